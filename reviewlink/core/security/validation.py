"""
Input Validation Module

Validates and sanitizes user inputs before they reach storage.
"""

import math
import re
from pathlib import PurePath
from typing import Optional, Union

from reviewlink.config import DEFAULT_AUTHOR, MAX_COMMENT_LENGTH
from reviewlink.core.exceptions import ValidationError
from reviewlink.core.repositories.models import UploadedFile
from reviewlink.core.security.constants import (
    DEFAULT_VIDEO_EXTENSION,
    MAX_AUTHOR_LENGTH,
    MAX_FILENAME_LENGTH,
    MAX_SLUG_LENGTH,
    MAX_TITLE_LENGTH,
    MAX_VIDEO_ID_LENGTH,
    SAFE_KEY_PATTERN,
    THUMBNAIL_EXTENSION,
    VIDEO_CONTENT_TYPE_PREFIX,
)

ALL_VERSIONS = "all"


def _validate_key(value: str, field: str, label: str, max_length: int) -> str:
    if not value or not isinstance(value, str):
        raise ValidationError(f"{label} is required", field=field)

    value = value.strip()

    if not re.match(SAFE_KEY_PATTERN, value) or ".." in value:
        raise ValidationError(f"Invalid {label.lower()} format", field=field)

    if len(value) > max_length:
        raise ValidationError(f"{label} too long", field=field)

    return value


def validate_slug(slug: str) -> str:
    """Validate project slug format (prevents path traversal)."""
    return _validate_key(slug, "slug", "Slug", MAX_SLUG_LENGTH)


def validate_video_id(video_id: str) -> str:
    """Validate video ID format (prevents path traversal)."""
    return _validate_key(video_id, "video_id", "Video ID", MAX_VIDEO_ID_LENGTH)


def validate_thumbnail_filename(filename: str) -> str:
    """Validate thumbnail filename format (prevents path traversal)."""
    filename = _validate_key(filename, "thumbnail", "Thumbnail filename", MAX_FILENAME_LENGTH)

    if not filename.lower().endswith(THUMBNAIL_EXTENSION):
        raise ValidationError(
            f"Thumbnail filename must end with {THUMBNAIL_EXTENSION}", field="thumbnail"
        )

    return filename


def validate_comment_id(comment_id: str) -> str:
    if not comment_id or not isinstance(comment_id, str) or not comment_id.strip():
        raise ValidationError("Comment ID is required", field="comment_id")
    return comment_id.strip()


def validate_comment_text(text: str) -> str:
    """Validate comment text; rejects empty text after sanitizing."""
    if not isinstance(text, str):
        raise ValidationError("Comment text must be a string", field="text")

    if len(text) > MAX_COMMENT_LENGTH:
        raise ValidationError(
            f"Comment exceeds maximum length of {MAX_COMMENT_LENGTH}", field="text"
        )

    text = sanitize_text(text, max_length=MAX_COMMENT_LENGTH)
    if not text:
        raise ValidationError("Comment text is required", field="text")

    return text


def validate_timestamp(timestamp: float) -> float:
    """Validate a playback position in seconds."""
    # bool is an int subclass but never a valid position
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        raise ValidationError("Timestamp must be a number", field="timestamp")

    if math.isnan(timestamp) or math.isinf(timestamp):
        raise ValidationError("Timestamp must be finite", field="timestamp")

    if timestamp < 0:
        raise ValidationError("Timestamp must be non-negative", field="timestamp")

    return float(timestamp)


def validate_version_number(version: int) -> int:
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValidationError("Version must be an integer", field="version")

    if version < 1:
        raise ValidationError("Version must be 1 or greater", field="version")

    return version


def validate_version_selector(version: Union[int, str]) -> Union[int, str]:
    """
    Validate a version filter: a version number or "all".

    Numeric strings (as sent in query strings) are converted to integers.
    """
    if isinstance(version, str):
        value = version.strip().lower()
        if value == ALL_VERSIONS:
            return ALL_VERSIONS
        if not value.isdigit():
            raise ValidationError("Version must be a number or 'all'", field="version")
        version = int(value)

    return validate_version_number(version)


def validate_author(author: Optional[str]) -> str:
    """Sanitize author name, falling back to the default author."""
    if author is None:
        return DEFAULT_AUTHOR

    if not isinstance(author, str):
        raise ValidationError("Author must be a string", field="author")

    author = sanitize_text(author, max_length=MAX_AUTHOR_LENGTH)
    return author or DEFAULT_AUTHOR


def validate_project_name(name: str) -> str:
    if not isinstance(name, str):
        raise ValidationError("Project name must be a string", field="name")

    name = sanitize_text(name, max_length=MAX_TITLE_LENGTH)
    if not name:
        raise ValidationError("Project name is required", field="name")

    return name


def validate_upload(file: Optional[UploadedFile]) -> UploadedFile:
    """Reject missing, empty, or non-video uploads."""
    if file is None:
        raise ValidationError("No file found", field="file")

    if not file.data:
        raise ValidationError("Uploaded file is empty", field="file")

    content_type = (file.content_type or "").lower()
    if not content_type.startswith(VIDEO_CONTENT_TYPE_PREFIX):
        raise ValidationError("Invalid file type", field="file")

    return file


def video_extension(filename: str) -> str:
    """Extension to store a video under, taken from the original filename."""
    suffix = PurePath(filename or "").suffix
    if not suffix or not re.match(r"^\.[a-zA-Z0-9]{1,10}$", suffix):
        return DEFAULT_VIDEO_EXTENSION
    return suffix


def sanitize_text(text: str, max_length: int = 1000) -> str:
    """
    Sanitize text input by removing potentially dangerous characters.

    Preserves most Unicode for internationalization.
    """
    if not text:
        return ""

    # Remove null bytes and control characters (except newlines/tabs)
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)

    # Truncate
    if len(text) > max_length:
        text = text[:max_length]

    return text.strip()
