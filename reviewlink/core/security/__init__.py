"""
Security module for reviewlink.

Provides input validation and sanitization for everything that ends up in a
blob key or a stored record.
"""

from reviewlink.core.security.constants import (
    DEFAULT_VIDEO_EXTENSION,
    MAX_AUTHOR_LENGTH,
    MAX_FILENAME_LENGTH,
    MAX_SLUG_LENGTH,
    MAX_TITLE_LENGTH,
    MAX_VIDEO_ID_LENGTH,
    THUMBNAIL_EXTENSION,
)
from reviewlink.core.security.validation import (
    ALL_VERSIONS,
    sanitize_text,
    validate_author,
    validate_comment_id,
    validate_comment_text,
    validate_project_name,
    validate_slug,
    validate_thumbnail_filename,
    validate_timestamp,
    validate_upload,
    validate_version_number,
    validate_version_selector,
    validate_video_id,
    video_extension,
)

__all__ = [
    # Constants
    "DEFAULT_VIDEO_EXTENSION",
    "MAX_AUTHOR_LENGTH",
    "MAX_FILENAME_LENGTH",
    "MAX_SLUG_LENGTH",
    "MAX_TITLE_LENGTH",
    "MAX_VIDEO_ID_LENGTH",
    "THUMBNAIL_EXTENSION",
    # Validation
    "ALL_VERSIONS",
    "sanitize_text",
    "validate_author",
    "validate_comment_id",
    "validate_comment_text",
    "validate_project_name",
    "validate_slug",
    "validate_thumbnail_filename",
    "validate_timestamp",
    "validate_upload",
    "validate_version_number",
    "validate_version_selector",
    "validate_video_id",
    "video_extension",
]
