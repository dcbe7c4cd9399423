"""
Pydantic models for stored review records.

Blobs are stored as camelCase JSON; attributes are snake_case and every
model accepts either spelling on input.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reviewlink.config import DEFAULT_AUTHOR


class RecordModel(BaseModel):
    """Base model for stored records."""
    model_config = ConfigDict(
        populate_by_name=True,
        allow_inf_nan=False,
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-compatible blob representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _as_utc(value: datetime) -> datetime:
    # Records written by older clients may carry naive timestamps
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Comment(RecordModel):
    """A timestamped feedback entry, optionally a reply to another comment."""

    id: str = Field(..., min_length=1, max_length=100)
    text: str = Field(..., min_length=1)
    timestamp: float = Field(..., ge=0)
    author: str = Field(default=DEFAULT_AUTHOR, min_length=1, max_length=100)
    version: int = Field(default=1, ge=1)
    parent_id: Optional[str] = Field(default=None, alias="parentId")

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls.model_validate(data)


class CommentWithReplies(Comment):
    """Comment node of a reply tree."""

    replies: List["CommentWithReplies"] = Field(default_factory=list)

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentWithReplies":
        return cls(**comment.model_dump())


CommentWithReplies.model_rebuild()


class VideoVersion(RecordModel):
    """One uploaded file of a project."""

    version: int = Field(..., ge=1)
    video_id: str = Field(..., min_length=1, max_length=100, alias="videoId")
    uploaded_at: datetime = Field(..., alias="uploadedAt")
    original_name: str = Field(..., min_length=1, alias="originalName")
    thumbnail_filename: Optional[str] = Field(default=None, alias="thumbnailFilename")

    @field_validator("uploaded_at")
    @classmethod
    def validate_uploaded_at(cls, v: datetime) -> datetime:
        return _as_utc(v)


class VideoProject(RecordModel):
    """Project metadata record: a slug plus its uploaded versions."""

    slug: str = Field(..., min_length=1, max_length=100)
    original_name: str = Field(..., min_length=1, alias="originalName")
    created_at: datetime = Field(..., alias="createdAt")
    versions: List[VideoVersion] = Field(default_factory=list)

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @property
    def is_live(self) -> bool:
        return bool(self.versions)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VideoProject":
        return cls.model_validate(data)


@dataclass
class UploadedFile:
    """A file received from an upload form."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class StoredVideo:
    """A video blob resolved from its video id."""
    video_id: str
    filename: str
    content_type: str
    data: bytes
