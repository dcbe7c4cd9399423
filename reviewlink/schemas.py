"""
Pydantic models for data handed across the review service boundary.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from reviewlink.core.repositories.models import VideoProject


class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class UploadResult(BaseSchema):
    """Outcome of an upload: where the new version lives."""
    video_id: str = Field(..., alias="videoId")
    slug: str
    version: int = Field(..., ge=1)


class ProjectListing(VideoProject):
    """A live project as shown in the project list."""
    expires_at: datetime = Field(..., alias="expiresAt")


# -----------------------------------------------------------------------------
# Feedback Summaries
# -----------------------------------------------------------------------------

class SummaryComment(BaseSchema):
    """A single comment as seen by the summarizer."""
    text: str = Field(..., min_length=1)
    version: int = Field(..., ge=1)


class SummaryRequest(BaseSchema):
    """Input for a feedback summary."""
    comments: List[SummaryComment] = Field(..., min_length=1)
    video_title: str = Field(..., alias="videoTitle")

    @property
    def versions(self) -> List[int]:
        return sorted({c.version for c in self.comments})


class SummaryResponse(BaseSchema):
    """Generated feedback summary."""
    summary: str
