"""
Repository layer for review records.

This package provides typed access to the project metadata and comment
blobs kept in a BlobStore.
"""

from reviewlink.core.repositories.comments import CommentRepository
from reviewlink.core.repositories.models import (
    Comment,
    CommentWithReplies,
    StoredVideo,
    UploadedFile,
    VideoProject,
    VideoVersion,
)
from reviewlink.core.repositories.projects import ProjectRepository

__all__ = [
    "Comment",
    "CommentRepository",
    "CommentWithReplies",
    "ProjectRepository",
    "StoredVideo",
    "UploadedFile",
    "VideoProject",
    "VideoVersion",
]
