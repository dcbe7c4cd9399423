"""
Comment list repository.

All comments of a project, across every version, live in a single JSON
array keyed by the project slug. Writes always replace the whole array.
"""

import json
import logging
from typing import List

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from reviewlink.core.exceptions import (
    BlobNotFoundError,
    NotFoundError,
    StorageError,
)
from reviewlink.core.repositories.models import Comment
from reviewlink.core.storage import BlobKind, BlobStore

logger = logging.getLogger(__name__)

_comment_list = TypeAdapter(List[Comment])


class CommentRepository:
    """Repository for per-project comment lists."""

    def __init__(self, store: BlobStore):
        self.store = store

    def load(self, slug: str) -> List[Comment]:
        """
        Load the flat comment list of a project.

        Raises:
            NotFoundError: If the project has no comment blob
            StorageError: If the blob cannot be read or is malformed
        """
        try:
            raw = self.store.get(BlobKind.COMMENTS, slug)
        except BlobNotFoundError:
            raise NotFoundError(f"Comments for project {slug} not found")
        try:
            return _comment_list.validate_python(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            logger.error(f"Malformed comment list for project {slug}: {e}")
            raise StorageError(f"Malformed comment list for project {slug}") from e

    def load_or_empty(self, slug: str) -> List[Comment]:
        try:
            return self.load(slug)
        except NotFoundError:
            return []

    def save(self, slug: str, comments: List[Comment]) -> None:
        data = json.dumps([c.to_dict() for c in comments], indent=2).encode("utf-8")
        self.store.put(BlobKind.COMMENTS, slug, data)
        logger.debug(f"Saved {len(comments)} comments for project {slug}")

    def create(self, slug: str) -> None:
        """Write an empty comment list for a new project."""
        self.save(slug, [])

    def delete(self, slug: str) -> None:
        try:
            self.store.delete(BlobKind.COMMENTS, slug)
        except BlobNotFoundError:
            raise NotFoundError(f"Comments for project {slug} not found")
