"""
Project metadata repository.

One JSON blob per project, keyed by slug. Reads validate the blob shape so
callers only ever see VideoProject instances or a typed error.
"""

import json
import logging
from typing import List

from pydantic import ValidationError as PydanticValidationError

from reviewlink.core.exceptions import (
    BlobNotFoundError,
    NotFoundError,
    StorageError,
)
from reviewlink.core.repositories.models import VideoProject
from reviewlink.core.storage import BlobKind, BlobStore

logger = logging.getLogger(__name__)


class ProjectRepository:
    """Repository for project metadata records."""

    def __init__(self, store: BlobStore):
        self.store = store

    def get(self, slug: str) -> VideoProject:
        """
        Load a project by slug.

        Raises:
            NotFoundError: If no metadata record exists
            StorageError: If the record cannot be read or is malformed
        """
        try:
            raw = self.store.get(BlobKind.METADATA, slug)
        except BlobNotFoundError:
            raise NotFoundError(f"Project {slug} not found")
        try:
            return VideoProject.from_dict(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            logger.error(f"Malformed metadata for project {slug}: {e}")
            raise StorageError(f"Malformed metadata for project {slug}") from e

    def save(self, project: VideoProject) -> VideoProject:
        data = json.dumps(project.to_dict(), indent=2).encode("utf-8")
        self.store.put(BlobKind.METADATA, project.slug, data)
        logger.debug(f"Saved metadata for project {project.slug}")
        return project

    def delete(self, slug: str) -> None:
        try:
            self.store.delete(BlobKind.METADATA, slug)
        except BlobNotFoundError:
            raise NotFoundError(f"Project {slug} not found")

    def exists(self, slug: str) -> bool:
        return self.store.exists(BlobKind.METADATA, slug)

    def list_slugs(self) -> List[str]:
        return self.store.list(BlobKind.METADATA)
