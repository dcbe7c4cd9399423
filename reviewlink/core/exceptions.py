"""
Exceptions for the review core.

Every error raised by storage, repositories and the review service derives
from RepositoryError so callers can catch one base class at their boundary.
"""

from typing import Optional


class RepositoryError(Exception):
    """Base exception for all review core errors."""
    pass


class ValidationError(RepositoryError):
    """Raised when input validation fails."""
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class NotFoundError(RepositoryError):
    """Raised when a requested resource is not found."""
    pass


class ProjectExpiredError(NotFoundError):
    """Raised when a project was found but has outlived its retention window."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Project {slug} has expired")


class StorageError(RepositoryError):
    """Raised when the blob store fails or returns a malformed record."""
    pass


class BlobNotFoundError(NotFoundError):
    """Raised by blob stores when a key does not exist."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} blob {key} not found")
