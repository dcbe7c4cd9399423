"""
Builds the configured blob store and review service.
"""

from typing import Optional

from reviewlink.config import GEMINI_API_KEY, STORAGE_BACKEND, UPLOADS_DIR, logger
from reviewlink.core.gemini import GeminiClient
from reviewlink.core.lifecycle import ReviewService, Thumbnailer
from reviewlink.core.storage import BlobStore, LocalBlobStore, MemoryBlobStore, R2BlobStore

STORAGE_BACKENDS = ("local", "r2", "memory")


def create_blob_store(backend: str = STORAGE_BACKEND) -> BlobStore:
    backend = (backend or "local").lower()
    if backend == "local":
        return LocalBlobStore(UPLOADS_DIR)
    if backend == "r2":
        return R2BlobStore()
    if backend == "memory":
        return MemoryBlobStore()
    raise ValueError(f"Unknown storage backend {backend!r}. Expected one of: {', '.join(STORAGE_BACKENDS)}")


def create_review_service(
    store: Optional[BlobStore] = None,
    thumbnailer: Optional[Thumbnailer] = None,
) -> ReviewService:
    """Review service over the configured store, with Gemini summaries when a key is set."""
    summarizer = GeminiClient() if GEMINI_API_KEY else None
    if summarizer is None:
        logger.info("GEMINI_API_KEY not set, feedback summaries are disabled")
    return ReviewService(
        store or create_blob_store(),
        thumbnailer=thumbnailer,
        summarizer=summarizer,
    )


_review_service: Optional[ReviewService] = None


def get_review_service() -> ReviewService:
    """Get the process-wide review service instance."""
    global _review_service
    if _review_service is None:
        _review_service = create_review_service()
    return _review_service
