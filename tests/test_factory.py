"""
Tests for service construction from configuration.

Run with: pytest tests/test_factory.py -v
"""

from unittest.mock import patch

import pytest

from reviewlink.core import factory
from reviewlink.core.storage import LocalBlobStore, MemoryBlobStore


class TestCreateBlobStore:
    """Tests for create_blob_store()."""

    def test_memory(self):
        assert isinstance(factory.create_blob_store("memory"), MemoryBlobStore)

    def test_local_uses_uploads_dir(self, tmp_path):
        with patch.object(factory, "UPLOADS_DIR", tmp_path):
            store = factory.create_blob_store("LOCAL")
        assert isinstance(store, LocalBlobStore)
        assert store.root == tmp_path

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown storage backend"):
            factory.create_blob_store("ftp")


class TestCreateReviewService:
    """Tests for create_review_service()."""

    def test_without_gemini_key(self):
        with patch.object(factory, "GEMINI_API_KEY", ""):
            service = factory.create_review_service(store=MemoryBlobStore())
        assert service.summarizer is None

    def test_with_gemini_key(self):
        with patch.object(factory, "GEMINI_API_KEY", "secret"), \
                patch.object(factory, "GeminiClient") as client:
            service = factory.create_review_service(store=MemoryBlobStore())
        assert service.summarizer is client.return_value
