"""Shared fixtures for reviewlink tests."""

from datetime import datetime, timedelta, timezone

import pytest

from reviewlink.core.lifecycle import ReviewService
from reviewlink.core.repositories.models import (
    Comment,
    UploadedFile,
    VideoProject,
    VideoVersion,
)
from reviewlink.core.storage import MemoryBlobStore

START = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable replacement for datetime.now(timezone.utc)."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryBlobStore()


@pytest.fixture
def service(store, clock):
    return ReviewService(store, clock=clock)


def make_upload(name: str = "My Cool Video!.mp4", content_type: str = "video/mp4", data: bytes = b"\x00\x01video") -> UploadedFile:
    return UploadedFile(filename=name, content_type=content_type, data=data)


def make_comment(id: str, timestamp: float, version: int = 1, parent_id=None, text=None) -> Comment:
    return Comment(
        id=id,
        text=text or f"comment {id}",
        timestamp=timestamp,
        author="Reviewer",
        version=version,
        parent_id=parent_id,
    )


def make_project(slug: str = "demo", created_at: datetime = START, versions=None) -> VideoProject:
    if versions is None:
        versions = [
            VideoVersion(
                version=1,
                video_id="vid-1",
                uploaded_at=created_at,
                original_name="demo.mp4",
            )
        ]
    return VideoProject(
        slug=slug,
        original_name="demo.mp4",
        created_at=created_at,
        versions=versions,
    )
