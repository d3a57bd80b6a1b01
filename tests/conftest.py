# tests/conftest.py
"""Shared fixtures for vidshare tests."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from vidshare.config import Settings
from vidshare.models import User, Video
from vidshare.storage.blobstore import BlobStore, StoredBlob
from vidshare.storage.sqlite import SQLiteUserRepository, SQLiteVideoRepository

CLOUDINARY_URL = (
    "https://res.cloudinary.com/demo/video/upload/v1700000000/"
    "video-sharing-platform/abc123xyz.mp4"
)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway data directory."""
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def video_repo():
    """SQLiteVideoRepository backed by in-memory database."""
    return SQLiteVideoRepository(":memory:")


@pytest.fixture
def user_repo():
    """SQLiteUserRepository backed by in-memory database."""
    return SQLiteUserRepository(":memory:")


@pytest.fixture
def alice(user_repo):
    user = User(username="alice", avatar="https://example.com/alice.png", bio="Cat person")
    user_repo.save(user)
    return user


@pytest.fixture
def bob(user_repo):
    user = User(username="bob")
    user_repo.save(user)
    return user


@pytest.fixture
def sample_video(alice):
    """Pre-built link video owned by alice."""
    return Video(
        title="Cats are great",
        description="A short film about cats.",
        storage_id="link_1700000000000",
        video_url="https://youtu.be/abc123",
        thumbnail_url="https://img.youtube.com/vi/abc123/maxresdefault.jpg",
        owner_id=alice.user_id,
        tags=["pets", "Funny"],
        created_at=datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc),
        updated_at=datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def make_video(video_repo, alice):
    """Factory that saves a video created on the given day of 2025."""

    def _make(title: str, day: int = 1, owner: User | None = None, **fields) -> Video:
        video = Video(
            title=title,
            storage_id=f"link_{day}",
            video_url="https://example.com/video.mp4",
            thumbnail_url="https://example.com/thumb.jpg",
            owner_id=(owner or alice).user_id,
            created_at=datetime(2025, 1, day, tzinfo=timezone.utc),
            **fields,
        )
        video_repo.save(video)
        return video

    return _make


@pytest.fixture
def blob_store():
    """BlobStore mock that pretends every upload landed on Cloudinary."""
    store = MagicMock(spec=BlobStore)
    store.upload.return_value = StoredBlob(
        storage_id="video-sharing-platform/abc123xyz",
        url=CLOUDINARY_URL,
        duration=42.5,
    )
    return store


@pytest.fixture
def service(video_repo, user_repo, settings, blob_store):
    """Fully wired VideoShareService with in-memory storage and a mocked blob store."""
    from vidshare.service import VideoShareService

    return VideoShareService(
        videos=video_repo,
        users=user_repo,
        settings=settings,
        blob_store=blob_store,
    )
