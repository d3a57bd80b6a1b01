"""Domain models for vidshare.

Field names are snake_case in Python; the REST surface serializes them
with camelCase aliases.
"""

import secrets
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


def _new_id() -> str:
    return secrets.token_hex(12)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_tags(raw: str | None) -> list[str]:
    """Split a comma-separated tag string into trimmed, non-empty, unique tags.

    Order of first appearance is preserved.
    """
    if not raw:
        return []
    return list(dict.fromkeys(t.strip() for t in raw.split(",") if t.strip()))


class ApiModel(BaseModel):
    """Base for models that cross the REST boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QualityOption(ApiModel):
    """One selectable quality variant of a blob-store video."""

    label: str
    src: str


class Playback(ApiModel):
    """How a client should render a video: native element or embedded iframe."""

    mode: Literal["native", "iframe"]
    src: str
    qualities: list[QualityOption] = Field(default_factory=list)


class Video(ApiModel):
    """Core domain entity — a video in the catalog."""

    video_id: str = Field(default_factory=_new_id, alias="id")
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    storage_id: str  # blob-store key, or a synthesized token for links
    video_url: str
    thumbnail_url: str
    duration: float = 0.0  # seconds; stays 0 for embed-only sources
    views: int = Field(default=0, ge=0)
    likes: list[str] = Field(default_factory=list)  # liking user ids
    owner_id: str
    tags: list[str] = Field(default_factory=list)
    is_private: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @computed_field(alias="likesCount")
    @property
    def likes_count(self) -> int:
        return len(self.likes)

    def touch(self) -> None:
        """Refresh the last-update timestamp."""
        self.updated_at = _utcnow()


class User(ApiModel):
    """A registered user, as far as the catalog needs one."""

    user_id: str = Field(default_factory=_new_id, alias="id")
    username: str
    avatar: str = ""
    bio: str = ""
    videos: list[str] = Field(default_factory=list)  # owned video ids
    api_token: str = Field(default_factory=lambda: secrets.token_urlsafe(24), exclude=True)


class Owner(ApiModel):
    """Public projection of a user, embedded in video responses."""

    user_id: str = Field(alias="id")
    username: str
    avatar: str = ""
    bio: str = ""

    @classmethod
    def from_user(cls, user: User) -> "Owner":
        return cls(user_id=user.user_id, username=user.username, avatar=user.avatar, bio=user.bio)


class VideoListing(Video):
    """A video with its owner expanded and playback resolved, for display."""

    uploader: Owner | None = None
    playback: Playback | None = None


class VideoPage(ApiModel):
    """One page of the public catalog."""

    videos: list[VideoListing]
    total_pages: int
    current_page: int


class LikeResult(ApiModel):
    """Outcome of a like toggle."""

    liked: bool
    likes_count: int


class VideoDraft(ApiModel):
    """Caller-supplied metadata shared by file and link uploads."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    tags: str = ""

    @property
    def tag_list(self) -> list[str]:
        return parse_tags(self.tags)
