"""Abstract repository interfaces for the catalog store."""

from abc import ABC, abstractmethod

from vidshare.models import User, Video


class VideoRepository(ABC):
    """Abstract base class defining the video storage contract.

    All concrete storage implementations must implement this interface,
    so the service layer depends on abstractions, not on a database.
    """

    @abstractmethod
    def save(self, video: Video) -> None:
        """Persist a video. Upserts if video_id already exists."""

    @abstractmethod
    def get(self, video_id: str) -> Video | None:
        """Retrieve a video by ID. Returns None if not found."""

    @abstractmethod
    def delete(self, video_id: str) -> None:
        """Remove a video. No-op if video_id does not exist."""

    @abstractmethod
    def exists(self, video_id: str) -> bool:
        """Check whether a video with the given ID is stored."""

    @abstractmethod
    def query(
        self,
        search: str | None = None,
        page: int = 1,
        limit: int = 12,
        public_only: bool = True,
    ) -> tuple[list[Video], int]:
        """Return one page of videos, newest first, and the total match count.

        Args:
            search: Case-insensitive substring matched against title,
                    description and each tag. Any field matching qualifies.
            page: 1-based page number.
            limit: Page size.
            public_only: Exclude private videos.
        """

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> list[Video]:
        """All videos owned by a user, newest first, private ones included."""

    @abstractmethod
    def increment_views(self, video_id: str) -> Video | None:
        """Atomically add one view and return the updated video, or None."""


class UserRepository(ABC):
    """Abstract base class for the user records the catalog keeps in sync."""

    @abstractmethod
    def save(self, user: User) -> None:
        """Persist a user. Upserts if user_id already exists."""

    @abstractmethod
    def get(self, user_id: str) -> User | None:
        """Retrieve a user by ID. Returns None if not found."""

    @abstractmethod
    def get_by_token(self, token: str) -> User | None:
        """Resolve an API token to its user. Returns None if unknown."""

    @abstractmethod
    def add_video_ref(self, user_id: str, video_id: str) -> None:
        """Append a video to the user's owned list. No-op if already present."""

    @abstractmethod
    def remove_video_ref(self, user_id: str, video_id: str) -> None:
        """Pull a video from the user's owned list. No-op if absent."""
