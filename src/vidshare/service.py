"""Core business logic for vidshare."""

import logging
import math
import time

from pydantic import ValidationError

from vidshare.classifier import ClassifiedUrl, ProviderKind, classify_url, is_valid_url, playback_for
from vidshare.config import Settings
from vidshare.models import LikeResult, Owner, User, Video, VideoDraft, VideoListing, VideoPage
from vidshare.storage.blobstore import BlobStore, BlobStoreError, StoredBlob
from vidshare.storage.repository import UserRepository, VideoRepository
from vidshare.storage.sqlite import SQLiteUserRepository, SQLiteVideoRepository

logger = logging.getLogger(__name__)


class VideoNotFoundError(Exception):
    """Raised when a requested video is not in the catalog."""


class NotVideoOwnerError(Exception):
    """Raised when a user tries to mutate a video they do not own."""


class InvalidRequestError(Exception):
    """Raised when caller input is missing or malformed."""


class VideoShareService:
    """Core service layer, the single orchestration point for catalog operations.

    The REST API, MCP server and CLI are thin wrappers over this class.
    Dependencies are injected via constructor for testability and
    backend swappability.
    """

    def __init__(
        self,
        videos: VideoRepository,
        users: UserRepository,
        settings: Settings,
        blob_store: BlobStore | None = None,
    ) -> None:
        self._videos = videos
        self._users = users
        self._settings = settings
        self._blobs = blob_store

    @property
    def blob_store(self) -> BlobStore | None:
        return self._blobs

    # -- uploads ---------------------------------------------------------

    def add_uploaded_video(
        self,
        owner: User,
        blob: StoredBlob,
        title: str | None,
        description: str | None = "",
        tags: str | None = "",
    ) -> VideoListing:
        """Record a video whose binary is already in the blob store.

        Args:
            owner: Authenticated uploader.
            blob: Storage id, URL and duration returned by the blob store.
            title: Required, at most 200 characters.
            description: At most 2000 characters.
            tags: Comma-separated tag string.

        Returns:
            The persisted video with its owner expanded.

        Raises:
            InvalidRequestError: If title or description are invalid.
        """
        draft = self.validate_draft(title, description, tags)
        video = Video(
            title=draft.title,
            description=draft.description,
            storage_id=blob.storage_id,
            video_url=blob.url,
            thumbnail_url=self.classify(blob.url).thumbnail_url,
            duration=blob.duration,
            owner_id=owner.user_id,
            tags=draft.tag_list,
        )
        return self._create(owner, video)

    def add_linked_video(
        self,
        owner: User,
        video_url: str | None,
        title: str | None,
        description: str | None = "",
        tags: str | None = "",
    ) -> VideoListing:
        """Record a video hosted elsewhere, identified only by its URL.

        The storage id comes from the classifier when the provider has
        one, otherwise a ``link_<epoch ms>`` token is synthesized.

        Raises:
            InvalidRequestError: If the URL is missing or malformed, or
                                 title/description are invalid.
        """
        if not video_url:
            raise InvalidRequestError("Video URL is required")
        video_url = video_url.strip()
        if not is_valid_url(video_url):
            raise InvalidRequestError("Invalid video URL format")

        draft = self.validate_draft(title, description, tags)
        classified = self.classify(video_url)
        video = Video(
            title=draft.title,
            description=draft.description,
            storage_id=classified.storage_id or f"link_{time.time_ns() // 1_000_000}",
            video_url=video_url,
            thumbnail_url=classified.thumbnail_url,
            owner_id=owner.user_id,
            tags=draft.tag_list,
        )
        return self._create(owner, video)

    def _create(self, owner: User, video: Video) -> VideoListing:
        """Persist a new video and append it to its owner's list.

        The two writes are not atomic: if the second fails the video stays
        saved and the error propagates.
        """
        self._videos.save(video)
        try:
            self._users.add_video_ref(owner.user_id, video.video_id)
        except Exception:
            logger.error(
                "Video %s saved but not linked to owner %s", video.video_id, owner.user_id
            )
            raise
        logger.info("Video added: %s %r (%s)", video.video_id, video.title, video.storage_id)
        return self._present(video, owner)

    @staticmethod
    def validate_draft(title: str | None, description: str | None, tags: str | None) -> VideoDraft:
        try:
            return VideoDraft(title=title or "", description=description or "", tags=tags or "")
        except ValidationError as e:
            err = e.errors()[0]
            field = ".".join(str(p) for p in err["loc"]) or "input"
            raise InvalidRequestError(f"Invalid {field}: {err['msg']}") from e

    # -- catalog ---------------------------------------------------------

    def list_videos(
        self, page: int = 1, limit: int | None = None, search: str | None = None
    ) -> VideoPage:
        """One page of public videos, newest first, optionally filtered.

        Args:
            page: 1-based page number.
            limit: Page size, defaults to settings.page_size.
            search: Case-insensitive substring over title, description and tags.
        """
        limit = limit or self._settings.page_size
        if page < 1 or limit < 1:
            raise InvalidRequestError("page and limit must be positive integers")
        limit = min(limit, self._settings.max_page_size)

        videos, total = self._videos.query(search=search or None, page=page, limit=limit)
        return VideoPage(
            videos=[self._present(v) for v in videos],
            total_pages=math.ceil(total / limit),
            current_page=page,
        )

    def get_video(self, video_id: str, count_view: bool = True) -> VideoListing:
        """Fetch a single video, counting a view.

        Visibility is not checked: private videos are returned to anyone
        holding the id.

        Raises:
            VideoNotFoundError: If the video is not in the catalog.
        """
        if count_view:
            video = self._videos.increment_views(video_id)
        else:
            video = self._videos.get(video_id)
        if video is None:
            raise VideoNotFoundError(f"Video not found: {video_id}")
        return self._present(video)

    def my_videos(self, user: User) -> list[VideoListing]:
        """All of a user's own videos, private ones included."""
        return [self._present(v, user) for v in self._videos.list_by_owner(user.user_id)]

    def classify(self, url: str) -> ClassifiedUrl:
        """Run the URL classifier with the configured blob-store domain."""
        return classify_url(url, self._settings.storage_domain)

    # -- engagement ------------------------------------------------------

    def toggle_like(self, video_id: str, user: User) -> LikeResult:
        """Flip the user's like on a video.

        Read-modify-write without locking: concurrent toggles by the same
        user may lose an update.

        Raises:
            VideoNotFoundError: If the video is not in the catalog.
        """
        video = self._videos.get(video_id)
        if video is None:
            raise VideoNotFoundError(f"Video not found: {video_id}")

        liked = user.user_id in video.likes
        if liked:
            video.likes = [uid for uid in video.likes if uid != user.user_id]
        else:
            video.likes.append(user.user_id)
        video.touch()
        self._videos.save(video)
        return LikeResult(liked=not liked, likes_count=len(video.likes))

    def delete_video(self, video_id: str, user: User) -> None:
        """Delete a video owned by ``user``.

        Blob-store cleanup is best-effort: a failure is logged and the
        catalog deletion goes ahead.

        Raises:
            VideoNotFoundError: If the video is not in the catalog.
            NotVideoOwnerError: If ``user`` is not the uploader.
        """
        video = self._videos.get(video_id)
        if video is None:
            raise VideoNotFoundError(f"Video not found: {video_id}")
        if video.owner_id != user.user_id:
            raise NotVideoOwnerError("Not authorized to delete this video")

        if self._blobs and self.classify(video.video_url).kind is ProviderKind.BLOB:
            try:
                self._blobs.delete(video.storage_id)
            except BlobStoreError as e:
                logger.warning("Blob store deletion failed for %s: %s", video.storage_id, e)

        self._videos.delete(video_id)
        self._users.remove_video_ref(video.owner_id, video_id)
        logger.info("Video removed: %s", video_id)

    # -- users -----------------------------------------------------------

    def register_user(self, username: str, avatar: str = "", bio: str = "") -> User:
        """Create a user record with a fresh API token."""
        user = User(username=username, avatar=avatar, bio=bio)
        self._users.save(user)
        logger.info("User registered: %s (%s)", user.username, user.user_id)
        return user

    def authenticate(self, token: str) -> User | None:
        """Resolve an API token to its user."""
        return self._users.get_by_token(token)

    def _present(self, video: Video, owner: User | None = None) -> VideoListing:
        """Expand the owner and resolve playback for display."""
        if owner is None or owner.user_id != video.owner_id:
            owner = self._users.get(video.owner_id)
        return VideoListing(
            **video.model_dump(exclude={"likes_count"}),
            uploader=Owner.from_user(owner) if owner else None,
            playback=playback_for(video.video_url, self._settings.storage_domain),
        )


def build_service(settings: Settings, blob_store: BlobStore | None = None) -> VideoShareService:
    """Wire a service over the SQLite catalog under ``settings.data_dir``."""
    settings.ensure_dirs()
    db_path = str(settings.db_path)
    return VideoShareService(
        videos=SQLiteVideoRepository(db_path),
        users=SQLiteUserRepository(db_path),
        settings=settings,
        blob_store=blob_store,
    )
