"""FastMCP server — read-only catalog tools over VideoShareService."""

from fastmcp import FastMCP

from vidshare.config import Settings
from vidshare.models import VideoListing
from vidshare.service import InvalidRequestError, VideoNotFoundError, VideoShareService, build_service


mcp = FastMCP(
    name="vidshare",
    instructions=(
        "vidshare is a video-sharing catalog. Use list_videos to browse or "
        "search public videos, get_video for full details of one video, and "
        "classify_url to see how a video link would be recognized."
    ),
)

_service: VideoShareService | None = None


def _get_service() -> VideoShareService:
    """Lazy-initialise the service singleton with default dependencies."""
    global _service
    if _service is None:
        _service = build_service(Settings())
    return _service


@mcp.tool(annotations={"readOnlyHint": True})
def list_videos(page: int = 1, limit: int = 12, search: str | None = None) -> dict:
    """List public videos in the catalog, newest first.

    Args:
        page: 1-based page number.
        limit: Videos per page (default 12).
        search: Optional case-insensitive text matched against title,
                description and tags.
    """
    try:
        result = _get_service().list_videos(page=page, limit=limit, search=search)
    except InvalidRequestError as e:
        return {"error": str(e)}
    return {
        "videos": [_video_summary(v) for v in result.videos],
        "total_pages": result.total_pages,
        "current_page": result.current_page,
    }


@mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": False})
def get_video(video_id: str) -> dict:
    """Get full details for a video. Counts as a view.

    Args:
        video_id: The catalog video ID.
    """
    try:
        video = _get_service().get_video(video_id)
        return video.model_dump(mode="json")
    except VideoNotFoundError as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": True})
def classify_url(url: str) -> dict:
    """Show how a video URL is recognized: provider, identifier and thumbnail.

    Args:
        url: Any video URL (blob store, Google Drive, YouTube, Vimeo, direct).
    """
    classified = _get_service().classify(url)
    return {
        "kind": classified.kind.value,
        "provider_id": classified.provider_id,
        "storage_id": classified.storage_id,
        "thumbnail_url": classified.thumbnail_url,
    }


def _video_summary(video: VideoListing) -> dict:
    """Create a concise summary dict for tool responses."""
    return {
        "video_id": video.video_id,
        "title": video.title,
        "uploader": video.uploader.username if video.uploader else None,
        "views": video.views,
        "likes": video.likes_count,
        "url": video.video_url,
        "thumbnail_url": video.thumbnail_url,
        "tags": video.tags,
        "created_at": video.created_at.isoformat() if video.created_at else None,
    }
