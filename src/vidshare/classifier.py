"""Video URL classification — provider kind, identifier and thumbnail.

Pure string-pattern matching over a handful of known URL shapes. No
network calls: nothing here checks that the resource exists.
Shared by the upload path (thumbnail and storage identifier) and the
playback projection handed to clients (native element vs. iframe).
"""

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from vidshare.models import Playback, QualityOption

DEFAULT_STORAGE_DOMAIN = "cloudinary.com"

FALLBACK_THUMBNAIL = (
    "https://images.unsplash.com/photo-1611162617474-5b21e879e113"
    "?w=800&h=450&fit=crop&crop=center"
)

# Label -> blob-store transformation inserted after /upload/
QUALITY_PRESETS = {
    "Auto": None,
    "1080p": "q_auto,h_1080",
    "720p": "q_auto,h_720",
    "480p": "q_auto,h_480",
    "360p": "q_auto,h_360",
}

_DRIVE_QUERY_ID = re.compile(r"[?&]id=([^&]+)")
_DRIVE_PATH_ID = re.compile(r"/file/d/([^/?#]+)")


class ProviderKind(str, Enum):
    """Origin service a video URL points to."""

    BLOB = "blob"
    DRIVE = "drive"
    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    DIRECT = "direct"


@dataclass(frozen=True)
class ClassifiedUrl:
    """Result of classifying a video URL."""

    kind: ProviderKind
    thumbnail_url: str
    provider_id: str | None = None  # raw id as the provider knows it
    storage_id: str | None = None  # provider-tagged id handed to callers


def classify_url(url: str, storage_domain: str = DEFAULT_STORAGE_DOMAIN) -> ClassifiedUrl:
    """Classify a video URL. First match wins, in this order:

    1. blob store (URL contains ``storage_domain``)
    2. Google Drive
    3. YouTube (``youtube.com/watch?v=`` or ``youtu.be/``)
    4. Vimeo
    5. anything else: a direct link with the fallback thumbnail

    Checks are case-sensitive substring matches on the raw string.
    """
    if storage_domain and storage_domain in url:
        stem = url.split("/")[-1].split(".")[0]
        return ClassifiedUrl(
            kind=ProviderKind.BLOB,
            thumbnail_url=url.replace("/video/", "/video/so_0/", 1),
            provider_id=stem or None,
            storage_id=stem or None,
        )

    if "drive.google.com" in url:
        file_id = _drive_file_id(url)
        if file_id is None:
            return ClassifiedUrl(kind=ProviderKind.DRIVE, thumbnail_url=FALLBACK_THUMBNAIL)
        # Thumbnail follows the share path, identifier the download query
        return ClassifiedUrl(
            kind=ProviderKind.DRIVE,
            thumbnail_url=f"https://drive.google.com/thumbnail?id={file_id}&sz=w800-h450",
            provider_id=file_id,
            storage_id=f"drive_{_drive_file_id(url, prefer_query=True)}",
        )

    video_id = _youtube_video_id(url)
    if video_id:
        return ClassifiedUrl(
            kind=ProviderKind.YOUTUBE,
            thumbnail_url=f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg",
            provider_id=video_id,
        )

    if "vimeo.com" in url:
        video_id = url.split("/")[-1].split("?")[0]
        if video_id:
            # Real Vimeo thumbnails need an authenticated API call; use a proxy
            return ClassifiedUrl(
                kind=ProviderKind.VIMEO,
                thumbnail_url=f"https://vumbnail.com/{video_id}.jpg",
                provider_id=video_id,
            )

    return ClassifiedUrl(kind=ProviderKind.DIRECT, thumbnail_url=FALLBACK_THUMBNAIL)


def is_valid_url(url: str) -> bool:
    """Return True if ``url`` is syntactically an absolute URL."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def playback_for(url: str, storage_domain: str = DEFAULT_STORAGE_DOMAIN) -> Playback:
    """Decide how a client should render a video URL.

    Drive, YouTube and Vimeo only play inside their own embed pages;
    blob-store and direct links go to a native media element. Blob-store
    videos also carry quality variants.
    """
    classified = classify_url(url, storage_domain)
    vid = classified.provider_id

    if classified.kind is ProviderKind.DRIVE and vid:
        return Playback(mode="iframe", src=f"https://drive.google.com/file/d/{vid}/preview")
    if classified.kind is ProviderKind.YOUTUBE:
        return Playback(mode="iframe", src=f"https://www.youtube.com/embed/{vid}")
    if classified.kind is ProviderKind.VIMEO:
        return Playback(mode="iframe", src=f"https://player.vimeo.com/video/{vid}")

    qualities = []
    if classified.kind is ProviderKind.BLOB:
        qualities = [
            QualityOption(label=label, src=quality_url(url, label, storage_domain))
            for label in QUALITY_PRESETS
        ]
    return Playback(mode="native", src=url, qualities=qualities)


def quality_url(url: str, preset: str, storage_domain: str = DEFAULT_STORAGE_DOMAIN) -> str:
    """Return the blob-store URL variant for a quality preset label.

    Unknown presets raise KeyError. ``Auto`` and non blob-store URLs are
    returned unchanged.
    """
    transformation = QUALITY_PRESETS[preset]
    if transformation is None or storage_domain not in url:
        return url
    head, sep, tail = url.partition("/upload/")
    if not sep or "/upload/" in tail:
        return url
    return f"{head}/upload/{transformation}/{tail}"


def _drive_file_id(url: str, prefer_query: bool = False) -> str | None:
    """Extract a Drive file id from ``/file/d/<id>`` or ``?id=`` / ``&id=``.

    The share path wins unless ``prefer_query`` is set.
    """
    patterns = (_DRIVE_PATH_ID, _DRIVE_QUERY_ID)
    if prefer_query:
        patterns = patterns[::-1]
    match = next((m for m in (p.search(url) for p in patterns) if m), None)
    return match.group(1) if match else None


def _youtube_video_id(url: str) -> str | None:
    """Extract a YouTube id from watch or short-link URLs, dropping trailing params."""
    if "youtube.com/watch?v=" in url:
        tail = url.split("v=", 1)[1]
        video_id = re.split(r"[&#]", tail, maxsplit=1)[0]
    elif "youtu.be/" in url:
        tail = url.split("youtu.be/", 1)[1]
        video_id = re.split(r"[?#]", tail, maxsplit=1)[0].split("/")[0]
    else:
        return None
    return video_id or None
