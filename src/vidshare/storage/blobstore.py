"""Blob store interface and Cloudinary implementation for uploaded videos."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePath
from typing import BinaryIO

import cloudinary.uploader

from vidshare.config import Settings

logger = logging.getLogger(__name__)

ALLOWED_FORMATS = ("mp4", "mov", "avi", "wmv", "flv", "webm")


class BlobStoreError(Exception):
    """Raised when the blob store rejects or fails an operation."""


class UploadRejectedError(Exception):
    """Raised when an upload is refused before reaching the blob store."""

    def __init__(self, message: str, *, too_large: bool = False) -> None:
        super().__init__(message)
        self.too_large = too_large


@dataclass
class StoredBlob:
    """Where an uploaded binary ended up."""

    storage_id: str  # opaque key for later deletion
    url: str
    duration: float = 0.0


def check_upload(filename: str | None, size: int | None, max_bytes: int) -> None:
    """Enforce the container-format allow-list and the size ceiling.

    Raises:
        UploadRejectedError: If the file is not an allowed format or too large.
    """
    ext = PurePath(filename or "").suffix.lower().lstrip(".")
    if ext not in ALLOWED_FORMATS:
        raise UploadRejectedError(
            f"Unsupported video format: {ext or 'unknown'}. "
            f"Allowed: {', '.join(ALLOWED_FORMATS)}"
        )
    if size is not None and size > max_bytes:
        raise UploadRejectedError(
            f"Video exceeds the maximum upload size of {max_bytes} bytes",
            too_large=True,
        )


class BlobStore(ABC):
    """Abstract interface for the object store holding uploaded videos."""

    @abstractmethod
    def upload(self, fileobj: BinaryIO, filename: str) -> StoredBlob:
        """Store a video binary.

        Raises:
            BlobStoreError: If the store fails.
        """

    @abstractmethod
    def delete(self, storage_id: str) -> None:
        """Delete a stored video.

        Raises:
            BlobStoreError: If the store fails.
        """


class CloudinaryBlobStore(BlobStore):
    """Cloudinary-backed video storage via the official SDK.

    Credentials are passed on each call rather than through the SDK's
    global config, so several stores can coexist in one process.
    """

    _CHUNK_SIZE = 20 * 1024 * 1024

    def __init__(self, settings: Settings) -> None:
        self._folder = settings.cloudinary_folder
        self._credentials = {
            "cloud_name": settings.cloudinary_cloud_name,
            "api_key": settings.cloudinary_api_key,
            "api_secret": settings.cloudinary_api_secret,
        }

    def upload(self, fileobj: BinaryIO, filename: str) -> StoredBlob:
        """Stream a video to Cloudinary in chunks and return its public id and URL."""
        try:
            result = cloudinary.uploader.upload_large(
                fileobj,
                resource_type="video",
                folder=self._folder,
                filename=filename,
                allowed_formats=list(ALLOWED_FORMATS),
                chunk_size=self._CHUNK_SIZE,
                **self._credentials,
            )
        except Exception as e:
            raise BlobStoreError(f"Cloudinary upload failed: {e}") from e

        logger.info("Uploaded %s to Cloudinary as %s", filename, result.get("public_id"))
        return StoredBlob(
            storage_id=result["public_id"],
            url=result.get("secure_url") or result["url"],
            duration=float(result.get("duration") or 0),
        )

    def delete(self, storage_id: str) -> None:
        """Destroy a video on Cloudinary. An already-missing asset is not an error."""
        try:
            result = cloudinary.uploader.destroy(
                storage_id, resource_type="video", **self._credentials
            )
        except Exception as e:
            raise BlobStoreError(f"Cloudinary delete failed for {storage_id}: {e}") from e

        outcome = result.get("result")
        if outcome == "not found":
            logger.warning("Cloudinary asset already gone: %s", storage_id)
        elif outcome != "ok":
            raise BlobStoreError(f"Cloudinary delete returned {outcome!r} for {storage_id}")
