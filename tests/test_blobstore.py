# tests/test_blobstore.py
"""Tests for upload checks and the Cloudinary blob store."""

import io
from unittest.mock import patch

import pytest

from vidshare.config import Settings
from vidshare.storage.blobstore import (
    ALLOWED_FORMATS,
    BlobStoreError,
    CloudinaryBlobStore,
    UploadRejectedError,
    check_upload,
)

GIB = 1024 ** 3


class TestCheckUpload:
    @pytest.mark.parametrize("ext", ALLOWED_FORMATS)
    def test_allowed_formats(self, ext):
        check_upload(f"clip.{ext}", 1024, 5 * GIB)

    def test_extension_case_insensitive(self):
        check_upload("CLIP.MP4", 1024, 5 * GIB)

    @pytest.mark.parametrize("filename", ["notes.txt", "movie.mkv", "noextension", None])
    def test_rejected_formats(self, filename):
        with pytest.raises(UploadRejectedError) as exc:
            check_upload(filename, 1024, 5 * GIB)
        assert exc.value.too_large is False

    def test_size_ceiling(self):
        check_upload("clip.mp4", 5 * GIB, 5 * GIB)
        with pytest.raises(UploadRejectedError) as exc:
            check_upload("clip.mp4", 5 * GIB + 1, 5 * GIB)
        assert exc.value.too_large is True

    def test_unknown_size_allowed(self):
        check_upload("clip.webm", None, 5 * GIB)


@pytest.fixture
def cloudinary_store():
    return CloudinaryBlobStore(Settings(
        cloudinary_cloud_name="demo",
        cloudinary_api_key="key",
        cloudinary_api_secret="secret",
    ))


class TestCloudinaryBlobStore:
    @patch("vidshare.storage.blobstore.cloudinary.uploader.upload_large")
    def test_upload(self, mock_upload, cloudinary_store):
        mock_upload.return_value = {
            "public_id": "video-sharing-platform/abc123",
            "secure_url": "https://res.cloudinary.com/demo/video/upload/v1/video-sharing-platform/abc123.mp4",
            "url": "http://res.cloudinary.com/demo/video/upload/v1/video-sharing-platform/abc123.mp4",
            "duration": 12.25,
        }
        stored = cloudinary_store.upload(io.BytesIO(b"data"), "clip.mp4")

        assert stored.storage_id == "video-sharing-platform/abc123"
        assert stored.url.startswith("https://res.cloudinary.com/")
        assert stored.duration == 12.25

        _, kwargs = mock_upload.call_args
        assert kwargs["resource_type"] == "video"
        assert kwargs["folder"] == "video-sharing-platform"
        assert kwargs["cloud_name"] == "demo"
        assert set(kwargs["allowed_formats"]) == set(ALLOWED_FORMATS)

    @patch("vidshare.storage.blobstore.cloudinary.uploader.upload_large")
    def test_upload_without_duration(self, mock_upload, cloudinary_store):
        mock_upload.return_value = {"public_id": "x", "url": "http://res.cloudinary.com/x.mp4"}
        stored = cloudinary_store.upload(io.BytesIO(b"data"), "clip.mp4")
        assert stored.duration == 0.0
        assert stored.url == "http://res.cloudinary.com/x.mp4"

    @patch("vidshare.storage.blobstore.cloudinary.uploader.upload_large")
    def test_upload_failure_wrapped(self, mock_upload, cloudinary_store):
        mock_upload.side_effect = RuntimeError("network down")
        with pytest.raises(BlobStoreError, match="network down"):
            cloudinary_store.upload(io.BytesIO(b"data"), "clip.mp4")

    @patch("vidshare.storage.blobstore.cloudinary.uploader.destroy")
    def test_delete(self, mock_destroy, cloudinary_store):
        mock_destroy.return_value = {"result": "ok"}
        cloudinary_store.delete("video-sharing-platform/abc123")
        args, kwargs = mock_destroy.call_args
        assert args == ("video-sharing-platform/abc123",)
        assert kwargs["resource_type"] == "video"

    @patch("vidshare.storage.blobstore.cloudinary.uploader.destroy")
    def test_delete_not_found_is_tolerated(self, mock_destroy, cloudinary_store):
        mock_destroy.return_value = {"result": "not found"}
        cloudinary_store.delete("gone")  # should not raise

    @patch("vidshare.storage.blobstore.cloudinary.uploader.destroy")
    def test_delete_unexpected_result(self, mock_destroy, cloudinary_store):
        mock_destroy.return_value = {"result": "error"}
        with pytest.raises(BlobStoreError):
            cloudinary_store.delete("abc")

    @patch("vidshare.storage.blobstore.cloudinary.uploader.destroy")
    def test_delete_failure_wrapped(self, mock_destroy, cloudinary_store):
        mock_destroy.side_effect = RuntimeError("timeout")
        with pytest.raises(BlobStoreError, match="timeout"):
            cloudinary_store.delete("abc")
