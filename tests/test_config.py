# tests/test_config.py
"""Tests for vidshare configuration."""

from pathlib import Path
from unittest.mock import patch

from vidshare.config import Settings


class TestSettings:
    def test_default_settings(self):
        s = Settings()
        assert s.host == "127.0.0.1"
        assert s.port == 5000
        assert s.data_dir == Path.home() / ".vidshare"
        assert s.page_size == 12
        assert s.max_upload_bytes == 5 * 1024 ** 3

    def test_db_path_derived(self):
        s = Settings()
        assert s.db_path == s.data_dir / "vidshare.db"

    def test_ensure_dirs_creates(self, tmp_path):
        s = Settings(data_dir=tmp_path / "testdata")
        s.ensure_dirs()
        assert s.data_dir.exists()

    def test_env_override(self):
        with patch.dict("os.environ", {"VIDSHARE_PORT": "1234"}):
            s = Settings()
            assert s.port == 1234

    def test_cloudinary_env(self):
        env = {
            "VIDSHARE_CLOUDINARY_CLOUD_NAME": "demo",
            "VIDSHARE_ALLOWED_ORIGIN": "https://videos.example.com",
        }
        with patch.dict("os.environ", env):
            s = Settings()
            assert s.cloudinary_cloud_name == "demo"
            assert s.allowed_origin == "https://videos.example.com"
