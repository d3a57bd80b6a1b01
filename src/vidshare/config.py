"""Configuration management for vidshare."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable overrides.

    All settings can be overridden via environment variables
    prefixed with VIDSHARE_ (e.g. VIDSHARE_DATA_DIR, VIDSHARE_PORT).
    Construct once at process start and pass it to the components
    that need it.
    """

    model_config = {"env_prefix": "VIDSHARE_"}

    # Storage
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".vidshare",
        description="Root directory for the catalog database",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 5000
    allowed_origin: str = "http://localhost:5173"
    log_level: str = "INFO"

    # Blob store (Cloudinary)
    storage_domain: str = "cloudinary.com"
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "video-sharing-platform"
    max_upload_bytes: int = 5 * 1024 * 1024 * 1024  # 5 GiB

    # Catalog
    page_size: int = 12
    max_page_size: int = 100

    @property
    def db_path(self) -> Path:
        """SQLite database path."""
        return self.data_dir / "vidshare.db"

    def ensure_dirs(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
