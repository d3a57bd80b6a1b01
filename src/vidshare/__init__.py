"""vidshare — video-sharing catalog backend."""

__version__ = "0.1.0"
