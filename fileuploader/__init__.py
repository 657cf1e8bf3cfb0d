"""File Uploader: image uploads behind username/password and session tokens."""

__version__ = "0.1.0"
