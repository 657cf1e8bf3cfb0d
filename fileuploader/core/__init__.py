# File Uploader Core Module
from .config import get_settings, settings
from .database import (
    Base,
    build_engine,
    build_session_maker,
    check_db_connection,
    create_tables,
    get_db,
)
from .logging import setup_logging

__all__ = [
    "settings",
    "get_settings",
    "setup_logging",
    "Base",
    "build_engine",
    "build_session_maker",
    "create_tables",
    "get_db",
    "check_db_connection",
]
