"""File Uploader Logging Configuration.

Two output modes: one JSON object per line for production and a readable
single-line format for development. Both run records through
``TokenRedactionFilter``, since session tokens may arrive in query strings.
"""

import json
import logging
import re
import sys
from typing import Literal

LogFormat = Literal["structured", "dev"]

DEV_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEV_DATEFMT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_TOKEN_PATTERNS = (
    re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+"),
    re.compile(r"([?&]token=)[^&\s]+"),
)
REDACTED = "[REDACTED]"


def redact_tokens(text: str) -> str:
    """Mask bearer tokens and ``token=`` query values in a string."""
    for pattern in _TOKEN_PATTERNS:
        text = pattern.sub(rf"\g<1>{REDACTED}", text)
    return text


class TokenRedactionFilter(logging.Filter):
    """Rewrites each record's message with session tokens masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_tokens(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    json.dumps() escapes quotes, backslashes and newlines, so a message can
    never break out of its line.
    """

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _build_handler(format_type: LogFormat) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if format_type == "structured":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEV_FORMAT, datefmt=DEV_DATEFMT))
    handler.addFilter(TokenRedactionFilter())
    return handler


def setup_logging(level: str = "INFO", format_type: LogFormat = "dev") -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'structured' for JSON lines, 'dev' for readable output
    """
    level = level.upper()
    logging.root.handlers = [_build_handler(format_type)]
    logging.root.setLevel(getattr(logging, level))

    # Access lines include query strings, which may carry a token
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.DEBUG if level == "DEBUG" else logging.WARNING
    )

    get_logger("logging").info(f"Logging configured: level={level}, format={format_type}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the fileuploader prefix."""
    return logging.getLogger(f"fileuploader.{name}")
