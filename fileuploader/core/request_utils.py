"""Request utility functions for handling common request operations."""

import ipaddress
import logging

from fastapi import Request

logger = logging.getLogger(__name__)


def _is_valid_ip(ip_str: str) -> bool:
    """Check if a string is a valid IP address."""
    try:
        ipaddress.ip_address(ip_str)
        return True
    except ValueError:
        return False


def get_client_ip(request: Request) -> str | None:
    """Get the client IP address from a request.

    Priority order:
    1. First entry of X-Forwarded-For (set by a fronting proxy)
    2. X-Real-IP
    3. Direct client connection

    The address is only recorded as upload metadata and never used for an
    access decision, so proxy headers are taken as given once they parse
    as an IP address.

    Args:
        request: The FastAPI request object

    Returns:
        Client IP address or None if not available
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
        if _is_valid_ip(ip):
            return ip
        logger.warning(f"Invalid X-Forwarded-For: {forwarded}")

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        ip = real_ip.strip()
        if _is_valid_ip(ip):
            return ip
        logger.warning(f"Invalid X-Real-IP: {real_ip}")

    if request.client:
        return request.client.host

    return None
