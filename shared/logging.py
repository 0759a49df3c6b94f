"""
Logging utilities: logger factory plus re-exports of the configuration entry points.

Example:
    >>> from shared.logging import get_logger
    >>> log = get_logger(__name__)
    >>> log.info("reset_code_issued", email="a@x.com")
"""

from typing import Optional

import structlog
from structlog.stdlib import BoundLogger

from shared.logging_config import (
    configure_structlog,
    hash_ip as _hash_ip,
    setup_logging,
)


def get_logger(name: str) -> BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """None-tolerant wrapper around logging_config.hash_ip()."""
    if ip_address is None:
        return None
    return _hash_ip(ip_address)


__all__ = [
    "get_logger",
    "hash_ip",
    "configure_structlog",
    "setup_logging",
]
