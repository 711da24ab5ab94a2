"""
Utility modules for page capture.

Contains logging, URL and path handling utilities, and constants.
"""

from .log import setup_logger, get_logger
from .paths import (
    UnparseableURL,
    resolve_reference,
    is_in_scope,
    ensure_dir,
    ensure_parent_dir,
)
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_CONCURRENCY,
    DEFAULT_OUTPUT_ROOT,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "UnparseableURL",
    "resolve_reference",
    "is_in_scope",
    "ensure_dir",
    "ensure_parent_dir",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_PAGE_TIMEOUT",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_OUTPUT_ROOT",
]
