"""
Path and URL utilities for page capture.

Provides reference resolution, same-host checks, and directory management.
"""

import os
from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from .constants import SKIPPED_SCHEMES


class UnparseableURL(ValueError):
    """Raised when a reference cannot be turned into a usable absolute URL."""

    def __init__(self, reference: str, reason: str = ""):
        self.reference = reference
        self.reason = reason
        message = f"Cannot parse URL: {reference!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


def is_skipped_reference(reference: Optional[str]) -> bool:
    """
    Check if a raw reference should never be resolved or fetched.

    Args:
        reference: Raw attribute value

    Returns:
        True for empty values and inline data, mail and phone references
    """
    if not reference:
        return True
    reference = reference.strip()
    if not reference:
        return True
    return reference.lower().startswith(SKIPPED_SCHEMES)


def remove_dot_segments(path: str) -> str:
    """
    Collapse '.' and '..' segments of a URL path.

    Args:
        path: URL path component

    Returns:
        Path without dot segments (trailing slash kept when the last
        segment was a dot segment)
    """
    if not path or ('/.' not in path and not path.startswith('.')):
        return path

    segments = path.split('/')
    resolved = []
    for segment in segments:
        if segment == '..':
            # Never pop the empty root segment of an absolute path
            if len(resolved) > 1 or (resolved and resolved[0] != ''):
                resolved.pop()
        elif segment != '.':
            resolved.append(segment)

    if segments[-1] in ('.', '..'):
        resolved.append('')

    result = '/'.join(resolved)
    if path.startswith('/') and not result.startswith('/'):
        result = '/' + result
    return result


def resolve_reference(reference: Optional[str], base_url: str) -> Optional[str]:
    """
    Resolve a raw reference against the page URL.

    Handles absolute, path-relative and protocol-relative references.
    The query is kept, the fragment dropped.

    Args:
        reference: Raw attribute value
        base_url: Absolute URL of the page holding the reference

    Returns:
        Absolute URL string, or None if the reference is skipped

    Raises:
        UnparseableURL: If the joined URL cannot be parsed
    """
    if is_skipped_reference(reference):
        return None

    reference = reference.strip()

    try:
        joined = urljoin(base_url, reference)
        parts = urlsplit(joined)
        host = parts.hostname
        # Raises ValueError for out-of-range or non-numeric ports
        parts.port
    except ValueError as e:
        raise UnparseableURL(reference, str(e)) from e

    if parts.scheme in ('http', 'https') and not host:
        raise UnparseableURL(reference, "missing host")

    return urlunsplit((
        parts.scheme,
        parts.netloc,
        remove_dot_segments(parts.path),
        parts.query,
        ''  # Remove fragment
    ))


def get_host(url: str) -> str:
    """
    Extract the host name from a URL.

    Args:
        url: URL to extract host from

    Returns:
        Lowercase host without port, or an empty string
    """
    try:
        return urlsplit(url).hostname or ''
    except ValueError:
        return ''


def is_in_scope(url: str, base_url: str) -> bool:
    """
    Check if a URL is served by exactly the same host as the page.

    Subdomains and other schemes on the same host are not treated
    specially: only the host names are compared.

    Args:
        url: Absolute URL to check
        base_url: Absolute page URL

    Returns:
        True if same host, False otherwise
    """
    host = get_host(url)
    return bool(host) and host == get_host(base_url)


def ensure_dir(path: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists
    """
    os.makedirs(path, exist_ok=True)


def ensure_parent_dir(file_path: str) -> None:
    """
    Ensure the parent directory of a file exists.

    Args:
        file_path: File path whose parent directory should exist
    """
    parent = os.path.dirname(file_path)
    if parent:
        ensure_dir(parent)


def local_to_filesystem_path(output_dir: str, local_path: str) -> str:
    """
    Join a '/'-separated local path onto the output directory.

    Args:
        output_dir: Capture output directory
        local_path: Relative path as written into the document

    Returns:
        Filesystem path of the asset
    """
    return os.path.join(output_dir, *local_path.split('/'))
