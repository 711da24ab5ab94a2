"""
Shared constants for page capture.

Contains common configuration values used across multiple modules.
"""

# Default user agent string for all HTTP requests
# Used by both the browser renderer and asset downloader
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Default asset request timeout in seconds
DEFAULT_TIMEOUT = 30

# Default page load timeout in milliseconds (for Playwright)
DEFAULT_PAGE_TIMEOUT = 60000

# Default concurrent downloads (0 disables the limit)
DEFAULT_CONCURRENCY = 10

# Captures are stored under <output root>/<name>/
DEFAULT_OUTPUT_ROOT = "webcode"

INDEX_FILENAME = "index.html"

# Fallback naming for assets whose local path would be empty
FALLBACK_ASSET_DIR = "assets"
FALLBACK_ASSET_PREFIX = "resource_"

# Reference prefixes that can never be fetched
SKIPPED_SCHEMES = ("data:", "mailto:", "tel:")

# Element ids injected by the edit session
EDITOR_TOAST_ID = "editor-toast-notification"
EDITOR_STYLE_ID = "editor-performance-style"
EDITOR_MARKER_IDS = (EDITOR_TOAST_ID, EDITOR_STYLE_ID)
