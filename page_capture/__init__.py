"""
Page Capture - save a rendered web page with its same-host assets.

This package renders a page with Playwright, rewrites its image, script,
stylesheet, icon and media references to local paths that mirror the
origin server, and downloads those assets for offline viewing.
"""

__version__ = "1.0.0"
__author__ = "Page Capture Team"
