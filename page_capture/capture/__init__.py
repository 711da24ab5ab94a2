"""
Capture module for saving a rendered page.

Contains components for rendering, extracting, mapping, rewriting, and downloading.
"""

from .capture import PageCapture, AssetLocalizer, CaptureError
from .renderer import PageRenderer
from .extractor import AssetExtractor
from .mapper import PathMapper
from .downloader import AssetDownloader
from .rewrite import DocumentRewriter

__all__ = [
    "PageCapture",
    "AssetLocalizer",
    "CaptureError",
    "PageRenderer",
    "AssetExtractor",
    "PathMapper",
    "AssetDownloader",
    "DocumentRewriter",
]
