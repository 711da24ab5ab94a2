"""
Document rewriter for pointing references at local copies.

Rewrites are applied in a separate pass over a finished list of decisions,
never while the document is still being scanned.
"""

from typing import Iterable, Sequence

from bs4 import BeautifulSoup

from .models import ResolvedAsset
from ..utils.constants import EDITOR_MARKER_IDS
from ..utils.log import get_logger


class DocumentRewriter:
    """
    Mutates a parsed document before it is saved.

    Replaces localized reference attributes and removes elements injected
    by the edit session.
    """

    def __init__(self, marker_ids: Sequence[str] = EDITOR_MARKER_IDS):
        """
        Initialize the document rewriter.

        Args:
            marker_ids: Ids of transient elements to drop before saving
        """
        self.marker_ids = tuple(marker_ids)
        self.logger = get_logger("rewriter")

    def strip_markers(self, soup: BeautifulSoup) -> int:
        """
        Remove transient edit-session elements.

        Args:
            soup: Parsed document

        Returns:
            Number of removed elements
        """
        removed = 0
        for marker_id in self.marker_ids:
            for element in soup.find_all(id=marker_id):
                element.decompose()
                removed += 1

        if removed:
            self.logger.debug(f"Removed {removed} editor marker elements")
        return removed

    def apply(self, assets: Iterable[ResolvedAsset]) -> int:
        """
        Write local paths into the referencing attributes.

        Skipped assets keep their original attribute value.

        Args:
            assets: Final decisions for every reference

        Returns:
            Number of rewritten attributes
        """
        rewritten = 0
        for asset in assets:
            if asset.local_path is None:
                continue
            reference = asset.reference
            reference.element[reference.attribute] = asset.local_path
            rewritten += 1

        self.logger.debug(f"Rewrote {rewritten} references")
        return rewritten

    def serialize(self, soup: BeautifulSoup) -> str:
        """Return the final markup of the document."""
        return str(soup)
