"""
Asset extractor for finding localizable references in a document.

Uses BeautifulSoup to walk the parsed page and report every element
attribute that points at an image, script, stylesheet, icon or media file.
"""

from typing import Iterator, List

from bs4 import BeautifulSoup, Tag

from .models import AssetReference, TagKind
from ..utils.log import get_logger


def parse_document(html: str) -> BeautifulSoup:
    """
    Parse HTML into a mutable document tree.

    Args:
        html: Page markup

    Returns:
        BeautifulSoup document
    """
    return BeautifulSoup(html, 'lxml')


def _rel_values(link: Tag) -> List[str]:
    """Return the lowercased rel tokens of a link element."""
    rel_value = link.get('rel', [])
    # BeautifulSoup returns rel as a list of individual values,
    # e.g. <link rel="shortcut icon"> becomes ['shortcut', 'icon']
    if isinstance(rel_value, list):
        return [v.lower() for v in rel_value]
    return rel_value.lower().split()


class AssetExtractor:
    """
    Extracts asset references from a parsed document.

    References are reported per element group in a fixed order: images,
    scripts, stylesheets, icons, then media sources. Within a group they
    follow document order.
    """

    MEDIA_TAGS = ('source', 'video', 'audio')

    def __init__(self):
        self.logger = get_logger("extractor")

    def extract(self, soup: BeautifulSoup) -> List[AssetReference]:
        """
        Collect every asset reference of the document.

        Args:
            soup: Parsed document

        Returns:
            List of AssetReference, one per element attribute
        """
        references = list(self._iter_references(soup))
        self.logger.debug(f"Found {len(references)} asset references")
        return references

    def _iter_references(self, soup: BeautifulSoup) -> Iterator[AssetReference]:
        yield from self._extract_images(soup)
        yield from self._extract_scripts(soup)
        yield from self._extract_links(soup)
        yield from self._extract_media(soup)

    def _extract_images(self, soup: BeautifulSoup) -> Iterator[AssetReference]:
        """Extract <img src>."""
        for img in soup.find_all('img', src=True):
            yield AssetReference(TagKind.IMAGE, img, 'src', img['src'])

    def _extract_scripts(self, soup: BeautifulSoup) -> Iterator[AssetReference]:
        """Extract <script src>."""
        for script in soup.find_all('script', src=True):
            yield AssetReference(TagKind.SCRIPT, script, 'src', script['src'])

    def _extract_links(self, soup: BeautifulSoup) -> Iterator[AssetReference]:
        """Extract stylesheet links first, then icon links."""
        links = soup.find_all('link', href=True)

        icons = []
        for link in links:
            rel_values = _rel_values(link)
            if 'stylesheet' in rel_values:
                yield AssetReference(TagKind.STYLESHEET, link, 'href', link['href'])
            elif 'icon' in rel_values:
                # Covers both rel="icon" and rel="shortcut icon"
                icons.append(link)

        for link in icons:
            yield AssetReference(TagKind.ICON, link, 'href', link['href'])

    def _extract_media(self, soup: BeautifulSoup) -> Iterator[AssetReference]:
        """Extract src of <source>, <video> and <audio>."""
        for tag_name in self.MEDIA_TAGS:
            for element in soup.find_all(tag_name, src=True):
                yield AssetReference(TagKind.MEDIA, element, 'src', element['src'])
