"""
Path mapper for computing where captured assets are stored.

Local paths mirror the asset's position on the origin server, relative
to the directory of the captured page when the asset lives below it.
"""

import posixpath
import uuid
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

from .models import TagKind
from ..utils.constants import FALLBACK_ASSET_DIR, FALLBACK_ASSET_PREFIX, INDEX_FILENAME
from ..utils.log import get_logger


def random_token() -> str:
    """Generate a short random token for fallback file names."""
    return uuid.uuid4().hex[:8]


def page_directory(page_path: str) -> str:
    """
    Compute the directory a page path stands for.

    Paths ending in '/' are used as-is, paths with a file extension map to
    their parent directory, and extensionless paths are treated as
    directory-style routes.

    Args:
        page_path: Path component of the page URL

    Returns:
        Directory path ending with '/'
    """
    if not page_path:
        return '/'
    if page_path.endswith('/'):
        return page_path

    _, extension = posixpath.splitext(page_path)
    if not extension:
        return page_path + '/'

    directory = posixpath.dirname(page_path)
    if not directory.endswith('/'):
        directory += '/'
    return directory


def document_directory(page_path: str) -> str:
    """
    Directory that relative references of a page resolve against.

    Args:
        page_path: Path component of the page URL

    Returns:
        Everything up to and including the last '/' of the path
    """
    if not page_path or '/' not in page_path:
        return '/'
    return page_path[:page_path.rindex('/') + 1]


class PathMapper:
    """
    Maps in-scope asset URLs to local relative paths.

    Mappings are memoized per absolute URL, so repeated references
    (including ones that received a random fallback name) always get the
    same local path for the lifetime of the mapper.

    Relative paths are taken from the first prefix the asset lives under:
    the page directory, then (for extensionless pages) the directory
    relative references resolve against. A child of the route and a
    sibling of the page can therefore land on the same local path, e.g.
    /blog/post/img.png and /blog/img.png on /blog/post; that case is
    reported as a collision and the last download wins.

    The saved page's own file name is reserved; an asset that would map
    onto it gets a fallback name instead.
    """

    def __init__(
        self,
        page_url: str,
        token_factory: Callable[[], str] = random_token,
        reserved: Tuple[str, ...] = (INDEX_FILENAME,)
    ):
        """
        Initialize the path mapper.

        Args:
            page_url: Absolute URL of the captured page
            token_factory: Zero-argument callable producing fallback name tokens
            reserved: Local paths no asset may be written to
        """
        self.page_url = page_url
        page_path = urlsplit(page_url).path
        self.base_dir = page_directory(page_path)
        # For extensionless pages, siblings of the page are mapped relative
        # to the directory the browser resolves references against
        self.prefixes = [self.base_dir]
        if document_directory(page_path) != self.base_dir:
            self.prefixes.append(document_directory(page_path))
        self.token_factory = token_factory
        self.reserved = tuple(reserved)
        self.logger = get_logger("mapper")

        self._by_url: Dict[str, str] = {}
        # local path -> first URL that claimed it, for collision reporting
        self._claimed: Dict[str, str] = {}

    def map(self, asset_url: str, kind: Optional[TagKind] = None) -> str:
        """
        Compute the local path for an asset.

        Args:
            asset_url: Absolute, in-scope asset URL with dot segments removed
            kind: Kind of the referencing element, used for extension fallback

        Returns:
            Non-empty local path using '/' separators
        """
        key = self._url_key(asset_url)
        if key in self._by_url:
            return self._by_url[key]

        local_path = self._compute(urlsplit(asset_url).path, kind)
        self._by_url[key] = local_path

        previous = self._claimed.setdefault(local_path, key)
        if previous != key:
            self.logger.warning(
                f"Local path collision: {key} and {previous} both map to "
                f"{local_path} (last download wins)"
            )

        return local_path

    def _compute(self, asset_path: str, kind: Optional[TagKind]) -> str:
        local_path = asset_path
        for prefix in self.prefixes:
            if asset_path.startswith(prefix):
                local_path = asset_path[len(prefix):]
                break

        # Strip leading slashes so the path stays relative to the output dir
        local_path = local_path.lstrip('/')

        if not local_path:
            local_path = f"{FALLBACK_ASSET_DIR}/{FALLBACK_ASSET_PREFIX}{self.token_factory()}"
        elif local_path.endswith('/'):
            local_path += 'index'

        _, extension = posixpath.splitext(local_path)
        if not extension and kind is not None:
            local_path += kind.default_extension

        if local_path in self.reserved:
            _, extension = posixpath.splitext(local_path)
            renamed = f"{FALLBACK_ASSET_DIR}/{FALLBACK_ASSET_PREFIX}{self.token_factory()}{extension}"
            self.logger.warning(f"{asset_path} would overwrite {local_path}, saving it as {renamed}")
            local_path = renamed

        return local_path

    @staticmethod
    def _url_key(url: str) -> str:
        parts = urlsplit(url)
        return urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ''))
