"""
Main page capture module.

Orchestrates the capture process: page rendering, reference discovery,
resolution and path mapping, document rewriting, and asset downloading.
"""

import os
from typing import Callable, List, Optional

from .downloader import AssetDownloader, Fetch
from .extractor import AssetExtractor, parse_document
from .mapper import PathMapper, random_token
from .models import (
    AssetReference,
    CaptureResult,
    DownloadJob,
    DownloadOutcome,
    ResolvedAsset,
    SkipReason,
)
from .renderer import BeforeCapture, PageRenderer
from .rewrite import DocumentRewriter
from ..utils.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_OUTPUT_ROOT,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_TIMEOUT,
    INDEX_FILENAME,
)
from ..utils.log import get_logger, create_progress, print_info, print_success, print_warning
from ..utils.paths import (
    UnparseableURL,
    ensure_dir,
    is_in_scope,
    local_to_filesystem_path,
    resolve_reference,
)


class CaptureError(Exception):
    """Fatal setup failure that aborts a capture run."""


class AssetLocalizer:
    """
    Localizes the assets of one rendered document.

    Decisions for every reference are collected first; the document is
    only mutated once all of them are known.
    """

    def __init__(
        self,
        page_url: str,
        output_dir: str,
        downloader: Optional[AssetDownloader] = None,
        token_factory: Callable[[], str] = random_token,
        extractor: Optional[AssetExtractor] = None,
        rewriter: Optional[DocumentRewriter] = None
    ):
        """
        Initialize the localizer.

        Args:
            page_url: Final absolute URL of the captured page
            output_dir: Directory the capture is written to
            downloader: Download coordinator (a default one is created if omitted)
            token_factory: Generator of fallback name tokens
            extractor: Asset extractor
            rewriter: Document rewriter
        """
        self.page_url = page_url
        self.output_dir = output_dir
        self.downloader = downloader or AssetDownloader()
        self.mapper = PathMapper(page_url, token_factory=token_factory)
        self.extractor = extractor or AssetExtractor()
        self.rewriter = rewriter or DocumentRewriter()
        self.logger = get_logger("capture")

    def resolve(self, reference: AssetReference) -> ResolvedAsset:
        """
        Decide what happens to a single reference.

        Args:
            reference: Reference found in the document

        Returns:
            ResolvedAsset; skipped references carry no local path
        """
        try:
            absolute_url = resolve_reference(reference.raw, self.page_url)
        except UnparseableURL as e:
            self.logger.warning(f"Skipping invalid URL: {reference.raw} ({e.reason})")
            return ResolvedAsset(reference, skip_reason=SkipReason.UNPARSEABLE)

        if absolute_url is None:
            self.logger.debug(f"Skipping non-fetchable reference: {reference.raw[:60]!r}")
            return ResolvedAsset(reference, skip_reason=SkipReason.NOT_FETCHABLE)

        if not is_in_scope(absolute_url, self.page_url):
            self.logger.debug(f"Skipping external resource: {absolute_url}")
            return ResolvedAsset(
                reference,
                absolute_url=absolute_url,
                skip_reason=SkipReason.OUT_OF_SCOPE
            )

        return ResolvedAsset(
            reference,
            absolute_url=absolute_url,
            in_scope=True,
            local_path=self.mapper.map(absolute_url, reference.kind)
        )

    async def capture_document(self, html: str) -> CaptureResult:
        """
        Localize every asset of a document and download the in-scope ones.

        Args:
            html: Rendered page markup

        Returns:
            CaptureResult with the rewritten markup and download outcomes
        """
        soup = parse_document(html)
        self.rewriter.strip_markers(soup)

        references = self.extractor.extract(soup)
        assets = tuple(self.resolve(reference) for reference in references)

        self.rewriter.apply(assets)

        jobs = [
            DownloadJob(
                url=asset.absolute_url,
                local_path=asset.local_path,
                target_path=local_to_filesystem_path(self.output_dir, asset.local_path)
            )
            for asset in assets
            if asset.local_path is not None
        ]

        skipped = len(assets) - len(jobs)
        self.logger.info(
            f"Found {len(references)} asset references: "
            f"{len(jobs)} queued, {skipped} left untouched"
        )

        outcomes = await self.downloader.download_all(jobs)

        return CaptureResult(
            html=self.rewriter.serialize(soup),
            assets=assets,
            outcomes=outcomes,
            output_dir=self.output_dir
        )


class PageCapture:
    """
    Main page capture class.

    Renders one page and saves it with its same-host assets under
    <output_root>/<name>/.
    """

    def __init__(
        self,
        url: str,
        name: str,
        output_root: str = DEFAULT_OUTPUT_ROOT,
        page_timeout: int = DEFAULT_PAGE_TIMEOUT,
        timeout: int = DEFAULT_TIMEOUT,
        concurrency: int = DEFAULT_CONCURRENCY,
        headless: bool = True,
        before_capture: Optional[BeforeCapture] = None,
        renderer: Optional[PageRenderer] = None,
        fetch: Optional[Fetch] = None
    ):
        """
        Initialize the page capture.

        Args:
            url: URL of the page to capture
            name: Folder name of the capture
            output_root: Directory holding all captures
            page_timeout: Page load timeout in milliseconds
            timeout: Asset request timeout in seconds
            concurrency: Maximum concurrent asset downloads (0 for no limit)
            headless: Run browser in headless mode
            before_capture: Optional hook run on the loaded page (edit session)
            renderer: Page renderer (a Playwright one is created if omitted)
            fetch: Optional coroutine function used to fetch asset bytes
        """
        if not url or not url.strip():
            raise CaptureError("Website URL is required")
        if not name or not name.strip():
            raise CaptureError("Website name is required")
        name = name.strip()
        separators = [sep for sep in ('/', os.sep, os.altsep) if sep]
        if os.path.isabs(name) or name in ('.', '..') or any(sep in name for sep in separators):
            raise CaptureError(f"Website name must be a single folder name: {name!r}")

        self.url = url.strip()
        self.name = name
        self.output_dir = os.path.abspath(os.path.join(output_root, self.name))
        self.timeout = timeout
        self.concurrency = concurrency
        self.before_capture = before_capture
        self.fetch = fetch
        self.renderer = renderer or PageRenderer(timeout=page_timeout, headless=headless)
        self.logger = get_logger("capture")

    async def run(self) -> CaptureResult:
        """
        Capture the page.

        Returns:
            CaptureResult with statistics and the written index path

        Raises:
            CaptureError: If the page could not be loaded
        """
        ensure_dir(self.output_dir)

        print_info(f"Opening {self.url} in browser...")

        try:
            await self.renderer.start()
            html, final_url = await self.renderer.render_page(
                self.url,
                before_capture=self.before_capture
            )
        finally:
            await self.renderer.stop()

        if html is None:
            raise CaptureError(f"Failed to load page: {self.url}")

        print_info("Extracting and localizing assets...")

        with create_progress() as progress:
            task = progress.add_task("Downloading assets", total=None)

            def advance(outcome: DownloadOutcome) -> None:
                progress.advance(task)

            downloader = AssetDownloader(
                timeout=self.timeout,
                concurrency=self.concurrency,
                fetch=self.fetch,
                on_complete=advance
            )
            localizer = AssetLocalizer(final_url or self.url, self.output_dir, downloader)
            result = await localizer.capture_document(html)

        index_path = os.path.join(self.output_dir, INDEX_FILENAME)
        with open(index_path, 'w', encoding='utf-8') as f:
            f.write(result.html)
        result.index_path = index_path

        if result.failed:
            print_warning(
                f"{result.failed} of {result.queued} assets failed to download"
            )
        print_success(f"Page captured to: {self.output_dir}")

        return result


def failed_outcomes(result: CaptureResult) -> List[DownloadOutcome]:
    """Return the outcomes of failed downloads."""
    return [outcome for outcome in result.outcomes if not outcome.success]
