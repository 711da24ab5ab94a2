"""
Asset downloader for fetching and saving captured resources.

Uses aiohttp for parallel asynchronous downloads.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence

import aiohttp
from aiohttp import ClientTimeout, ClientError

from .models import DownloadJob, DownloadOutcome
from ..utils.constants import DEFAULT_TIMEOUT, DEFAULT_CONCURRENCY, DEFAULT_USER_AGENT
from ..utils.log import get_logger
from ..utils.paths import ensure_parent_dir


Fetch = Callable[[str], Awaitable[bytes]]


class AssetDownloader:
    """
    Downloads captured assets asynchronously.

    Every job runs independently: a failed fetch or write is recorded
    in its outcome and never cancels the other jobs.
    """

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT,
        concurrency: int = DEFAULT_CONCURRENCY,
        user_agent: str = DEFAULT_USER_AGENT,
        fetch: Optional[Fetch] = None,
        on_complete: Optional[Callable[[DownloadOutcome], None]] = None
    ):
        """
        Initialize the asset downloader.

        Args:
            timeout: Request timeout in seconds
            concurrency: Maximum concurrent downloads (0 for no limit)
            user_agent: User agent string for requests
            fetch: Optional coroutine function returning the bytes of a URL;
                   an aiohttp session is used when omitted
            on_complete: Optional callback invoked after each job
        """
        self.timeout = ClientTimeout(total=timeout)
        self.concurrency = concurrency
        self.user_agent = user_agent
        self.on_complete = on_complete
        self.logger = get_logger("downloader")
        self._fetch = fetch

    async def download_all(self, jobs: Sequence[DownloadJob]) -> List[DownloadOutcome]:
        """
        Download all jobs concurrently and wait for every one of them.

        Args:
            jobs: Jobs to run

        Returns:
            One DownloadOutcome per job, in job order
        """
        if not jobs:
            return []

        self.logger.info(f"Downloading {len(jobs)} assets...")

        if self._fetch is not None:
            outcomes = await self._run_jobs(jobs, self._fetch)
        else:
            async with aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            ) as session:
                async def fetch(url: str) -> bytes:
                    async with session.get(url, allow_redirects=True) as response:
                        response.raise_for_status()
                        return await response.read()

                outcomes = await self._run_jobs(jobs, fetch)

        failed = sum(1 for outcome in outcomes if not outcome.success)
        self.logger.info(
            f"Downloaded {len(outcomes) - failed} assets, {failed} failed"
        )

        return outcomes

    async def _run_jobs(
        self,
        jobs: Sequence[DownloadJob],
        fetch: Fetch
    ) -> List[DownloadOutcome]:
        semaphore = asyncio.Semaphore(self.concurrency) if self.concurrency > 0 else None

        async def run(job: DownloadJob) -> DownloadOutcome:
            if semaphore is None:
                return await self._download_asset(job, fetch)
            async with semaphore:
                return await self._download_asset(job, fetch)

        return list(await asyncio.gather(*(run(job) for job in jobs)))

    async def _download_asset(self, job: DownloadJob, fetch: Fetch) -> DownloadOutcome:
        """
        Fetch a single asset and write it to its target path.

        Args:
            job: Job to run
            fetch: Coroutine function returning the bytes of a URL

        Returns:
            DownloadOutcome for the job
        """
        error: Optional[str] = None

        try:
            content = await fetch(job.url)

            ensure_parent_dir(job.target_path)
            with open(job.target_path, 'wb') as f:
                f.write(content)

        except ClientError as e:
            error = f"Client error: {e}"
        except asyncio.TimeoutError:
            error = "Timeout"
        except OSError as e:
            error = f"OS error: {e}"
        except Exception as e:
            error = f"{type(e).__name__}: {e}"

        if error is None:
            self.logger.debug(f"Downloaded: {job.url} -> {job.local_path}")
        else:
            self.logger.warning(f"Failed to download asset: {job.url} ({error})")

        outcome = DownloadOutcome(
            url=job.url,
            local_path=job.local_path,
            target_path=job.target_path,
            success=error is None,
            error=error
        )

        if self.on_complete:
            self.on_complete(outcome)

        return outcome
