"""Test doubles for external collaborators."""

from typing import Dict, Iterable, List, Optional, Tuple

import aiohttp


class FakeServer:
    """In-memory stand-in for the HTTP fetch capability."""

    def __init__(self, files: Dict[str, bytes] = None, failing: Iterable[str] = ()):
        self.files = dict(files or {})
        self.failing = set(failing)
        self.requested: List[str] = []

    async def fetch(self, url: str) -> bytes:
        self.requested.append(url)
        if url in self.failing:
            raise aiohttp.ClientError(f"connection refused: {url}")
        return self.files.get(url, b"content of " + url.encode())


class FakeRenderer:
    """Renderer returning canned markup instead of driving a browser."""

    def __init__(self, html: Optional[str], final_url: Optional[str] = None):
        self.html = html
        self.final_url = final_url
        self.started = False
        self.stopped = False
        self.rendered: List[str] = []
        self.hook_ran = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def render_page(self, url, before_capture=None) -> Tuple[Optional[str], Optional[str]]:
        self.rendered.append(url)
        if self.html is None:
            return None, None
        if before_capture:
            await before_capture(None)
            self.hook_ran = True
        return self.html, self.final_url or url
