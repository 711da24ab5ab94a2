"""
Page renderer using Playwright for JavaScript rendering.

Handles browser rendering to capture dynamically generated content,
and the optional in-browser edit session that runs before capture.
"""

import asyncio
import threading
from typing import Awaitable, Callable, Optional, Tuple

from playwright.async_api import async_playwright, Browser, Page, TimeoutError as PlaywrightTimeout

from ..utils.constants import (
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_USER_AGENT,
    EDITOR_STYLE_ID,
    EDITOR_TOAST_ID,
)
from ..utils.log import get_logger


# Runs inside the page. Makes the body editable and quiets timers and
# animations so editing stays responsive.
EDIT_SESSION_SCRIPT = """
([styleId, toastId]) => {
    document.body.contentEditable = "true";

    const maxIntervalId = window.setInterval(() => {}, 9999);
    for (let i = 1; i < maxIntervalId; i++) window.clearInterval(i);

    const maxTimeoutId = window.setTimeout(() => {}, 9999);
    for (let i = 1; i < maxTimeoutId; i++) window.clearTimeout(i);

    const style = document.createElement("style");
    style.id = styleId;
    style.innerHTML = "* { transition: none !important; animation: none !important; }";
    document.head.appendChild(style);

    window.requestAnimationFrame = () => 0;

    const toast = document.createElement("div");
    toast.id = toastId;
    Object.assign(toast.style, {
        position: "fixed",
        bottom: "20px",
        right: "20px",
        backgroundColor: "#333",
        color: "#fff",
        padding: "10px 20px",
        borderRadius: "5px",
        zIndex: "999999",
        fontFamily: "sans-serif",
        boxShadow: "0 2px 10px rgba(0,0,0,0.5)",
        pointerEvents: "none",
    });
    toast.innerText = "Editing enabled. Press ENTER in the terminal to save.";
    document.body.appendChild(toast);
}
"""


BeforeCapture = Callable[[Page], Awaitable[None]]


class PageRenderer:
    """
    Renders web pages using a Playwright browser.

    Captures the final DOM after JavaScript execution.
    """

    def __init__(
        self,
        timeout: int = DEFAULT_PAGE_TIMEOUT,
        wait_until: str = "networkidle",
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT
    ):
        """
        Initialize the page renderer.

        Args:
            timeout: Page load timeout in milliseconds
            wait_until: Event to wait for ('load', 'domcontentloaded', 'networkidle')
            headless: Run browser in headless mode
            user_agent: User agent for the browser context
        """
        self.timeout = timeout
        self.wait_until = wait_until
        self.headless = headless
        self.user_agent = user_agent
        self.logger = get_logger("renderer")

        self._playwright = None
        self._browser: Optional[Browser] = None

    async def start(self) -> None:
        """Start the Playwright browser instance."""
        self.logger.info("Starting Playwright browser...")
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=[
                '--disable-blink-features=AutomationControlled',
                '--no-sandbox',
                '--disable-setuid-sandbox',
                '--disable-dev-shm-usage',
            ]
        )
        self.logger.info("Browser started successfully")

    async def stop(self) -> None:
        """Stop the Playwright browser instance."""
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self.logger.info("Browser stopped")

    async def render_page(
        self,
        url: str,
        before_capture: Optional[BeforeCapture] = None
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Render a page and return the final HTML content.

        Args:
            url: URL to render
            before_capture: Optional coroutine run on the loaded page
                            before its markup is read

        Returns:
            Tuple of (html_content, final_url) or (None, None) on error
        """
        if not self._browser:
            await self.start()

        page: Optional[Page] = None

        try:
            context = await self._browser.new_context(
                user_agent=self.user_agent,
                viewport=None if not self.headless else {"width": 1920, "height": 1080},
                ignore_https_errors=True,
            )

            page = await context.new_page()

            self.logger.debug(f"Rendering: {url}")
            response = await page.goto(
                url,
                wait_until=self.wait_until,
                timeout=self.timeout
            )

            if not response:
                self.logger.warning(f"No response for {url}")
                return None, None

            if response.status >= 400:
                self.logger.warning(f"HTTP {response.status} for {url}")
                return None, None

            if before_capture:
                await before_capture(page)

            # Get the final URL (after redirects)
            final_url = page.url

            html_content = await page.content()

            self.logger.debug(f"Successfully rendered: {final_url}")

            return html_content, final_url

        except PlaywrightTimeout:
            self.logger.warning(f"Timeout rendering {url}")
            return None, None
        except Exception as e:
            self.logger.error(f"Error rendering {url}: {e}")
            return None, None
        finally:
            if page:
                await page.close()

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.stop()


async def enable_editing(page: Page) -> None:
    """
    Turn the loaded page into an editable document.

    Args:
        page: Loaded Playwright page
    """
    await page.evaluate(EDIT_SESSION_SCRIPT, [EDITOR_STYLE_ID, EDITOR_TOAST_ID])


async def wait_in_daemon_thread(func: Callable[[], None]) -> None:
    """
    Await a blocking call running in a daemon thread.

    A thread blocked on terminal input must not keep the interpreter
    alive once the capture is cancelled, so the default executor is not used.

    Args:
        func: Blocking callable
    """
    loop = asyncio.get_running_loop()
    done = loop.create_future()

    def finish(error: Optional[BaseException]) -> None:
        if done.done():
            return
        if error is None:
            done.set_result(None)
        else:
            done.set_exception(error)

    def target() -> None:
        error = None
        try:
            func()
        except Exception as e:
            error = e
        try:
            loop.call_soon_threadsafe(finish, error)
        except RuntimeError:
            # Event loop already closed after cancellation
            pass

    threading.Thread(target=target, name="edit-session-wait", daemon=True).start()
    await done


def edit_session(wait_for_user: Callable[[], None]) -> BeforeCapture:
    """
    Build a before-capture hook that lets the user edit the page.

    Args:
        wait_for_user: Blocking callable returning once the user is done

    Returns:
        Coroutine function suitable for PageRenderer.render_page
    """
    async def run(page: Page) -> None:
        await enable_editing(page)
        await wait_in_daemon_thread(wait_for_user)

    return run
