"""Game client hosted in a Playwright-driven Chromium.

HUD regions and color signatures are tuned to one resolution, so the page
always gets a fixed viewport. The runtime hands out the frame source and
input backend bound to its page.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from hudbot.actions.backend import PlaywrightInputBackend
from hudbot.vision.capture import PlaywrightFrameSource

if TYPE_CHECKING:
    from playwright.sync_api import Browser, BrowserContext, Page, Playwright

logger = logging.getLogger(__name__)

CHROMIUM_ARGS = ["--disable-dev-shm-usage"]


class BrowserRuntimeError(Exception):
    """Error raised when the browser cannot host the game client."""

    pass


class BrowserRuntime:
    """Owns the Playwright objects behind the game page.

    Example:
        >>> with BrowserRuntime(headless=False) as runtime:
        ...     runtime.open_game("https://universe.flyff.com/play")
        ...     capture = FrameCapture(runtime.frame_source())
    """

    def __init__(
        self,
        headless: bool = False,
        viewport_width: int = 800,
        viewport_height: int = 600,
    ) -> None:
        self._headless = headless
        self._viewport = {"width": viewport_width, "height": viewport_height}

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def is_running(self) -> bool:
        return self._page is not None

    @property
    def page(self) -> Page | None:
        return self._page

    def start(self) -> None:
        """Launch Chromium and open a blank page.

        Raises:
            BrowserRuntimeError: If Playwright or Chromium fails to start.
        """
        if self.is_running:
            logger.warning("Browser is already running")
            return

        from playwright.sync_api import sync_playwright

        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self._headless,
                args=CHROMIUM_ARGS,
            )
            self._context = self._browser.new_context(viewport=self._viewport)
            self._page = self._context.new_page()
        except Exception as e:
            self.stop()
            raise BrowserRuntimeError(f"Failed to start browser: {e}") from e

        logger.info(
            f"Chromium started (headless={self._headless}, "
            f"viewport={self._viewport['width']}x{self._viewport['height']})"
        )

    def _require_page(self) -> Page:
        if self._page is None:
            raise BrowserRuntimeError("Browser not running. Call start() first.")
        return self._page

    def open_game(self, url: str, timeout_ms: int = 60000) -> None:
        """Load the game client and wait for the page load event.

        Raises:
            BrowserRuntimeError: If loading fails or the browser is not running.
        """
        page = self._require_page()
        logger.info(f"Opening game client: {url}")
        try:
            page.goto(url, timeout=timeout_ms, wait_until="load")
        except Exception as e:
            raise BrowserRuntimeError(f"Loading {url} failed: {e}") from e

    def frame_source(self) -> PlaywrightFrameSource:
        return PlaywrightFrameSource(self._require_page())

    def input_backend(self) -> PlaywrightInputBackend:
        return PlaywrightInputBackend(self._require_page())

    def stop(self) -> None:
        """Close everything that was opened, newest first."""
        closers: list[Callable[[], object]] = []
        if self._page is not None:
            closers.append(self._page.close)
        if self._context is not None:
            closers.append(self._context.close)
        if self._browser is not None:
            closers.append(self._browser.close)
        if self._playwright is not None:
            closers.append(self._playwright.stop)

        for close in closers:
            with contextlib.suppress(Exception):
                close()

        if closers:
            logger.info("Browser stopped")
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

    def __enter__(self) -> BrowserRuntime:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        self.stop()
