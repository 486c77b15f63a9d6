"""Playwright browser manager — one lazily launched Chromium reused across captures."""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from types import TracebackType
from typing import Protocol

from playwright.async_api import async_playwright, Browser, Page, Playwright

from avd.schemas.config import DebugConfig
from avd.schemas.session import CaptureOptions

logger = logging.getLogger(__name__)


class ScreenshotTaker(Protocol):
    """Anything that can save a screenshot of ``url`` to ``dest``."""

    async def capture(self, url: str, dest: Path, options: CaptureOptions) -> Path: ...


class BrowserManager:
    """Owns a Playwright Chromium instance for the lifetime of a scope.

    The browser is launched on the first capture, not on entry, so a scope
    that never captures never starts Chromium.

    Usage::

        async with BrowserManager(config) as bm:
            path = await bm.capture("https://example.com", dest, CaptureOptions())
    """

    def __init__(self, config: DebugConfig | None = None) -> None:
        self.config = config or DebugConfig()
        self._pw: Playwright | None = None
        self._browser: Browser | None = None

    async def __aenter__(self) -> "BrowserManager":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _ensure_browser(self) -> Browser:
        if self._browser is None:
            self._pw = await async_playwright().start()
            self._browser = await self._pw.chromium.launch(headless=True)
            logger.info("Browser launched")
        return self._browser

    async def close(self) -> None:
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._pw:
            await self._pw.stop()
            self._pw = None
            logger.info("Browser closed")

    async def _new_page(self) -> Page:
        browser = await self._ensure_browser()
        page = await browser.new_page()
        await page.set_viewport_size({
            "width": self.config.viewport_width,
            "height": self.config.viewport_height,
        })
        return page

    async def capture(self, url: str, dest: Path, options: CaptureOptions) -> Path:
        """Navigate to ``url`` and save a PNG screenshot to ``dest``."""
        page = await self._new_page()
        try:
            await page.goto(url, wait_until="load", timeout=self.config.navigation_timeout_ms)
            if options.wait_for_selector:
                await page.wait_for_selector(
                    options.wait_for_selector, timeout=self.config.selector_timeout_ms,
                )
            if options.wait_time:
                await page.wait_for_timeout(options.wait_time)
            dest.parent.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(dest), full_page=options.full_page, type="png")
            logger.info("Captured %s -> %s", url, dest)
            return dest
        finally:
            await page.close()


# 1x1 transparent PNG
_PLACEHOLDER_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class DryRunBrowser:
    """Stand-in that writes a placeholder PNG instead of launching Chromium."""

    def __init__(self) -> None:
        self.captured: list[str] = []

    async def __aenter__(self) -> "DryRunBrowser":
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def capture(self, url: str, dest: Path, options: CaptureOptions) -> Path:
        logger.info("[dry-run] Capturing %s", url)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(_PLACEHOLDER_PNG)
        self.captured.append(url)
        return dest
