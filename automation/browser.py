from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from typing import Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)

logger = logging.getLogger(__name__)


class HeadlessBrowser(AbstractAsyncContextManager["HeadlessBrowser"]):
    """Manage a Chromium browser instance for one booking run."""

    def __init__(
        self,
        *,
        headless: bool = True,
        slow_mo: int = 0,
        timeout: float = 30.0,
        viewport: tuple[int, int] = (1280, 900),
    ) -> None:
        self._headless = headless
        self._slow_mo = slow_mo
        self._timeout = timeout
        self._viewport = viewport
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "HeadlessBrowser":
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                slow_mo=self._slow_mo,
            )
            width, height = self._viewport
            self._context = await self._browser.new_context(
                viewport={"width": width, "height": height},
            )
            self._page = await self._context.new_page()
        except BaseException:
            await self.close()
            raise
        self._page.set_default_timeout(self._timeout * 1000)
        logger.debug(
            "Chromium started (headless=%s, slow_mo=%sms)", self._headless, self._slow_mo
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser page is not initialized yet.")
        return self._page

    async def close(self) -> None:
        """
        Close page, context and browser, then stop Playwright.

        Every resource gets its close call even when an earlier one fails; the
        first failure is re-raised once all of them have been released.
        """
        first_error: Optional[BaseException] = None
        async with self._lock:
            for attr, method in (
                ("_page", "close"),
                ("_context", "close"),
                ("_browser", "close"),
                ("_playwright", "stop"),
            ):
                resource = getattr(self, attr)
                if resource is None:
                    continue
                setattr(self, attr, None)
                try:
                    await getattr(resource, method)()
                except Exception as exc:
                    logger.warning("Failed to %s %s: %s", method, attr.lstrip("_"), exc)
                    if first_error is None:
                        first_error = exc
        if first_error is not None:
            raise first_error
        logger.debug("Chromium closed")

    async def goto(self, url: str) -> str:
        """
        Navigate to a specified URL and wait until the network is idle.

        Returns the final URL the browser ends up at (after potential redirects).
        """
        page = self.page
        await page.goto(url, wait_until="commit")
        await page.wait_for_load_state("networkidle")
        return page.url
