from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from review_summarizer.scraper.errors import DriverFailure

LOGGER = logging.getLogger(__name__)


class BrowserSession:
    """One driver, one browser and one page, owned by a single scrape."""

    def __init__(
        self,
        *,
        headless: bool = True,
        slow_mo_ms: int = 0,
        locale: str = "en-US",
        user_agent: str | None = None,
        geolocation: tuple[float, float] | None = None,
        extra_args: list[str] | None = None,
        timeout_ms: int = 8000,
    ) -> None:
        self._headless = headless
        self._slow_mo_ms = max(0, slow_mo_ms)
        self._locale = locale
        self._user_agent = user_agent
        self._geolocation = geolocation
        self._extra_args = list(extra_args or [])
        self._timeout_ms = timeout_ms

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    async def __aenter__(self) -> BrowserSession:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser session is not started. Call start() first.")
        return self._page

    async def start(self) -> Page:
        if self._page is not None:
            return self._page

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                slow_mo=self._slow_mo_ms,
                args=["--disable-blink-features=AutomationControlled", *self._extra_args],
            )
            self._context = await self._browser.new_context(**self._context_options())
            self._context.set_default_timeout(self._timeout_ms)
            self._context.set_default_navigation_timeout(self._timeout_ms)
            self._page = await self._context.new_page()
        except Exception as exc:
            await self.close()
            raise DriverFailure(f"Could not start browser session: {exc}") from exc

        return self._page

    async def close(self) -> None:
        for name, resource in (("context", self._context), ("browser", self._browser)):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception:
                LOGGER.warning("Failed to close browser %s.", name, exc_info=True)

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception:
                LOGGER.warning("Failed to stop Playwright driver.", exc_info=True)

        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

    def _context_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "viewport": {"width": 1366, "height": 900},
            "locale": self._locale,
        }
        if self._user_agent:
            options["user_agent"] = self._user_agent
        if self._geolocation is not None:
            latitude, longitude = self._geolocation
            options["geolocation"] = {"latitude": latitude, "longitude": longitude}
            options["permissions"] = ["geolocation"]
        return options
