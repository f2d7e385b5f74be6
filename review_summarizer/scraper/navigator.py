from __future__ import annotations

import asyncio
import logging
from urllib.parse import quote, quote_plus

from playwright.async_api import Locator, Page, TimeoutError as PlaywrightTimeoutError

from review_summarizer.models.review import ScrapeQuery
from review_summarizer.scraper.consent import ConsentHandler
from review_summarizer.scraper.selectors import (
    ENTRYPOINT_GROUPS,
    PLACE_SIGNAL_GROUPS,
    SEARCH_URL_TEMPLATES,
    SELECTOR_PATTERNS,
)
from review_summarizer.scraper.steps import NavigationStep, StepRunner
from review_summarizer.scraper.types import NavigationState

LOGGER = logging.getLogger(__name__)


class DomNavigator:
    """Drives the Maps UI from a search query to an open reviews view."""

    def __init__(
        self,
        page: Page,
        *,
        consent: ConsentHandler | None = None,
        maps_url: str = "https://www.google.com/maps",
        step_timeout_ms: int = 8000,
        probe_timeout_ms: int = 6000,
        option_timeout_ms: int = 1200,
    ) -> None:
        self._page = page
        self._consent = consent or ConsentHandler()
        self._maps_url = maps_url.rstrip("/")
        self._step_timeout_ms = max(500, step_timeout_ms)
        self._probe_timeout_ms = max(250, probe_timeout_ms)
        self._option_timeout_ms = max(100, option_timeout_ms)
        self._runner = StepRunner(after_step=self._dismiss_consent)
        self._place_open = False

    @property
    def state(self) -> NavigationState:
        return self._runner.state

    async def open(self, query: ScrapeQuery) -> NavigationState:
        steps = [
            NavigationStep(
                name="open_search",
                attempt=lambda: self.open_search(query),
                fatal_on_failure=True,
                reached_state=NavigationState.SEARCH_OPENED,
            ),
            NavigationStep(
                name="open_place",
                attempt=lambda: self.open_place(query),
                fatal_on_failure=True,
                reached_state=NavigationState.PLACE_OPENED,
            ),
            NavigationStep(
                name="open_reviews",
                attempt=self.open_reviews,
                fatal_on_failure=False,
                reached_state=NavigationState.REVIEWS_OPENED,
            ),
            NavigationStep(
                name="apply_sort",
                attempt=self.apply_sort,
                fatal_on_failure=False,
                reached_state=NavigationState.SORT_APPLIED,
            ),
        ]
        return await self._runner.run(steps)

    def search_urls(self, query: ScrapeQuery) -> list[str]:
        text = query.search_text
        return [
            template.format(
                base=self._maps_url,
                path_query=quote(text, safe=""),
                form_query=quote_plus(text),
            )
            for template in SEARCH_URL_TEMPLATES
        ]

    async def open_search(self, query: ScrapeQuery) -> bool:
        page = self._page
        loaded_any = False
        results_url: str | None = None

        for url in self.search_urls(query):
            try:
                await page.goto(url, wait_until="domcontentloaded", timeout=self._step_timeout_ms)
            except PlaywrightTimeoutError:
                LOGGER.debug("Search variant timed out: %s", url)
                continue

            loaded_any = True
            await self._dismiss_consent()

            if await self.wait_for_place_signal() is not None:
                LOGGER.info("Search variant landed on a place page: %s", url)
                self._place_open = True
                return True

            if results_url is None and await self._is_any_visible("RESULTS_FEED"):
                results_url = page.url

        if not loaded_any:
            return False

        if results_url and page.url != results_url:
            try:
                await page.goto(results_url, wait_until="domcontentloaded", timeout=self._step_timeout_ms)
            except PlaywrightTimeoutError:
                LOGGER.debug("Could not return to results list: %s", results_url)

        return True

    async def open_place(self, query: ScrapeQuery) -> bool:
        if self._place_open:
            return True

        page = self._page
        for selector in SELECTOR_PATTERNS["RESULT_LINKS"]:
            candidate = page.locator(selector).first
            try:
                if not await candidate.is_visible():
                    continue
                await candidate.click(timeout=self._step_timeout_ms)
            except PlaywrightTimeoutError:
                continue

            if await self.wait_for_place_signal() is not None:
                self._place_open = True
                return True

        if await self._submit_search(query):
            self._place_open = True
            return True

        return False

    async def open_reviews(self) -> bool:
        # Some place pages render review cards inline without a reviews view.
        for group in ENTRYPOINT_GROUPS:
            control = await self._first_optional_visible(group)
            if control is None:
                continue
            await control.click(timeout=self._step_timeout_ms)
            await self._page.wait_for_timeout(1000)
            LOGGER.debug("Opened reviews via %s.", group)
            return True

        return False

    async def apply_sort(self) -> bool:
        sort_button = await self._first_optional_visible("SORT_BUTTON")
        if sort_button is None:
            return False
        await sort_button.click(timeout=self._step_timeout_ms)

        newest = await self._first_optional_visible("SORT_NEWEST")
        if newest is None:
            await self._page.keyboard.press("Escape")
            return False

        await newest.click(timeout=self._step_timeout_ms)
        await self._page.wait_for_timeout(800)
        return True

    async def discover_shared_url(self) -> str:
        try:
            shared = await self._shared_url_from_dialog()
        except Exception:
            LOGGER.debug("Share dialog lookup failed.", exc_info=True)
            shared = ""

        return shared or self.current_place_url()

    def current_place_url(self) -> str:
        """The page URL when it points at a place, without touching the UI."""
        try:
            current = self._page.url
        except Exception:
            return ""
        return current if "/maps/place/" in current else ""

    async def wait_for_place_signal(self, timeout_ms: int | None = None) -> str | None:
        """Race the place-page probes; the first to resolve wins, the rest are abandoned."""
        timeout = self._probe_timeout_ms if timeout_ms is None else timeout_ms
        tasks = [asyncio.create_task(self._probe(group, timeout)) for group in PLACE_SIGNAL_GROUPS]
        driver_error: BaseException | None = None

        try:
            pending = set(tasks)
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    if task.cancelled():
                        continue
                    error = task.exception()
                    if error is None:
                        return task.result()
                    if not isinstance(error, PlaywrightTimeoutError):
                        driver_error = error
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        if driver_error is not None:
            raise driver_error
        return None

    async def _probe(self, group: str, timeout_ms: int) -> str:
        selector = ", ".join(SELECTOR_PATTERNS[group])
        await self._page.locator(selector).first.wait_for(state="visible", timeout=timeout_ms)
        return group

    async def _submit_search(self, query: ScrapeQuery) -> bool:
        search_input = await self._first_optional_visible("SEARCH_INPUT")
        if search_input is None:
            return False

        await search_input.fill(query.search_text, timeout=self._step_timeout_ms)
        search_button = await self._first_optional_visible("SEARCH_BUTTON")
        if search_button is not None:
            await search_button.click(timeout=self._step_timeout_ms)
        else:
            await search_input.press("Enter", timeout=self._step_timeout_ms)

        await self._dismiss_consent()
        return await self.wait_for_place_signal() is not None

    async def _shared_url_from_dialog(self) -> str:
        share_button = await self._first_optional_visible("SHARE_BUTTON")
        if share_button is None:
            return ""
        await share_button.click(timeout=self._step_timeout_ms)

        link_input = await self._first_optional_visible("SHARE_LINK_INPUT", timeout_ms=2000)
        if link_input is None:
            await self._page.keyboard.press("Escape")
            return ""

        value = (await link_input.input_value(timeout=self._option_timeout_ms)).strip()
        await self._page.keyboard.press("Escape")
        return value

    async def _first_optional_visible(self, key: str, timeout_ms: int | None = None) -> Locator | None:
        timeout = self._option_timeout_ms if timeout_ms is None else timeout_ms

        for selector in SELECTOR_PATTERNS[key]:
            locator = self._page.locator(selector).first
            try:
                await locator.wait_for(state="visible", timeout=timeout)
                return locator
            except PlaywrightTimeoutError:
                continue

        return None

    async def _is_any_visible(self, key: str) -> bool:
        for selector in SELECTOR_PATTERNS[key]:
            try:
                if await self._page.locator(selector).first.is_visible():
                    return True
            except PlaywrightTimeoutError:
                continue

        return False

    async def _dismiss_consent(self) -> None:
        await self._consent.dismiss(self._page)
