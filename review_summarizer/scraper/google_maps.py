from __future__ import annotations

import asyncio
import logging
from time import monotonic
from typing import Callable, Protocol

from playwright.async_api import Error as PlaywrightError, Page

from review_summarizer.models.review import ReviewRecord, ScrapeQuery
from review_summarizer.scraper.collector import IncrementalCollector, PlaywrightReviewsPane, ReviewsPane
from review_summarizer.scraper.consent import ConsentHandler
from review_summarizer.scraper.errors import DriverFailure, ScrapeError, ScrapeTimeout
from review_summarizer.scraper.navigator import DomNavigator
from review_summarizer.scraper.results import normalize_results
from review_summarizer.scraper.session import BrowserSession
from review_summarizer.scraper.text import UniqueTexts
from review_summarizer.scraper.types import NavigationState

LOGGER = logging.getLogger(__name__)


class Navigator(Protocol):
    @property
    def state(self) -> NavigationState: ...

    async def open(self, query: ScrapeQuery) -> NavigationState: ...

    async def discover_shared_url(self) -> str: ...

    def current_place_url(self) -> str: ...


class GoogleMapsReviewScraper:
    """End-to-end Google Maps review scrape for one (name, location) query.

    The browser session is acquired once per call and always released. The
    query's time budget is a ceiling over browser start, navigation, collection and
    share-URL discovery combined: running out before collection is a ScrapeTimeout,
    running out during collection returns what was gathered.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        slow_mo_ms: int = 0,
        maps_url: str = "https://www.google.com/maps",
        locale: str = "en-US",
        user_agent: str | None = None,
        geolocation: tuple[float, float] | None = None,
        extra_chromium_args: list[str] | None = None,
        step_timeout_ms: int = 8000,
        probe_timeout_ms: int = 6000,
        scroll_pause_ms: int = 900,
        stagnation_threshold: int = 6,
        min_review_length: int = 6,
        max_expand_clicks: int = 8,
        session_factory: Callable[[], BrowserSession] | None = None,
        navigator_factory: Callable[[Page], Navigator] | None = None,
        pane_factory: Callable[[Page], ReviewsPane] | None = None,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self._maps_url = maps_url
        self._step_timeout_ms = step_timeout_ms
        self._probe_timeout_ms = probe_timeout_ms
        self._scroll_pause_ms = scroll_pause_ms
        self._stagnation_threshold = stagnation_threshold
        self._min_review_length = min_review_length
        self._max_expand_clicks = max_expand_clicks
        self._clock = clock

        self._session_factory = session_factory or (
            lambda: BrowserSession(
                headless=headless,
                slow_mo_ms=slow_mo_ms,
                locale=locale,
                user_agent=user_agent,
                geolocation=geolocation,
                extra_args=extra_chromium_args,
                timeout_ms=step_timeout_ms,
            )
        )
        self._navigator_factory = navigator_factory or self._default_navigator
        self._pane_factory = pane_factory or PlaywrightReviewsPane

    async def scrape(self, query: ScrapeQuery) -> list[ReviewRecord]:
        deadline = self._clock() + query.time_budget_ms / 1000
        unique = UniqueTexts()
        shared_url = ""
        LOGGER.info(
            "Scraping Google reviews for %r (max=%s, budget=%sms)",
            query.search_text,
            query.max_results,
            query.time_budget_ms,
        )

        try:
            session = self._session_factory()
            await self._open_session(session, deadline)
            try:
                navigator = self._navigator_factory(session.page)
                await self._navigate(navigator, query, deadline)
                await self._collect(session.page, query, deadline, unique)
                shared_url = await self._discover_shared_url(navigator, deadline)
            finally:
                await session.__aexit__(None, None, None)
        except ScrapeError:
            raise
        except PlaywrightError as exc:
            raise DriverFailure(f"Browser automation failed: {exc}") from exc

        records = normalize_results(unique, shared_url, query.max_results)
        LOGGER.info("Collected %s Google reviews for %r", len(records), query.search_text)
        return records

    async def _open_session(self, session: BrowserSession, deadline: float) -> None:
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise ScrapeTimeout("Time budget exhausted before the browser started.")

        try:
            await asyncio.wait_for(session.__aenter__(), timeout=remaining)
        except asyncio.TimeoutError:
            await session.__aexit__(None, None, None)
            raise ScrapeTimeout("Time budget exceeded while starting the browser.") from None

    async def _navigate(self, navigator: Navigator, query: ScrapeQuery, deadline: float) -> None:
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise ScrapeTimeout("Time budget exhausted before navigation started.")

        try:
            state = await asyncio.wait_for(navigator.open(query), timeout=remaining)
        except asyncio.TimeoutError:
            raise ScrapeTimeout(
                f"Time budget exceeded during navigation (last state: {navigator.state.value})."
            ) from None

        LOGGER.info("Navigation finished at state=%s", state.value)

    async def _collect(self, page: Page, query: ScrapeQuery, deadline: float, unique: UniqueTexts) -> None:
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise ScrapeTimeout("Time budget exhausted before review collection started.")

        collector = IncrementalCollector(
            stagnation_threshold=self._stagnation_threshold,
            scroll_pause_ms=self._scroll_pause_ms,
            min_review_length=self._min_review_length,
            max_expand_clicks=self._max_expand_clicks,
            clock=self._clock,
        )
        try:
            await asyncio.wait_for(
                collector.collect(self._pane_factory(page), query, deadline=deadline, unique=unique),
                timeout=remaining,
            )
        except asyncio.TimeoutError:
            LOGGER.info("Time budget reached mid-collection, keeping %s partial reviews.", len(unique))

    async def _discover_shared_url(self, navigator: Navigator, deadline: float) -> str:
        remaining = deadline - self._clock()
        if remaining <= 0:
            return self._current_place_url(navigator)

        try:
            return await asyncio.wait_for(navigator.discover_shared_url(), timeout=remaining)
        except asyncio.TimeoutError:
            return self._current_place_url(navigator)
        except Exception:
            LOGGER.debug("Shared URL discovery failed.", exc_info=True)
            return self._current_place_url(navigator)

    def _current_place_url(self, navigator: Navigator) -> str:
        try:
            return navigator.current_place_url()
        except Exception:
            LOGGER.debug("Place URL lookup failed.", exc_info=True)
            return ""

    def _default_navigator(self, page: Page) -> DomNavigator:
        return DomNavigator(
            page,
            consent=ConsentHandler(),
            maps_url=self._maps_url,
            step_timeout_ms=self._step_timeout_ms,
            probe_timeout_ms=self._probe_timeout_ms,
        )
