import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from review_summarizer.models.review import ScrapeQuery
from review_summarizer.scraper.errors import NavigationFailed
from review_summarizer.scraper.navigator import DomNavigator
from review_summarizer.scraper.types import NavigationState

PLACE_URL = "https://www.google.com/maps/place/30+West+Apartments/@27.49,-82.57,17z"


class FakeKeyboard:
    def __init__(self) -> None:
        self.pressed: list[str] = []

    async def press(self, key: str) -> None:
        self.pressed.append(key)


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str) -> None:
        self._page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    def _parts(self) -> list[str]:
        return [part.strip() for part in self.selector.split(", ")]

    async def wait_for(self, state: str = "visible", timeout: float | None = None) -> None:
        if any(part in self._page.broken for part in self._parts()):
            raise PlaywrightError("Target page, context or browser has been closed")
        if not await self.is_visible():
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def is_visible(self) -> bool:
        return any(part in self._page.visible for part in self._parts())

    async def click(self, timeout: float | None = None) -> None:
        self._page.clicked.append(self.selector)
        self._page.visible |= self._page.reveals.get(self.selector, set())

    async def fill(self, value: str, timeout: float | None = None) -> None:
        self._page.filled.append((self.selector, value))

    async def press(self, key: str, timeout: float | None = None) -> None:
        self._page.pressed.append((self.selector, key))
        self._page.visible |= self._page.reveals.get(f"{self.selector}:{key}", set())

    async def input_value(self, timeout: float | None = None) -> str:
        return self._page.values.get(self.selector, "")


class FakePage:
    def __init__(self, visible: set[str] | None = None, *, url: str = "about:blank") -> None:
        self.visible = visible or set()
        self.broken: set[str] = set()
        self.url = url
        self.frames: list[object] = []
        self.keyboard = FakeKeyboard()
        self.gotos: list[str] = []
        self.clicked: list[str] = []
        self.goto_fails = False
        self.reveals: dict[str, set[str]] = {}
        self.values: dict[str, str] = {}
        self.filled: list[tuple[str, str]] = []
        self.pressed: list[tuple[str, str]] = []

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def goto(self, url: str, wait_until: str | None = None, timeout: float | None = None) -> None:
        if self.goto_fails:
            raise PlaywrightTimeoutError(f"page.goto: Timeout {timeout}ms exceeded.")
        self.gotos.append(url)
        self.url = url

    async def wait_for_timeout(self, timeout: float) -> None:
        return None


class FakeConsent:
    def __init__(self) -> None:
        self.calls = 0

    async def dismiss(self, page) -> bool:
        self.calls += 1
        return False


def _query() -> ScrapeQuery:
    return ScrapeQuery(
        subject_name="30 West Apartments",
        location_hint="Bradenton, FL",
        max_results=5,
        time_budget_ms=30000,
    )


def _navigator(page: FakePage, consent: FakeConsent | None = None) -> DomNavigator:
    return DomNavigator(page, consent=consent or FakeConsent())


def test_search_urls_cover_path_and_form_variants() -> None:
    urls = _navigator(FakePage()).search_urls(_query())

    assert urls[0] == "https://www.google.com/maps/search/30%20West%20Apartments%20Bradenton%2C%20FL?hl=en"
    assert urls[1] == "https://www.google.com/maps?q=30+West+Apartments+Bradenton%2C+FL&hl=en"
    assert len(urls) == 3


def test_place_signal_race_returns_first_visible_group() -> None:
    page = FakePage({"div[role='main'] h1"})

    assert asyncio.run(_navigator(page).wait_for_place_signal()) == "PLACE_HEADING"


def test_place_signal_race_returns_none_when_all_probes_time_out() -> None:
    assert asyncio.run(_navigator(FakePage()).wait_for_place_signal()) is None


def test_place_signal_race_surfaces_driver_errors() -> None:
    page = FakePage()
    page.broken.add("div[role='main'] h1")

    with pytest.raises(PlaywrightError):
        asyncio.run(_navigator(page).wait_for_place_signal())


def test_open_reaches_reviews_when_sort_control_missing() -> None:
    page = FakePage({"div[role='main'] h1", "button[aria-label$=' reviews' i]"})
    consent = FakeConsent()
    navigator = _navigator(page, consent)

    state = asyncio.run(navigator.open(_query()))

    assert state is NavigationState.REVIEWS_OPENED
    assert len(page.gotos) == 1
    assert page.clicked == ["button[aria-label$=' reviews' i]"]
    assert consent.calls >= 4


def test_open_applies_newest_sort() -> None:
    page = FakePage(
        {
            "div[role='main'] h1",
            "button[aria-label$=' reviews' i]",
            "button[aria-label*='Sort' i]",
            "div[role='menuitemradio']:has-text('Newest')",
        }
    )

    state = asyncio.run(_navigator(page).open(_query()))

    assert state is NavigationState.SORT_APPLIED
    assert page.clicked[-1] == "div[role='menuitemradio']:has-text('Newest')"


def test_open_fails_when_no_search_variant_loads() -> None:
    page = FakePage()
    page.goto_fails = True
    navigator = _navigator(page)

    with pytest.raises(NavigationFailed) as exc_info:
        asyncio.run(navigator.open(_query()))

    assert exc_info.value.last_state is NavigationState.START
    assert navigator.state is NavigationState.FAILED


def test_open_fails_when_no_place_can_be_opened() -> None:
    page = FakePage({"div[role='feed']"})
    navigator = _navigator(page)

    with pytest.raises(NavigationFailed) as exc_info:
        asyncio.run(navigator.open(_query()))

    assert exc_info.value.last_state is NavigationState.SEARCH_OPENED


def test_discover_shared_url_falls_back_to_place_page_url() -> None:
    assert asyncio.run(_navigator(FakePage(url=PLACE_URL)).discover_shared_url()) == PLACE_URL


def test_discover_shared_url_ignores_non_place_pages() -> None:
    page = FakePage(url="https://www.google.com/maps/search/30+West")

    assert asyncio.run(_navigator(page).discover_shared_url()) == ""


def test_open_place_clicks_first_visible_result_link() -> None:
    page = FakePage({"div[role='feed']", "a.hfpxzc"})
    page.reveals["a.hfpxzc"] = {"div[role='main'] h1"}
    navigator = _navigator(page)

    state = asyncio.run(navigator.open(_query()))

    assert state is NavigationState.PLACE_OPENED
    assert page.clicked == ["a.hfpxzc"]
    assert page.filled == []


def test_open_place_falls_back_to_typing_the_search() -> None:
    page = FakePage({"div[role='feed']", "input#searchboxinput"})
    page.reveals["input#searchboxinput:Enter"] = {"div[role='main'] h1"}

    state = asyncio.run(_navigator(page).open(_query()))

    assert state is NavigationState.PLACE_OPENED
    assert page.filled == [("input#searchboxinput", "30 West Apartments Bradenton, FL")]
    assert page.pressed == [("input#searchboxinput", "Enter")]


def test_open_place_submits_typed_search_with_button() -> None:
    page = FakePage({"input#searchboxinput", "button#searchbox-searchbutton"})
    page.reveals["button#searchbox-searchbutton"] = {"div[role='main'] h1"}

    state = asyncio.run(_navigator(page).open(_query()))

    assert state is NavigationState.PLACE_OPENED
    assert page.clicked == ["button#searchbox-searchbutton"]
    assert page.pressed == []


def test_discover_shared_url_reads_share_dialog_link() -> None:
    page = FakePage({"button[aria-label*='Share' i]"}, url=PLACE_URL)
    page.reveals["button[aria-label*='Share' i]"] = {"input[aria-label='Link to share']"}
    page.values["input[aria-label='Link to share']"] = " https://maps.app.goo.gl/xyz "

    shared = asyncio.run(_navigator(page).discover_shared_url())

    assert shared == "https://maps.app.goo.gl/xyz"
    assert page.keyboard.pressed == ["Escape"]


def test_discover_shared_url_closes_dialog_without_link_input() -> None:
    page = FakePage({"button[aria-label*='Share' i]"}, url=PLACE_URL)

    shared = asyncio.run(_navigator(page).discover_shared_url())

    assert shared == PLACE_URL
    assert page.keyboard.pressed == ["Escape"]


def test_current_place_url_only_reports_place_pages() -> None:
    assert _navigator(FakePage(url=PLACE_URL)).current_place_url() == PLACE_URL
    assert _navigator(FakePage(url="https://www.google.com/maps?q=30+West")).current_place_url() == ""
