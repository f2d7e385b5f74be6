from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from time import monotonic
from typing import Awaitable, Callable, Protocol

from playwright.async_api import Page

from review_summarizer.models.review import ScrapeQuery
from review_summarizer.scraper.errors import ReviewsNotFound
from review_summarizer.scraper.selectors import REVIEW_CARD_PATTERNS, TEXT_ATTRIBUTES, ReviewCardPattern
from review_summarizer.scraper.text import UniqueTexts, clean_review_text
from review_summarizer.scraper.types import CollectionProgress

LOGGER = logging.getLogger(__name__)

SCROLLER_MARKER = "data-review-scroller"


@dataclass(frozen=True)
class PatternMatch:
    element_count: int
    texts: list[str] = field(default_factory=list)


class ReviewsPane(Protocol):
    async def match(self, pattern: ReviewCardPattern) -> PatternMatch: ...

    async def expand_read_more(self, pattern: ReviewCardPattern, max_clicks: int) -> int: ...

    async def scroll(self, pattern: ReviewCardPattern) -> bool: ...


class PlaywrightReviewsPane:
    """Review list operations evaluated against the live page."""

    def __init__(self, page: Page, *, click_timeout_ms: int = 1500) -> None:
        self._page = page
        self._click_timeout_ms = click_timeout_ms

    async def match(self, pattern: ReviewCardPattern) -> PatternMatch:
        payload = await self._page.evaluate(
            """
            (payload) => {
                const readText = (node) => ((node && (node.innerText || node.textContent)) || "").trim();
                const pick = (root, selectors) => {
                    for (const selector of selectors) {
                        const text = readText(root.querySelector(selector));
                        if (text) return text;
                    }
                    return "";
                };

                const cards = Array.from(document.querySelectorAll(payload.cardSelector));
                const texts = [];
                for (const card of cards) {
                    let text = pick(card, payload.longSelectors)
                        || pick(card, payload.shortSelectors)
                        || pick(card, payload.fallbackSelectors);
                    if (!text) {
                        for (const attribute of payload.attributes) {
                            const value = (card.getAttribute(attribute) || "").trim();
                            if (value) {
                                text = value;
                                break;
                            }
                        }
                    }
                    if (text) texts.push(text);
                }
                return { count: cards.length, texts };
            }
            """,
            {
                "cardSelector": pattern.card_selector,
                "longSelectors": list(pattern.long_text_selectors),
                "shortSelectors": list(pattern.short_text_selectors),
                "fallbackSelectors": list(pattern.fallback_text_selectors),
                "attributes": list(TEXT_ATTRIBUTES),
            },
        )
        return PatternMatch(
            element_count=int(payload.get("count", 0)),
            texts=[str(text) for text in payload.get("texts", [])],
        )

    async def expand_read_more(self, pattern: ReviewCardPattern, max_clicks: int) -> int:
        clicks = 0
        cards = self._page.locator(pattern.card_selector)

        for selector in pattern.expand_selectors:
            buttons = cards.locator(selector)
            try:
                total = await buttons.count()
            except Exception:
                continue

            for idx in range(total):
                if clicks >= max_clicks:
                    return clicks

                button = buttons.nth(idx)
                try:
                    if not await button.is_visible():
                        continue
                    await button.click(timeout=self._click_timeout_ms)
                    clicks += 1
                except Exception:
                    continue

        return clicks

    async def scroll(self, pattern: ReviewCardPattern) -> bool:
        metrics = await self._page.evaluate(
            """
            (payload) => {
                let target = document.querySelector(`[${payload.marker}]`);
                if (!target) {
                    const card = document.querySelector(payload.cardSelector);
                    let parent = card ? card.parentElement : null;
                    while (parent) {
                        const overflowY = window.getComputedStyle(parent).overflowY;
                        const canScroll = parent.scrollHeight > parent.clientHeight;
                        if ((overflowY === "auto" || overflowY === "scroll") && canScroll) {
                            target = parent;
                            target.setAttribute(payload.marker, "1");
                            break;
                        }
                        parent = parent.parentElement;
                    }
                }

                const scroller = target || document.scrollingElement || document.documentElement;
                const before = scroller.scrollTop;
                scroller.scrollBy(0, scroller.scrollHeight);
                return { container: Boolean(target), scrolled: scroller.scrollTop > before };
            }
            """,
            {"cardSelector": pattern.card_selector, "marker": SCROLLER_MARKER},
        )
        return bool(metrics.get("scrolled"))


class IncrementalCollector:
    """Scroll-and-extract loop over a virtualized review list."""

    def __init__(
        self,
        patterns: tuple[ReviewCardPattern, ...] = REVIEW_CARD_PATTERNS,
        *,
        stagnation_threshold: int = 6,
        scroll_pause_ms: int = 900,
        min_review_length: int = 6,
        max_expand_clicks: int = 8,
        clock: Callable[[], float] = monotonic,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if not patterns:
            raise ValueError("At least one review card pattern is required.")

        self._patterns = patterns
        self._stagnation_threshold = max(1, stagnation_threshold)
        self._scroll_pause_s = max(0, scroll_pause_ms) / 1000
        self._min_review_length = max(1, min_review_length)
        self._max_expand_clicks = max(0, max_expand_clicks)
        self._clock = clock
        self._sleep = sleep
        self.progress = CollectionProgress()
        self.stop_reason: str | None = None

    async def collect(
        self,
        pane: ReviewsPane,
        query: ScrapeQuery,
        *,
        deadline: float,
        unique: UniqueTexts | None = None,
    ) -> UniqueTexts:
        """Accumulate unique review texts until a stop condition fires.

        `unique` may be supplied by the caller so the texts gathered so far
        stay reachable if the loop is cancelled by an outer timeout.
        """
        collected = unique if unique is not None else UniqueTexts()
        self.progress = CollectionProgress(unique_count=len(collected), last_growth_check_count=len(collected))
        self.stop_reason = None
        scroll_pattern: ReviewCardPattern | None = None
        iteration = 0

        while True:
            iteration += 1
            pattern, match = await self._match_first(pane)

            if match is None:
                if iteration == 1:
                    raise ReviewsNotFound()
                texts: list[str] = []
            else:
                scroll_pattern = pattern
                texts = self._filter_noise(match.texts)

            added = collected.extend(texts)
            self.progress.record(len(collected))
            LOGGER.debug(
                "Iteration %s: pattern=%s new=%s unique=%s stagnation=%s",
                iteration,
                pattern.name if pattern else None,
                added,
                self.progress.unique_count,
                self.progress.stagnation_streak,
            )

            self.stop_reason = self._stop_reason(query, deadline)
            if self.stop_reason is not None:
                LOGGER.info(
                    "Collection stopped (%s) after %s iterations with %s unique reviews.",
                    self.stop_reason,
                    iteration,
                    self.progress.unique_count,
                )
                return collected

            if scroll_pattern is not None:
                await pane.scroll(scroll_pattern)
            await self._sleep(self._scroll_pause_s)

    async def _match_first(self, pane: ReviewsPane) -> tuple[ReviewCardPattern | None, PatternMatch | None]:
        for pattern in self._patterns:
            match = await pane.match(pattern)
            if match.element_count <= 0:
                continue

            if await self._expand(pane, pattern) > 0:
                match = await pane.match(pattern)
            return pattern, match

        return None, None

    async def _expand(self, pane: ReviewsPane, pattern: ReviewCardPattern) -> int:
        if not self._max_expand_clicks or not pattern.expand_selectors:
            return 0
        try:
            return await pane.expand_read_more(pattern, self._max_expand_clicks)
        except Exception:
            LOGGER.debug("Read-more expansion failed for %s.", pattern.name, exc_info=True)
            return 0

    def _filter_noise(self, texts: list[str]) -> list[str]:
        cleaned = (clean_review_text(text) for text in texts)
        return [text for text in cleaned if len(text) >= self._min_review_length]

    def _stop_reason(self, query: ScrapeQuery, deadline: float) -> str | None:
        if self.progress.unique_count >= query.max_results:
            return "target_reached"
        if self.progress.stagnation_streak >= self._stagnation_threshold:
            return "stagnation"
        if self._clock() >= deadline:
            return "time_budget"
        return None
