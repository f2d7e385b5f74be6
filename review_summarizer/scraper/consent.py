from __future__ import annotations

import logging
import re
from typing import Any

from playwright.async_api import Locator, Page

from review_summarizer.scraper.selectors import CONSENT_PHRASES

LOGGER = logging.getLogger(__name__)


class ConsentHandler:
    """Dismisses cookie/consent overlays in the page or in an embedded frame."""

    def __init__(self, phrases: tuple[str, ...] = CONSENT_PHRASES, *, max_candidates: int = 6) -> None:
        self._phrases = phrases
        self._max_candidates = max(1, max_candidates)

    async def dismiss(self, page: Page) -> bool:
        try:
            scopes: list[Any] = [page, *(frame for frame in page.frames if frame is not page.main_frame)]
        except Exception:
            LOGGER.debug("Consent check skipped, page frames unavailable.", exc_info=True)
            return False

        for phrase in self._phrases:
            regex = re.compile(re.escape(phrase), re.IGNORECASE)
            for scope in scopes:
                if await self._click_first_visible(scope, regex):
                    LOGGER.info("Dismissed consent dialog via %r.", phrase)
                    return True

        return False

    async def _click_first_visible(self, scope: Any, regex: re.Pattern[str]) -> bool:
        try:
            candidate_groups: list[Locator] = [
                scope.get_by_role("button", name=regex),
                scope.locator("button, [role='button'], input[type='submit']").filter(has_text=regex),
            ]
        except Exception:
            return False

        for candidates in candidate_groups:
            try:
                total = await candidates.count()
            except Exception:
                continue

            for idx in range(min(total, self._max_candidates)):
                candidate = candidates.nth(idx)
                try:
                    if not await candidate.is_visible():
                        continue
                    await candidate.click(timeout=3000)
                    return True
                except Exception:
                    continue

        return False
