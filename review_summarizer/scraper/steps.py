from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from review_summarizer.scraper.errors import NavigationFailed
from review_summarizer.scraper.types import NavigationState

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationStep:
    name: str
    attempt: Callable[[], Awaitable[bool]]
    fatal_on_failure: bool
    reached_state: NavigationState


class StepRunner:
    """Runs navigation steps in order and owns the best-effort/fatal policy.

    Best-effort steps never raise. A fatal step that reports failure or times
    out raises NavigationFailed with the last state reached. Any other
    exception from a fatal step propagates unchanged.
    """

    def __init__(self, after_step: Callable[[], Awaitable[object]] | None = None) -> None:
        self._after_step = after_step
        self.state = NavigationState.START

    async def run(self, steps: list[NavigationStep]) -> NavigationState:
        for step in steps:
            await self.run_step(step)
        return self.state

    async def run_step(self, step: NavigationStep) -> bool:
        if self.state is NavigationState.FAILED:
            raise NavigationFailed(f"Cannot run step '{step.name}' after a failed step.", NavigationState.FAILED)

        succeeded = await self._attempt(step)
        if succeeded:
            self._advance(step.reached_state)
            LOGGER.debug("Step %s succeeded, state=%s", step.name, self.state.value)
        elif step.fatal_on_failure:
            last_state = self.state
            self.state = NavigationState.FAILED
            LOGGER.warning("Fatal step %s failed at state=%s", step.name, last_state.value)
            raise NavigationFailed(f"Step '{step.name}' failed after all variants.", last_state)
        else:
            LOGGER.debug("Best-effort step %s skipped, state=%s", step.name, self.state.value)

        await self._notify_after_step()
        return succeeded

    async def _attempt(self, step: NavigationStep) -> bool:
        if step.fatal_on_failure:
            try:
                return bool(await step.attempt())
            except PlaywrightTimeoutError:
                LOGGER.debug("Fatal step %s timed out.", step.name, exc_info=True)
                return False

        try:
            return bool(await step.attempt())
        except Exception:
            LOGGER.debug("Best-effort step %s raised.", step.name, exc_info=True)
            return False

    def _advance(self, new_state: NavigationState) -> None:
        if new_state.rank > self.state.rank:
            self.state = new_state

    async def _notify_after_step(self) -> None:
        if self._after_step is None:
            return
        try:
            await self._after_step()
        except Exception:
            LOGGER.debug("After-step hook raised.", exc_info=True)
