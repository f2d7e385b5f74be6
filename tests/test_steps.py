import asyncio

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from review_summarizer.scraper.errors import NavigationFailed, ScrapeErrorKind
from review_summarizer.scraper.steps import NavigationStep, StepRunner
from review_summarizer.scraper.types import NavigationState


def _step(name, result, *, fatal, state):
    async def attempt() -> bool:
        if isinstance(result, BaseException):
            raise result
        return result

    return NavigationStep(name=name, attempt=attempt, fatal_on_failure=fatal, reached_state=state)


def test_runner_advances_through_all_states() -> None:
    hook_calls: list[int] = []

    async def after_step() -> None:
        hook_calls.append(1)

    runner = StepRunner(after_step=after_step)
    steps = [
        _step("open_search", True, fatal=True, state=NavigationState.SEARCH_OPENED),
        _step("open_place", True, fatal=True, state=NavigationState.PLACE_OPENED),
        _step("open_reviews", True, fatal=False, state=NavigationState.REVIEWS_OPENED),
        _step("apply_sort", True, fatal=False, state=NavigationState.SORT_APPLIED),
    ]

    final_state = asyncio.run(runner.run(steps))

    assert final_state is NavigationState.SORT_APPLIED
    assert len(hook_calls) == 4


def test_fatal_step_failure_raises_with_last_state() -> None:
    runner = StepRunner()
    steps = [
        _step("open_search", True, fatal=True, state=NavigationState.SEARCH_OPENED),
        _step("open_place", False, fatal=True, state=NavigationState.PLACE_OPENED),
        _step("open_reviews", True, fatal=False, state=NavigationState.REVIEWS_OPENED),
    ]

    with pytest.raises(NavigationFailed) as exc_info:
        asyncio.run(runner.run(steps))

    assert exc_info.value.kind is ScrapeErrorKind.NAVIGATION_FAILED
    assert exc_info.value.last_state is NavigationState.SEARCH_OPENED
    assert runner.state is NavigationState.FAILED


def test_fatal_step_timeout_is_navigation_failure() -> None:
    runner = StepRunner()
    steps = [_step("open_search", PlaywrightTimeoutError("goto timed out"), fatal=True, state=NavigationState.SEARCH_OPENED)]

    with pytest.raises(NavigationFailed) as exc_info:
        asyncio.run(runner.run(steps))

    assert exc_info.value.last_state is NavigationState.START


def test_fatal_step_other_errors_propagate() -> None:
    runner = StepRunner()
    steps = [_step("open_search", RuntimeError("driver crashed"), fatal=True, state=NavigationState.SEARCH_OPENED)]

    with pytest.raises(RuntimeError, match="driver crashed"):
        asyncio.run(runner.run(steps))


def test_best_effort_failures_are_absorbed() -> None:
    runner = StepRunner()
    steps = [
        _step("open_search", True, fatal=True, state=NavigationState.SEARCH_OPENED),
        _step("open_place", True, fatal=True, state=NavigationState.PLACE_OPENED),
        _step("open_reviews", False, fatal=False, state=NavigationState.REVIEWS_OPENED),
        _step("apply_sort", ValueError("menu vanished"), fatal=False, state=NavigationState.SORT_APPLIED),
    ]

    final_state = asyncio.run(runner.run(steps))

    assert final_state is NavigationState.PLACE_OPENED


def test_states_never_move_backwards() -> None:
    runner = StepRunner()
    steps = [
        _step("open_place", True, fatal=True, state=NavigationState.PLACE_OPENED),
        _step("open_search_again", True, fatal=True, state=NavigationState.SEARCH_OPENED),
    ]

    assert asyncio.run(runner.run(steps)) is NavigationState.PLACE_OPENED


def test_after_step_hook_errors_do_not_break_navigation() -> None:
    async def broken_hook() -> None:
        raise RuntimeError("consent frame detached")

    runner = StepRunner(after_step=broken_hook)
    steps = [_step("open_search", True, fatal=True, state=NavigationState.SEARCH_OPENED)]

    assert asyncio.run(runner.run(steps)) is NavigationState.SEARCH_OPENED
