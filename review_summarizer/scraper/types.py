from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NavigationState(str, Enum):
    START = "start"
    SEARCH_OPENED = "search_opened"
    PLACE_OPENED = "place_opened"
    REVIEWS_OPENED = "reviews_opened"
    SORT_APPLIED = "sort_applied"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        return _STATE_ORDER.index(self)


_STATE_ORDER = (
    NavigationState.START,
    NavigationState.SEARCH_OPENED,
    NavigationState.PLACE_OPENED,
    NavigationState.REVIEWS_OPENED,
    NavigationState.SORT_APPLIED,
    NavigationState.FAILED,
)


@dataclass
class CollectionProgress:
    unique_count: int = 0
    last_growth_check_count: int = 0
    stagnation_streak: int = 0

    def record(self, unique_count: int) -> bool:
        if unique_count < self.unique_count:
            raise ValueError("unique_count must not decrease within one collection.")

        grew = unique_count > self.last_growth_check_count
        self.unique_count = unique_count
        self.last_growth_check_count = unique_count
        if grew:
            self.stagnation_streak = 0
        else:
            self.stagnation_streak += 1
        return grew
