from __future__ import annotations

from typing import Iterable

from review_summarizer.models.review import ReviewRecord
from review_summarizer.scraper.text import UniqueTexts

GOOGLE_MAPS_SOURCE = "google_maps"


def normalize_results(
    texts: Iterable[str],
    shared_url: str | None,
    max_results: int,
    *,
    source: str = GOOGLE_MAPS_SOURCE,
) -> list[ReviewRecord]:
    """Turn collected texts into records in first-seen order.

    Every record carries the same place URL because Maps review cards do not
    expose a stable per-review link.
    """
    if max_results <= 0:
        return []

    url = (shared_url or "").strip()
    unique = UniqueTexts(texts).as_list()[:max_results]
    return [ReviewRecord(text=text, source_url=url, source=source) for text in unique]
