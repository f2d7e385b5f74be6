from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime, timezone
from itertools import chain
from typing import Any, Iterable

from review_summarizer.config import settings
from review_summarizer.models.review import ReviewRecord, ScrapeQuery
from review_summarizer.pipeline.categorizer import ReviewCategorizer
from review_summarizer.pipeline.email_summary import build_email_summary
from review_summarizer.scraper.errors import ScrapeError
from review_summarizer.scraper.google_maps import GoogleMapsReviewScraper
from review_summarizer.scraper.listing_sites import APARTMENT_RATINGS, APARTMENTS_COM, ListingSiteScraper
from review_summarizer.scraper.results import GOOGLE_MAPS_SOURCE
from review_summarizer.scraper.text import dedupe_records
from review_summarizer.services.cache import TTLCache

LOGGER = logging.getLogger(__name__)


def parse_keywords(value: str | None) -> list[str]:
    """Split a comma-separated keyword list, lowercased with blanks dropped."""
    return [part.strip() for part in (value or "").lower().split(",") if part.strip()]


def filter_by_keywords(records: list[ReviewRecord], keywords: Iterable[str] | None) -> list[ReviewRecord]:
    needles = [keyword.lower() for keyword in keywords or () if keyword]
    if not needles:
        return records
    return [record for record in records if any(needle in record.text.lower() for needle in needles)]


class ReviewService:
    def __init__(
        self,
        *,
        google_scraper: GoogleMapsReviewScraper | None = None,
        listing_scrapers: dict[str, ListingSiteScraper] | None = None,
        cache: TTLCache[list[ReviewRecord]] | None = None,
        categorizer: ReviewCategorizer | None = None,
    ) -> None:
        self.google_scraper = google_scraper or GoogleMapsReviewScraper(
            headless=settings.scraper_headless,
            slow_mo_ms=settings.scraper_slow_mo_ms,
            maps_url=settings.scraper_maps_url,
            locale=settings.scraper_locale,
            user_agent=settings.scraper_user_agent,
            geolocation=(settings.scraper_latitude, settings.scraper_longitude),
            extra_chromium_args=settings.scraper_extra_chromium_args,
            step_timeout_ms=settings.scraper_step_timeout_ms,
            probe_timeout_ms=settings.scraper_probe_timeout_ms,
            scroll_pause_ms=settings.scraper_scroll_pause_ms,
            stagnation_threshold=settings.scraper_stagnation_threshold,
            min_review_length=settings.scraper_min_review_length,
            max_expand_clicks=settings.scraper_max_expand_clicks,
        )
        if listing_scrapers is None:
            listing_scrapers = {
                site.name: ListingSiteScraper(
                    site,
                    timeout_s=settings.http_timeout_s,
                    user_agent=settings.http_user_agent,
                    min_text_length=settings.listing_min_text_length,
                )
                for site in (APARTMENTS_COM, APARTMENT_RATINGS)
            }
        self.listing_scrapers = listing_scrapers
        self.cache = cache if cache is not None else TTLCache(settings.cache_ttl_seconds)
        self.categorizer = categorizer or ReviewCategorizer()

    async def google_reviews(
        self,
        name: str,
        location: str,
        *,
        max_results: int | None = None,
        time_budget_ms: int | None = None,
        keywords: Iterable[str] | None = None,
    ) -> list[ReviewRecord]:
        subject_name = self._require("name", name)
        location_hint = self._require("location", location)
        limit = settings.scraper_max_reviews if max_results is None else int(max_results)
        if limit <= 0:
            raise ValueError("max_results must be greater than 0.")

        cache_key = (GOOGLE_MAPS_SOURCE, subject_name, location_hint, limit)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return filter_by_keywords(cached, keywords)

        query = ScrapeQuery(
            subject_name=subject_name,
            location_hint=location_hint,
            max_results=limit,
            time_budget_ms=time_budget_ms or settings.scraper_time_budget_ms,
        )
        try:
            records = await self.google_scraper.scrape(query)
        except ScrapeError as exc:
            LOGGER.warning("Google reviews unavailable for %r (%s): %s", query.search_text, exc.kind.value, exc)
            return []

        self.cache.set(cache_key, records)
        return filter_by_keywords(records, keywords)

    async def apartments_com(self, name: str, location: str) -> list[ReviewRecord]:
        return await self.listing_reviews(APARTMENTS_COM.name, name, location)

    async def apartment_ratings(self, name: str, location: str) -> list[ReviewRecord]:
        return await self.listing_reviews(APARTMENT_RATINGS.name, name, location)

    async def listing_reviews(self, site_name: str, name: str, location: str) -> list[ReviewRecord]:
        subject_name = self._require("name", name)
        location_hint = self._require("location", location)
        scraper = self.listing_scrapers.get(site_name)
        if scraper is None:
            raise ValueError(f"Unknown review source '{site_name}'.")

        cache_key = (site_name, subject_name, location_hint)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            records = await scraper.fetch_reviews(subject_name, location_hint)
        except Exception:
            LOGGER.exception("%s reviews failed for %r %r", site_name, subject_name, location_hint)
            return []

        self.cache.set(cache_key, records)
        return records

    async def summarize(
        self,
        name: str,
        location: str,
        *,
        use_google: bool = True,
        use_apartments_com: bool = True,
        use_apartment_ratings: bool = True,
    ) -> dict[str, Any]:
        subject_name = self._require("name", name)
        location_hint = self._require("location", location)

        tasks = []
        if use_google:
            tasks.append(self.google_reviews(subject_name, location_hint))
        if use_apartments_com:
            tasks.append(self.apartments_com(subject_name, location_hint))
        if use_apartment_ratings:
            tasks.append(self.apartment_ratings(subject_name, location_hint))
        if not tasks:
            raise ValueError("Select at least one review source.")

        results = await asyncio.gather(*tasks)
        items = dedupe_records(chain.from_iterable(results))[: settings.summary_max_items]

        buckets = self.categorizer.aggregate(items)
        counts = buckets.counts()
        source_counts: dict[str, int] = {}
        for item in items:
            source_counts[item.source] = source_counts.get(item.source, 0) + 1

        return {
            "name": subject_name,
            "location": location_hint,
            "generated_at": datetime.now(timezone.utc),
            "headline": self.categorizer.headline(counts),
            "counts": counts,
            "badges": {category: self.categorizer.score_badge(count) for category, count in counts.items()},
            "source_counts": source_counts,
            "buckets": buckets.model_dump(mode="json"),
            "email_summary": build_email_summary(subject_name, location_hint, counts, buckets),
            "items": [item.model_dump(mode="json", by_alias=True) for item in items],
        }

    def _require(self, field_name: str, value: str) -> str:
        cleaned = re.sub(r"\s+", " ", str(value or "")).strip()
        if not cleaned:
            raise ValueError(f"Missing required query param: {field_name}")
        return cleaned
