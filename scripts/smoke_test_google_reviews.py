import argparse
import asyncio
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from review_summarizer.config import settings
from review_summarizer.models.review import ScrapeQuery
from review_summarizer.scraper.errors import ScrapeError
from review_summarizer.scraper.google_maps import GoogleMapsReviewScraper


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Smoke test for Google Maps review collection.")
    parser.add_argument("name", nargs="?", default="30 West Apartments", help="Property name.")
    parser.add_argument("location", nargs="?", default="Bradenton, FL", help="City/state hint.")
    parser.add_argument(
        "--max-reviews",
        type=int,
        default=settings.scraper_max_reviews,
        help=f"Maximum number of reviews to collect (default: {settings.scraper_max_reviews}).",
    )
    parser.add_argument(
        "--budget-ms",
        type=int,
        default=settings.scraper_time_budget_ms,
        help=f"Overall time budget in milliseconds (default: {settings.scraper_time_budget_ms}).",
    )
    parser.add_argument("--headed", action="store_true", help="Show the browser window.")
    return parser.parse_args()


async def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    scraper = GoogleMapsReviewScraper(
        headless=not args.headed and settings.scraper_headless,
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
    query = ScrapeQuery(
        subject_name=args.name,
        location_hint=args.location,
        max_results=max(1, args.max_reviews),
        time_budget_ms=max(1000, args.budget_ms),
    )

    try:
        records = await scraper.scrape(query)
    except ScrapeError as exc:
        print(f"FAILED ({exc.kind.value}): {exc}")
        return 1

    print(f"OK - collected {len(records)} reviews for: {query.search_text}")
    if records:
        print(f"Shared URL: {records[0].source_url or '(not found)'}")
        for record in records[:3]:
            print(f"- {record.text[:160]}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
