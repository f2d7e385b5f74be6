import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from review_summarizer.services.review_service import ReviewService


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the multi-source review summary without the API server.")
    parser.add_argument("name", help="Property name.")
    parser.add_argument("location", help="City/state hint.")
    parser.add_argument("--no-google", action="store_true", help="Skip Google Maps reviews.")
    parser.add_argument("--no-apartments-com", action="store_true", help="Skip Apartments.com reviews.")
    parser.add_argument("--no-apartmentratings", action="store_true", help="Skip ApartmentRatings reviews.")
    parser.add_argument("--email", action="store_true", help="Print only the email summary text.")
    parser.add_argument("--compact", action="store_true", help="Print compact JSON output (single line).")
    return parser.parse_args()


def _json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


async def _run() -> None:
    args = _parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    service = ReviewService()
    report = await service.summarize(
        args.name,
        args.location,
        use_google=not args.no_google,
        use_apartments_com=not args.no_apartments_com,
        use_apartment_ratings=not args.no_apartmentratings,
    )

    if args.email:
        print(report["email_summary"])
    elif args.compact:
        print(json.dumps(report, ensure_ascii=False, default=_json_default))
    else:
        print(json.dumps(report, ensure_ascii=False, indent=2, default=_json_default))


if __name__ == "__main__":
    asyncio.run(_run())
