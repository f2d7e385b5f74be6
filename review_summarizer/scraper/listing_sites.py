from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final
from urllib.parse import quote, urljoin

import httpx
from bs4 import BeautifulSoup

from review_summarizer.models.review import ReviewRecord
from review_summarizer.scraper.text import clean_review_text, dedupe_key

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListingSite:
    """A review site scraped with one search fetch and one listing fetch."""

    name: str
    base_url: str
    search_path: str
    listing_link_selectors: tuple[str, ...]
    review_selectors: tuple[str, ...]

    def search_url(self, query_text: str) -> str:
        return f"{self.base_url}{self.search_path.format(query=quote(query_text, safe=''))}"


APARTMENTS_COM: Final = ListingSite(
    name="apartments_com",
    base_url="https://www.apartments.com",
    search_path="/search/?q={query}",
    listing_link_selectors=(
        "a.placardTitle",
        "a.property-link",
        "a[data-tid='listing-card-title']",
    ),
    review_selectors=(
        "section:-soup-contains('Reviews') p",
        "#reviews p",
        ".review",
        ".reviewText",
        ".review__content",
        ".review__text",
    ),
)

APARTMENT_RATINGS: Final = ListingSite(
    name="apartmentratings",
    base_url="https://www.apartmentratings.com",
    search_path="/search/?q={query}",
    listing_link_selectors=(
        "a.property-title",
        "a[href*='/apartment/']",
    ),
    review_selectors=(
        ".review__content",
        ".review__text",
        ".review-body",
    ),
)


class ListingSiteScraper:
    def __init__(
        self,
        site: ListingSite,
        *,
        timeout_s: float = 20.0,
        user_agent: str = "Mozilla/5.0",
        min_text_length: int = 31,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.site = site
        self._timeout_s = timeout_s
        self._headers = {"User-Agent": user_agent}
        self._min_text_length = max(1, min_text_length)
        self._transport = transport

    async def fetch_reviews(self, name: str, location: str) -> list[ReviewRecord]:
        query_text = f"{name} {location}".strip()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s,
                follow_redirects=True,
                headers=self._headers,
                transport=self._transport,
            ) as client:
                search_html = await self._get_html(client, self.site.search_url(query_text))
                if search_html is None:
                    return []

                listing_url = self.find_listing_url(search_html)
                if listing_url is None:
                    LOGGER.info("%s: no listing found for %r", self.site.name, query_text)
                    return []

                listing_html = await self._get_html(client, listing_url)
                if listing_html is None:
                    return []
        except httpx.HTTPError as exc:
            LOGGER.warning("%s: request failed for %r: %s", self.site.name, query_text, exc)
            return []

        records = self.extract_reviews(listing_html, listing_url)
        LOGGER.info("%s: extracted %s reviews from %s", self.site.name, len(records), listing_url)
        return records

    def find_listing_url(self, search_html: str) -> str | None:
        soup = BeautifulSoup(search_html, "html.parser")
        link = soup.select_one(", ".join(self.site.listing_link_selectors))
        href = str(link.get("href") or "").strip() if link is not None else ""
        if not href:
            return None
        return href if href.startswith("http") else urljoin(self.site.base_url, href)

    def extract_reviews(self, listing_html: str, listing_url: str) -> list[ReviewRecord]:
        soup = BeautifulSoup(listing_html, "html.parser")
        seen: set[str] = set()
        records: list[ReviewRecord] = []

        for node in soup.select(", ".join(self.site.review_selectors)):
            text = clean_review_text(node.get_text(" "))
            if len(text) < self._min_text_length:
                continue

            key = dedupe_key(text)
            if key in seen:
                continue
            seen.add(key)
            records.append(ReviewRecord(text=text, source_url=listing_url, source=self.site.name))

        return records

    async def _get_html(self, client: httpx.AsyncClient, url: str) -> str | None:
        response = await client.get(url)
        if response.is_error:
            LOGGER.warning("%s: HTTP %s for %s", self.site.name, response.status_code, url)
            return None
        return response.text
