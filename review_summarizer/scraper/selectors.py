from __future__ import annotations

from dataclasses import dataclass
from typing import Final

# Selector strategy based on UI structure, roles and aria labels.
# Generated class names are kept only as late fallbacks because they drift.
SELECTOR_PATTERNS: Final[dict[str, tuple[str, ...]]] = {
    # Search controls
    "SEARCH_INPUT": (
        "input#searchboxinput",
        "div[role='search'] input[role='combobox'][name='q']",
        "form[jsaction*='searchboxFormSubmit'] input[name='q']",
        "input[aria-label*='Search Google Maps' i]",
    ),
    "SEARCH_BUTTON": (
        "button#searchbox-searchbutton",
        "div[role='search'] button[jsaction*='omnibox.search']",
        "div[role='search'] button[aria-label*='search' i]",
    ),
    # Search results list (left panel)
    "RESULTS_FEED": (
        "div[role='feed']",
        "div[aria-label*='Results' i][role='feed']",
    ),
    "RESULT_LINKS": (
        "a[data-result-id]:has(h3)",
        "a.hfpxzc",
        "div[role='feed'] a[href*='/maps/place/']",
        "div[role='feed'] [jsaction*='pane.result'] a[href*='/maps/place/']",
        "div[role='article'] a[href*='/maps/place/']",
    ),
    # Place page signals, raced against each other
    "PLACE_REVIEWS_AFFORDANCE": (
        "button[jsaction*='pane.reviewChart']",
        "button[aria-label*='reviews' i]",
        "div[jsaction*='reviewChart.moreReviews']",
    ),
    "PLACE_HEADING": (
        "div[role='main'] h1",
        "h1.DUwDvf",
    ),
    "PLACE_REVIEWS_TAB": (
        "button[role='tab'][aria-label*='review' i]",
        "[role='tablist'] button:has-text('Reviews')",
    ),
    # Review entrypoints, in priority order
    "REVIEWS_COUNT_BUTTON": (
        "button[aria-label*='reviews' i][jsaction*='reviewChart']",
        "div.F7nice button[aria-label*='review' i]",
        "button[aria-label$=' reviews' i]",
    ),
    "REVIEWS_CHART_BUTTON": (
        "button[jsaction*='pane.reviewChart.moreReviews']",
        "div[jsaction*='reviewChart.moreReviews'] button",
        "button[jsaction*='reviewChart']",
    ),
    "REVIEWS_TAB": (
        "button[role='tab'][aria-label*='review' i]",
        "[role='tablist'] button[role='tab']:has-text('Reviews')",
    ),
    "REVIEWS_LINK": (
        "a[href*='/reviews']",
        "a:has-text('Google reviews')",
        "button:has-text('More reviews')",
        "button[aria-label*='more reviews' i]",
    ),
    # Sorting
    "SORT_BUTTON": (
        "button[aria-label*='Sort' i]",
        "div[role='button'][aria-label*='Sort' i]",
        "button[data-value='Sort']",
    ),
    "SORT_NEWEST": (
        "div[role='menuitemradio']:has-text('Newest')",
        "div[role='menuitem']:has-text('Newest')",
        "li[role='menuitemradio']:has-text('Newest')",
    ),
    # Shared place link
    "SHARE_BUTTON": (
        "button[aria-label*='Share' i]",
        "button[data-value='Share']",
    ),
    "SHARE_LINK_INPUT": (
        "input[aria-label='Link to share']",
        "input[aria-label*='link to share' i]",
        "input.vrsrZe",
    ),
}

ENTRYPOINT_GROUPS: Final[tuple[str, ...]] = (
    "REVIEWS_COUNT_BUTTON",
    "REVIEWS_CHART_BUTTON",
    "REVIEWS_TAB",
    "REVIEWS_LINK",
)

PLACE_SIGNAL_GROUPS: Final[tuple[str, ...]] = (
    "PLACE_REVIEWS_AFFORDANCE",
    "PLACE_HEADING",
    "PLACE_REVIEWS_TAB",
)

# Maps search URL variants, tried in order.
SEARCH_URL_TEMPLATES: Final[tuple[str, ...]] = (
    "{base}/search/{path_query}?hl=en",
    "{base}?q={form_query}&hl=en",
    "{base}/search/?api=1&query={form_query}&hl=en",
)

CONSENT_PHRASES: Final[tuple[str, ...]] = ("accept all", "i agree", "accept")

TEXT_ATTRIBUTES: Final[tuple[str, ...]] = ("data-review-text", "aria-label")


@dataclass(frozen=True)
class ReviewCardPattern:
    """One markup shape a review card may be rendered with."""

    name: str
    card_selector: str
    long_text_selectors: tuple[str, ...]
    short_text_selectors: tuple[str, ...]
    fallback_text_selectors: tuple[str, ...] = ()
    expand_selectors: tuple[str, ...] = ()


REVIEW_CARD_PATTERNS: Final[tuple[ReviewCardPattern, ...]] = (
    ReviewCardPattern(
        name="data_review_id",
        card_selector="div[data-review-id][jsaction*='review.in'], div.jftiEf[data-review-id]",
        long_text_selectors=("span[jsname='fbQN7e']", "span[class*='review-full-text']"),
        short_text_selectors=("span[jsname='bN97Pc']", "span[class*='review-snippet']"),
        fallback_text_selectors=(".MyEned .wiI7pd", "span.wiI7pd", "div[lang]"),
        expand_selectors=(
            "button[jsaction*='review.expandReview']",
            "button[aria-label='See more']",
            "button:has-text('More')",
        ),
    ),
    ReviewCardPattern(
        name="jscontroller_review_id",
        card_selector="div[jscontroller][data-review-id]",
        long_text_selectors=("span[jsname='fbQN7e']", "span[class*='review-full-text']"),
        short_text_selectors=("span[jsname='bN97Pc']", "span[class*='review-snippet']"),
        fallback_text_selectors=("span.wiI7pd", "div[lang]"),
        expand_selectors=("a.review-more-link", "button:has-text('More')"),
    ),
    ReviewCardPattern(
        name="legacy_gws_card",
        card_selector="div.gws-localreviews__google-review, div.WMbnJf",
        long_text_selectors=("span.review-full-text",),
        short_text_selectors=("span[data-expandable-section]", "span.review-snippet"),
        fallback_text_selectors=("div.Jtu6Td", "span[tabindex='-1']"),
        expand_selectors=("a.review-more-link",),
    ),
    ReviewCardPattern(
        name="generic_review_block",
        card_selector="div[data-review-id]",
        long_text_selectors=("span[jsname='fbQN7e']",),
        short_text_selectors=("span[jsname='bN97Pc']",),
        fallback_text_selectors=("span.wiI7pd", "div[lang]", "span[lang]"),
    ),
)
