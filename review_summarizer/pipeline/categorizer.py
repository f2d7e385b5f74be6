import re
from typing import Iterable

from review_summarizer.models.insights import CategoryBuckets, CategoryHit
from review_summarizer.models.review import ReviewRecord

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "security": (
        "trespass", "trespasser", "loiter", "loitering", "theft", "stolen", "break-in", "break in",
        "broken into", "burglary", "vandal", "vandalism", "homeless", "transient", "drug", "crime",
        "criminal", "suspicious", "car break", "catalytic", "porch pirate", "police", "weapon", "gun",
        "knife", "fight", "assault",
    ),
    "pet": (
        "dog poop", "poop", "pet waste", "dog waste", "didn't pick up", "did not pick up", "feces",
        "droppings", "poo", "mess from dogs", "dogs everywhere",
    ),
    "amenity": (
        "amenity misuse", "pool party", "after hours", "after-hours", "noise", "loud", "non-residents",
        "guests using", "gym crowd", "smoking by pool", "smoke at pool", "parking unauthorized",
        "illegal parking", "trash dumping", "dumpster", "package theft", "mailroom",
    ),
    "safety": (
        "unsafe", "not safe", "sketchy", "poor lighting", "dark at night", "gate broken", "gate stuck open",
        "door propped", "fire alarm", "elevator stuck", "assault", "harassed", "threatening",
    ),
}

CATEGORY_LABELS: dict[str, str] = {
    "security": "security",
    "pet": "pet-waste",
    "amenity": "amenity-misuse",
    "safety": "safety",
}


class ReviewCategorizer:
    _SENTENCE_SPLIT_REGEX = re.compile(r"\n|\.|!|\?|\r")

    def __init__(self, keywords: dict[str, tuple[str, ...]] | None = None) -> None:
        self._keywords = keywords or CATEGORY_KEYWORDS

    def tokenize(self, text: str) -> list[str]:
        value = re.sub(r"\n+", "\n", text or "")
        return [part.strip() for part in self._SENTENCE_SPLIT_REGEX.split(value) if part.strip()]

    def classify_sentence(self, sentence: str) -> dict[str, bool]:
        value = sentence.lower()
        return {
            category: any(keyword in value for keyword in keywords)
            for category, keywords in self._keywords.items()
        }

    def aggregate(self, records: Iterable[ReviewRecord]) -> CategoryBuckets:
        buckets = CategoryBuckets()

        for record in records:
            for sentence in self.tokenize(record.text):
                hit = CategoryHit(sentence=sentence, source=record.source, url=record.source_url)
                for category, matched in self.classify_sentence(sentence).items():
                    if matched:
                        getattr(buckets, category).append(hit)

        return buckets

    def headline(self, counts: dict[str, int]) -> str:
        if not sum(counts.values()):
            return "No issues detected in the fetched reviews."

        parts = [
            f"{counts[category]} {label}"
            for category, label in CATEGORY_LABELS.items()
            if counts.get(category)
        ]
        return f"Signals found: {', '.join(parts)}."

    def score_badge(self, count: int) -> str:
        if count >= 6:
            return "Severe"
        if count >= 3:
            return "Moderate"
        if count >= 1:
            return "Noted"
        return "No signal"
