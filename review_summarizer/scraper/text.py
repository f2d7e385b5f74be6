from __future__ import annotations

import re
from typing import Iterable, Iterator

from review_summarizer.models.review import ReviewRecord

_HORIZONTAL_SPACE_REGEX = re.compile(r"[^\S\n]+")
_CONTROL_CHARS_REGEX = re.compile(r"[\x00-\x09\x0B-\x1F\x7F]")


def clean_review_text(value: object) -> str:
    """Trim a scraped review, keeping line breaks between non-empty lines."""
    text = str(value or "").replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS_REGEX.sub(" ", text)
    lines = [_HORIZONTAL_SPACE_REGEX.sub(" ", line).strip() for line in text.split("\n")]
    return "\n".join(line for line in lines if line)


def dedupe_key(text: str) -> str:
    return text.casefold()


class UniqueTexts:
    """Insertion-ordered texts, unique by case-insensitive equality."""

    def __init__(self, texts: Iterable[str] = ()) -> None:
        self._items: dict[str, str] = {}
        self.extend(texts)

    def add(self, text: str) -> bool:
        cleaned = clean_review_text(text)
        if not cleaned:
            return False

        key = dedupe_key(cleaned)
        if key in self._items:
            return False

        self._items[key] = cleaned
        return True

    def extend(self, texts: Iterable[str]) -> int:
        return sum(1 for text in texts if self.add(text))

    def as_list(self) -> list[str]:
        return list(self._items.values())

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and dedupe_key(clean_review_text(text)) in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items.values()))


def dedupe_records(records: Iterable[ReviewRecord]) -> list[ReviewRecord]:
    seen: set[str] = set()
    unique: list[ReviewRecord] = []

    for record in records:
        key = dedupe_key(record.text)
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(record)

    return unique
