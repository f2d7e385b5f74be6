from review_summarizer.models.review import ReviewRecord
from review_summarizer.scraper.text import UniqueTexts, clean_review_text, dedupe_records


def test_clean_review_text_trims_and_keeps_line_breaks() -> None:
    raw = "  Great   place\t to live.\r\n\r\n  Pool is   clean!  "

    assert clean_review_text(raw) == "Great place to live.\nPool is clean!"


def test_clean_review_text_handles_empty_values() -> None:
    assert clean_review_text(None) == ""
    assert clean_review_text("   \n  ") == ""


def test_unique_texts_dedupes_case_insensitively_and_keeps_first_casing() -> None:
    unique = UniqueTexts()

    assert unique.add("Great place") is True
    assert unique.add("great place") is False
    assert unique.add("GREAT PLACE ") is False

    assert unique.as_list() == ["Great place"]
    assert "great PLACE" in unique


def test_unique_texts_extend_reports_new_items_in_insertion_order() -> None:
    unique = UniqueTexts(["b review", "a review"])

    added = unique.extend(["A REVIEW", "c review", "", "c review"])

    assert added == 1
    assert list(unique) == ["b review", "a review", "c review"]
    assert len(unique) == 3


def test_dedupe_records_merges_sources_first_seen_wins() -> None:
    records = [
        ReviewRecord(text="Loud neighbors after hours", source_url="https://maps.example/p", source="google_maps"),
        ReviewRecord(text="loud neighbors after hours", source_url="https://apartments.example/l", source="apartments_com"),
        ReviewRecord(text="Gate broken for weeks", source_url="https://apartments.example/l", source="apartments_com"),
    ]

    merged = dedupe_records(records)

    assert [record.text for record in merged] == ["Loud neighbors after hours", "Gate broken for weeks"]
    assert merged[0].source == "google_maps"
