from review_summarizer.scraper.results import normalize_results


def test_normalize_results_truncates_and_attaches_shared_url() -> None:
    texts = ["First review", "Second review", "Third review"]

    records = normalize_results(texts, "https://maps.app.goo.gl/abc", 2)

    assert [record.text for record in records] == ["First review", "Second review"]
    assert {record.source_url for record in records} == {"https://maps.app.goo.gl/abc"}
    assert {record.source for record in records} == {"google_maps"}


def test_normalize_results_uses_empty_url_when_not_discovered() -> None:
    records = normalize_results(["Only review"], None, 5)

    assert len(records) == 1
    assert records[0].source_url == ""
    assert records[0].model_dump(by_alias=True)["url"] == ""


def test_normalize_results_dedupes_case_insensitively() -> None:
    records = normalize_results(["Great place", "great place", "Quiet at night"], "", 10)

    assert [record.text for record in records] == ["Great place", "Quiet at night"]


def test_normalize_results_is_idempotent() -> None:
    texts = ["Noise at the pool", "  Dog poop everywhere ", "noise at the pool"]

    first = normalize_results(texts, "https://maps.example/place", 5)
    second = normalize_results(texts, "https://maps.example/place", 5)
    again = normalize_results([record.text for record in first], "https://maps.example/place", 5)

    assert first == second
    assert first == again


def test_normalize_results_returns_nothing_for_non_positive_limit() -> None:
    assert normalize_results(["Some review"], "", 0) == []
