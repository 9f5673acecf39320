from datetime import datetime, timedelta, timezone

from grepbase.storage.references import derive_document_ref, sanitize


def test_sanitize_collapses_non_alphanumeric_runs():
    assert sanitize("  Hello, World!!  ") == "hello-world"
    assert sanitize("Q3 -- Earnings / Call") == "q3-earnings-call"


def test_sanitize_falls_back_when_nothing_survives():
    assert sanitize("!!!") == "unknown"
    assert sanitize("", fallback="n-a") == "n-a"
    assert sanitize(None) == "unknown"


def test_sanitize_caps_length_without_trailing_hyphen():
    value = sanitize("a" * 19 + " tail", max_length=20)
    assert value == "a" * 19
    assert len(sanitize("x" * 80, max_length=50)) == 50


def test_reference_layout_with_and_without_publisher():
    ts = datetime(2024, 3, 5, 23, 30, tzinfo=timezone.utc)

    assert derive_document_ref("Test Doc", "demo", timestamp=ts) == "demo/2024-03/2024-03-05-test-doc.md"
    assert (
        derive_document_ref("Test Doc", "YouTube", publisher="Some Channel!", timestamp=ts)
        == "youtube/some-channel/2024-03/2024-03-05-test-doc.md"
    )


def test_reference_is_deterministic():
    ts = datetime(2025, 12, 6, 8, 0, tzinfo=timezone.utc)
    refs = {derive_document_ref("Same Label", "Reddit", publisher="r/stocks", timestamp=ts) for _ in range(5)}
    assert refs == {"reddit/r-stocks/2025-12/2025-12-06-same-label.md"}


def test_reference_uses_utc_date():
    plus_two = timezone(timedelta(hours=2))
    ts = datetime(2024, 3, 1, 1, 0, tzinfo=plus_two)
    assert derive_document_ref("Doc", "demo", timestamp=ts) == "demo/2024-02/2024-02-29-doc.md"


def test_naive_timestamp_is_treated_as_utc():
    ts = datetime(2024, 1, 31, 23, 59)
    assert derive_document_ref("Doc", "demo", timestamp=ts) == "demo/2024-01/2024-01-31-doc.md"


def test_label_falls_back_to_id_then_unknown():
    ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert derive_document_ref("???", "demo", timestamp=ts, id="ABC 123") == "demo/2024-01/2024-01-01-abc-123.md"
    assert derive_document_ref("???", "", timestamp=ts) == "unknown/2024-01/2024-01-01-unknown.md"


def test_source_segment_is_capped_at_twenty_characters():
    ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ref = derive_document_ref("Doc", "a-very-long-source-name-indeed", timestamp=ts)
    assert ref.split("/")[0] == "a-very-long-source-n"
