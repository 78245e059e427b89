import pytest

from feed_classifier.merge import apply_classifications, clamp_confidence, utc_timestamp

from conftest import make_record

STAMP = "2026-10-16T09:30:00.000Z"


def test_valid_result_is_merged():
    feed = [make_record(1), make_record(2)]
    results = [{"id": "post-2", "label": "Question", "confidence": 0.8, "reason": "asks how"}]
    assert apply_classifications(feed, results, "classification", classified_at=STAMP) == 1
    assert "classification" not in feed[0]
    assert feed[1]["classification"] == {
        "label": "question",
        "confidence": 0.8,
        "reason": "asks how",
        "classifiedAt": STAMP,
    }


@pytest.mark.parametrize("result", [
    {"id": "post-1", "label": "urgent", "confidence": 0.9},
    {"id": "post-1", "confidence": 0.9},
    {"id": "post-1", "label": None},
    {"id": "post-1", "label": 3},
])
def test_invalid_label_leaves_record_untouched(result):
    previous = {"label": "love", "confidence": 0.5, "reason": "old", "classifiedAt": STAMP}
    feed = [make_record(1, classification=dict(previous)), make_record(2)]
    assert apply_classifications(feed, [result], "classification") == 0
    assert feed[0]["classification"] == previous
    assert "classification" not in feed[1]


@pytest.mark.parametrize("raw,expected", [
    (1.7, 1.0), (-0.3, 0.0), (0.42, 0.42), (1, 1.0), ("high", None), (None, None),
    (True, None), (float("nan"), None),
])
def test_clamp_confidence(raw, expected):
    assert clamp_confidence(raw) == expected


def test_confidence_clamped_on_merge():
    feed = [make_record(1), make_record(2), make_record(3)]
    results = [
        {"id": "post-1", "label": "bug", "confidence": 1.7},
        {"id": "post-2", "label": "bug", "confidence": -0.3},
        {"id": "post-3", "label": "bug", "confidence": "high"},
    ]
    apply_classifications(feed, results, "classification")
    assert [r["classification"]["confidence"] for r in feed] == [1, 0, None]


def test_missing_reason_becomes_empty_string():
    feed = [make_record(1)]
    apply_classifications(feed, [{"id": "post-1", "label": "other"}], "classification")
    assert feed[0]["classification"]["reason"] == ""


def test_last_duplicate_result_wins():
    feed = [make_record(1)]
    results = [
        {"id": "post-1", "label": "bug", "reason": "first"},
        {"id": "post-1", "label": "love", "reason": "second"},
    ]
    apply_classifications(feed, results, "classification")
    assert feed[0]["classification"]["label"] == "love"
    assert feed[0]["classification"]["reason"] == "second"


def test_unrequested_and_malformed_results_ignored():
    feed = [make_record(1)]
    results = ["junk", {"label": "bug"}, {"id": ["x"], "label": "bug"}, {"id": "post-99", "label": "bug"}]
    assert apply_classifications(feed, results, "classification") == 0
    assert feed == [make_record(1)]


def test_ids_match_by_exact_value():
    feed = [make_record(1, id=7)]
    apply_classifications(feed, [{"id": "7", "label": "bug"}], "classification")
    assert "classification" not in feed[0]
    apply_classifications(feed, [{"id": 7, "label": "bug"}], "classification")
    assert feed[0]["classification"]["label"] == "bug"


def test_utc_timestamp_format():
    stamp = utc_timestamp()
    assert stamp.endswith("Z")
    assert len(stamp) == len("2026-10-16T09:30:00.000Z")
