import pytest

from social_listener.core.constants import ASPECTS, SENTIMENTS
from social_listener.schemas.analytics import AspectSummary, SplitSeries
from social_listener.services.metrics import (
    argmax,
    argmin,
    aspect_labels,
    avg_score_series,
    normalize_series,
    percent_map,
    percentage,
    round_half_up,
    sentiment_insight,
    split_summary,
    summarize,
    total,
)


def test_normalize_fills_missing_categories_with_zero():
    assert normalize_series({"counts": {"positive": 10, "negative": 5}}, SENTIMENTS) == [10, 0, 5]


def test_normalize_prefers_legacy_series_key():
    raw = {"series": {"pricing": 40.0, "staff": 10.0}, "counts": {"pricing": 4}}
    assert normalize_series(raw, ASPECTS) == [40.0, 0, 0, 10.0, 0]


def test_normalize_accepts_flat_mapping_and_models():
    assert normalize_series({"neutral": 3}, SENTIMENTS) == [0, 3, 0]
    summary = AspectSummary(counts={"returns": 2, "app/ux": 9})
    assert normalize_series(summary, ASPECTS) == [0, 0, 2, 0, 9]


@pytest.mark.parametrize("raw", [None, "garbage", 42, [], {"counts": "nope"}, {}])
def test_normalize_degrades_to_zeros(raw):
    assert normalize_series(raw, SENTIMENTS) == [0, 0, 0]


def test_normalize_ignores_non_numeric_values():
    assert normalize_series({"counts": {"positive": "7", "neutral": None, "negative": "x"}}) == [7, 0, 0]


@pytest.mark.parametrize("value", [0, 1, 17, 1000])
def test_percentage_of_zero_total_is_zero(value):
    assert percentage(value, 0) == 0


def test_percentage_rounds_half_up_to_one_decimal():
    assert percentage(1, 3) == 33.3
    assert percentage(2, 3) == 66.7
    assert percentage(1, 16) == 6.3
    assert percentage(1, 80) == 1.3
    assert percentage(5, 5) == 100.0


@pytest.mark.parametrize("counts", [
    {"positive": 1, "neutral": 1, "negative": 1},
    {"positive": 201, "neutral": 401, "negative": 1398},
    {"positive": 7, "neutral": 0, "negative": 13},
    {"positive": 333, "neutral": 333, "negative": 334},
    {"positive": 1, "neutral": 0, "negative": 0},
])
def test_sentiment_percentages_sum_close_to_100(counts):
    assert 99.9 <= round(sum(percent_map(counts, SENTIMENTS).values()), 6) <= 100.1


@pytest.mark.parametrize("counts", [
    {"pricing": 1, "delivery": 1, "returns": 1, "staff": 1, "app/ux": 1996},
    {"pricing": 1, "delivery": 1, "returns": 1, "staff": 1, "app/ux": 1},
    {"pricing": 13, "delivery": 29, "returns": 7, "staff": 0, "app/ux": 51},
    {"pricing": 0, "delivery": 0, "returns": 0, "staff": 0, "app/ux": 3},
])
def test_aspect_percentages_stay_within_rounding_error(counts):
    # Each category rounds independently, off by at most 0.05.
    drift = abs(round(sum(percent_map(counts, ASPECTS).values()), 6) - 100)
    assert drift <= 0.05 * len(ASPECTS) + 1e-9


def test_independent_rounding_can_exceed_a_tenth():
    counts = {"pricing": 1, "delivery": 1, "returns": 1, "staff": 1, "app/ux": 1996}
    percent = percent_map(counts, ASPECTS)
    assert percent["pricing"] == 0.1
    assert percent["app/ux"] == 99.8
    assert round(sum(percent.values()), 6) == 100.2


def test_total_handles_maps_lists_and_junk():
    assert total({"a": 2, "b": 3}) == 5
    assert total([1, 2.5]) == 3.5
    assert total(None) == 0


def test_round_half_up():
    assert round_half_up(2.5, places=0) == 3
    assert round_half_up(0.25) == 0.3


def test_superlatives_break_ties_by_declared_order():
    counts = {"a": 5, "b": 5, "c": 3}
    assert argmax(counts, ["a", "b", "c"]) == "a"
    assert argmax(counts, ["b", "a", "c"]) == "b"
    assert argmin({"a": 1, "b": 1, "c": 4}, ["a", "b", "c"]) == "a"
    assert argmin(counts, ["a", "b", "c"]) == "c"


def test_superlatives_are_deterministic_and_tolerate_gaps():
    counts = {"negative": 4, "positive": 4}
    results = {argmax(counts, SENTIMENTS) for _ in range(20)}
    assert results == {"positive"}
    assert argmin(counts, SENTIMENTS) == "neutral"
    assert argmax(None, SENTIMENTS) == "positive"
    assert argmax({}, []) is None


def test_summarize_zero_total():
    stats = summarize({"counts": {}}, SENTIMENTS)
    assert stats.total == 0
    assert stats.percent == {"positive": 0.0, "neutral": 0.0, "negative": 0.0}
    assert stats.top is None and stats.bottom is None


def test_summarize_counts():
    stats = summarize({"counts": {"positive": 6, "neutral": 1, "negative": 3}}, SENTIMENTS)
    assert stats.total == 10
    assert stats.counts == {"positive": 6, "neutral": 1, "negative": 3}
    assert stats.percent == {"positive": 60.0, "neutral": 10.0, "negative": 30.0}
    assert stats.top == "positive"
    assert stats.bottom == "neutral"


def test_aspect_labels_default_to_fixed_order():
    assert aspect_labels(AspectSummary()) == list(ASPECTS)
    assert aspect_labels(AspectSummary(labels=["staff", "pricing"])) == ["staff", "pricing"]
    assert aspect_labels(None) == list(ASPECTS)


def test_avg_score_series_reads_prefixed_keys():
    payload = {"avg_scores": {"aspect_pricing": -0.2, "aspect_app/ux": 0.5, "pricing": 9}}
    assert avg_score_series(payload, ASPECTS) == [-0.2, 0.0, 0.0, 0.0, 0.5]
    assert avg_score_series({}, ASPECTS) == [0.0] * 5


def test_split_summary_uses_counts_with_row_and_grand_totals():
    split = SplitSeries(
        labels=["pricing", "delivery", "returns"],
        counts={"positive": [6, 2, 1], "neutral": [2, 2, 1], "negative": [2, 6, 0]},
        percent={"positive": [99, 99, 99], "neutral": [99, 99, 99], "negative": [99, 99, 99]},
    )
    summary = split_summary(split)

    assert summary.total == 22
    assert summary.totals == {"positive": 9, "neutral": 5, "negative": 8}
    assert summary.percent == {"positive": 40.9, "neutral": 22.7, "negative": 36.4}

    pricing, delivery, returns = summary.aspects
    assert (pricing.total, pricing.positive_pct, pricing.neutral_pct, pricing.negative_pct) == (10, 60.0, 20.0, 20.0)
    assert (returns.total, returns.positive_pct, returns.neutral_pct, returns.negative_pct) == (2, 50.0, 50.0, 0.0)
    assert summary.most_positive.aspect == "pricing"
    assert summary.most_negative.aspect == "delivery"


def test_split_summary_pads_short_arrays_and_guards_empty_rows():
    summary = split_summary({"labels": ["pricing", "staff"], "counts": {"positive": [1]}})
    pricing, staff = summary.aspects
    assert pricing.positive_pct == 100.0
    assert staff.total == 0
    assert (staff.positive_pct, staff.neutral_pct, staff.negative_pct) == (0.0, 0.0, 0.0)


def test_split_summary_of_nothing():
    summary = split_summary(None)
    assert summary.total == 0
    assert summary.aspects == []
    assert summary.most_positive is None
    assert summary.most_negative is None


@pytest.mark.parametrize("sentiment, pct, detailed, expected", [
    ("positive", 51, False, "Above average positivity"),
    ("positive", 50, False, "Below average positivity"),
    ("neutral", 31, False, "High neutral sentiment"),
    ("negative", 12, False, "Low negative sentiment"),
    ("positive", 31, True, "Moderate positivity - mixed customer sentiment"),
    ("neutral", 41, True, "High neutral sentiment - many customers are indifferent"),
    ("negative", 15, True, "Low negative sentiment - customers are generally satisfied"),
    ("negative", 15.1, True, "Moderate negative sentiment - some customer dissatisfaction"),
])
def test_sentiment_insight_bands(sentiment, pct, detailed, expected):
    assert sentiment_insight(sentiment, pct, detailed=detailed) == expected


def test_sentiment_insight_unknown_sentiment():
    assert sentiment_insight("mixed", 80) == ""
