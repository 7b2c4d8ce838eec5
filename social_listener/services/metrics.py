"""
Derived metrics for the dashboard panels.

Turns aggregate payloads into dense, category-ordered series and the summary
numbers shown on KPI cards. Every function here is pure and never raises for
malformed input: missing categories count as zero and an empty total yields 0%.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from social_listener.core.constants import ASPECTS, SENTIMENTS
from social_listener.schemas.analytics import AspectAvgScores, AspectSummary, SplitSeries
from social_listener.schemas.common import Number, parse_payload, to_number

_ONE_DECIMAL = Decimal("0.1")


def _category_source(raw: Any, categories: Sequence[str]) -> Mapping[str, Any]:
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        return {}
    for key in ("series", "counts"):
        nested = raw.get(key)
        if isinstance(nested, Mapping):
            return nested
    if any(c in raw for c in categories):
        return raw
    return {}


def normalize_series(raw: Any, categories: Sequence[str] = SENTIMENTS) -> List[Number]:
    """Align a sparse aggregate to ``categories``, substituting 0 for gaps.

    ``raw`` may be a payload carrying a ``series`` (legacy, preferred) or
    ``counts`` mapping, or a flat category mapping.

    >>> normalize_series({"counts": {"positive": 10, "negative": 5}})
    [10, 0, 5]
    """
    source = _category_source(raw, categories)
    return [to_number(source.get(c)) for c in categories]


def category_map(raw: Any, categories: Sequence[str] = SENTIMENTS) -> Dict[str, Number]:
    """Dense mapping in declaration order."""
    return dict(zip(categories, normalize_series(raw, categories)))


def total(values: Any) -> Number:
    if isinstance(values, Mapping):
        values = list(values.values())
    if not isinstance(values, (list, tuple)):
        return 0
    return sum(to_number(v) for v in values)


def round_half_up(value: Any, places: int = 1) -> float:
    quantum = _ONE_DECIMAL if places == 1 else Decimal(1).scaleb(-places)
    return float(Decimal(str(to_number(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(value: Any, total_value: Any) -> float:
    """``value / total * 100`` rounded half up to one decimal; 0 when total is 0."""
    denominator = to_number(total_value)
    if denominator <= 0:
        return 0.0
    exact = Decimal(str(to_number(value))) * 100 / Decimal(str(denominator))
    return float(exact.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def percent_map(raw: Any, categories: Sequence[str] = SENTIMENTS) -> Dict[str, float]:
    counts = category_map(raw, categories)
    grand = total(counts)
    return {c: percentage(v, grand) for c, v in counts.items()}


def _superlative(values: Mapping[str, Any], categories: Optional[Sequence[str]], pick_max: bool) -> Optional[str]:
    if not isinstance(values, Mapping):
        values = {}
    order = list(categories) if categories is not None else list(values)
    best: Optional[str] = None
    best_value: Number = 0
    for category in order:
        value = to_number(values.get(category))
        # Strict comparison keeps the first category on ties.
        if best is None or (value > best_value if pick_max else value < best_value):
            best, best_value = category, value
    return best


def argmax(values: Mapping[str, Any], categories: Optional[Sequence[str]] = None) -> Optional[str]:
    """Category with the largest value; ties go to the earliest in ``categories``."""
    return _superlative(values, categories, pick_max=True)


def argmin(values: Mapping[str, Any], categories: Optional[Sequence[str]] = None) -> Optional[str]:
    """Category with the smallest value; ties go to the earliest in ``categories``."""
    return _superlative(values, categories, pick_max=False)


class CategorySummary(BaseModel):
    total: Number = 0
    counts: Dict[str, Number]
    percent: Dict[str, float]
    top: Optional[str] = None
    bottom: Optional[str] = None


def summarize(raw: Any, categories: Sequence[str] = SENTIMENTS) -> CategorySummary:
    counts = category_map(raw, categories)
    grand = total(counts)
    return CategorySummary(
        total=grand,
        counts=counts,
        percent={c: percentage(v, grand) for c, v in counts.items()},
        top=argmax(counts, categories) if grand else None,
        bottom=argmin(counts, categories) if grand else None,
    )


def aspect_labels(summary: Any) -> List[str]:
    """Labels an aspect summary is charted against; the fixed order when absent."""
    labels = summary.labels if isinstance(summary, AspectSummary) else None
    return list(labels) if labels else list(ASPECTS)


def avg_score_series(payload: Any, categories: Sequence[str] = ASPECTS) -> List[float]:
    """Per-aspect average sentiment scores from ``avg_scores["aspect_<name>"]``."""
    if isinstance(payload, AspectAvgScores):
        scores: Mapping[str, Any] = payload.avg_scores
    elif isinstance(payload, Mapping) and isinstance(payload.get("avg_scores"), Mapping):
        scores = payload["avg_scores"]
    else:
        scores = {}
    return [float(to_number(scores.get(f"aspect_{c}"))) for c in categories]


# ---------------------------------------------------------------------------
# Aspect x sentiment breakdown
# ---------------------------------------------------------------------------

class AspectBreakdown(BaseModel):
    aspect: str
    total: Number
    positive: Number
    neutral: Number
    negative: Number
    positive_pct: float
    neutral_pct: float
    negative_pct: float


class SplitSummary(BaseModel):
    total: Number = 0
    totals: Dict[str, Number]
    percent: Dict[str, float]
    aspects: List[AspectBreakdown]
    most_positive: Optional[AspectBreakdown] = None
    most_negative: Optional[AspectBreakdown] = None


def split_summary(split: Any) -> SplitSummary:
    """Summarize a split series from its counts.

    Row percentages use the aspect's own total, overall percentages use the
    grand total. The percent arrays are never summed.
    """
    if not isinstance(split, SplitSeries):
        split = parse_payload(SplitSeries, split if isinstance(split, Mapping) else None)
    counts = split.counts
    rows: List[AspectBreakdown] = []
    for i, aspect in enumerate(split.labels):
        pos, neu, neg = counts.positive[i], counts.neutral[i], counts.negative[i]
        row_total = pos + neu + neg
        rows.append(AspectBreakdown(
            aspect=aspect,
            total=row_total,
            positive=pos,
            neutral=neu,
            negative=neg,
            positive_pct=percentage(pos, row_total),
            neutral_pct=percentage(neu, row_total),
            negative_pct=percentage(neg, row_total),
        ))

    totals = {
        "positive": sum(counts.positive),
        "neutral": sum(counts.neutral),
        "negative": sum(counts.negative),
    }
    grand = total(totals)
    by_aspect = {row.aspect: row for row in rows}
    labels = [row.aspect for row in rows]
    most_positive = argmax({r.aspect: r.positive_pct for r in rows}, labels)
    most_negative = argmax({r.aspect: r.negative_pct for r in rows}, labels)
    return SplitSummary(
        total=grand,
        totals=totals,
        percent={k: percentage(v, grand) for k, v in totals.items()},
        aspects=rows,
        most_positive=by_aspect.get(most_positive) if most_positive else None,
        most_negative=by_aspect.get(most_negative) if most_negative else None,
    )


# ---------------------------------------------------------------------------
# Captions
# ---------------------------------------------------------------------------

_SHORT_INSIGHTS = {
    "positive": ((50, "Above average positivity"), (None, "Below average positivity")),
    "neutral": ((30, "High neutral sentiment"), (None, "Low neutral sentiment")),
    "negative": ((30, "High negative sentiment"), (None, "Low negative sentiment")),
}
_DETAILED_INSIGHTS = {
    "positive": (
        (50, "Above average positivity - customers are generally satisfied"),
        (30, "Moderate positivity - mixed customer sentiment"),
        (None, "Below average positivity - customers may have concerns"),
    ),
    "neutral": (
        (40, "High neutral sentiment - many customers are indifferent"),
        (20, "Moderate neutral sentiment - balanced customer views"),
        (None, "Low neutral sentiment - customers have strong opinions"),
    ),
    "negative": (
        (30, "High negative sentiment - customers have significant concerns"),
        (15, "Moderate negative sentiment - some customer dissatisfaction"),
        (None, "Low negative sentiment - customers are generally satisfied"),
    ),
}


def sentiment_insight(sentiment: str, pct: Any, detailed: bool = False) -> str:
    bands = (_DETAILED_INSIGHTS if detailed else _SHORT_INSIGHTS).get(sentiment)
    if not bands:
        return ""
    value = to_number(pct)
    for threshold, caption in bands:
        if threshold is None or value > threshold:
            return caption
    return ""
