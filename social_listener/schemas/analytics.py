from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional

from social_listener.schemas.common import Number, numeric_map, to_number, valid_items


class DateBounds(BaseModel):
    min: Optional[str] = None
    max: Optional[str] = None


class MetaResponse(BaseModel):
    date_range: Optional[DateBounds] = None


class SentimentSummary(BaseModel):
    total: int = 0
    counts: Dict[str, Number] = Field(default_factory=dict)
    percent: Dict[str, Number] = Field(default_factory=dict)

    @field_validator("total", mode="before")
    @classmethod
    def _total(cls, v: Any) -> int:
        return int(to_number(v))

    @field_validator("counts", "percent", mode="before")
    @classmethod
    def _maps(cls, v: Any) -> Dict[str, Number]:
        return numeric_map(v)


class TrendPoint(BaseModel):
    date: str
    positive: Number = 0
    neutral: Number = 0
    negative: Number = 0

    @field_validator("positive", "neutral", "negative", mode="before")
    @classmethod
    def _value(cls, v: Any) -> Number:
        return to_number(v)


class TrendResponse(BaseModel):
    # Days without data are absent, never zero-filled.
    trend: List[TrendPoint] = Field(default_factory=list)

    @field_validator("trend", mode="before")
    @classmethod
    def _rows(cls, v: Any) -> List[TrendPoint]:
        if not isinstance(v, list):
            return []
        return valid_items(TrendPoint, [row for row in v if not isinstance(row, dict) or row.get("date")], "trend")

    @field_validator("trend")
    @classmethod
    def _ascending(cls, v: List[TrendPoint]) -> List[TrendPoint]:
        return sorted(v, key=lambda p: p.date)


class AspectSummary(BaseModel):
    total: int = 0
    counts: Dict[str, Number] = Field(default_factory=dict)
    percent: Dict[str, Number] = Field(default_factory=dict)
    labels: Optional[List[str]] = None
    # Legacy key, preferred over counts when present
    series: Optional[Dict[str, Number]] = None

    @field_validator("total", mode="before")
    @classmethod
    def _total(cls, v: Any) -> int:
        return int(to_number(v))

    @field_validator("counts", "percent", mode="before")
    @classmethod
    def _maps(cls, v: Any) -> Dict[str, Number]:
        return numeric_map(v)

    @field_validator("series", mode="before")
    @classmethod
    def _series(cls, v: Any) -> Optional[Dict[str, Number]]:
        return numeric_map(v) if isinstance(v, dict) else None

    @field_validator("labels", mode="before")
    @classmethod
    def _labels(cls, v: Any) -> Optional[List[str]]:
        if not isinstance(v, list) or not v:
            return None
        return [str(label) for label in v]


class AspectAvgScores(BaseModel):
    avg_scores: Dict[str, Number] = Field(default_factory=dict)

    @field_validator("avg_scores", mode="before")
    @classmethod
    def _scores(cls, v: Any) -> Dict[str, Number]:
        return numeric_map(v)


class SentimentArrays(BaseModel):
    positive: List[Number] = Field(default_factory=list)
    neutral: List[Number] = Field(default_factory=list)
    negative: List[Number] = Field(default_factory=list)

    @field_validator("positive", "neutral", "negative", mode="before")
    @classmethod
    def _values(cls, v: Any) -> List[Number]:
        if not isinstance(v, list):
            return []
        return [to_number(x) for x in v]

    def aligned(self, length: int) -> "SentimentArrays":
        def fit(values: List[Number]) -> List[Number]:
            return (values + [0] * length)[:length]

        return SentimentArrays(
            positive=fit(self.positive),
            neutral=fit(self.neutral),
            negative=fit(self.negative),
        )


class SplitSeries(BaseModel):
    """Aspect x sentiment cross-tabulation, arrays positionally aligned to labels."""

    labels: List[str] = Field(default_factory=list)
    counts: SentimentArrays = Field(default_factory=SentimentArrays)
    percent: SentimentArrays = Field(default_factory=SentimentArrays)

    @field_validator("labels", mode="before")
    @classmethod
    def _labels(cls, v: Any) -> List[str]:
        if not isinstance(v, list):
            return []
        return [str(label) for label in v]

    @field_validator("counts", "percent", mode="before")
    @classmethod
    def _arrays(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    @model_validator(mode="after")
    def _align(self) -> "SplitSeries":
        size = len(self.labels)
        self.counts = self.counts.aligned(size)
        self.percent = self.percent.aligned(size)
        return self
