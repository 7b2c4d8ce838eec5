"""
Date-range helpers for the dashboard's range selector.

``to_iso_date`` only canonicalizes; clamping is done by the selector through
``start_limits`` / ``end_limits`` so that min <= start <= end <= max holds.
"""
import logging
from datetime import date, datetime
from typing import Any, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, model_validator

from social_listener.schemas.analytics import DateBounds

logger = logging.getLogger(__name__)


def to_iso_date(value: Any) -> str:
    """Canonical ``YYYY-MM-DD`` for the local calendar date of ``value``.

    Accepts ``date``/``datetime`` (aware values are converted to local time),
    pandas timestamps, epoch milliseconds and date-like strings. A bare
    ``YYYY-MM-DD`` string is already a calendar date and is not shifted.
    Returns ``""`` for ``None`` or anything unparsable.
    """
    if value is None or value is pd.NaT:
        return ""
    if isinstance(value, datetime):
        local = value.astimezone() if value.tzinfo is not None else value
        return local.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000).date().isoformat()
        except (OverflowError, OSError, ValueError):
            return ""
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ""
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError:
            pass
        value = text
    try:
        parsed = pd.to_datetime(value, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return ""
    if not isinstance(parsed, pd.Timestamp) or pd.isna(parsed):
        return ""
    return to_iso_date(parsed.to_pydatetime())


def parse_iso_date(value: Any) -> Optional[date]:
    text = to_iso_date(value)
    return date.fromisoformat(text) if text else None


class DateRange(BaseModel):
    """Inclusive calendar-date range; ``start == end`` is a valid one-day range."""

    start: date
    end: date

    @model_validator(mode="after")
    def _ordered(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")
        return self

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def as_params(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}

    def within(self, bounds: Optional[DateBounds]) -> bool:
        if bounds is None:
            return True
        lower, upper = parse_iso_date(bounds.min), parse_iso_date(bounds.max)
        if lower is not None and self.start < lower:
            return False
        if upper is not None and self.end > upper:
            return False
        return True


def default_range(bounds: Optional[DateBounds]) -> Optional[DateRange]:
    """The dataset's full span, or ``None`` when the bounds are unknown."""
    if bounds is None:
        return None
    lower, upper = parse_iso_date(bounds.min), parse_iso_date(bounds.max)
    if lower is None or upper is None or lower > upper:
        logger.warning(f"Unusable dataset bounds: {bounds.min!r}..{bounds.max!r}")
        return None
    return DateRange(start=lower, end=upper)


def start_limits(end: str, min_date: Optional[str], max_date: Optional[str]) -> Tuple[str, str]:
    """Selectable ``(min, max)`` for the start input."""
    return (min_date or "", end or max_date or "")


def end_limits(start: str, min_date: Optional[str], max_date: Optional[str]) -> Tuple[str, str]:
    """Selectable ``(min, max)`` for the end input."""
    return (start or min_date or "", max_date or "")


def clamp_iso(value: str, lower: str, upper: str) -> str:
    # ISO dates order lexicographically; empty limits are open.
    if lower and value < lower:
        return lower
    if upper and value > upper:
        return upper
    return value
