"""
Client-side filtering and pagination for the raw data explorer.

Filtering never mutates the source collection and keeps the original relative
order, so both steps are safe to recompute on every keystroke.
"""
import math
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel

from social_listener.core.constants import ALL, ASPECTS, PAGE_BUTTONS, SENTIMENTS
from social_listener.services.metrics import percentage

RecordT = TypeVar("RecordT")


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def matches(
    record: Any,
    search: str = "",
    sentiment: str = ALL,
    aspect: str = ALL,
    text_field: str = "text",
) -> bool:
    text = _field(record, text_field)
    text = text if isinstance(text, str) else ""
    if search and search.lower() not in text.lower():
        return False
    if sentiment != ALL and _field(record, "sentiment_label") != sentiment:
        return False
    if aspect != ALL and _field(record, "aspect_dominant") != aspect:
        return False
    return True


def filter_records(
    records: Sequence[RecordT],
    search: str = "",
    sentiment: str = ALL,
    aspect: str = ALL,
    text_field: str = "text",
) -> List[RecordT]:
    """Records passing a case-insensitive text match and exact category matches.

    ``"all"`` disables a category predicate and an empty search matches everything.
    """
    search = search or ""
    sentiment = sentiment or ALL
    aspect = aspect or ALL
    return [r for r in records or [] if matches(r, search, sentiment, aspect, text_field)]


def total_pages(count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(count / page_size) if count > 0 else 0


class Page(BaseModel, Generic[RecordT]):
    items: List[RecordT]
    page: int
    page_size: int
    total_items: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(records: Sequence[RecordT], page: int, page_size: int) -> Page[RecordT]:
    """Slice ``[(page-1)*page_size, page*page_size)`` clipped to the record count.

    ``page`` is 1-indexed. Callers reset it to 1 whenever a filter changes; a
    stale page beyond the end yields an empty slice rather than an error.
    """
    pages = total_pages(len(records), page_size)
    page = max(1, page)
    start = (page - 1) * page_size
    return Page(
        items=list(records[start:start + page_size]),
        page=page,
        page_size=page_size,
        total_items=len(records),
        total_pages=pages,
    )


def clamp_page(page: int, pages: int) -> int:
    """Keep a previous/next move inside ``[1, pages]``."""
    return min(max(1, page), max(1, pages))


def page_window(pages: int, limit: int = PAGE_BUTTONS) -> List[int]:
    """Page numbers offered as direct buttons."""
    return list(range(1, min(limit, pages) + 1))


class RecordStats(BaseModel):
    total: int
    sentiment_counts: Dict[str, int]
    sentiment_percent: Dict[str, float]
    aspect_counts: Dict[str, int]
    filtered: Optional[int] = None


def record_stats(records: Sequence[Any], filtered: Optional[Sequence[Any]] = None) -> RecordStats:
    records = records or []
    sentiments = {s: sum(1 for r in records if _field(r, "sentiment_label") == s) for s in SENTIMENTS}
    aspects = {a: sum(1 for r in records if _field(r, "aspect_dominant") == a) for a in ASPECTS}
    return RecordStats(
        total=len(records),
        sentiment_counts=sentiments,
        sentiment_percent={s: percentage(n, len(records)) for s, n in sentiments.items()},
        aspect_counts=aspects,
        filtered=len(filtered) if filtered is not None else None,
    )
