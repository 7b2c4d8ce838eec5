"""
Dashboard UI state as immutable snapshots.

Each user action produces a new ``DashboardState`` through ``reduce``; nothing
mutates a snapshot in place. ``RequestTracker`` tags fetches with a generation
number so a slower, superseded response never overwrites a newer one.
"""
import itertools
import threading
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from social_listener.core.constants import ALL
from social_listener.core.errors import UpstreamError
from social_listener.schemas.analytics import DateBounds
from social_listener.services.dates import (
    DateRange,
    clamp_iso,
    default_range,
    end_limits,
    start_limits,
    to_iso_date,
)
from social_listener.services.records import clamp_page

T = TypeVar("T")

TABS = ("overview", "sentiment", "aspects", "aspect-sentiment", "themes", "raw-data")


class RawDataFilters(BaseModel):
    model_config = ConfigDict(frozen=True)

    search: str = ""
    sentiment: str = ALL
    aspect: str = ALL
    page: int = 1


class DashboardState(BaseModel):
    model_config = ConfigDict(frozen=True)

    active_tab: str = "overview"
    min_date: Optional[str] = None
    max_date: Optional[str] = None
    start: str = ""
    end: str = ""
    filters: RawDataFilters = Field(default_factory=RawDataFilters)
    aspects_as_percent: bool = False
    split_as_percent: bool = False
    active_theme: Optional[int] = None
    # Banner text per panel; a panel's failure never touches another panel.
    errors: Dict[str, str] = Field(default_factory=dict)


class Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class SetTab(Action):
    tab: str


class MetaLoaded(Action):
    min_date: Optional[str] = None
    max_date: Optional[str] = None


class SetStart(Action):
    value: Any = None


class SetEnd(Action):
    value: Any = None


class SetSearch(Action):
    value: str = ""


class SetSentimentFilter(Action):
    value: str = ALL


class SetAspectFilter(Action):
    value: str = ALL


class ClearFilters(Action):
    pass


class SetPage(Action):
    page: int
    total_pages: int


class ToggleAspectsPercent(Action):
    value: bool


class ToggleSplitPercent(Action):
    value: bool


class OpenTheme(Action):
    theme_id: Optional[int] = None


class PanelFailed(Action):
    panel: str
    message: str


class DismissError(Action):
    panel: str


AnyAction = Union[
    SetTab, MetaLoaded, SetStart, SetEnd, SetSearch, SetSentimentFilter, SetAspectFilter,
    ClearFilters, SetPage, ToggleAspectsPercent, ToggleSplitPercent, OpenTheme, PanelFailed,
    DismissError,
]


def _with_filters(state: DashboardState, **changes) -> DashboardState:
    # Any filter or date-range change sends the explorer back to page 1.
    filters = state.filters.model_copy(update={**changes, "page": 1})
    return state.model_copy(update={"filters": filters})


def reduce(state: DashboardState, action: AnyAction) -> DashboardState:
    """Return the snapshot that follows ``state`` after ``action``."""
    if isinstance(action, SetTab):
        if action.tab not in TABS:
            return state
        return state.model_copy(update={"active_tab": action.tab})

    if isinstance(action, MetaLoaded):
        lower, upper = to_iso_date(action.min_date), to_iso_date(action.max_date)
        span = default_range(DateBounds(min=lower or None, max=upper or None))
        start, end = (span.start.isoformat(), span.end.isoformat()) if span else ("", "")
        return state.model_copy(update={
            "min_date": lower or None,
            "max_date": upper or None,
            "start": start,
            "end": end,
        })

    if isinstance(action, SetStart):
        value = to_iso_date(action.value)
        if value:
            value = clamp_iso(value, *start_limits(state.end, state.min_date, state.max_date))
        return _with_filters(state).model_copy(update={"start": value})

    if isinstance(action, SetEnd):
        value = to_iso_date(action.value)
        if value:
            value = clamp_iso(value, *end_limits(state.start, state.min_date, state.max_date))
        return _with_filters(state).model_copy(update={"end": value})

    if isinstance(action, SetSearch):
        return _with_filters(state, search=action.value)
    if isinstance(action, SetSentimentFilter):
        return _with_filters(state, sentiment=action.value or ALL)
    if isinstance(action, SetAspectFilter):
        return _with_filters(state, aspect=action.value or ALL)
    if isinstance(action, ClearFilters):
        return state.model_copy(update={"filters": RawDataFilters()})

    if isinstance(action, SetPage):
        page = clamp_page(action.page, action.total_pages)
        return state.model_copy(update={"filters": state.filters.model_copy(update={"page": page})})

    if isinstance(action, ToggleAspectsPercent):
        return state.model_copy(update={"aspects_as_percent": action.value})
    if isinstance(action, ToggleSplitPercent):
        return state.model_copy(update={"split_as_percent": action.value})
    if isinstance(action, OpenTheme):
        return state.model_copy(update={"active_theme": action.theme_id})

    if isinstance(action, PanelFailed):
        return state.model_copy(update={"errors": {**state.errors, action.panel: action.message}})
    if isinstance(action, DismissError):
        errors = {k: v for k, v in state.errors.items() if k != action.panel}
        return state.model_copy(update={"errors": errors})

    raise TypeError(f"Unknown action: {type(action).__name__}")


def active_range(state: DashboardState) -> Optional[DateRange]:
    """The selected range, or ``None`` while it is incomplete, inverted or outside the dataset."""
    if not state.start or not state.end:
        return None
    try:
        span = DateRange(start=state.start, end=state.end)
    except ValidationError:
        return None
    if not span.within(DateBounds(min=state.min_date, max=state.max_date)):
        return None
    return span


class RequestTracker:
    """Monotonic generation numbers per logical query."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._current: Dict[str, int] = {}
        self._lock = threading.Lock()

    def begin(self, key: str) -> int:
        with self._lock:
            generation = next(self._counter)
            self._current[key] = generation
            return generation

    def is_current(self, key: str, generation: int) -> bool:
        with self._lock:
            return self._current.get(key) == generation


def tracked_fetch(tracker: RequestTracker, panel: str, call: Callable[[], T]) -> Tuple[Optional[T], Optional[Action]]:
    """Run one panel's upstream call under a fresh generation.

    Returns the result and the action to commit for the panel. Both are
    ``None`` when a newer request for the same panel has started meanwhile,
    whether this one succeeded or failed.
    """
    generation = tracker.begin(panel)
    try:
        result = call()
    except UpstreamError as e:
        if not tracker.is_current(panel, generation):
            return None, None
        return None, PanelFailed(panel=panel, message=e.message)
    if not tracker.is_current(panel, generation):
        return None, None
    return result, DismissError(panel=panel)
