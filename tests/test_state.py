from datetime import date

import pytest

from social_listener.core.errors import UpstreamError
from social_listener.services.state import (
    ClearFilters,
    DashboardState,
    DismissError,
    MetaLoaded,
    OpenTheme,
    PanelFailed,
    RequestTracker,
    SetAspectFilter,
    SetEnd,
    SetPage,
    SetSearch,
    SetSentimentFilter,
    SetStart,
    SetTab,
    ToggleSplitPercent,
    active_range,
    reduce,
    tracked_fetch,
)


@pytest.fixture
def loaded():
    return reduce(DashboardState(), MetaLoaded(min_date="2024-01-01", max_date="2024-01-31"))


def test_meta_sets_full_range(loaded):
    assert (loaded.start, loaded.end) == ("2024-01-01", "2024-01-31")
    assert (loaded.min_date, loaded.max_date) == ("2024-01-01", "2024-01-31")


def test_meta_without_bounds():
    state = reduce(DashboardState(), MetaLoaded())
    assert state.min_date is None and state.start == ""


def test_reduce_never_mutates(loaded):
    after = reduce(loaded, SetSearch(value="late"))
    assert loaded.filters.search == ""
    assert after.filters.search == "late"


def test_start_is_clamped_to_bounds_and_end(loaded):
    state = reduce(loaded, SetEnd(value="2024-01-20"))
    assert reduce(state, SetStart(value="2023-12-01")).start == "2024-01-01"
    assert reduce(state, SetStart(value="2024-01-25")).start == "2024-01-20"
    assert reduce(state, SetStart(value=date(2024, 1, 10))).start == "2024-01-10"


def test_end_is_clamped_to_start_and_bounds(loaded):
    state = reduce(loaded, SetStart(value="2024-01-10"))
    assert reduce(state, SetEnd(value="2024-01-05")).end == "2024-01-10"
    assert reduce(state, SetEnd(value="2024-02-15")).end == "2024-01-31"


def test_single_day_range_allowed(loaded):
    state = reduce(reduce(loaded, SetStart(value="2024-01-15")), SetEnd(value="2024-01-15"))
    assert state.start == state.end == "2024-01-15"


def test_unparsable_date_clears_field(loaded):
    assert reduce(loaded, SetStart(value="garbage")).start == ""


@pytest.mark.parametrize("action", [
    SetSearch(value="refund"),
    SetSentimentFilter(value="negative"),
    SetAspectFilter(value="returns"),
    SetStart(value="2024-01-05"),
    SetEnd(value="2024-01-25"),
])
def test_filter_and_range_changes_reset_page(loaded, action):
    paged = reduce(loaded, SetPage(page=4, total_pages=5))
    assert paged.filters.page == 4
    assert reduce(paged, action).filters.page == 1


def test_empty_filter_means_all(loaded):
    state = reduce(loaded, SetSentimentFilter(value=""))
    assert state.filters.sentiment == "all"


def test_clear_filters(loaded):
    state = reduce(reduce(loaded, SetSearch(value="x")), SetAspectFilter(value="staff"))
    cleared = reduce(state, ClearFilters())
    assert cleared.filters.search == "" and cleared.filters.aspect == "all"
    assert cleared.start == loaded.start


@pytest.mark.parametrize("page, total_pages, expected", [(3, 5, 3), (9, 5, 5), (0, 5, 1), (2, 0, 1)])
def test_set_page_clamps(loaded, page, total_pages, expected):
    assert reduce(loaded, SetPage(page=page, total_pages=total_pages)).filters.page == expected


def test_tabs(loaded):
    assert reduce(loaded, SetTab(tab="themes")).active_tab == "themes"
    assert reduce(loaded, SetTab(tab="nope")).active_tab == "overview"


def test_panel_errors_are_independent(loaded):
    state = reduce(loaded, PanelFailed(panel="aspects", message="aspects down"))
    state = reduce(state, PanelFailed(panel="themes", message="themes down"))
    assert state.errors == {"aspects": "aspects down", "themes": "themes down"}

    state = reduce(state, DismissError(panel="aspects"))
    assert state.errors == {"themes": "themes down"}


def test_toggles_and_theme(loaded):
    state = reduce(reduce(loaded, ToggleSplitPercent(value=True)), OpenTheme(theme_id=3))
    assert state.split_as_percent and not state.aspects_as_percent
    assert state.active_theme == 3
    assert reduce(state, OpenTheme()).active_theme is None


def test_unknown_action(loaded):
    with pytest.raises(TypeError):
        reduce(loaded, object())


def test_request_tracker_drops_superseded_responses():
    tracker = RequestTracker()
    first = tracker.begin("summary")
    second = tracker.begin("summary")
    other = tracker.begin("trend")
    assert not tracker.is_current("summary", first)
    assert tracker.is_current("summary", second)
    assert tracker.is_current("trend", other)
    assert not tracker.is_current("missing", 1)


@pytest.mark.parametrize("lower, upper", [("2024-01-31", "2024-01-01"), ("2024-01-01", None)])
def test_meta_with_unusable_bounds_leaves_range_empty(lower, upper):
    state = reduce(DashboardState(), MetaLoaded(min_date=lower, max_date=upper))
    assert (state.start, state.end) == ("", "")
    assert active_range(state) is None


def test_active_range(loaded):
    span = active_range(loaded)
    assert (span.start, span.end) == (date(2024, 1, 1), date(2024, 1, 31))
    assert span.days == 31


def test_active_range_rejects_incomplete_or_out_of_bounds(loaded):
    assert active_range(loaded.model_copy(update={"end": ""})) is None
    assert active_range(loaded.model_copy(update={"start": "2024-01-20", "end": "2024-01-10"})) is None
    assert active_range(loaded.model_copy(update={"end": "2024-02-10"})) is None


def test_tracked_fetch_success_clears_banner():
    result, action = tracked_fetch(RequestTracker(), "summary", lambda: {"total": 3})
    assert result == {"total": 3}
    assert action == DismissError(panel="summary")


def test_tracked_fetch_failure_raises_banner():
    def failing():
        raise UpstreamError("analytics down")

    assert tracked_fetch(RequestTracker(), "summary", failing) == (None, PanelFailed(panel="summary", message="analytics down"))


def test_superseded_failure_is_discarded():
    tracker = RequestTracker()
    newer = []

    def slow_failing():
        # A newer request for the same panel completes while this one is in flight.
        newer.append(tracked_fetch(tracker, "summary", lambda: "fresh"))
        raise UpstreamError("stale failure")

    assert tracked_fetch(tracker, "summary", slow_failing) == (None, None)
    assert newer == [("fresh", DismissError(panel="summary"))]


def test_superseded_success_is_discarded():
    tracker = RequestTracker()

    def slow():
        tracked_fetch(tracker, "summary", lambda: "fresh")
        return "stale"

    assert tracked_fetch(tracker, "summary", slow) == (None, None)
