import streamlit as st
import requests
import pandas as pd
from datetime import date, timedelta
from typing import Callable, List, Optional, Tuple, TypeVar

from social_listener.core.config import settings
from social_listener.core.constants import (
    ALL,
    ASPECTS,
    OVERVIEW_ERROR,
    SENTIMENT_ERROR,
    SENTIMENTS,
)
from social_listener.core.logging import configure_logging
from social_listener.schemas.analytics import (
    AspectAvgScores,
    AspectSummary,
    DateBounds,
    SentimentSummary,
    SplitSeries,
    TrendPoint,
)
from social_listener.schemas.themes import RawRecord, ThemesPayload, ThemeTweetsResponse
from social_listener.services.api_client import AnalyticsClient, ThemesClient
from social_listener.services.dates import DateRange, parse_iso_date, to_iso_date
from social_listener.services.metrics import (
    aspect_labels,
    avg_score_series,
    argmax,
    normalize_series,
    percent_map,
    sentiment_insight,
    split_summary,
    summarize,
)
from social_listener.services.mock_data import generate_raw_records
from social_listener.services.records import filter_records, page_window, paginate, record_stats
from social_listener.services.state import (
    ClearFilters,
    DashboardState,
    DismissError,
    MetaLoaded,
    OpenTheme,
    RequestTracker,
    SetAspectFilter,
    SetEnd,
    SetPage,
    SetSearch,
    SetSentimentFilter,
    SetStart,
    SetTab,
    ToggleAspectsPercent,
    ToggleSplitPercent,
    active_range,
    reduce,
    tracked_fetch,
)
from social_listener.services.themes import (
    display_name,
    keyword_display,
    theme_stats,
    truncate_summary,
    tweet_text,
)
from social_listener.ui.charts import (
    aspect_bar,
    aspect_doughnut,
    aspect_label,
    sentiment_bar,
    sentiment_doughnut,
    split_stacked_bar,
    trend_line,
)

T = TypeVar("T")

configure_logging(settings.log_level)

# Page configuration
st.set_page_config(
    page_title="Social Listener",
    page_icon="🧠",
    layout="wide",
    initial_sidebar_state="expanded"
)

PAGES = {
    "overview": "📊 Overview",
    "sentiment": "😊 Sentiment Analysis",
    "aspects": "🎯 Aspect Analysis",
    "aspect-sentiment": "📈 Aspect × Sentiment",
    "themes": "📚 Themes & Topics",
    "raw-data": "🔍 Raw Data Explorer",
}
SENTIMENT_EMOJI = {"positive": "😊", "neutral": "😐", "negative": "😞"}
ASPECT_EMOJI = {"pricing": "💰", "delivery": "🚚", "returns": "↩️", "staff": "👥", "app/ux": "📱"}

# Session state: one immutable snapshot, replaced on every action
if "ui_state" not in st.session_state:
    st.session_state.ui_state = DashboardState()
if "tracker" not in st.session_state:
    st.session_state.tracker = RequestTracker()


def current() -> DashboardState:
    return st.session_state.ui_state


def dispatch(action) -> DashboardState:
    st.session_state.ui_state = reduce(st.session_state.ui_state, action)
    return st.session_state.ui_state


def fetch(panel: str, call: Callable[[], T]) -> Optional[T]:
    """Run one panel's upstream call, keeping its failure scoped to that panel."""
    result, action = tracked_fetch(st.session_state.tracker, panel, call)
    if action is not None:
        dispatch(action)
    return result


def error_banner(panel: str) -> None:
    message = current().errors.get(panel)
    if not message:
        return
    col1, col2 = st.columns([6, 1])
    with col1:
        st.error(f"⚠️ {message}")
    with col2:
        if st.button("Dismiss", key=f"dismiss-{panel}"):
            dispatch(DismissError(panel=panel))
            st.rerun()


# ==================== CACHED LOADERS ====================

@st.cache_data(ttl=300, show_spinner=False)
def load_meta(base: str) -> Optional[DateBounds]:
    return AnalyticsClient(base).get_meta()


@st.cache_data(ttl=300, show_spinner=False)
def load_sentiment(base: str, start: str, end: str, message: str) -> Tuple[SentimentSummary, List[TrendPoint]]:
    client = AnalyticsClient(base)
    return client.get_summary(start, end, message), client.get_trend(start, end, message)


@st.cache_data(ttl=300, show_spinner=False)
def load_aspects(base: str, start: str, end: str, as_percent: bool) -> Tuple[AspectSummary, AspectAvgScores]:
    client = AnalyticsClient(base)
    return client.get_aspect_summary(start, end, as_percent), client.get_aspect_avg_scores(start, end)


@st.cache_data(ttl=300, show_spinner=False)
def load_split(base: str, start: str, end: str, as_percent: bool) -> SplitSeries:
    return AnalyticsClient(base).get_aspect_sentiment_split(start, end, as_percent)


@st.cache_data(ttl=300, show_spinner=False)
def load_themes(base: str) -> ThemesPayload:
    return ThemesClient(base).get_themes()


@st.cache_data(ttl=60, show_spinner=False)
def load_theme_tweets(base: str, theme_id: int, q: str) -> ThemeTweetsResponse:
    return ThemesClient(base).get_theme_tweets(theme_id, limit=10, q=q or None)


@st.cache_data(show_spinner=False)
def load_raw_records(start: str, end: str, count: int) -> List[RawRecord]:
    return generate_raw_records(date.fromisoformat(start), date.fromisoformat(end), count)


# ==================== SIDEBAR ====================

st.sidebar.title("⚙️ Configuration")
ANALYTICS_BASE = st.sidebar.text_input("Analytics API URL", settings.analytics_api_base)
THEMES_BASE = st.sidebar.text_input("Themes API URL", settings.themes_api_base)

# Check themes API health
try:
    health_resp = requests.get(f"{THEMES_BASE.rstrip('/')}/health", timeout=5)
    if health_resp.ok:
        st.sidebar.success("✅ Themes API Connected")
    else:
        st.sidebar.error("❌ Themes API Error")
except requests.RequestException:
    st.sidebar.error("❌ Themes API Unreachable")

st.sidebar.markdown("---")
labels = list(PAGES.values())
choice = st.sidebar.radio("Navigate", labels, index=list(PAGES).index(current().active_tab))
dispatch(SetTab(tab=list(PAGES)[labels.index(choice)]))

# Dataset bounds, loaded once per session
if current().min_date is None and "meta_attempted" not in st.session_state:
    st.session_state.meta_attempted = True
    bounds = fetch("meta", lambda: load_meta(ANALYTICS_BASE))
    if bounds is not None:
        dispatch(MetaLoaded(min_date=bounds.min, max_date=bounds.max))

# Main title
st.title("🧠 Walmart Social Listener")
st.markdown("Explore sentiment, aspects and discovered themes across social media conversations")

error_banner("meta")

# ==================== DATE RANGE ====================

state = current()
min_value = parse_iso_date(state.min_date)
max_value = parse_iso_date(state.max_date)
col1, col2, col3 = st.columns([1, 1, 2])
with col1:
    start_value = st.date_input(
        "Start date",
        value=parse_iso_date(state.start),
        min_value=min_value,
        max_value=parse_iso_date(state.end) or max_value,
    )
with col2:
    end_value = st.date_input(
        "End date",
        value=parse_iso_date(state.end),
        min_value=parse_iso_date(state.start) or min_value,
        max_value=max_value,
    )
with col3:
    st.caption(f"Sentiment API: {ANALYTICS_BASE}  \nThemes API: {THEMES_BASE}")

if to_iso_date(start_value) != state.start:
    dispatch(SetStart(value=start_value))
if to_iso_date(end_value) != current().end:
    dispatch(SetEnd(value=end_value))


# ==================== OVERVIEW / SENTIMENT ====================

def sentiment_kpis(summary: SentimentSummary, subtitle: str) -> None:
    stats = summarize(summary, SENTIMENTS)
    total = summary.total or stats.total
    cols = st.columns(4)
    with cols[0]:
        st.metric("📊 Total Tweets", f"{total:,}")
        st.caption(subtitle)
    for col, sentiment in zip(cols[1:], SENTIMENTS):
        with col:
            st.metric(f"{SENTIMENT_EMOJI[sentiment]} {sentiment.title()} Sentiment", f"{stats.percent[sentiment]}%")
            st.caption(f"{stats.counts[sentiment]:,} tweets")


def render_trend(trend: List[TrendPoint]) -> None:
    if trend:
        st.plotly_chart(trend_line(trend), use_container_width=True)
    else:
        st.info("No trend data for this date range")


def overview_page(span: DateRange) -> None:
    start, end = span.as_params()["start"], span.as_params()["end"]
    data = fetch("overview", lambda: load_sentiment(ANALYTICS_BASE, start, end, OVERVIEW_ERROR))
    error_banner("overview")
    if data is None:
        return
    summary, trend = data

    sentiment_kpis(summary, f"From {start} to {end}")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Sentiment Distribution")
        st.plotly_chart(sentiment_bar(normalize_series(summary, SENTIMENTS)), use_container_width=True)
    with col2:
        st.subheader("Daily Sentiment Trend")
        render_trend(trend)

    st.subheader("Analysis Summary")
    percent = summarize(summary, SENTIMENTS).percent
    for col, sentiment in zip(st.columns(3), SENTIMENTS):
        with col:
            st.metric(f"{sentiment.title()} Sentiment", f"{percent[sentiment]}%")
            st.caption(sentiment_insight(sentiment, percent[sentiment]))


def sentiment_page(span: DateRange) -> None:
    start, end = span.as_params()["start"], span.as_params()["end"]
    data = fetch("sentiment", lambda: load_sentiment(ANALYTICS_BASE, start, end, SENTIMENT_ERROR))
    error_banner("sentiment")
    if data is None:
        return
    summary, trend = data
    stats = summarize(summary, SENTIMENTS)

    sentiment_kpis(summary, "Sentiment classified")
    if not stats.total:
        st.info("No tweets in this date range")
        return

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Sentiment Distribution (Count)")
        st.plotly_chart(sentiment_bar(normalize_series(summary, SENTIMENTS)), use_container_width=True)
    with col2:
        st.subheader("Sentiment Distribution (Percentage)")
        st.plotly_chart(sentiment_doughnut(normalize_series(summary, SENTIMENTS)), use_container_width=True)

    st.subheader("Daily Sentiment Trend")
    render_trend(trend)

    st.subheader("Sentiment Insights")
    for col, sentiment in zip(st.columns(3), SENTIMENTS):
        with col:
            st.metric(f"{sentiment.title()} Sentiment", f"{stats.percent[sentiment]}%")
            st.caption(sentiment_insight(sentiment, stats.percent[sentiment], detailed=True))
    st.markdown(
        f"Most common sentiment: **{stats.top}** · least common: **{stats.bottom}**"
    )


# ==================== ASPECTS ====================

def aspects_page(span: DateRange) -> None:
    start, end = span.as_params()["start"], span.as_params()["end"]
    as_percent = st.checkbox("Show as percentage", value=current().aspects_as_percent)
    if as_percent != current().aspects_as_percent:
        dispatch(ToggleAspectsPercent(value=as_percent))

    data = fetch("aspects", lambda: load_aspects(ANALYTICS_BASE, start, end, as_percent))
    error_banner("aspects")
    if data is None:
        return
    summary, scores = data

    stats = summarize(summary.counts, ASPECTS)
    percent = percent_map(summary.counts, ASPECTS)
    avg_scores = dict(zip(ASPECTS, avg_score_series(scores, ASPECTS)))

    def aspect_value(aspect: str) -> str:
        return f"{percent[aspect]}%" if as_percent else f"{stats.counts[aspect]:,}"

    cols = st.columns(len(ASPECTS) + 1)
    with cols[0]:
        st.metric("📊 Total Tweets", f"{summary.total or stats.total:,}")
        st.caption("With aspect analysis")
    for col, aspect in zip(cols[1:], ASPECTS):
        with col:
            st.metric(f"{ASPECT_EMOJI[aspect]} {aspect_label(aspect)}", aspect_value(aspect))
            st.caption("of all aspects" if as_percent else "mentions")

    labels = aspect_labels(summary)
    values = normalize_series(summary, labels)
    col1, col2 = st.columns(2)
    with col1:
        st.subheader(f"Aspect Distribution {'(Percentage)' if as_percent else '(Count)'}")
        st.plotly_chart(aspect_bar(labels, values, as_percent), use_container_width=True)
    with col2:
        st.subheader("Aspect Distribution (Pie)")
        st.plotly_chart(aspect_doughnut(labels, values), use_container_width=True)

    st.subheader("Aspect Analysis Details")
    details = pd.DataFrame([{
        "Aspect": aspect_label(aspect),
        "Mentions": stats.counts[aspect],
        "Share (%)": percent[aspect],
        "Avg Score": round(avg_scores[aspect], 2),
    } for aspect in ASPECTS])
    st.dataframe(details, use_container_width=True, hide_index=True)

    st.subheader("Aspect Insights")
    top = argmax(percent, ASPECTS) if stats.total else None
    for aspect in ASPECTS:
        star = " ⭐" if aspect == top else ""
        st.markdown(
            f"**{aspect_label(aspect)}{star}** · {stats.counts[aspect]:,} mentions "
            f"({percent[aspect]}% of all aspects)"
        )


def aspect_sentiment_page(span: DateRange) -> None:
    start, end = span.as_params()["start"], span.as_params()["end"]
    as_percent = st.checkbox("Show as percentage", value=current().split_as_percent, key="split-percent")
    if as_percent != current().split_as_percent:
        dispatch(ToggleSplitPercent(value=as_percent))

    split = fetch("aspect-sentiment", lambda: load_split(ANALYTICS_BASE, start, end, as_percent))
    error_banner("aspect-sentiment")
    if split is None:
        return
    summary = split_summary(split)

    cols = st.columns(4)
    with cols[0]:
        st.metric("📊 Total Mentions", f"{summary.total:,}")
        st.caption("Across all aspects")
    for col, sentiment in zip(cols[1:], SENTIMENTS):
        with col:
            value = f"{summary.percent[sentiment]}%" if as_percent else f"{summary.totals[sentiment]:,}"
            st.metric(f"{SENTIMENT_EMOJI[sentiment]} {sentiment.title()} Mentions", value)
            st.caption("of all mentions" if as_percent else "total mentions")

    st.subheader(f"Aspect × Sentiment Analysis {'(Percentage)' if as_percent else '(Count)'}")
    if not split.labels:
        st.info("No aspect mentions in this date range")
        return
    st.plotly_chart(split_stacked_bar(split, as_percent), use_container_width=True)

    st.subheader("Aspect Breakdown")
    for row in summary.aspects:
        with st.container():
            st.markdown(f"**{aspect_label(row.aspect)}** · {row.total:,} mentions")
            for sentiment in SENTIMENTS:
                pct = getattr(row, f"{sentiment}_pct")
                st.progress(min(pct / 100, 1.0), text=f"{sentiment.title()}: {pct}%")

    st.subheader("Insights")
    col1, col2 = st.columns(2)
    with col1:
        if summary.most_positive:
            st.success(
                f"😊 Most positive aspect: **{aspect_label(summary.most_positive.aspect)}** "
                f"({summary.most_positive.positive_pct}% positive sentiment)"
            )
    with col2:
        if summary.most_negative:
            st.error(
                f"😞 Most negative aspect: **{aspect_label(summary.most_negative.aspect)}** "
                f"({summary.most_negative.negative_pct}% negative sentiment)"
            )


# ==================== THEMES ====================

def themes_page() -> None:
    st.markdown(
        "Unsupervised topic modeling results from your social media data. "
        "Each theme represents a cluster of related conversations."
    )
    payload = fetch("themes", lambda: load_themes(THEMES_BASE))
    error_banner("themes")
    if payload is None:
        return
    if payload.updated_at:
        st.caption(f"Last updated: {payload.updated_at}")
    if not payload.themes:
        st.info("No themes have been generated yet. Make sure your topic modeling pipeline has been run.")
        return

    stats = theme_stats(payload.themes)
    cols = st.columns(4)
    cols[0].metric("📚 Total Themes", stats.total_themes)
    cols[1].metric("🐦 Total Tweets", f"{stats.total_tweets:,}")
    cols[2].metric("📊 Avg Tweets/Theme", f"{stats.avg_tweets:,}")
    cols[3].metric("🎯 Largest Theme", f"{stats.largest:,}")

    for theme in payload.themes:
        with st.container(border=True):
            col1, col2 = st.columns([5, 1])
            with col1:
                st.markdown(f"#### {display_name(theme)}")
                st.caption(f"{theme.tweet_count} tweets · Theme ID: {theme.id}")
            with col2:
                if st.button("View Tweets", key=f"theme-{theme.id}"):
                    dispatch(OpenTheme(theme_id=theme.id))
            st.write(truncate_summary(theme.summary) or "No summary available")
            shown, more = keyword_display(theme.keywords)
            if shown:
                st.markdown(" ".join(f"`{k}`" for k in shown) + (f"  _{more}_" if more else ""))

    theme_id = current().active_theme
    if theme_id is None:
        return

    st.markdown("---")
    col1, col2 = st.columns([5, 1])
    with col1:
        st.subheader(f"Theme {theme_id}: Sample Tweets")
    with col2:
        if st.button("Close", key="close-theme"):
            dispatch(OpenTheme(theme_id=None))
            st.rerun()
    q = st.text_input("Filter tweets", key="theme-q")
    with st.spinner("Loading tweets..."):
        tweets = fetch("tweets", lambda: load_theme_tweets(THEMES_BASE, theme_id, q))
    error_banner("tweets")
    if tweets is None:
        return
    if not tweets.items:
        st.info("No tweets found for this theme.")
        return
    for item in tweets.items:
        meta = " · ".join(x for x in [
            item.sentiment_label or "",
            f"score {item.sentiment_score:.2f}" if item.sentiment_score is not None else "",
            item.aspect_dominant or "",
        ] if x)
        st.markdown(f"**{meta}**  \n{tweet_text(item)}")
        if item.twitterurl:
            st.markdown(f"[View Original Tweet →]({item.twitterurl})")
    if tweets.note:
        st.caption(tweets.note)


# ==================== RAW DATA ====================

def raw_data_page(span: DateRange) -> None:
    st.markdown("Browse individual tweets and explore the raw data from your sentiment analysis pipeline.")
    records = load_raw_records(span.start.isoformat(), span.end.isoformat(), settings.raw_record_count)
    filters = current().filters

    col1, col2, col3, col4 = st.columns([3, 2, 2, 1])
    with col1:
        search = st.text_input("Search", value=filters.search, placeholder="Search in tweet text...")
    with col2:
        sentiment_options = [ALL, *SENTIMENTS]
        sentiment = st.selectbox(
            "Sentiment", sentiment_options, index=sentiment_options.index(filters.sentiment),
            format_func=lambda s: "All Sentiments" if s == ALL else s.title(),
        )
    with col3:
        aspect_options = [ALL, *ASPECTS]
        aspect = st.selectbox(
            "Aspect", aspect_options, index=aspect_options.index(filters.aspect),
            format_func=lambda a: "All Aspects" if a == ALL else a.title(),
        )
    with col4:
        if st.button("Clear Filters"):
            dispatch(ClearFilters())
            st.rerun()

    if search != filters.search:
        dispatch(SetSearch(value=search))
    if sentiment != current().filters.sentiment:
        dispatch(SetSentimentFilter(value=sentiment))
    if aspect != current().filters.aspect:
        dispatch(SetAspectFilter(value=aspect))
    filters = current().filters

    filtered = filter_records(records, filters.search, filters.sentiment, filters.aspect)
    stats = record_stats(records, filtered)
    cols = st.columns(5)
    cols[0].metric("📊 Total Tweets", f"{stats.total:,}")
    for col, s in zip(cols[1:4], SENTIMENTS):
        col.metric(f"{SENTIMENT_EMOJI[s]} {s.title()}", f"{stats.sentiment_counts[s]:,}",
                   f"{stats.sentiment_percent[s]}%", delta_color="off")
    cols[4].metric("🔍 Filtered Results", f"{stats.filtered:,}")

    page = paginate(filtered, filters.page, settings.page_size)
    st.subheader(f"Tweets ({page.total_items} results)")
    if not page.items:
        st.info("No tweets match the current filters")
        return
    st.caption(f"Page {page.page} of {page.total_pages}")

    df = pd.DataFrame([r.model_dump() for r in page.items])
    st.dataframe(
        df[["id", "created_at", "sentiment_label", "aspect_dominant", "sentiment_score", "user", "text", "twitterurl"]],
        use_container_width=True,
        hide_index=True,
        column_config={
            "sentiment_score": st.column_config.NumberColumn("Score", format="%.2f"),
            "twitterurl": st.column_config.LinkColumn("Tweet"),
        },
    )

    if page.total_pages > 1:
        buttons = page_window(page.total_pages)
        cols = st.columns(len(buttons) + 2)
        if cols[0].button("Previous", disabled=not page.has_previous):
            dispatch(SetPage(page=page.page - 1, total_pages=page.total_pages))
            st.rerun()
        for col, number in zip(cols[1:-1], buttons):
            if col.button(str(number), key=f"page-{number}", type="primary" if number == page.page else "secondary"):
                dispatch(SetPage(page=number, total_pages=page.total_pages))
                st.rerun()
        if cols[-1].button("Next", disabled=not page.has_next):
            dispatch(SetPage(page=page.page + 1, total_pages=page.total_pages))
            st.rerun()


# ==================== ROUTING ====================

active = current().active_tab
st.header(PAGES[active])

if active == "themes":
    themes_page()
else:
    span = active_range(current())
    if span is None and active == "raw-data":
        # No dataset bounds yet; browse the last 30 days
        today = date.today()
        span = DateRange(start=today - timedelta(days=30), end=today)
    if span is None:
        st.info("👆 Select a date range to load data")
    elif active == "overview":
        overview_page(span)
    elif active == "sentiment":
        sentiment_page(span)
    elif active == "aspects":
        aspects_page(span)
    elif active == "aspect-sentiment":
        aspect_sentiment_page(span)
    else:
        raw_data_page(span)

# Footer
st.markdown("---")
st.markdown(
    """
    <div style="text-align: center; color: #666;">
        <p>Social Listener | Built with FastAPI, Streamlit and Plotly</p>
    </div>
    """,
    unsafe_allow_html=True
)
