"""Plotly figures for the dashboard, built only from normalized series."""
from typing import List, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from social_listener.core.constants import ASPECT_COLORS, SENTIMENT_COLORS, SENTIMENTS
from social_listener.schemas.analytics import SplitSeries, TrendPoint
from social_listener.schemas.common import Number


def aspect_label(aspect: str) -> str:
    """Card label, e.g. ``"app/ux"`` -> ``"App & Ux"``."""
    return aspect.replace("/", " & ").title()


def _title(label: str) -> str:
    return label[:1].upper() + label[1:]


def sentiment_bar(values: Sequence[Number]) -> go.Figure:
    fig = go.Figure(go.Bar(
        x=[_title(s) for s in SENTIMENTS],
        y=list(values),
        name="Tweet Count",
        marker_color=[SENTIMENT_COLORS[s] for s in SENTIMENTS],
    ))
    fig.update_layout(showlegend=False, yaxis_title="Tweets")
    return fig


def sentiment_doughnut(values: Sequence[Number]) -> go.Figure:
    fig = go.Figure(go.Pie(
        labels=[_title(s) for s in SENTIMENTS],
        values=list(values),
        hole=0.4,
        marker_colors=[SENTIMENT_COLORS[s] for s in SENTIMENTS],
        sort=False,
    ))
    fig.update_layout(legend=dict(orientation="h", yanchor="bottom", y=-0.2))
    return fig


def trend_frame(trend: Sequence[TrendPoint]) -> pd.DataFrame:
    """Long-format trend rows, one per (date, sentiment)."""
    rows = [
        {"date": p.date, "sentiment": s, "value": getattr(p, s)}
        for p in trend
        for s in SENTIMENTS
    ]
    return pd.DataFrame(rows, columns=["date", "sentiment", "value"])


def trend_line(trend: Sequence[TrendPoint]) -> go.Figure:
    df = trend_frame(trend)
    fig = px.line(
        df,
        x="date",
        y="value",
        color="sentiment",
        color_discrete_map=SENTIMENT_COLORS,
        category_orders={"sentiment": list(SENTIMENTS)},
        markers=True,
        labels={"value": "% of tweets", "date": "Date"},
    )
    fig.update_yaxes(range=[0, 100], ticksuffix="%")
    return fig


def aspect_bar(labels: Sequence[str], values: Sequence[Number], as_percent: bool = False) -> go.Figure:
    fig = go.Figure(go.Bar(
        x=[label.upper() for label in labels],
        y=list(values),
        name="Aspect Share (%)" if as_percent else "Aspect Count",
        marker_color=[ASPECT_COLORS.get(label, "#95a5a6") for label in labels],
    ))
    if as_percent:
        fig.update_yaxes(ticksuffix="%")
    fig.update_layout(showlegend=False)
    return fig


def aspect_doughnut(labels: Sequence[str], values: Sequence[Number]) -> go.Figure:
    fig = go.Figure(go.Pie(
        labels=[label.upper() for label in labels],
        values=list(values),
        hole=0.4,
        marker_colors=[ASPECT_COLORS.get(label, "#95a5a6") for label in labels],
        sort=False,
    ))
    fig.update_layout(legend=dict(orientation="h", yanchor="bottom", y=-0.2))
    return fig


def split_stacked_bar(split: SplitSeries, as_percent: bool = False) -> go.Figure:
    series = split.percent if as_percent else split.counts
    x = [label.upper() for label in split.labels]
    fig = go.Figure()
    for sentiment in SENTIMENTS:
        values: List[Number] = getattr(series, sentiment)
        fig.add_trace(go.Bar(
            x=x,
            y=values,
            name=f"% {_title(sentiment)}" if as_percent else _title(sentiment),
            marker_color=SENTIMENT_COLORS[sentiment],
        ))
    fig.update_layout(barmode="stack")
    if as_percent:
        fig.update_yaxes(range=[0, 100], ticksuffix="%")
    return fig

