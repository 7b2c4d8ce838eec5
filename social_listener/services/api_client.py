"""
HTTP clients for the two upstream services the dashboard reads from.

Every call is bounded by ``settings.request_timeout`` and is never retried.
Any transport failure (connection error, timeout, non-2xx status, non-JSON
body) is logged and re-raised as ``UpstreamError`` carrying the fixed message
for the panel that made the call.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from social_listener.core.config import settings
from social_listener.core.constants import (
    ASPECTS_ERROR,
    DEFAULT_TWEET_LIMIT,
    META_ERROR,
    SENTIMENT_ERROR,
    SPLIT_ERROR,
    THEMES_ERROR,
    TWEETS_ERROR,
)
from social_listener.core.errors import UpstreamError
from social_listener.schemas.analytics import (
    AspectAvgScores,
    AspectSummary,
    DateBounds,
    MetaResponse,
    SentimentSummary,
    SplitSeries,
    TrendPoint,
    TrendResponse,
)
from social_listener.schemas.common import parse_payload
from social_listener.schemas.themes import ThemesPayload, ThemeTweetsResponse

logger = logging.getLogger(__name__)


class BaseClient:
    """Shared session handling for upstream JSON services."""

    def __init__(self, base_url: str, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = settings.request_timeout if timeout is None else timeout
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": "SocialListener/1.0",
            "Accept": "application/json",
        })

    def _get(self, path: str, message: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``path`` and decode JSON, raising ``UpstreamError(message)`` on failure."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request("GET", url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error(f"Request to {url} failed with status {status}: {e}")
            raise UpstreamError(message, url=url, status_code=status) from e
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise UpstreamError(message, url=url) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Response from {url} is not JSON: {e}")
            raise UpstreamError(message, url=url, status_code=response.status_code) from e


def _range_params(start: str, end: str, **extra: Any) -> Dict[str, Any]:
    params: Dict[str, Any] = {"start": start, "end": end}
    for key, value in extra.items():
        # Sent lowercase, matching what the analytics service parses.
        params[key] = str(value).lower() if isinstance(value, bool) else value
    return params


class AnalyticsClient(BaseClient):
    """Sentiment and aspect aggregates."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        super().__init__(base_url or settings.analytics_api_base, timeout)

    def get_meta(self) -> Optional[DateBounds]:
        data = self._get("/", META_ERROR)
        return parse_payload(MetaResponse, data).date_range

    def get_summary(self, start: str, end: str, message: str = SENTIMENT_ERROR) -> SentimentSummary:
        data = self._get("/sentiment/summary", message, _range_params(start, end))
        return parse_payload(SentimentSummary, data)

    def get_trend(self, start: str, end: str, message: str = SENTIMENT_ERROR) -> List[TrendPoint]:
        data = self._get("/sentiment/trend", message, _range_params(start, end))
        return parse_payload(TrendResponse, data).trend

    def get_aspect_summary(self, start: str, end: str, as_percent: bool = False) -> AspectSummary:
        data = self._get("/aspects/summary", ASPECTS_ERROR, _range_params(start, end, as_percent=as_percent))
        return parse_payload(AspectSummary, data)

    def get_aspect_avg_scores(self, start: str, end: str) -> AspectAvgScores:
        data = self._get("/aspects/avg-scores", ASPECTS_ERROR, _range_params(start, end))
        return parse_payload(AspectAvgScores, data)

    def get_aspect_sentiment_split(self, start: str, end: str, as_percent: bool = False) -> SplitSeries:
        data = self._get("/aspects/sentiment-split", SPLIT_ERROR, _range_params(start, end, as_percent=as_percent))
        return parse_payload(SplitSeries, data)


class ThemesClient(BaseClient):
    """Topic-model themes and their sample tweets."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        super().__init__(base_url or settings.themes_api_base, timeout)

    def get_themes(self) -> ThemesPayload:
        data = self._get("/api/themes", THEMES_ERROR)
        return parse_payload(ThemesPayload, data)

    def get_theme_tweets(self, theme_id: int, limit: int = DEFAULT_TWEET_LIMIT, q: Optional[str] = None) -> ThemeTweetsResponse:
        params: Dict[str, Any] = {"limit": limit}
        if q:
            params["q"] = q
        data = self._get(f"/api/themes/{theme_id}/tweets", TWEETS_ERROR, params)
        return parse_payload(ThemeTweetsResponse, data)
