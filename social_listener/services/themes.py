"""
Theme payload adapter: display cleanup for topic-model output and the
payload loader used by the themes service.
"""
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from social_listener.core.constants import (
    ELLIPSIS,
    KEYWORD_LIMIT,
    PAYLOAD_MISSING,
    SUMMARY_LIMIT,
    TWEET_TEXT_LIMIT,
)
from social_listener.schemas.themes import Theme
from social_listener.services.metrics import round_half_up

logger = logging.getLogger(__name__)

_WRAPPING_QUOTES = re.compile(r'^"+|"+$')


def clean_name(raw: Any) -> str:
    """Strip any run of leading/trailing double quotes, then surrounding whitespace."""
    if raw is None:
        return ""
    text = str(raw)
    if not text:
        return ""
    return _WRAPPING_QUOTES.sub("", text).strip()


def display_name(theme: Theme) -> str:
    return clean_name(theme.name) or f"Theme {theme.id}"


def truncate_summary(text: Optional[str], limit: int = SUMMARY_LIMIT) -> str:
    """Plain character slice plus an ellipsis; not word-boundary aware."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def keyword_display(keywords: Optional[Sequence[str]], limit: int = KEYWORD_LIMIT) -> Tuple[List[str], Optional[str]]:
    """Keywords to show and the ``"+N more"`` indicator, if any were cut."""
    keywords = list(keywords or [])
    shown = keywords[:limit]
    hidden = len(keywords) - len(shown)
    return shown, (f"+{hidden} more" if hidden > 0 else None)


def tweet_text(item: Any, limit: int = TWEET_TEXT_LIMIT) -> str:
    for name in ("text_clean", "clean_tweet", "text"):
        value = item.get(name) if isinstance(item, dict) else getattr(item, name, None)
        if value:
            return str(value)[:limit]
    return ""


class ThemeStats(BaseModel):
    total_themes: int = 0
    total_tweets: int = 0
    avg_tweets: int = 0
    largest: int = 0


def theme_stats(themes: Sequence[Theme]) -> ThemeStats:
    themes = list(themes or [])
    if not themes:
        return ThemeStats()
    counts = [t.tweet_count or 0 for t in themes]
    return ThemeStats(
        total_themes=len(themes),
        total_tweets=sum(counts),
        avg_tweets=int(round_half_up(sum(counts) / len(counts), places=0)),
        largest=max(counts),
    )


def read_themes_payload(path: Path) -> Any:
    """Read the externally produced themes file, returning its JSON as is.

    A missing file is not an error: the payload is empty and carries an
    explanatory ``error`` field. Unreadable or non-JSON files raise.
    Element validation is left to readers of the payload.
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Themes payload not found at {path}")
        return {
            "themes": [],
            "updated_at": datetime.now(timezone.utc).isoformat(),
            "error": PAYLOAD_MISSING,
        }
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)
