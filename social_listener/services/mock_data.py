"""
Mock tweets for the themes drill-down and the raw data explorer.

All randomness comes from an injected ``random.Random`` so that output can be
reproduced in tests or pinned with ``MOCK_SEED``.
"""
import random
import string
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from social_listener.core.config import settings
from social_listener.core.constants import ASPECTS, MAX_TWEET_LIMIT, MIN_TWEET_LIMIT, SENTIMENTS
from social_listener.schemas.themes import RawRecord, TweetRecord

# Built-in catalogue matching the bundled topic-model run.
THEME_CATALOGUE: Dict[int, Dict] = {
    0: {"name": "User Engagement and Experience Insights", "tweet_count": 410,
        "keywords": ["noise", "environment", "clothing", "children"]},
    1: {"name": "Walmart User Feedback Insights", "tweet_count": 364,
        "keywords": ["exclusivity", "fulfillment", "inventory", "delivery"]},
    2: {"name": "User Feedback on Price Concerns", "tweet_count": 349,
        "keywords": ["pricing", "coffee", "increases", "transparency"]},
    3: {"name": "Walmart User Feedback Insights", "tweet_count": 328,
        "keywords": ["support", "online", "fulfillment", "community"]},
    4: {"name": "User Sentiment on Food Products", "tweet_count": 299,
        "keywords": ["quality", "freshness", "availability", "produce"]},
    5: {"name": "User Satisfaction and Engagement Insights", "tweet_count": 635,
        "keywords": ["availability", "reliability", "inventory", "communication"]},
    6: {"name": "Walmart User Experience Insights", "tweet_count": 335,
        "keywords": ["accessibility", "responsiveness", "economy", "community"]},
    7: {"name": "User Feedback on Pricing Issues", "tweet_count": 503,
        "keywords": ["pricing", "gouging", "tariffs", "safety"]},
    8: {"name": "Customer Service and Order Feedback", "tweet_count": 468,
        "keywords": ["responsiveness", "returns", "delivery", "communication"]},
    9: {"name": "User Insights: American & Indian Perspectives", "tweet_count": 394,
        "keywords": ["hiring", "H1B", "management", "diversity"]},
    10: {"name": "Radioactive Shrimp User Feedback", "tweet_count": 95,
         "keywords": ["shrimp", "safety", "FDA", "contamination"]},
    11: {"name": "User Engagement and Feedback Trends", "tweet_count": 820,
         "keywords": ["organization", "security", "placement", "safety"]},
}

TWEET_TEMPLATES = [
    "Just had an amazing experience with {kw} at Walmart! The staff was so helpful and friendly.",
    "Walmart's {kw} service has really improved lately. Much better than before!",
    "Had some issues with {kw} at Walmart today, but they resolved it quickly.",
    "The {kw} at my local Walmart store is always top-notch. Highly recommend!",
    "Walmart's {kw} could use some improvement. Not the best experience today.",
    "Love shopping at Walmart! Their {kw} is exactly what I needed.",
    "Walmart's {kw} policy is very customer-friendly. Great service!",
    "Had to return something due to {kw} issues, but Walmart made it easy.",
    "Walmart's {kw} team went above and beyond to help me today.",
    "The {kw} at Walmart is consistently good. No complaints here!",
]

_STATUS_ALPHABET = string.digits + string.ascii_lowercase
_WINDOW_DAYS = 30


def make_rng(seed: Optional[int] = None, stream: str = "") -> random.Random:
    """Seeded generator per logical stream, or an unseeded one."""
    seed = settings.mock_seed if seed is None else seed
    if seed is None:
        return random.Random()
    return random.Random(f"{seed}:{stream}")


def clamp_limit(limit: int) -> int:
    return max(MIN_TWEET_LIMIT, min(limit, MAX_TWEET_LIMIT))


def _status_url(rng: random.Random) -> str:
    status = "".join(rng.choice(_STATUS_ALPHABET) for _ in range(9))
    return f"https://twitter.com/user/status/{status}"


def _score_for(sentiment: str, rng: random.Random) -> float:
    if sentiment == "positive":
        return round(rng.random() * 0.5 + 0.5, 2)
    if sentiment == "negative":
        return round(rng.random() * 0.5 - 0.5, 2)
    return round(rng.random() * 0.2 - 0.1, 2)


def generate_theme_tweets(
    theme_id: int,
    limit: int = 10,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> List[TweetRecord]:
    """``limit`` mock tweets themed on a catalogue entry (theme 0 if unknown)."""
    rng = rng or make_rng(stream=f"theme-{theme_id}")
    now = now or datetime.now(timezone.utc)
    theme = THEME_CATALOGUE.get(theme_id, THEME_CATALOGUE[0])

    tweets: List[TweetRecord] = []
    for i in range(limit):
        sentiment = rng.choice(SENTIMENTS)
        aspect = rng.choice(ASPECTS)
        keyword = rng.choice(theme["keywords"])
        text = rng.choice(TWEET_TEMPLATES).format(kw=keyword)
        tweets.append(TweetRecord(
            id=f"{theme_id}_{i + 1}",
            twitterurl=_status_url(rng),
            text_clean=text,
            text=text,
            clean_tweet=text,
            sentiment_label=sentiment,
            sentiment_score=_score_for(sentiment, rng),
            aspect_dominant=aspect,
            date=(now - timedelta(days=rng.random() * _WINDOW_DAYS)).date().isoformat(),
            createdat=(now - timedelta(days=rng.random() * _WINDOW_DAYS)).isoformat(),
            lang="en",
            has_url=rng.random() > 0.7,
            has_hashtag=rng.random() > 0.8,
        ))
    return tweets


def search_tweets(tweets: List[TweetRecord], q: str) -> List[TweetRecord]:
    """Case-insensitive substring match across the tweet's text fields."""
    needle = (q or "").strip().lower()
    if not needle:
        return tweets
    return [
        t for t in tweets
        if needle in t.text_clean.lower() or needle in t.text.lower() or needle in t.clean_tweet.lower()
    ]


def generate_raw_records(
    start: date,
    end: date,
    count: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[RawRecord]:
    """Raw explorer rows dated inside ``[start, end]``."""
    count = settings.raw_record_count if count is None else count
    rng = rng or make_rng(stream=f"raw-{start.isoformat()}-{end.isoformat()}")
    span = max((end - start).days, 0)

    records: List[RawRecord] = []
    for i in range(count):
        records.append(RawRecord(
            id=i + 1,
            text=(f"Sample tweet {i + 1} about Walmart shopping experience. "
                  "This is a longer tweet that might contain various sentiments and aspects."),
            created_at=(start + timedelta(days=rng.randint(0, span))).isoformat(),
            sentiment_label=rng.choice(SENTIMENTS),
            sentiment_score=(rng.random() - 0.5) * 2,
            aspect_dominant=rng.choice(ASPECTS),
            twitterurl=_status_url(rng),
            user=f"user{i + 1}",
            retweets=rng.randrange(100),
            likes=rng.randrange(500),
        ))
    return records
