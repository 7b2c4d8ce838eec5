"""Fixed category orders, display limits and UI messages."""

# Declaration order is display order and the tie-break order for superlatives.
SENTIMENTS = ("positive", "neutral", "negative")
ASPECTS = ("pricing", "delivery", "returns", "staff", "app/ux")

# Filter value meaning "no constraint"
ALL = "all"

SENTIMENT_COLORS = {
    "positive": "#22c55e",
    "neutral": "#facc15",
    "negative": "#ef4444",
}
ASPECT_COLORS = {
    "pricing": "#3b82f6",
    "delivery": "#22c55e",
    "returns": "#f97316",
    "staff": "#a855f7",
    "app/ux": "#ef4444",
}

SUMMARY_LIMIT = 300
ELLIPSIS = "..."
KEYWORD_LIMIT = 8
TWEET_TEXT_LIMIT = 280
PAGE_BUTTONS = 5

# Server-side clamp for the tweet drill-down
MIN_TWEET_LIMIT = 1
MAX_TWEET_LIMIT = 50
DEFAULT_TWEET_LIMIT = 10

MOCK_NOTE = "This is mock data for demonstration purposes"
PAYLOAD_MISSING = "Themes payload file not found"

# Banner texts, one per panel
META_ERROR = "Failed to load metadata"
OVERVIEW_ERROR = "Failed to load data. Is the analytics API running on :8000?"
SENTIMENT_ERROR = "Failed to load sentiment data. Is the analytics API running on :8000?"
ASPECTS_ERROR = "Failed to load aspect data. Is the analytics API running on :8000?"
SPLIT_ERROR = "Failed to load aspect-sentiment data. Is the analytics API running on :8000?"
THEMES_ERROR = "Themes API error. Is the themes service running on :3001?"
TWEETS_ERROR = "Failed to load tweets for this theme."
