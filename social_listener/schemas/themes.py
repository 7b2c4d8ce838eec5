from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional

from social_listener.schemas.common import to_number, valid_items


class Theme(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    # Topic-model output sometimes arrives quote-wrapped, e.g. '"Pricing Concerns"'
    name: Optional[str] = None
    tweet_count: int = 0
    summary: Optional[str] = None
    keywords: Optional[List[str]] = None

    @field_validator("name", "summary", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("tweet_count", mode="before")
    @classmethod
    def _count(cls, v: Any) -> int:
        return int(to_number(v))

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords(cls, v: Any) -> Optional[List[str]]:
        if not isinstance(v, list):
            return None
        return [str(k) for k in v]


class ThemesPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    updated_at: Optional[str] = None
    themes: List[Theme] = Field(default_factory=list)
    error: Optional[str] = None

    @field_validator("updated_at", "error", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("themes", mode="before")
    @classmethod
    def _themes(cls, v: Any) -> List[Theme]:
        return valid_items(Theme, v, "themes")


class TweetRecord(BaseModel):
    """One drill-down item served by the themes service."""

    id: str
    twitterurl: Optional[str] = None
    text_clean: str = ""
    text: str = ""
    clean_tweet: str = ""
    sentiment_label: Optional[str] = None
    sentiment_score: Optional[float] = None
    aspect_dominant: Optional[str] = None
    date: Optional[str] = None
    createdat: Optional[str] = None
    lang: str = "en"
    has_url: bool = False
    has_hashtag: bool = False


class ThemeTweetsResponse(BaseModel):
    theme: int = 0
    count: int = 0
    items: List[TweetRecord] = Field(default_factory=list)
    note: Optional[str] = None

    @field_validator("items", mode="before")
    @classmethod
    def _items(cls, v: Any) -> List[TweetRecord]:
        return valid_items(TweetRecord, v, "items")


class RawRecord(BaseModel):
    """One row of the raw data explorer."""

    id: int
    text: str
    created_at: str
    sentiment_label: str
    sentiment_score: float
    aspect_dominant: str
    twitterurl: Optional[str] = None
    user: Optional[str] = None
    retweets: int = 0
    likes: int = 0
