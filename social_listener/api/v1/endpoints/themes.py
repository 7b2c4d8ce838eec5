import logging

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional

from social_listener.core.config import settings
from social_listener.core.constants import DEFAULT_TWEET_LIMIT, MOCK_NOTE
from social_listener.schemas.themes import ThemeTweetsResponse
from social_listener.services.mock_data import clamp_limit, generate_theme_tweets, search_tweets
from social_listener.services.themes import read_themes_payload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["themes"])


@router.get("/themes")
def list_themes():
    """
    List all themes from the topic-model payload file, served as produced.
    """
    try:
        return read_themes_payload(settings.themes_payload_path)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read themes payload: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})


@router.get("/themes/{theme_id}/tweets", response_model=ThemeTweetsResponse)
def get_theme_tweets(
    theme_id: int,
    limit: int = Query(DEFAULT_TWEET_LIMIT),
    q: Optional[str] = Query(None),
):
    """
    Sample tweets for a theme (mock data), optionally filtered by ``q``.
    """
    limit = clamp_limit(limit)
    logger.info(f"Fetching tweets for theme {theme_id}, limit: {limit}")
    try:
        tweets = generate_theme_tweets(theme_id, limit)
        tweets = search_tweets(tweets, q or "")
    except Exception as e:
        logger.exception(f"Error generating tweets for theme {theme_id}")
        return JSONResponse(status_code=500, content={
            "error": str(e),
            "message": "Failed to generate mock tweets",
            "theme": theme_id,
        })

    logger.info(f"Generated {len(tweets)} tweets for theme {theme_id}")
    return ThemeTweetsResponse(theme=theme_id, count=len(tweets), items=tweets, note=MOCK_NOTE)
