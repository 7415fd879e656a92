"""
Configuration & Settings
Voice of Customer Analyzer
"""

from pydantic import BaseModel
from typing import Optional
import os


class Settings(BaseModel):
    # App
    APP_NAME: str = "Voice of Customer Analyzer"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("VOC_DEBUG", "").lower() in ("1", "true", "yes")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./voc_analyzer.db")

    # Outbound HTTP
    REQUEST_TIMEOUT: int = 10

    # Response cache
    CACHE_TTL_SECONDS: int = 15 * 60

    # Rate limits (per platform, fixed window)
    TWITTER_RATE_LIMIT_MAX: int = 180
    TWITTER_RATE_LIMIT_WINDOW: int = 15 * 60
    TWITTER_DEFAULT_RETRY_AFTER: int = 900
    REDDIT_RATE_LIMIT_MAX: int = 60
    REDDIT_RATE_LIMIT_WINDOW: int = 60
    REDDIT_DEFAULT_RETRY_AFTER: int = 60

    # Twitter / X API v2
    TWITTER_BEARER_TOKEN: Optional[str] = os.getenv("TWITTER_BEARER_TOKEN") or None
    TWITTER_SEARCH_URL: str = "https://api.twitter.com/2/tweets/search/recent"
    TWITTER_SEARCH_WINDOW_HOURS: int = 2
    TWITTER_LANGUAGE: str = "pt"
    TWITTER_COUNTRY: str = "BR"
    TWITTER_MAX_RESULTS: int = 10

    # Reddit API
    REDDIT_CLIENT_ID: Optional[str] = os.getenv("REDDIT_CLIENT_ID") or None
    REDDIT_CLIENT_SECRET: Optional[str] = os.getenv("REDDIT_CLIENT_SECRET") or None
    REDDIT_USER_AGENT: str = os.getenv("REDDIT_USER_AGENT", "VoiceOfCustomer/1.0")
    REDDIT_TOKEN_URL: str = "https://www.reddit.com/api/v1/access_token"
    REDDIT_SEARCH_URL: str = "https://oauth.reddit.com/search"
    REDDIT_SEARCH_LIMIT: int = 25
    REDDIT_TIME_FILTER: str = "day"

    # History
    HISTORY_LIMIT: int = 50

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000


settings = Settings()
