"""
Configuration settings for the Reddit proxy service.

All settings can be overridden via environment variables or a ``.env`` file
in the project root. Comma-separated list values are accepted for the list
fields and normalised after model initialisation.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Define the root directory of the reddit_proxy package
SERVICE_ROOT_DIR = Path(__file__).parent.parent.resolve()
# Path to the repository root (one level up from the package)
PROJECT_ROOT_DIR = SERVICE_ROOT_DIR.parent

FANOUT_STRATEGIES = ("parallel", "sequential")
INSIDER_TRADES_MODES = ("mock", "live")


def _split_csv(value: Union[str, List[str]]) -> List[str]:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(value)


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "RedditProxyService"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = Field(default=10000, validation_alias=AliasChoices("API_PORT", "PORT"))

    # Logging
    LOG_LEVEL: str = "INFO"
    LOGGING_CONFIG_PATH: str = str(SERVICE_ROOT_DIR / "config" / "logging_config.yaml")

    # Reddit OAuth credentials and endpoints
    REDDIT_CLIENT_ID: str = ""
    REDDIT_CLIENT_SECRET: str = ""
    REDDIT_USER_AGENT: str = "OnlyScans SEC Monitor (support@onlyscans.com)"
    REDDIT_TOKEN_URL: str = "https://www.reddit.com/api/v1/access_token"
    REDDIT_API_BASE_URL: str = "https://oauth.reddit.com"

    # Listing settings
    REDDIT_DEFAULT_SUBREDDITS: Union[str, List[str]] = "pennystocks,Shortsqueeze,SqueezePlays"
    REDDIT_LISTING_SORT: str = "top"
    REDDIT_LISTING_WINDOW: str = "day"
    REDDIT_LISTING_LIMIT: int = 25

    # Token cache: refresh this many seconds before the provider-declared expiry
    TOKEN_REFRESH_MARGIN_SECONDS: int = 120

    # Fan-out settings
    FANOUT_STRATEGY: str = "parallel"
    FANOUT_PACING_SECONDS: float = 1.0
    FANOUT_MAX_CONCURRENCY: int = 10

    # Upstream retry and timeout
    RETRY_ON_429: bool = True
    RETRY_COOLDOWN_SECONDS: float = 3.0
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0

    # CORS
    CORS_ORIGINS: Union[str, List[str]] = "*"
    CORS_ALLOW_METHODS: Union[str, List[str]] = "GET"

    # Inbound rate limiting (per client IP, fixed window)
    RATE_LIMIT_ENABLED: bool = False
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 900

    # Insider trades
    INSIDER_TRADES_MODE: str = "mock"
    SEC_EDGAR_FEED_URL: str = (
        "https://www.sec.gov/cgi-bin/browse-edgar"
        "?action=getcurrent&type=4&owner=only&count=40&output=atom"
    )
    SEC_USER_AGENT: str = "OnlyScans SEC Monitor support@onlyscans.com"
    SEC_FORM_CATEGORY: str = "4"

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def model_post_init(self, __context) -> None:
        """Parse comma-separated strings into lists after model initialization."""
        self.REDDIT_DEFAULT_SUBREDDITS = _split_csv(self.REDDIT_DEFAULT_SUBREDDITS)
        self.CORS_ORIGINS = _split_csv(self.CORS_ORIGINS)
        self.CORS_ALLOW_METHODS = [m.upper() for m in _split_csv(self.CORS_ALLOW_METHODS)]
        self.FANOUT_STRATEGY = self.FANOUT_STRATEGY.lower()
        self.INSIDER_TRADES_MODE = self.INSIDER_TRADES_MODE.lower()

    def validate_config(self) -> List[str]:
        """
        Validate configuration and return a list of validation errors.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.REDDIT_CLIENT_ID:
            errors.append("Missing REDDIT_CLIENT_ID in environment")
        if not self.REDDIT_CLIENT_SECRET:
            errors.append("Missing REDDIT_CLIENT_SECRET in environment")

        if not self.REDDIT_DEFAULT_SUBREDDITS:
            errors.append("REDDIT_DEFAULT_SUBREDDITS must name at least one subreddit")

        if self.FANOUT_STRATEGY not in FANOUT_STRATEGIES:
            errors.append(f"FANOUT_STRATEGY must be one of {', '.join(FANOUT_STRATEGIES)}")
        if self.FANOUT_PACING_SECONDS < 0:
            errors.append("FANOUT_PACING_SECONDS must not be negative")
        if self.FANOUT_MAX_CONCURRENCY <= 0:
            errors.append("FANOUT_MAX_CONCURRENCY must be greater than 0")

        if self.TOKEN_REFRESH_MARGIN_SECONDS < 0:
            errors.append("TOKEN_REFRESH_MARGIN_SECONDS must not be negative")
        if self.UPSTREAM_TIMEOUT_SECONDS <= 0:
            errors.append("UPSTREAM_TIMEOUT_SECONDS must be greater than 0")

        if self.RATE_LIMIT_ENABLED:
            if self.RATE_LIMIT_REQUESTS <= 0:
                errors.append("RATE_LIMIT_REQUESTS must be greater than 0")
            if self.RATE_LIMIT_WINDOW_SECONDS <= 0:
                errors.append("RATE_LIMIT_WINDOW_SECONDS must be greater than 0")

        if self.INSIDER_TRADES_MODE not in INSIDER_TRADES_MODES:
            errors.append(f"INSIDER_TRADES_MODE must be one of {', '.join(INSIDER_TRADES_MODES)}")

        return errors


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Configured settings instance
    """
    return Settings()
