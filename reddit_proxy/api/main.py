"""
FastAPI application for the Reddit proxy service.

This module wires the shared HTTP client, token cache, Reddit client, fan-out
aggregator and EDGAR client into a FastAPI application.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reddit_proxy.api.endpoints import insider_trades, reddit
from reddit_proxy.api.errors import register_exception_handlers
from reddit_proxy.api.middleware import RateLimitMiddleware
from reddit_proxy.config.settings import Settings, get_settings
from reddit_proxy.core.fanout import SubredditAggregator
from reddit_proxy.core.rate_limiter import FixedWindowRateLimiter
from reddit_proxy.core.token_cache import RedditTokenCache
from reddit_proxy.integrations.reddit import RedditAPIClient
from reddit_proxy.integrations.sec_edgar import SecEdgarClient
from reddit_proxy.models.dtos import HealthResponse

logger = logging.getLogger(__name__)


def build_services(app: FastAPI, settings: Settings, http_client: httpx.AsyncClient) -> None:
    """Create the per-application services and attach them to ``app.state``."""
    reddit_client = RedditAPIClient(
        http_client,
        base_url=settings.REDDIT_API_BASE_URL,
        user_agent=settings.REDDIT_USER_AGENT,
        listing_sort=settings.REDDIT_LISTING_SORT,
        listing_window=settings.REDDIT_LISTING_WINDOW,
        listing_limit=settings.REDDIT_LISTING_LIMIT,
        retry_on_429=settings.RETRY_ON_429,
        retry_cooldown=settings.RETRY_COOLDOWN_SECONDS,
    )
    app.state.http_client = http_client
    app.state.token_cache = RedditTokenCache(
        http_client,
        client_id=settings.REDDIT_CLIENT_ID,
        client_secret=settings.REDDIT_CLIENT_SECRET,
        token_url=settings.REDDIT_TOKEN_URL,
        user_agent=settings.REDDIT_USER_AGENT,
        refresh_margin=settings.TOKEN_REFRESH_MARGIN_SECONDS,
    )
    app.state.reddit_client = reddit_client
    app.state.aggregator = SubredditAggregator(
        reddit_client,
        strategy=settings.FANOUT_STRATEGY,
        pacing_seconds=settings.FANOUT_PACING_SECONDS,
        max_concurrency=settings.FANOUT_MAX_CONCURRENCY,
    )
    app.state.sec_client = SecEdgarClient(
        http_client,
        mode=settings.INSIDER_TRADES_MODE,
        feed_url=settings.SEC_EDGAR_FEED_URL,
        user_agent=settings.SEC_USER_AGENT,
        category=settings.SEC_FORM_CATEGORY,
    )


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the cached environment settings
        transport: Optional transport for the outbound HTTP client

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        for problem in settings.validate_config():
            logger.warning(f"Configuration problem: {problem}")

        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.UPSTREAM_TIMEOUT_SECONDS),
            transport=transport,
        )
        try:
            build_services(app, settings, http_client)
        except ValueError as e:
            logger.error(f"Invalid configuration, refusing to start: {e}")
            await http_client.aclose()
            raise
        try:
            yield
        finally:
            logger.info("Shutting down application")
            await http_client.aclose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Proxy for the Reddit OAuth API and SEC EDGAR insider filings.",
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )
    app.state.settings = settings

    # CORS is added last so it wraps the rate limiter
    if settings.RATE_LIMIT_ENABLED:
        app.state.rate_limiter = FixedWindowRateLimiter(
            max_requests=settings.RATE_LIMIT_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        )
        app.add_middleware(RateLimitMiddleware, limiter=app.state.rate_limiter)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(reddit.router, prefix="/reddit", tags=["reddit"])
    app.include_router(insider_trades.router, prefix="/api", tags=["insider-trades"])

    @app.get("/health", tags=["health"], response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Report service status and the active configuration choices."""
        return HealthResponse(
            status="healthy",
            service=settings.APP_NAME,
            version=settings.APP_VERSION,
            timestamp=datetime.now(timezone.utc).isoformat(),
            insider_trades_mode=settings.INSIDER_TRADES_MODE,
            fanout_strategy=settings.FANOUT_STRATEGY,
            rate_limit_enabled=settings.RATE_LIMIT_ENABLED,
        )

    return app


# Create the application instance
app = create_app()
