"""Command-line interface for the Reddit proxy service."""

import asyncio
import json
import logging
from typing import Optional

import httpx
import typer
import uvicorn
from typing_extensions import Annotated

from reddit_proxy.api.endpoints.reddit import parse_subs
from reddit_proxy.config.settings import Settings, get_settings
from reddit_proxy.core.fanout import SubredditAggregator
from reddit_proxy.core.token_cache import RedditTokenCache
from reddit_proxy.integrations.reddit import RedditAPIClient
from reddit_proxy.utils.logging_utils import setup_logging

app = typer.Typer(help="Reddit proxy - Reddit OAuth and SEC EDGAR passthrough API")

logger = logging.getLogger(__name__)


def _report_problems(settings: Settings) -> bool:
    problems = settings.validate_config()
    for problem in problems:
        typer.echo(f"Configuration error: {problem}", err=True)
    return not problems


async def fetch_trending(settings: Settings, subs: Optional[str] = None) -> dict:
    """Run one token exchange and fan-out outside the web server."""
    async with httpx.AsyncClient(timeout=httpx.Timeout(settings.UPSTREAM_TIMEOUT_SECONDS)) as http_client:
        token_cache = RedditTokenCache(
            http_client,
            client_id=settings.REDDIT_CLIENT_ID,
            client_secret=settings.REDDIT_CLIENT_SECRET,
            token_url=settings.REDDIT_TOKEN_URL,
            user_agent=settings.REDDIT_USER_AGENT,
            refresh_margin=settings.TOKEN_REFRESH_MARGIN_SECONDS,
        )
        token = await token_cache.get_token()
        if not token:
            raise RuntimeError("Reddit token unavailable")

        client = RedditAPIClient(
            http_client,
            base_url=settings.REDDIT_API_BASE_URL,
            user_agent=settings.REDDIT_USER_AGENT,
            listing_sort=settings.REDDIT_LISTING_SORT,
            listing_window=settings.REDDIT_LISTING_WINDOW,
            listing_limit=settings.REDDIT_LISTING_LIMIT,
            retry_on_429=settings.RETRY_ON_429,
            retry_cooldown=settings.RETRY_COOLDOWN_SECONDS,
        )
        aggregator = SubredditAggregator(
            client,
            strategy=settings.FANOUT_STRATEGY,
            pacing_seconds=settings.FANOUT_PACING_SECONDS,
            max_concurrency=settings.FANOUT_MAX_CONCURRENCY,
        )
        children = await aggregator.fetch_all(parse_subs(subs, settings.REDDIT_DEFAULT_SUBREDDITS), token)
        return {"data": {"children": children}}


@app.command()
def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address (overrides API_HOST)")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port (overrides API_PORT/PORT)")] = None,
    loglevel: Annotated[Optional[str], typer.Option("--loglevel", "-l", help="Logging level")] = None,
):
    """Run the proxy API server."""
    settings = get_settings()
    setup_logging(log_level=loglevel)
    if not _report_problems(settings):
        raise typer.Exit(code=1)

    bind_host = host or settings.API_HOST
    bind_port = port or settings.API_PORT
    logger.info(f"{settings.APP_NAME} listening on {bind_host}:{bind_port}")
    uvicorn.run("reddit_proxy.api.main:app", host=bind_host, port=bind_port, log_config=None)


@app.command("check-config")
def check_config():
    """Validate configuration and exit non-zero on problems."""
    settings = get_settings()
    if not _report_problems(settings):
        raise typer.Exit(code=1)
    typer.echo("Configuration OK")


@app.command()
def trending(
    subs: Annotated[Optional[str], typer.Option("--subs", "-s", help="Comma-separated subreddits")] = None,
    loglevel: Annotated[str, typer.Option("--loglevel", "-l", help="Logging level")] = "WARNING",
):
    """Fetch trending posts once and print them as JSON."""
    settings = get_settings()
    setup_logging(log_level=loglevel)
    try:
        result = asyncio.run(fetch_trending(settings, subs))
    except RuntimeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(result, indent=2))


if __name__ == "__main__":
    app()
