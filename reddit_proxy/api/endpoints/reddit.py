"""
Reddit proxy endpoints.

Routes are declared most-specific first so ``/reddit/trending`` and
``/reddit/search`` are never captured by ``/reddit/{sub}``.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from fastapi import APIRouter, Depends, Query

from reddit_proxy.api.dependencies import (
    get_aggregator,
    get_app_settings,
    get_reddit_client,
    get_token_cache,
)
from reddit_proxy.api.errors import ProxyError
from reddit_proxy.config.settings import Settings
from reddit_proxy.core.fanout import SubredditAggregator
from reddit_proxy.core.token_cache import RedditTokenCache
from reddit_proxy.integrations.reddit import RedditAPIClient, UpstreamAPIError, is_valid_subreddit
from reddit_proxy.models.dtos import AggregatedListing, ListingData

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_TICKER_LENGTH = 6


def parse_subs(subs: Optional[str], defaults: List[str]) -> List[str]:
    """Split the comma-separated ``subs`` parameter, falling back to ``defaults``."""
    if subs:
        names = [s.strip() for s in subs.split(",") if s.strip()]
        if names:
            return names
    return list(defaults)


async def require_token(token_cache: RedditTokenCache) -> str:
    token = await token_cache.get_token()
    if not token:
        raise ProxyError(500, "Reddit token unavailable")
    return token


@router.get("", response_model=AggregatedListing)
@router.get("/trending", response_model=AggregatedListing)
async def trending(
    subs: Optional[str] = Query(default=None, description="Comma-separated subreddit names"),
    settings: Settings = Depends(get_app_settings),
    token_cache: RedditTokenCache = Depends(get_token_cache),
    aggregator: SubredditAggregator = Depends(get_aggregator),
) -> AggregatedListing:
    """
    Fetch several subreddits and merge their posts.

    Individual subreddit failures are left out of the result; the response
    is a 200 even if every subreddit failed.
    """
    token = await require_token(token_cache)
    subreddits = parse_subs(subs, settings.REDDIT_DEFAULT_SUBREDDITS)
    children = await aggregator.fetch_all(subreddits, token)
    return AggregatedListing(data=ListingData(children=children))


@router.get("/search")
async def search(
    q: Optional[str] = Query(default=None, description="Ticker symbol, at most 6 characters"),
    token_cache: RedditTokenCache = Depends(get_token_cache),
    client: RedditAPIClient = Depends(get_reddit_client),
) -> Dict[str, Any]:
    """Search Reddit for a ticker cashtag."""
    if not q or len(q) > MAX_TICKER_LENGTH:
        raise ProxyError(400, "Invalid ticker query")

    token = await require_token(token_cache)
    try:
        return await client.search(q, token)
    except UpstreamAPIError as e:
        logger.error(f"Reddit search API error: {e.status_code}")
        raise ProxyError(e.status_code or 502, e.message) from e
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Reddit search failed: {e}")
        raise ProxyError(500, "Reddit search failed") from e


@router.get("/{sub}")
async def single_subreddit(
    sub: str,
    token_cache: RedditTokenCache = Depends(get_token_cache),
    client: RedditAPIClient = Depends(get_reddit_client),
) -> Dict[str, Any]:
    """Return one subreddit listing verbatim, or the upstream error status."""
    if not is_valid_subreddit(sub):
        raise ProxyError(400, "Invalid subreddit name")

    token = await require_token(token_cache)
    try:
        return await client.fetch_listing(sub, token)
    except UpstreamAPIError as e:
        logger.error(f"Reddit API error for /r/{sub}: {e.status_code}")
        raise ProxyError(e.status_code or 502, e.message) from e
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error fetching /r/{sub}: {e}")
        raise ProxyError(500, f"Failed to fetch /r/{sub}") from e
