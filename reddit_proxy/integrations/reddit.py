"""
Reddit OAuth API client.

Builds listing and search URLs, attaches the bearer token and User-Agent,
and retries a single time after a 429 response.
"""

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

SUBREDDIT_NAME_RE = re.compile(r"^[A-Za-z0-9_]{2,21}$")


def is_valid_subreddit(name: str) -> bool:
    return bool(SUBREDDIT_NAME_RE.match(name or ""))


class InvalidSubredditError(ValueError):
    """Raised for a subreddit name that could escape the ``/r/<name>`` path."""

    def __init__(self, subreddit: str):
        self.subreddit = subreddit
        super().__init__(f"Invalid subreddit name: {subreddit!r}")


class UpstreamAPIError(Exception):
    """Raised when Reddit answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class RedditAPIClient:
    """Thin async wrapper around the Reddit listing and search endpoints."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = "https://oauth.reddit.com",
        user_agent: str = "OnlyScans SEC Monitor (support@onlyscans.com)",
        listing_sort: str = "top",
        listing_window: str = "day",
        listing_limit: int = 25,
        retry_on_429: bool = True,
        retry_cooldown: float = 3.0,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize the Reddit API client.

        Args:
            http_client: Shared async HTTP client
            base_url: OAuth API host
            user_agent: User-Agent sent with every request
            listing_sort: Listing sort used for subreddit fetches (top, hot, new, ...)
            listing_window: Time window for ``top`` listings
            listing_limit: Number of posts per listing
            retry_on_429: Retry once after a 429 response
            retry_cooldown: Seconds to wait before that retry
            sleep: Awaitable sleep used for the cooldown
        """
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.listing_sort = listing_sort
        self.listing_window = listing_window
        self.listing_limit = listing_limit
        self.retry_on_429 = retry_on_429
        self.retry_cooldown = retry_cooldown
        self._sleep = sleep

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "User-Agent": self.user_agent,
        }

    def listing_url(self, subreddit: str) -> str:
        if not is_valid_subreddit(subreddit):
            raise InvalidSubredditError(subreddit)
        return f"{self.base_url}/r/{subreddit}/{self.listing_sort}"

    def listing_params(self) -> Dict[str, Any]:
        return {"t": self.listing_window, "limit": self.listing_limit}

    async def safe_get(
        self, url: str, token: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        """
        GET ``url`` with auth headers, retrying once after a 429.

        Transport errors propagate as ``httpx.HTTPError``.
        """
        retries = 1 if self.retry_on_429 else 0
        while True:
            response = await self.http_client.get(url, params=params, headers=self._headers(token))
            if response.status_code == 429 and retries > 0:
                logger.warning(f"429 received, retrying after {self.retry_cooldown}s ({url})")
                await self._sleep(self.retry_cooldown)
                retries -= 1
                continue
            return response

    async def _get_json(
        self, url: str, token: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        response = await self.safe_get(url, token, params=params)
        if not response.is_success:
            raise UpstreamAPIError(f"Reddit API error: {response.status_code}", response.status_code)
        return response.json()

    async def fetch_listing(self, subreddit: str, token: str) -> Dict[str, Any]:
        """
        Fetch one subreddit listing.

        Args:
            subreddit: Subreddit name without the ``r/`` prefix
            token: Bearer token

        Returns:
            The listing payload exactly as Reddit returned it

        Raises:
            InvalidSubredditError: If ``subreddit`` is not a plain subreddit name
            UpstreamAPIError: If Reddit answers with a non-success status
            httpx.HTTPError: On transport failure
        """
        return await self._get_json(self.listing_url(subreddit), token, params=self.listing_params())

    async def search(self, query: str, token: str) -> Dict[str, Any]:
        """
        Search all of Reddit for a cashtag (``$QUERY``), top results first.

        Raises:
            UpstreamAPIError: If Reddit answers with a non-success status
            httpx.HTTPError: On transport failure
        """
        params = {
            "q": f"${query}",
            "sort": "top",
            "limit": self.listing_limit,
            "restrict_sr": "false",
        }
        return await self._get_json(f"{self.base_url}/search.json", token, params=params)
