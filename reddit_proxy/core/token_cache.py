"""OAuth token cache for the Reddit API (client-credentials grant)."""

import asyncio
import base64
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class Credential:
    """A bearer token and the absolute time (epoch seconds) it stops being served."""

    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class RedditTokenCache:
    """
    Obtains and caches an application-only bearer token from Reddit.

    The token is refreshed ``refresh_margin`` seconds before the lifetime
    declared by Reddit runs out, so a request never starts with a token that
    expires mid-flight. Failures are reported as ``None``; they never raise
    past :meth:`get_token`.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        token_url: str,
        user_agent: str,
        refresh_margin: float = 120.0,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the token cache.

        Args:
            http_client: Shared async HTTP client
            client_id: Reddit application client ID
            client_secret: Reddit application client secret
            token_url: OAuth access token endpoint
            user_agent: User-Agent sent with the exchange request
            refresh_margin: Seconds subtracted from the declared token lifetime
            clock: Source of the current time in epoch seconds
        """
        self.http_client = http_client
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.user_agent = user_agent
        self.refresh_margin = refresh_margin
        self._clock = clock
        self._credential: Optional[Credential] = None
        self._lock = asyncio.Lock()

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    def _cached_token(self) -> Optional[str]:
        if self._credential and self._credential.is_valid(self._clock()):
            return self._credential.value
        return None

    async def get_token(self) -> Optional[str]:
        """
        Return a valid bearer token, exchanging credentials if needed.

        Returns:
            The token string, or None if no token could be obtained
        """
        token = self._cached_token()
        if token:
            return token

        async with self._lock:
            # Another waiter may have refreshed while we were queued
            token = self._cached_token()
            if token:
                return token
            return await self._refresh()

    def invalidate(self) -> None:
        """Drop the cached credential so the next call performs an exchange."""
        self._credential = None

    async def _refresh(self) -> Optional[str]:
        if not self.client_id or not self.client_secret:
            logger.error("Reddit client credentials are not configured; cannot request a token")
            return None

        creds = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode()).decode()
        headers = {
            "Authorization": f"Basic {creds}",
            "Content-Type": "application/x-www-form-urlencoded",
            "User-Agent": self.user_agent,
        }

        now = self._clock()
        try:
            response = await self.http_client.post(
                self.token_url,
                headers=headers,
                content="grant_type=client_credentials",
            )
        except httpx.HTTPError as e:
            logger.error(f"Error refreshing Reddit token: {e}")
            return None

        if not response.is_success:
            logger.error(f"Failed to refresh Reddit token: HTTP {response.status_code}")
            return None

        try:
            data = response.json()
            access_token = data["access_token"]
            expires_in = float(data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed Reddit token response: {e}")
            return None

        if not access_token:
            logger.error("Reddit token response contained an empty access_token")
            return None

        self._credential = Credential(
            value=access_token,
            expires_at=now + expires_in - self.refresh_margin,
        )
        logger.info(f"Reddit token refreshed (valid for {expires_in - self.refresh_margin:.0f}s)")
        return access_token
