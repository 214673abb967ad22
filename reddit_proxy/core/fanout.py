"""Multi-subreddit fan-out with per-item failure isolation."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from reddit_proxy.integrations.reddit import RedditAPIClient, Sleep

logger = logging.getLogger(__name__)

PARALLEL = "parallel"
SEQUENTIAL = "sequential"


@dataclass
class FetchOutcome:
    """Result of fetching one subreddit. ``error`` is None on success."""

    subreddit: str
    children: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SubredditAggregator:
    """
    Fetches several subreddit listings and concatenates their children.

    A failing subreddit is logged and left out; it never aborts the others.
    Two strategies are supported:

    - ``parallel``: all subreddits at once, at most ``max_concurrency`` in flight
    - ``sequential``: one at a time with ``pacing_seconds`` between requests
    """

    def __init__(
        self,
        client: RedditAPIClient,
        strategy: str = PARALLEL,
        pacing_seconds: float = 1.0,
        max_concurrency: int = 10,
        sleep: Sleep = asyncio.sleep,
    ):
        if strategy not in (PARALLEL, SEQUENTIAL):
            raise ValueError(f"Unknown fan-out strategy: {strategy}")
        self.client = client
        self.strategy = strategy
        self.pacing_seconds = pacing_seconds
        self.max_concurrency = max_concurrency
        self._sleep = sleep

    async def fetch_one(self, subreddit: str, token: str) -> FetchOutcome:
        """Fetch a single subreddit, capturing any failure in the outcome."""
        try:
            payload = await self.client.fetch_listing(subreddit, token)
        except Exception as e:
            logger.error(f"Failed subreddit fetch /r/{subreddit}: {e}")
            return FetchOutcome(subreddit=subreddit, error=str(e) or type(e).__name__)

        data = payload.get("data") if isinstance(payload, dict) else None
        children = data.get("children") if isinstance(data, dict) else None
        return FetchOutcome(subreddit=subreddit, children=list(children or []))

    async def _fetch_parallel(self, subreddits: Sequence[str], token: str) -> List[FetchOutcome]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(sr: str) -> FetchOutcome:
            async with semaphore:
                return await self.fetch_one(sr, token)

        return list(await asyncio.gather(*(bounded(sr) for sr in subreddits)))

    async def _fetch_sequential(self, subreddits: Sequence[str], token: str) -> List[FetchOutcome]:
        outcomes = []
        for index, sr in enumerate(subreddits):
            if index > 0 and self.pacing_seconds > 0:
                await self._sleep(self.pacing_seconds)
            outcomes.append(await self.fetch_one(sr, token))
        return outcomes

    async def fetch_outcomes(self, subreddits: Sequence[str], token: str) -> List[FetchOutcome]:
        if self.strategy == SEQUENTIAL:
            return await self._fetch_sequential(subreddits, token)
        return await self._fetch_parallel(subreddits, token)

    async def fetch_all(self, subreddits: Sequence[str], token: str) -> List[Dict[str, Any]]:
        """
        Fetch every subreddit and return the concatenated children.

        Args:
            subreddits: Subreddit names to fetch
            token: Bearer token

        Returns:
            Children of all successful listings, in input order
        """
        outcomes = await self.fetch_outcomes(subreddits, token)

        results: List[Dict[str, Any]] = []
        failed = 0
        for outcome in outcomes:
            if outcome.ok:
                results.extend(outcome.children)
            else:
                failed += 1

        logger.info(
            f"Fan-out over {len(outcomes)} subreddits ({self.strategy}): "
            f"{len(results)} posts, {failed} failed"
        )
        return results
