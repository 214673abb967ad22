from .fanout import FetchOutcome, SubredditAggregator
from .rate_limiter import FixedWindowRateLimiter, RateLimitDecision
from .token_cache import Credential, RedditTokenCache

__all__ = [
    "Credential",
    "FetchOutcome",
    "FixedWindowRateLimiter",
    "RateLimitDecision",
    "RedditTokenCache",
    "SubredditAggregator",
]
