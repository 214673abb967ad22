"""FastAPI dependencies resolving the services created in the app lifespan."""

from fastapi import Request

from reddit_proxy.config.settings import Settings
from reddit_proxy.core.fanout import SubredditAggregator
from reddit_proxy.core.token_cache import RedditTokenCache
from reddit_proxy.integrations.reddit import RedditAPIClient
from reddit_proxy.integrations.sec_edgar import SecEdgarClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_cache(request: Request) -> RedditTokenCache:
    return request.app.state.token_cache


def get_reddit_client(request: Request) -> RedditAPIClient:
    return request.app.state.reddit_client


def get_aggregator(request: Request) -> SubredditAggregator:
    return request.app.state.aggregator


def get_sec_client(request: Request) -> SecEdgarClient:
    return request.app.state.sec_client
