import pytest

from reddit_proxy.config.settings import Settings, get_settings
from reddit_proxy.tests.stubs.reddit_upstream_stub import FakeRedditUpstream


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make sure no test sees settings cached by another."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings with test credentials and no real waiting."""
    return Settings(
        _env_file=None,
        REDDIT_CLIENT_ID="test_client_id",
        REDDIT_CLIENT_SECRET="test_client_secret",
        REDDIT_DEFAULT_SUBREDDITS="pennystocks,Shortsqueeze,SqueezePlays",
        RETRY_COOLDOWN_SECONDS=0,
        FANOUT_PACING_SECONDS=0,
        RATE_LIMIT_ENABLED=False,
        INSIDER_TRADES_MODE="mock",
    )


@pytest.fixture
def upstream() -> FakeRedditUpstream:
    return FakeRedditUpstream()
