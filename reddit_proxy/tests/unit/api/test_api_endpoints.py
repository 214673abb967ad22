"""
Unit tests for API endpoints.

The application runs against FakeRedditUpstream through httpx.MockTransport,
so no test leaves the process.
"""

import pytest
from fastapi.testclient import TestClient

from reddit_proxy.api.main import create_app


@pytest.fixture
def make_client(settings, upstream):
    """Return a factory producing a started TestClient for given setting overrides."""
    clients = []

    def _make(**overrides):
        app_settings = settings.model_copy(update=overrides)
        client = TestClient(create_app(app_settings, transport=upstream.transport()))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()


def subreddits_of(body):
    return [c["data"]["subreddit"] for c in body["data"]["children"]]


class TestTrendingEndpoint:
    """Test cases for /reddit and /reddit/trending."""

    @pytest.mark.parametrize("path", ["/reddit", "/reddit/trending"])
    def test_default_subreddits(self, client, upstream, path):
        response = client.get(path)

        assert response.status_code == 200
        body = response.json()
        assert sorted(set(subreddits_of(body))) == ["Shortsqueeze", "SqueezePlays", "pennystocks"]
        assert len(body["data"]["children"]) == 6

    def test_subs_parameter_overrides_defaults(self, client, upstream):
        response = client.get("/reddit/trending", params={"subs": "stocks, wallstreetbets,,"})

        assert response.status_code == 200
        assert sorted(set(subreddits_of(response.json()))) == ["stocks", "wallstreetbets"]
        assert len(upstream.calls_to("/r/")) == 2

    def test_partial_failures_are_excluded(self, client, upstream):
        upstream.sub_statuses["Shortsqueeze"] = [404]
        upstream.network_errors.add("SqueezePlays")

        response = client.get("/reddit/trending")

        assert response.status_code == 200
        assert subreddits_of(response.json()) == ["pennystocks", "pennystocks"]

    def test_path_like_subs_are_dropped(self, client, upstream):
        response = client.get("/reddit", params={"subs": "../search.json?q=secret&,stocks"})

        assert response.status_code == 200
        assert subreddits_of(response.json()) == ["stocks", "stocks"]
        assert [r.url.path for r in upstream.calls_to("/r/")] == ["/r/stocks/top"]
        assert upstream.calls_to("/search.json") == []

    def test_all_failures_still_return_200(self, client, upstream):
        for sub in ("pennystocks", "Shortsqueeze", "SqueezePlays"):
            upstream.sub_statuses[sub] = [500]

        response = client.get("/reddit/trending")

        assert response.status_code == 200
        assert response.json() == {"data": {"children": []}}

    def test_rate_limited_item_recovers_after_retry(self, client, upstream):
        upstream.sub_statuses["pennystocks"] = [429]

        response = client.get("/reddit/trending")

        assert subreddits_of(response.json()).count("pennystocks") == 2

    def test_sequential_strategy(self, make_client, upstream):
        client = make_client(FANOUT_STRATEGY="sequential")

        response = client.get("/reddit/trending")

        assert response.status_code == 200
        assert subreddits_of(response.json()) == [
            "pennystocks", "pennystocks", "Shortsqueeze", "Shortsqueeze", "SqueezePlays", "SqueezePlays",
        ]

    def test_token_unavailable(self, client, upstream):
        upstream.token_status = 401

        response = client.get("/reddit/trending")

        assert response.status_code == 500
        assert response.json() == {"error": "Reddit token unavailable"}
        assert upstream.calls_to("/r/") == []

    def test_token_is_reused_across_requests(self, client, upstream):
        client.get("/reddit/trending")
        client.get("/reddit/stocks")

        assert upstream.token_calls == 1
        assert all(r.headers["Authorization"] == "Bearer test-token" for r in upstream.calls_to("/r/"))


class TestSingleSubredditEndpoint:
    """Test cases for /reddit/{sub}."""

    def test_returns_payload_verbatim(self, client, upstream):
        response = client.get("/reddit/stocks")

        assert response.status_code == 200
        body = response.json()
        assert body["kind"] == "Listing"
        assert subreddits_of(body) == ["stocks", "stocks"]

    def test_upstream_status_is_propagated(self, client, upstream):
        upstream.sub_statuses["doesnotexist"] = [404]

        response = client.get("/reddit/doesnotexist")

        assert response.status_code == 404
        assert response.json() == {"error": "Reddit API error: 404"}

    @pytest.mark.parametrize("sub", ["x", "stocks%3Fq%3D1", "my-sub"])
    def test_invalid_name_is_rejected_without_upstream_calls(self, client, upstream, sub):
        response = client.get(f"/reddit/{sub}")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid subreddit name"}
        assert upstream.requests == []

    def test_exhausted_429_is_propagated(self, client, upstream):
        upstream.sub_statuses["stocks"] = [429, 429]

        response = client.get("/reddit/stocks")

        assert response.status_code == 429
        assert len(upstream.calls_to("/r/stocks")) == 2

    def test_transport_error_is_500(self, client, upstream):
        upstream.network_errors.add("stocks")

        response = client.get("/reddit/stocks")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch /r/stocks"}

    def test_token_unavailable(self, client, upstream):
        upstream.token_status = 500

        response = client.get("/reddit/stocks")

        assert response.status_code == 500
        assert response.json() == {"error": "Reddit token unavailable"}


class TestSearchEndpoint:
    """Test cases for /reddit/search."""

    def test_search_success(self, client, upstream):
        response = client.get("/reddit/search", params={"q": "GME"})

        assert response.status_code == 200
        assert subreddits_of(response.json()) == ["search", "search"]
        assert upstream.calls_to("/search.json")[0].url.params["q"] == "$GME"

    @pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "TOOLONG"}])
    def test_invalid_query_makes_no_outbound_call(self, client, upstream, params):
        response = client.get("/reddit/search", params=params)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid ticker query"}
        assert upstream.requests == []

    def test_six_characters_is_accepted(self, client, upstream):
        response = client.get("/reddit/search", params={"q": "ABCDEF"})
        assert response.status_code == 200

    def test_upstream_status_is_propagated(self, client, upstream):
        upstream.search_status = 503

        response = client.get("/reddit/search", params={"q": "GME"})

        assert response.status_code == 503
        assert response.json() == {"error": "Reddit API error: 503"}


class TestInsiderTradesEndpoint:
    """Test cases for /api/insider-trades."""

    def test_mock_mode(self, client, upstream):
        response = client.get("/api/insider-trades")

        assert response.status_code == 200
        trades = response.json()
        assert [t["symbol"] for t in trades] == ["TSLA", "AAPL", "NVDA"]
        assert set(trades[0]) == {
            "symbol", "insiderName", "transactionType", "shares", "sharePrice", "filingDate", "link",
        }
        assert upstream.requests == []

    def test_live_mode(self, make_client, upstream):
        client = make_client(INSIDER_TRADES_MODE="live")

        response = client.get("/api/insider-trades")

        assert response.status_code == 200
        trades = response.json()
        assert [t["insiderName"] for t in trades] == ["Musk Elon", "Cook Timothy D"]
        assert trades[0]["symbol"] is None

    def test_live_mode_failure(self, make_client, upstream):
        upstream.feed_status = 500
        client = make_client(INSIDER_TRADES_MODE="live")

        response = client.get("/api/insider-trades")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch insider trades"}


class TestCrossCutting:
    """Health, CORS, rate limiting and unknown routes."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["insider_trades_mode"] == "mock"
        assert body["fanout_strategy"] == "parallel"

    def test_cors_allows_any_origin(self, client):
        response = client.get("/health", headers={"Origin": "https://example.com"})
        assert response.headers["access-control-allow-origin"] == "*"

    def test_unknown_route_is_json_error(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert "error" in response.json()

    def test_rate_limit(self, make_client):
        client = make_client(RATE_LIMIT_ENABLED=True, RATE_LIMIT_REQUESTS=2, RATE_LIMIT_WINDOW_SECONDS=60)

        statuses = [client.get("/api/insider-trades").status_code for _ in range(3)]

        assert statuses == [200, 200, 429]
        response = client.get("/api/insider-trades")
        assert response.json() == {"error": "Too many requests, please try again later."}
        assert int(response.headers["Retry-After"]) > 0

    def test_health_is_not_rate_limited(self, make_client):
        client = make_client(RATE_LIMIT_ENABLED=True, RATE_LIMIT_REQUESTS=1, RATE_LIMIT_WINDOW_SECONDS=60)

        statuses = [client.get("/health").status_code for _ in range(3)]

        assert statuses == [200, 200, 200]


class TestStartupValidation:
    """Unknown fan-out strategy or insider mode stop the application from starting."""

    def test_unknown_fanout_strategy(self, make_client):
        with pytest.raises(ValueError, match="fan-out strategy"):
            make_client(FANOUT_STRATEGY="bogus")

    def test_unknown_insider_trades_mode(self, make_client):
        with pytest.raises(ValueError, match="insider trades mode"):
            make_client(INSIDER_TRADES_MODE="bogus")
