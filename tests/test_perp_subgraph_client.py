from __future__ import annotations

import json

import httpx
import pytest

from perp_points.infrastructure.clients.perp_subgraph_client import (
    PaginationInfo,
    PerpSubgraphClient,
    PerpSubgraphClientSettings,
    SubgraphError,
    SubgraphNetworkError,
    SubgraphRateLimitError,
)


ENDPOINT = "https://subgraph.example.com/perp"


def _make_client(
    handler=None,
    *,
    max_retries: int = 0,
    page_size: int = 2,
    max_rate_limit_waits: int = 2,
) -> PerpSubgraphClient:
    transport = httpx.MockTransport(handler) if handler is not None else None
    return PerpSubgraphClient(
        PerpSubgraphClientSettings(
            endpoint=ENDPOINT,
            timeout_seconds=5,
            max_retries=max_retries,
            retry_delay_ms=100,
            requests_per_second=0,
            page_size=page_size,
            rate_limit_cooldown_seconds=5,
            max_rate_limit_waits=max_rate_limit_waits,
        ),
        transport=transport,
    )


def _rows(*accounts: str) -> list[dict]:
    return [{"account": account, "tradingVolume": "1"} for account in accounts]


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    recorded: list[float] = []
    monkeypatch.setattr(
        "perp_points.infrastructure.clients.perp_subgraph_client.time.sleep",
        lambda seconds: recorded.append(seconds),
    )
    return recorded


def test_fetch_page_sends_window_variables_and_detects_full_page():
    captured: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == ENDPOINT
        captured.append(json.loads(request.content))
        return httpx.Response(200, json={"data": {"data": _rows("0xa", "0xb")}})

    page = _make_client(handler).fetch_page(epoch_begin=1000, epoch_end=2000, skip=4)

    assert captured[0]["variables"] == {"first": 2, "skip": 4, "epochBegin": 1000, "epochEnded": 2000}
    assert "leaderboards" in captured[0]["query"]
    assert [row["account"] for row in page.rows] == ["0xa", "0xb"]
    assert page.pagination == PaginationInfo(skip=4, has_more=True, total_fetched=6)


def test_fetch_all_paginates_until_short_page_and_deduplicates(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()
    scripted = [_rows("0xa", "0xb"), _rows("0xb", "0xc"), _rows("0xd")]
    skips: list[int] = []

    def fake_post_graphql(*, query: str, variables: dict) -> dict:
        _ = query
        skips.append(variables["skip"])
        return {"data": {"data": scripted[len(skips) - 1]}}

    monkeypatch.setattr(client, "_post_graphql", fake_post_graphql)
    progress: list[PaginationInfo] = []

    rows = client.fetch_all(epoch_begin=1, epoch_end=2, on_progress=progress.append)

    assert [row["account"] for row in rows] == ["0xa", "0xb", "0xc", "0xd"]
    assert skips == [0, 2, 4]
    assert progress[-1] == PaginationInfo(skip=6, has_more=False, total_fetched=4)
    assert [info.has_more for info in progress] == [True, True, False]


def test_fetch_all_stops_at_max_records(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()
    calls = {"count": 0}

    def fake_post_graphql(*, query: str, variables: dict) -> dict:
        _ = (query, variables)
        calls["count"] += 1
        return {"data": {"data": _rows(f"0x{calls['count']}a", f"0x{calls['count']}b")}}

    monkeypatch.setattr(client, "_post_graphql", fake_post_graphql)

    rows = client.fetch_all(epoch_begin=1, epoch_end=2, max_records=3)

    assert len(rows) == 3
    assert calls["count"] == 2


def test_fetch_all_waits_and_retries_same_page_on_rate_limit(monkeypatch: pytest.MonkeyPatch, sleeps):
    client = _make_client()
    responses: list[object] = [SubgraphRateLimitError(), {"data": {"data": _rows("0xa")}}]
    skips: list[int] = []

    def fake_post_graphql(*, query: str, variables: dict) -> dict:
        _ = query
        skips.append(variables["skip"])
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(client, "_post_graphql", fake_post_graphql)

    rows = client.fetch_all(epoch_begin=1, epoch_end=2)

    assert [row["account"] for row in rows] == ["0xa"]
    assert skips == [0, 0]
    assert sleeps == [5]


def test_fetch_all_gives_up_after_max_rate_limit_waits(monkeypatch: pytest.MonkeyPatch, sleeps):
    client = _make_client(max_rate_limit_waits=2)

    def fake_post_graphql(*, query: str, variables: dict) -> dict:
        _ = (query, variables)
        raise SubgraphRateLimitError()

    monkeypatch.setattr(client, "_post_graphql", fake_post_graphql)

    with pytest.raises(SubgraphRateLimitError):
        client.fetch_all(epoch_begin=1, epoch_end=2)
    assert sleeps == [5, 5]


def test_server_errors_are_retried_with_exponential_backoff(sleeps):
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        _ = request
        calls["count"] += 1
        if calls["count"] < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"data": {"data": _rows("0xa")}})

    page = _make_client(handler, max_retries=3).fetch_page(epoch_begin=1, epoch_end=2)

    assert calls["count"] == 3
    assert sleeps == [0.1, 0.2]
    assert page.pagination.has_more is False


def test_server_errors_raise_network_error_after_retries(sleeps):
    def handler(request: httpx.Request) -> httpx.Response:
        _ = request
        return httpx.Response(502)

    with pytest.raises(SubgraphNetworkError) as excinfo:
        _make_client(handler, max_retries=2).fetch_page(epoch_begin=1, epoch_end=2)

    assert excinfo.value.status_code == 502
    assert excinfo.value.code == "NETWORK_ERROR"
    assert sleeps == [0.1, 0.2]


def test_transport_errors_raise_network_error_after_retries(sleeps):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SubgraphNetworkError, match="connection refused"):
        _make_client(handler, max_retries=1).fetch_page(epoch_begin=1, epoch_end=2)
    assert sleeps == [0.1]


def test_client_errors_are_not_retried(sleeps):
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        _ = request
        calls["count"] += 1
        return httpx.Response(400)

    with pytest.raises(SubgraphError) as excinfo:
        _make_client(handler, max_retries=3).fetch_page(epoch_begin=1, epoch_end=2)

    assert excinfo.value.code == "CLIENT_ERROR"
    assert excinfo.value.status_code == 400
    assert calls["count"] == 1
    assert sleeps == []


def test_http_429_raises_rate_limit_error_without_retry(sleeps):
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        _ = request
        calls["count"] += 1
        return httpx.Response(429)

    with pytest.raises(SubgraphRateLimitError):
        _make_client(handler, max_retries=3).fetch_page(epoch_begin=1, epoch_end=2)
    assert calls["count"] == 1


def test_graphql_errors_are_retried_then_raised(sleeps):
    def handler(request: httpx.Request) -> httpx.Response:
        _ = request
        return httpx.Response(200, json={"errors": [{"message": "indexer unavailable"}]})

    with pytest.raises(SubgraphNetworkError, match="indexer unavailable"):
        _make_client(handler, max_retries=1).fetch_page(epoch_begin=1, epoch_end=2)
    assert sleeps == [0.1]


def test_rate_limit_waits_for_min_interval(sleeps):
    client = PerpSubgraphClient(PerpSubgraphClientSettings(endpoint=ENDPOINT, requests_per_second=10))
    client._respect_rate_limit()
    client._respect_rate_limit()

    assert len(sleeps) == 1
    assert 0 < sleeps[0] <= 0.1


def test_rate_limit_disabled_when_requests_per_second_is_zero(sleeps):
    client = _make_client()
    client._respect_rate_limit()
    client._respect_rate_limit()

    assert sleeps == []
