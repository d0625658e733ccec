"""
Shared test fixtures for Meowcoin API tests.

Provides reusable fixtures for:
- RPC client with a mocked httpx client
- Controllable clock, cache and fetcher
- Mock httpx responses
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

import httpx

from meowcoin_api.cache import CachedFetcher, MetricsCache
from meowcoin_api.rpc_client import MeowcoinRPCClient


class FakeClock:
    """Callable clock returning unix seconds that tests can advance."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_response(json_data=None, status_code=200, reason="OK", invalid_json=False):
    """Create a mock httpx.Response."""
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.reason_phrase = reason
    resp.is_success = 200 <= status_code < 300
    if invalid_json:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = json_data
    return resp


def rpc_result(result):
    """JSON-RPC success envelope."""
    return make_response({"result": result, "error": None, "id": 1})


# ---------------------------------------------------------------------------
# Clock / cache fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MetricsCache(clock=clock)


@pytest.fixture
def fetcher(cache):
    return CachedFetcher(cache, ttl_ms=60_000)


# ---------------------------------------------------------------------------
# RPC client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def rpc_client():
    """MeowcoinRPCClient with credentials and a mocked httpx client."""
    client = MeowcoinRPCClient(
        url="http://127.0.0.1:8332",
        user="rpcuser",
        password="rpcpass",
        timeout=5.0,
    )
    client._client = AsyncMock(spec=httpx.AsyncClient)
    return client


@pytest.fixture
def mock_rpc():
    """Stand-in for MeowcoinRPCClient used by service tests."""
    client = MagicMock(spec=MeowcoinRPCClient)
    client.call = AsyncMock()
    client.call_method = AsyncMock()
    return client


@pytest.fixture(name="make_response")
def make_response_fixture():
    return make_response


@pytest.fixture(name="rpc_result")
def rpc_result_fixture():
    return rpc_result
