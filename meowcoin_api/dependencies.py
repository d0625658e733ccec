"""
Shared FastAPI dependencies.

One RPC client, one cache and one fetcher per process. Tests override
these with app.dependency_overrides.
"""

from typing import Optional

from meowcoin_api.cache import CachedFetcher, MetricsCache
from meowcoin_api.config import settings
from meowcoin_api.rpc_client import MeowcoinRPCClient

metrics_cache = MetricsCache()
cached_fetcher = CachedFetcher(metrics_cache, ttl_ms=settings.cache_ttl_ms)

_rpc_client: Optional[MeowcoinRPCClient] = None


def get_rpc_client() -> MeowcoinRPCClient:
    """Lazily create the shared RPC client."""
    global _rpc_client
    if _rpc_client is None:
        _rpc_client = MeowcoinRPCClient.from_settings(settings)
    return _rpc_client


async def close_rpc_client():
    global _rpc_client
    if _rpc_client is not None:
        await _rpc_client.close()
        _rpc_client = None


def get_metrics_cache() -> MetricsCache:
    return metrics_cache


def get_cached_fetcher() -> CachedFetcher:
    return cached_fetcher
