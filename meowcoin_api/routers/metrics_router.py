"""
Metrics Router

Supply, block reward and mining endpoints. Every value goes through the
shared CachedFetcher, so a node outage serves the last known value when
one exists and a 503 otherwise.
"""

import logging
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Depends

from meowcoin_api.cache import CachedFetcher
from meowcoin_api.config import settings
from meowcoin_api.dependencies import get_cached_fetcher, get_rpc_client
from meowcoin_api.exceptions import ServiceUnavailableError
from meowcoin_api.rpc_client import MeowcoinRPCClient
from meowcoin_api.schemas import (
    BlockRewardResponse,
    CirculatingSupplyResponse,
    MiningInfoResponse,
    RewardBreakdownResponse,
    TotalSupplyResponse,
)
from meowcoin_api.services import metrics_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["metrics"])


async def _serve(
    fetcher: CachedFetcher,
    key: str,
    producer: Callable[[], Awaitable[Any]],
    description: str,
) -> Any:
    try:
        return await fetcher.fetch(key, producer)
    except Exception as e:
        logger.error(f"Error fetching {description}: {e}")
        raise ServiceUnavailableError(f"Unable to fetch {description}")


@router.get("/total-supply", response_model=TotalSupplyResponse)
async def get_total_supply(
    fetcher: CachedFetcher = Depends(get_cached_fetcher),
    client: MeowcoinRPCClient = Depends(get_rpc_client),
):
    """Current total supply (value of the UTXO set)."""
    supply = await _serve(
        fetcher, "total_supply", lambda: metrics_service.fetch_total_supply(client), "total supply"
    )
    return TotalSupplyResponse(total_supply=supply)


@router.get("/circulating-supply", response_model=CirculatingSupplyResponse)
async def get_circulating_supply(
    fetcher: CachedFetcher = Depends(get_cached_fetcher),
    client: MeowcoinRPCClient = Depends(get_rpc_client),
):
    """Current circulating supply."""
    supply = await _serve(
        fetcher,
        "circulating_supply",
        lambda: metrics_service.fetch_circulating_supply(client),
        "circulating supply",
    )
    return CirculatingSupplyResponse(circulating_supply=supply)


@router.get("/block-reward", response_model=BlockRewardResponse)
async def get_block_reward(
    fetcher: CachedFetcher = Depends(get_cached_fetcher),
    client: MeowcoinRPCClient = Depends(get_rpc_client),
):
    """Consensus block subsidy at the current height, split miner/foundation."""
    return await _serve(
        fetcher, "block_reward", lambda: metrics_service.fetch_block_reward(client), "block reward"
    )


@router.get("/reward-breakdown", response_model=RewardBreakdownResponse)
async def get_reward_breakdown(
    fetcher: CachedFetcher = Depends(get_cached_fetcher),
    client: MeowcoinRPCClient = Depends(get_rpc_client),
):
    """Block subsidy with the 60/40 miner/foundation percentages."""
    return await _serve(
        fetcher,
        "reward_breakdown",
        lambda: metrics_service.fetch_reward_breakdown(client),
        "reward breakdown",
    )


@router.get("/mining-info", response_model=MiningInfoResponse)
async def get_mining_info(
    fetcher: CachedFetcher = Depends(get_cached_fetcher),
    client: MeowcoinRPCClient = Depends(get_rpc_client),
):
    """
    Difficulty, hash rate, blocks found and average block time for
    MeowPow and Scrypt over the configured window.

    Scans recent blocks one at a time, so an uncached request is slow.
    """
    return await _serve(
        fetcher,
        "mining_info",
        lambda: metrics_service.fetch_mining_info(
            client,
            window_minutes=settings.mining_window_minutes,
            scan_depth=settings.mining_scan_depth,
        ),
        "mining info",
    )
