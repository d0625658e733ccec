"""
Metrics Service

Producers for every metric the API serves, all read from Meowcoin Core:
- Total / circulating supply (gettxoutsetinfo)
- Block reward and 60/40 breakdown (getblockchaininfo + consensus subsidy)
- Mining info per algorithm (difficulty, hash rate, recent block stats)

Producers raise domain exceptions and never touch the cache; routers
wrap them with CachedFetcher.
"""

import logging
import time
from typing import Any, Callable

from meowcoin_api.algorithms import ALGORITHM_INDEX, AlgorithmKind
from meowcoin_api.exceptions import ValidationError
from meowcoin_api.rpc_client import MeowcoinRPCClient
from meowcoin_api.schemas import (
    AlgorithmMiningInfo,
    BlockRewardResponse,
    MiningInfoResponse,
    RewardBreakdownResponse,
)
from meowcoin_api.services.block_stats_service import aggregate_block_stats, scan_recent_blocks
from meowcoin_api.subsidy import FOUNDATION_PERCENTAGE, MINER_PERCENTAGE, subsidy_at

logger = logging.getLogger(__name__)


def _require_field(result: Any, field: str, command: str) -> Any:
    if not isinstance(result, dict) or result.get(field) is None:
        raise ValidationError(f"Invalid response from {command}: missing {field}", command=command)
    return result[field]


def _require_number(value: Any, command: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Invalid response from {command}: expected a number", command=command)
    return value


# =============================================================================
# Supply
# =============================================================================


async def fetch_total_supply(client: MeowcoinRPCClient) -> float:
    """Total value of the UTXO set in MEWC"""
    info = await client.call("gettxoutsetinfo")
    return float(_require_number(_require_field(info, "total_amount", "gettxoutsetinfo"), "gettxoutsetinfo"))


async def fetch_circulating_supply(client: MeowcoinRPCClient) -> float:
    """Circulating supply; nothing is locked or burned, so it equals the UTXO total"""
    return await fetch_total_supply(client)


# =============================================================================
# Block reward
# =============================================================================


async def fetch_chain_height(client: MeowcoinRPCClient) -> int:
    chain = await client.call("getblockchaininfo")
    return int(_require_number(_require_field(chain, "blocks", "getblockchaininfo"), "getblockchaininfo"))


async def fetch_block_reward(client: MeowcoinRPCClient) -> BlockRewardResponse:
    """Consensus subsidy at the current tip"""
    record = subsidy_at(await fetch_chain_height(client))
    return BlockRewardResponse(
        height=record.height,
        block_reward=record.subsidy_total,
        miner_reward=record.miner_share,
        foundation_reward=record.foundation_share,
    )


async def fetch_reward_breakdown(client: MeowcoinRPCClient) -> RewardBreakdownResponse:
    """Consensus subsidy at the current tip with the split percentages"""
    record = subsidy_at(await fetch_chain_height(client))
    return RewardBreakdownResponse(
        height=record.height,
        subsidy_total=record.subsidy_total,
        miner_percentage=MINER_PERCENTAGE,
        foundation_percentage=FOUNDATION_PERCENTAGE,
        miner_reward=record.miner_share,
        foundation_reward=record.foundation_share,
    )


# =============================================================================
# Mining info
# =============================================================================


async def fetch_block_count(client: MeowcoinRPCClient) -> int:
    height = _require_number(await client.call("getblockcount"), "getblockcount")
    return int(height)


async def fetch_mining_info(
    client: MeowcoinRPCClient,
    window_minutes: int,
    scan_depth: int,
    clock: Callable[[], float] = time.time,
) -> MiningInfoResponse:
    """
    Difficulty, hash rate and recent block stats for MeowPow and Scrypt.

    Scans the last `scan_depth` blocks one by one; blocks that fail to
    load are skipped rather than failing the whole metric.
    """
    height = await fetch_block_count(client)

    network = {}
    for algo, index in ALGORITHM_INDEX.items():
        difficulty_cmd = f"getdifficulty {index}"
        hashrate_cmd = f"getnetworkhashps 0 -1 {index}"
        network[algo] = (
            _require_number(await client.call(difficulty_cmd), difficulty_cmd),
            _require_number(await client.call(hashrate_cmd), hashrate_cmd),
        )

    samples = await scan_recent_blocks(client, height, scan_depth)
    stats = aggregate_block_stats(samples, window_minutes, now_unix=int(clock()))

    logger.info(
        f"Mining info at height {height}: {len(samples)}/{min(scan_depth, height + 1)} blocks scanned, "
        + ", ".join(f"{algo.value}={stats[algo].blocks_found}" for algo in ALGORITHM_INDEX)
    )

    def _algo_info(algo: AlgorithmKind) -> AlgorithmMiningInfo:
        difficulty, hashrate = network[algo]
        return AlgorithmMiningInfo(
            difficulty=difficulty,
            hashrate=hashrate,
            blocks_found=stats[algo].blocks_found,
            avg_block_time_seconds=stats[algo].avg_block_time_seconds,
        )

    return MiningInfoResponse(
        block_height=height,
        window_minutes=window_minutes,
        meowpow=_algo_info(AlgorithmKind.MEOWPOW),
        scrypt=_algo_info(AlgorithmKind.SCRYPT),
    )


# =============================================================================
# Health
# =============================================================================


async def check_node(client: MeowcoinRPCClient) -> int:
    """Cheap connectivity probe; returns the node's block count."""
    return await fetch_block_count(client)
