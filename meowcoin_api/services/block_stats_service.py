"""
Block Statistics Service

Per-algorithm block counts and average block spacing over a trailing
time window, built from the most recent blocks on the node.

- scan_recent_blocks: sequential (time, version) scan of the chain tip
- aggregate_block_stats: pure windowed aggregation, caller supplies "now"
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from meowcoin_api.algorithms import MINED_ALGORITHMS, AlgorithmKind, classify_version
from meowcoin_api.exceptions import RpcError, ValidationError
from meowcoin_api.rpc_client import MeowcoinRPCClient

logger = logging.getLogger(__name__)

# Spacings outside (0, MAX_SPACING_SECONDS] are clock skew or reorg noise
MAX_SPACING_SECONDS = 3600


@dataclass(frozen=True)
class BlockSample:
    height: int
    time: int
    version: int


@dataclass(frozen=True)
class AlgorithmStats:
    blocks_found: int
    avg_block_time_seconds: Optional[int]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _average_spacing(times: List[int]) -> Optional[int]:
    """Mean of the plausible gaps between sorted block times, or None."""
    spacings = [
        later - earlier
        for earlier, later in zip(times, times[1:])
        if 0 < later - earlier <= MAX_SPACING_SECONDS
    ]
    if not spacings:
        return None
    return _round_half_up(sum(spacings) / len(spacings))


def aggregate_block_stats(
    samples: Iterable[BlockSample],
    window_minutes: int,
    now_unix: int,
) -> Dict[AlgorithmKind, AlgorithmStats]:
    """
    Count blocks and average spacing per algorithm within the window.

    Blocks with an implausible spacing still count toward blocks_found;
    only the spacing is left out of the average. Input order does not
    matter.

    Args:
        samples: Blocks to consider
        window_minutes: Trailing window length, must be > 0
        now_unix: Window end in unix seconds

    Returns:
        Stats for MeowPow and Scrypt (Unknown blocks are dropped)
    """
    if window_minutes <= 0:
        raise ValueError(f"window_minutes must be > 0, got {window_minutes}")

    window_seconds = window_minutes * 60
    times_by_algo: Dict[AlgorithmKind, List[int]] = {algo: [] for algo in MINED_ALGORITHMS}

    for sample in samples:
        if now_unix - sample.time > window_seconds:
            continue
        algo = classify_version(sample.version)
        if algo is AlgorithmKind.UNKNOWN:
            continue
        times_by_algo[algo].append(sample.time)

    stats = {}
    for algo, times in times_by_algo.items():
        times.sort()
        stats[algo] = AlgorithmStats(
            blocks_found=len(times),
            avg_block_time_seconds=_average_spacing(times),
        )
    return stats


async def fetch_block_sample(client: MeowcoinRPCClient, height: int) -> BlockSample:
    """Fetch time and version of the block at height."""
    block_hash = await client.call_method("getblockhash", [height])
    block = await client.call_method("getblock", [block_hash, 1])

    try:
        return BlockSample(height=height, time=int(block["time"]), version=int(block["version"]))
    except (KeyError, TypeError, ValueError):
        raise ValidationError(
            "block is missing time or version",
            command=f"getblock {block_hash} 1",
        )


async def scan_recent_blocks(
    client: MeowcoinRPCClient,
    tip_height: int,
    depth: int,
) -> List[BlockSample]:
    """
    Fetch the last `depth` blocks ending at tip_height, one at a time.

    A height that fails to load is logged and skipped, so the result may
    hold fewer than `depth` samples.
    """
    start = max(0, tip_height - depth + 1)
    samples: List[BlockSample] = []

    for height in range(start, tip_height + 1):
        try:
            samples.append(await fetch_block_sample(client, height))
        except RpcError as e:
            logger.warning(f"Skipping block {height}: {e}")

    logger.debug(f"Scanned blocks {start}-{tip_height}: {len(samples)} samples")
    return samples
