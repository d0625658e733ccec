"""
Meowcoin block subsidy (consensus-derived).

The subsidy starts at 5000 MEWC and halves every 2,100,000 blocks
(~4 years at 1 minute blocks). It is split 60/40 between the miner and
the foundation.
"""

from dataclasses import dataclass

INITIAL_SUBSIDY = 5000  # MEWC
HALVING_INTERVAL = 2_100_000  # blocks
MAX_HALVINGS = 64

MINER_PERCENTAGE = 60
FOUNDATION_PERCENTAGE = 40


@dataclass(frozen=True)
class SubsidyRecord:
    height: int
    subsidy_total: float
    miner_share: float
    foundation_share: float


def block_subsidy(height: int) -> float:
    """Block subsidy in MEWC at the given height."""
    if height < 0:
        raise ValueError(f"Block height must be non-negative, got {height}")

    halvings = height // HALVING_INTERVAL
    # Reward is exhausted after 64 halvings (like Bitcoin)
    if halvings >= MAX_HALVINGS:
        return 0.0

    return INITIAL_SUBSIDY / 2**halvings


def subsidy_at(height: int) -> SubsidyRecord:
    """Block subsidy at height with its miner/foundation split."""
    total = block_subsidy(height)
    return SubsidyRecord(
        height=height,
        subsidy_total=total,
        miner_share=total * MINER_PERCENTAGE / 100,
        foundation_share=total * FOUNDATION_PERCENTAGE / 100,
    )
