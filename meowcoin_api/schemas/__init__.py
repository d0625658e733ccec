"""Centralized Pydantic schemas for API responses"""

from .health import HealthDegradedResponse, HealthResponse
from .metrics import (
    AlgorithmMiningInfo,
    BlockRewardResponse,
    CirculatingSupplyResponse,
    MiningInfoResponse,
    RewardBreakdownResponse,
    TotalSupplyResponse,
)

__all__ = [
    # Supply and reward schemas
    "TotalSupplyResponse",
    "CirculatingSupplyResponse",
    "BlockRewardResponse",
    "RewardBreakdownResponse",
    # Mining schemas
    "AlgorithmMiningInfo",
    "MiningInfoResponse",
    # Health schemas
    "HealthResponse",
    "HealthDegradedResponse",
]
