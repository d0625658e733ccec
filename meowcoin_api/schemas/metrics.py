"""Supply, reward and mining Pydantic schemas"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TotalSupplyResponse(BaseModel):
    total_supply: float


class CirculatingSupplyResponse(BaseModel):
    circulating_supply: float


class BlockRewardResponse(BaseModel):
    height: int
    block_reward: float
    miner_reward: float
    foundation_reward: float


class RewardBreakdownResponse(BaseModel):
    height: int
    subsidy_total: float
    miner_percentage: int
    foundation_percentage: int
    miner_reward: float
    foundation_reward: float


class AlgorithmMiningInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    difficulty: float
    hashrate: float
    blocks_found: int = Field(alias="blocksFound")
    avg_block_time_seconds: Optional[int] = Field(alias="avgBlockTimeSeconds")


class MiningInfoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    block_height: int = Field(alias="blockHeight")
    window_minutes: int = Field(alias="windowMinutes")
    meowpow: AlgorithmMiningInfo = Field(alias="MeowPow")
    scrypt: AlgorithmMiningInfo = Field(alias="Scrypt")
