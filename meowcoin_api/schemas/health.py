"""Health check Pydantic schemas"""
from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    cache_age_ms: int


class HealthDegradedResponse(BaseModel):
    status: str
    error: str
    timestamp: datetime
