"""
Health Router

Probes the node directly (never served from cache).
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from meowcoin_api.cache import MetricsCache
from meowcoin_api.dependencies import get_metrics_cache, get_rpc_client
from meowcoin_api.exceptions import AppError
from meowcoin_api.rpc_client import MeowcoinRPCClient
from meowcoin_api.schemas import HealthDegradedResponse, HealthResponse
from meowcoin_api.services.metrics_service import check_node

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthDegradedResponse}},
)
async def health_check(
    client: MeowcoinRPCClient = Depends(get_rpc_client),
    cache: MetricsCache = Depends(get_metrics_cache),
):
    """Report whether the node answers RPC, plus the age of the cache."""
    try:
        await check_node(client)
    except AppError as e:
        logger.error(f"Health check failed: {e}")
        degraded = HealthDegradedResponse(
            status="degraded",
            error="RPC connection failed",
            timestamp=datetime.now(timezone.utc),
        )
        return JSONResponse(status_code=503, content=degraded.model_dump(mode="json"))

    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        cache_age_ms=cache.age_ms(),
    )
