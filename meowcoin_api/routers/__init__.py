"""
API Routers
"""

from meowcoin_api.routers import health_router
from meowcoin_api.routers import metrics_router

__all__ = [
    "health_router",
    "metrics_router",
]
