import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from meowcoin_api.config import settings
from meowcoin_api.dependencies import close_rpc_client
from meowcoin_api.exceptions import AppError
from meowcoin_api.logging_config import configure_logging
from meowcoin_api.routers import health_router, metrics_router

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path and client address of every request."""

    async def dispatch(self, request: Request, call_next):
        client_host = request.client.host if request.client else "-"
        logger.info(f"{request.method} {request.url.path} - {client_host}")
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, settings.log_dir)
    logger.info(f"Meowcoin API server started on port {settings.port}")
    yield
    await close_rpc_client()
    logger.info("Meowcoin API server stopped")


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code == 503:
        body = {"error": "Service temporarily unavailable", "message": exc.message}
    else:
        body = {"detail": exc.message}
    return JSONResponse(status_code=exc.status_code, content=body)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={"error": "Not found", "message": f"Endpoint {request.url.path} not found"},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": "An unexpected error occurred"},
    )


def create_app() -> FastAPI:
    app = FastAPI(title="Meowcoin API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(metrics_router.router)
    app.include_router(health_router.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
