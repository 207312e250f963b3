"""lxc-manager FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from lxcmanager import __version__
from lxcmanager.app.api.v1 import containers_router, health_router, host_router
from lxcmanager.app.config import get_settings, missing_proxmox_settings
from lxcmanager.app.dependencies import close_services, init_services
from lxcmanager.app.logging import setup_logging
from lxcmanager.core.errors import ConfigurationError, LxcManagerError, OperationError
from lxcmanager.core.logging_schema import LogEvent

_settings = get_settings()
setup_logging(_settings.logging)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler.

    Missing credentials or a failed connection probe abort startup.
    """
    settings = get_settings()
    missing = missing_proxmox_settings(settings)
    if missing:
        logger.error(
            "Missing required environment variables: %s",
            ", ".join(missing),
            extra={"event": LogEvent.LXC_MANAGER_ERROR},
        )
        raise ConfigurationError(missing)

    await init_services(settings)
    logger.info(
        "Starting lxc-manager",
        extra={
            "event": LogEvent.APP_STARTED,
            "version": __version__,
            "node": settings.proxmox.node,
            "host": settings.proxmox.host,
        },
    )

    yield

    logger.info("Shutting down lxc-manager", extra={"event": LogEvent.APP_STOPPED})
    await close_services()


app = FastAPI(
    title="Proxmox LXC Manager",
    description="Start, stop and delete LXC containers on a Proxmox VE node",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(LxcManagerError)
async def lxc_manager_error_handler(request: Request, exc: LxcManagerError) -> JSONResponse:
    """Handle LxcManagerError exceptions."""
    extra = {
        "event": LogEvent.LXC_MANAGER_ERROR,
        "error_code": exc.code.value,
        "error_message": exc.message,
        "path": request.url.path,
        "method": request.method,
    }
    if isinstance(exc, OperationError):
        extra["error_class"] = exc.kind
    logger.warning("Request failed", extra=extra)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions with logging."""
    logger.exception(
        "Unhandled exception",
        extra={
            "event": LogEvent.UNHANDLED_EXCEPTION,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.include_router(health_router)


if _settings.metrics.enabled:

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose Prometheus metrics."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST,
        )


app.include_router(containers_router, prefix="/api/v1")
app.include_router(host_router, prefix="/api/v1")


def main() -> None:
    """Run the server."""
    config = get_settings()
    uvicorn.run(
        "lxcmanager.app.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
