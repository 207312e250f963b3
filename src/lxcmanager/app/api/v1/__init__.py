"""API v1 module."""

from lxcmanager.app.api.v1.containers import router as containers_router
from lxcmanager.app.api.v1.health import router as health_router
from lxcmanager.app.api.v1.host import router as host_router

__all__ = [
    "containers_router",
    "health_router",
    "host_router",
]
