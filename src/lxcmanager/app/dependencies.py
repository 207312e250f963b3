"""API dependencies for dependency injection.

Services are built once at startup from explicit settings and shared by
all requests. Tests replace them through app.dependency_overrides.
"""

from dataclasses import dataclass

from lxcmanager.app.config import Settings
from lxcmanager.proxmox import create_platform_client
from lxcmanager.reconciler import ConnectionManager, OperationReconciler
from lxcmanager.services import ContainerInventory, HostService


@dataclass
class Services:
    """Service graph for one process."""

    connection: ConnectionManager
    inventory: ContainerInventory
    reconciler: OperationReconciler
    host: HostService
    serialize_per_container: bool = False


_services: Services | None = None


def build_services(settings: Settings) -> Services:
    """Wire the service graph (no I/O)."""
    connection = ConnectionManager(lambda: create_platform_client(settings.proxmox))
    inventory = ContainerInventory(connection)
    return Services(
        connection=connection,
        inventory=inventory,
        reconciler=OperationReconciler(
            connection,
            inventory,
            settings.reconciler,
            slow_threshold_ms=settings.logging.slow_threshold_ms,
        ),
        host=HostService(connection),
        serialize_per_container=settings.reconciler.serialize_per_container,
    )


async def init_services(settings: Settings) -> Services:
    """Build services and connect to Proxmox.

    Must be called during app startup.

    Raises:
        ConnectionFailedError: If the initial probe fails (fatal at startup).
    """
    global _services
    services = build_services(settings)
    await services.connection.connect()
    _services = services
    return services


async def close_services() -> None:
    """Close the Proxmox session."""
    global _services
    if _services:
        await _services.connection.close()
        _services = None


def get_services() -> Services:
    """Get the shared services.

    Raises:
        RuntimeError: If called before init_services().
    """
    if _services is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _services


def reset_services() -> None:
    """Reset services (for testing)."""
    global _services
    _services = None
