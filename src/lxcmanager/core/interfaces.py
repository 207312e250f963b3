"""Platform client interface.

This is the single interface the reconciler uses to talk to the
virtualization platform. Payloads are returned raw (as the platform sends
them); mapping to domain models happens in the services layer.
"""

from abc import ABC, abstractmethod
from typing import Any


class PlatformClient(ABC):
    """Remote calls against one platform node.

    Implementations raise ``TransportError`` for any failed call.
    """

    @abstractmethod
    async def list_nodes(self) -> list[dict[str, Any]]:
        """List cluster nodes. Used as a lightweight connection probe."""

    @abstractmethod
    async def list_containers(self) -> list[dict[str, Any]]:
        """List raw LXC entries (vmid, status, uptime, mem, maxmem, cpu, ...)."""

    @abstractmethod
    async def list_interfaces(self, vmid: int) -> list[dict[str, Any]]:
        """List network interfaces ({name, inet?}) of a container."""

    @abstractmethod
    async def start(self, vmid: int) -> str | None:
        """Start a container. Returns a task handle, possibly empty."""

    @abstractmethod
    async def stop(self, vmid: int) -> str | None:
        """Stop a container. Returns a task handle, possibly empty."""

    @abstractmethod
    async def delete(self, vmid: int) -> str | None:
        """Delete a container. Returns a task handle, possibly empty."""

    @abstractmethod
    async def task_status(self, upid: str) -> str:
        """Get task status ("running", "stopped", ...)."""

    @abstractmethod
    async def node_status(self) -> dict[str, Any]:
        """Get host node status (cpu, memory, swap, rootfs, loadavg, ...)."""

    @abstractmethod
    async def node_version(self) -> dict[str, Any]:
        """Get platform version info."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP session."""
