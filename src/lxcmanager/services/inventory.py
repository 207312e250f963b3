"""Container inventory - fresh snapshots with derived network addresses.

Every call hits the platform; nothing is cached.
"""

import asyncio
import logging
import re
from typing import Any

from lxcmanager.core.errors import TransportError
from lxcmanager.core.interfaces import PlatformClient
from lxcmanager.core.logging_schema import LogEvent
from lxcmanager.core.models import ContainerSnapshot, ContainerStatus
from lxcmanager.reconciler.connection import ConnectionManager

logger = logging.getLogger(__name__)

_CIDR_SUFFIX = re.compile(r"/\d+$")
LOOPBACK = "lo"


def derive_address(interfaces: list[dict[str, Any]]) -> str | None:
    """First non-loopback IPv4 address, without its CIDR suffix."""
    for iface in interfaces:
        inet = iface.get("inet")
        if iface.get("name") != LOOPBACK and inet:
            return _CIDR_SUFFIX.sub("", inet)
    return None


class ContainerInventory:
    """Lists containers on the configured node."""

    def __init__(self, connection: ConnectionManager) -> None:
        self._connection = connection

    async def list_containers(self) -> list[ContainerSnapshot]:
        """List all containers, sorted by ID.

        Addresses are looked up only for running containers. A failed
        interface lookup leaves the address empty.

        Raises:
            ConnectionFailedError: If the session cannot be established.
            TransportError: If the container listing fails.
        """
        client = await self._connection.ensure_connected()
        raw_containers = await client.list_containers()

        addresses = await asyncio.gather(
            *[self._lookup_address(client, raw) for raw in raw_containers]
        )
        snapshots = [
            ContainerSnapshot.from_raw(raw, address)
            for raw, address in zip(raw_containers, addresses)
        ]
        return sorted(snapshots, key=lambda s: s.id)

    async def get_container(self, vmid: int) -> ContainerSnapshot | None:
        """Fresh snapshot of one container, or None if it is not listed."""
        for snapshot in await self.list_containers():
            if snapshot.id == vmid:
                return snapshot
        return None

    @staticmethod
    async def _lookup_address(client: PlatformClient, raw: dict[str, Any]) -> str | None:
        if ContainerStatus.parse(raw.get("status")) != ContainerStatus.RUNNING:
            return None
        vmid = raw["vmid"]
        try:
            interfaces = await client.list_interfaces(vmid)
        except TransportError as exc:
            logger.warning(
                "Could not fetch IP for container %s",
                vmid,
                extra={
                    "event": LogEvent.ADDRESS_LOOKUP_FAILED,
                    "vmid": vmid,
                    "error": exc.message,
                },
            )
            return None
        return derive_address(interfaces)
