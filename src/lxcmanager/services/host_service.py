"""Host node status summary."""

import asyncio
from typing import Any

from lxcmanager.core.models import CpuStats, HostStatus, UsageStats
from lxcmanager.reconciler.connection import ConnectionManager

NOT_AVAILABLE = "N/A"


def build_host_status(status: dict[str, Any], version: dict[str, Any]) -> HostStatus:
    """Map raw node status and version payloads to HostStatus."""
    cpuinfo = status.get("cpuinfo") or {}
    loadavg = list(status.get("loadavg") or [])
    loadavg += [0] * (3 - len(loadavg))

    return HostStatus(
        cpu=CpuStats(
            usage=round((status.get("cpu") or 0) * 100, 2),
            cores=cpuinfo.get("cpus") or 0,
            model=cpuinfo.get("model") or NOT_AVAILABLE,
            sockets=cpuinfo.get("sockets") or 0,
        ),
        memory=UsageStats.from_raw(status.get("memory")),
        swap=UsageStats.from_raw(status.get("swap"), zero_when_empty=True),
        disk=UsageStats.from_raw(status.get("rootfs")),
        load=[float(value or 0) for value in loadavg[:3]],
        io_delay=round((status.get("wait") or 0) * 100, 2),
        uptime=status.get("uptime") or 0,
        ksm_sharing=(status.get("ksm") or {}).get("shared") or 0,
        kernel=status.get("kversion") or NOT_AVAILABLE,
        boot_mode=(status.get("boot_info") or {}).get("mode") or NOT_AVAILABLE,
        pve_version=version.get("version") or NOT_AVAILABLE,
    )


class HostService:
    """Reads host status from the configured node."""

    def __init__(self, connection: ConnectionManager) -> None:
        self._connection = connection

    async def get_host_status(self) -> HostStatus:
        client = await self._connection.ensure_connected()
        status, version = await asyncio.gather(client.node_status(), client.node_version())
        return build_host_status(status, version)
