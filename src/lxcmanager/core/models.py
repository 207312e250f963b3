"""Domain models for containers, tasks and reconciliation results.

Snapshots are produced fresh on every list call and never cached.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, model_validator


class ContainerStatus(StrEnum):
    """Container status as reported by the platform."""

    RUNNING = "running"
    STOPPED = "stopped"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "ContainerStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class TaskStatus(StrEnum):
    """Observed status of an asynchronous platform task."""

    RUNNING = "running"
    TERMINAL = "terminal"
    UNAVAILABLE = "unavailable"


class ConnectionState(StrEnum):
    """Platform session state."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class LifecycleAction(StrEnum):
    """Lifecycle actions handled by the reconciler."""

    START = "start"
    STOP = "stop"
    DELETE = "delete"


class ReconcilePhase(StrEnum):
    """Phases of one reconciliation invocation.

    Idle -> ActionSubmitted -> TaskPolling -> [Converging] -> Settled
    """

    IDLE = "idle"
    ACTION_SUBMITTED = "action_submitted"
    TASK_POLLING = "task_polling"
    CONVERGING = "converging"
    SETTLED = "settled"


class PollOutcome(StrEnum):
    """How a task poll ended. None of these is an error."""

    SYNCHRONOUS = "synchronous"  # no task handle
    COMPLETED = "completed"
    UNAVAILABLE = "unavailable"  # status endpoint failed, lenient fallback
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class ContainerSnapshot(BaseModel):
    """Point-in-time view of one LXC container."""

    id: int
    name: str
    status: ContainerStatus
    uptime_seconds: int = 0
    memory_used_bytes: int = 0
    memory_max_bytes: int = 0
    cpu_fraction: float = 0.0
    # Fractional when a cpulimit is set (e.g. 0.5)
    cpu_count: float = 1.0
    disk_read_bytes: int = 0
    disk_write_bytes: int = 0
    address: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _address_requires_running(self) -> "ContainerSnapshot":
        if self.address is not None and self.status != ContainerStatus.RUNNING:
            raise ValueError("address is only set on running containers")
        return self

    @property
    def is_running(self) -> bool:
        return self.status == ContainerStatus.RUNNING

    @classmethod
    def from_raw(cls, raw: dict[str, Any], address: str | None = None) -> "ContainerSnapshot":
        """Build a snapshot from a raw ``/nodes/{node}/lxc`` entry.

        The address is dropped for containers that are not running.
        """
        vmid = int(raw["vmid"])
        status = ContainerStatus.parse(raw.get("status"))
        return cls(
            id=vmid,
            name=raw.get("name") or f"CT-{vmid}",
            status=status,
            uptime_seconds=int(raw.get("uptime") or 0),
            memory_used_bytes=int(raw.get("mem") or 0),
            memory_max_bytes=int(raw.get("maxmem") or 0),
            cpu_fraction=float(raw.get("cpu") or 0.0),
            cpu_count=float(raw.get("cpus") or 1),
            disk_read_bytes=int(raw.get("diskread") or 0),
            disk_write_bytes=int(raw.get("diskwrite") or 0),
            address=address if status == ContainerStatus.RUNNING else None,
        )


class NotFoundAfterOperation(BaseModel):
    """Soft result: the container was absent from the refreshed list.

    Returned instead of raised, so callers can render it alongside other
    containers.
    """

    action: LifecycleAction
    container_id: int

    model_config = {"frozen": True}

    @property
    def message(self) -> str:
        return f"Container not found after {self.action}"


class UsageStats(BaseModel):
    """Used/total pair with derived GB and percentage values."""

    used: int
    total: int
    used_gb: float
    total_gb: float
    percentage: float

    @classmethod
    def from_raw(cls, raw: dict[str, Any] | None, *, zero_when_empty: bool = False) -> "UsageStats":
        raw = raw or {}
        used = int(raw.get("used") or 0)
        total = int(raw.get("total") or 0)
        if zero_when_empty and total <= 0:
            percentage = 0.0
        else:
            percentage = round(used / (total or 1) * 100, 2)
        return cls(
            used=used,
            total=total,
            used_gb=round(used / 1024**3, 2),
            total_gb=round(total / 1024**3, 2),
            percentage=percentage,
        )


class CpuStats(BaseModel):
    usage: float
    cores: int
    model: str
    sockets: int


class HostStatus(BaseModel):
    """Host node status summary."""

    cpu: CpuStats
    memory: UsageStats
    swap: UsageStats
    disk: UsageStats
    load: list[float]
    io_delay: float
    uptime: int
    ksm_sharing: int
    kernel: str
    boot_mode: str
    pve_version: str
