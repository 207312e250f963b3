"""Tests for domain models."""

import pytest
from pydantic import ValidationError

from lxcmanager.core.models import (
    ContainerSnapshot,
    ContainerStatus,
    LifecycleAction,
    NotFoundAfterOperation,
    UsageStats,
)


class TestContainerStatus:
    def test_parse_known(self) -> None:
        assert ContainerStatus.parse("running") == ContainerStatus.RUNNING
        assert ContainerStatus.parse("stopped") == ContainerStatus.STOPPED

    def test_parse_unknown(self) -> None:
        assert ContainerStatus.parse("paused") == ContainerStatus.UNKNOWN
        assert ContainerStatus.parse(None) == ContainerStatus.UNKNOWN


class TestContainerSnapshot:
    """Tests for ContainerSnapshot."""

    def test_address_requires_running(self) -> None:
        with pytest.raises(ValidationError):
            ContainerSnapshot(id=1, name="a", status=ContainerStatus.STOPPED, address="10.0.0.1")

    def test_running_with_address(self) -> None:
        snapshot = ContainerSnapshot(
            id=1, name="a", status=ContainerStatus.RUNNING, address="10.0.0.1"
        )
        assert snapshot.is_running
        assert snapshot.address == "10.0.0.1"

    def test_frozen(self) -> None:
        snapshot = ContainerSnapshot(id=1, name="a", status=ContainerStatus.STOPPED)
        with pytest.raises(ValidationError):
            snapshot.name = "b"

    def test_from_raw_maps_fields(self, raw_container) -> None:
        raw = raw_container(
            101,
            "running",
            uptime=3600,
            mem=1024,
            maxmem=2048,
            cpu=0.25,
            cpus=2,
            diskread=10,
            diskwrite=20,
        )

        snapshot = ContainerSnapshot.from_raw(raw, "10.0.0.5")

        assert snapshot.id == 101
        assert snapshot.name == "ct-101"
        assert snapshot.status == ContainerStatus.RUNNING
        assert snapshot.uptime_seconds == 3600
        assert snapshot.memory_used_bytes == 1024
        assert snapshot.memory_max_bytes == 2048
        assert snapshot.cpu_fraction == 0.25
        assert snapshot.cpu_count == 2
        assert snapshot.disk_read_bytes == 10
        assert snapshot.disk_write_bytes == 20
        assert snapshot.address == "10.0.0.5"

    def test_from_raw_defaults(self) -> None:
        snapshot = ContainerSnapshot.from_raw({"vmid": "105", "status": "stopped"})

        assert snapshot.id == 105
        assert snapshot.name == "CT-105"
        assert snapshot.uptime_seconds == 0
        assert snapshot.cpu_count == 1

    def test_from_raw_keeps_fractional_cpus(self, raw_container) -> None:
        snapshot = ContainerSnapshot.from_raw(raw_container(101, cpus=0.5))
        assert snapshot.cpu_count == 0.5

    def test_from_raw_drops_address_when_not_running(self, raw_container) -> None:
        snapshot = ContainerSnapshot.from_raw(raw_container(101, "stopped"), "10.0.0.5")
        assert snapshot.address is None


class TestNotFoundAfterOperation:
    def test_message(self) -> None:
        marker = NotFoundAfterOperation(action=LifecycleAction.STOP, container_id=9)
        assert marker.message == "Container not found after stop"


class TestUsageStats:
    def test_from_raw(self) -> None:
        stats = UsageStats.from_raw({"used": 1024**3, "total": 4 * 1024**3})

        assert stats.used_gb == 1.0
        assert stats.total_gb == 4.0
        assert stats.percentage == 25.0

    def test_zero_total(self) -> None:
        assert UsageStats.from_raw({"used": 0, "total": 0}).percentage == 0.0

    def test_zero_when_empty(self) -> None:
        assert UsageStats.from_raw(None, zero_when_empty=True).percentage == 0.0
