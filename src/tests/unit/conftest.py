"""Fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from lxcmanager.app.config import ReconcilerConfig
from lxcmanager.core.interfaces import PlatformClient
from lxcmanager.reconciler.connection import ConnectionManager
from lxcmanager.services.inventory import ContainerInventory


def make_raw_container(vmid: int, status: str = "stopped", **fields: Any) -> dict[str, Any]:
    """Raw /nodes/{node}/lxc entry as Proxmox returns it."""
    raw = {
        "vmid": vmid,
        "name": f"ct-{vmid}",
        "status": status,
        "uptime": 0,
        "mem": 0,
        "maxmem": 536870912,
        "cpu": 0.0,
        "cpus": 1,
        "diskread": 0,
        "diskwrite": 0,
    }
    raw.update(fields)
    return raw


@pytest.fixture
def raw_container():
    """Factory for raw container entries."""
    return make_raw_container


@pytest.fixture
def mock_client() -> AsyncMock:
    """Mock PlatformClient for testing."""
    client = AsyncMock(spec=PlatformClient)
    client.list_nodes = AsyncMock(return_value=[{"node": "pve"}])
    client.list_containers = AsyncMock(return_value=[])
    client.list_interfaces = AsyncMock(return_value=[])
    client.start = AsyncMock(return_value="UPID:pve:start")
    client.stop = AsyncMock(return_value="UPID:pve:stop")
    client.delete = AsyncMock(return_value="UPID:pve:delete")
    client.task_status = AsyncMock(return_value="stopped")
    client.node_status = AsyncMock(return_value={})
    client.node_version = AsyncMock(return_value={})
    client.close = AsyncMock()
    return client


@pytest.fixture
def connection(mock_client: AsyncMock) -> ConnectionManager:
    """ConnectionManager backed by the mock client (connects lazily)."""
    return ConnectionManager(lambda: mock_client)


@pytest.fixture
def inventory(connection: ConnectionManager) -> ContainerInventory:
    return ContainerInventory(connection)


@pytest.fixture
def reconciler_config() -> ReconcilerConfig:
    """Default policy: 30 x 500ms task polling, 5 x 1000ms address wait."""
    return ReconcilerConfig(
        task_max_attempts=30,
        task_interval_ms=500,
        address_max_attempts=5,
        address_interval_ms=1000,
    )


@pytest.fixture
def mock_pause(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    """Replace suspension in both wait loops; records requested seconds."""
    pause = AsyncMock(return_value=True)
    monkeypatch.setattr("lxcmanager.reconciler.task_poller.pause", pause)
    monkeypatch.setattr("lxcmanager.reconciler.convergence.pause", pause)
    return pause
