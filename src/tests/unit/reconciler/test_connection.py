"""Tests for ConnectionManager."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from lxcmanager.core.errors import ConnectionFailedError, TransportError
from lxcmanager.core.models import ConnectionState
from lxcmanager.reconciler.connection import ConnectionManager


class TestConnectionManager:
    """Tests for session establishment and invalidation."""

    async def test_starts_disconnected(self, connection: ConnectionManager) -> None:
        assert connection.state == ConnectionState.DISCONNECTED
        with pytest.raises(ConnectionFailedError):
            _ = connection.client

    async def test_connect_probes_node_listing(
        self, connection: ConnectionManager, mock_client: AsyncMock
    ) -> None:
        await connection.connect()

        assert connection.is_connected
        assert connection.client is mock_client
        mock_client.list_nodes.assert_awaited_once()

    async def test_connect_is_idempotent(
        self, connection: ConnectionManager, mock_client: AsyncMock
    ) -> None:
        """Second connect reuses the session without a new probe."""
        await connection.connect()
        await connection.connect()

        mock_client.list_nodes.assert_awaited_once()

    async def test_concurrent_first_calls_build_one_client(self, mock_client: AsyncMock) -> None:
        factory_calls = 0

        def factory():
            nonlocal factory_calls
            factory_calls += 1
            return mock_client

        connection = ConnectionManager(factory)

        clients = await asyncio.gather(*[connection.ensure_connected() for _ in range(5)])

        assert factory_calls == 1
        assert all(c is mock_client for c in clients)

    async def test_probe_failure_raises_and_stays_disconnected(
        self, connection: ConnectionManager, mock_client: AsyncMock
    ) -> None:
        cause = TransportError("list_nodes", ValueError("denied"), remote_status=401)
        mock_client.list_nodes.side_effect = cause

        with pytest.raises(ConnectionFailedError) as exc_info:
            await connection.connect()

        assert exc_info.value.__cause__ is cause
        assert exc_info.value.message == "Proxmox connection failed. Check your credentials."
        assert connection.state == ConnectionState.DISCONNECTED
        mock_client.close.assert_awaited_once()

    async def test_retry_after_probe_failure(
        self, connection: ConnectionManager, mock_client: AsyncMock
    ) -> None:
        mock_client.list_nodes.side_effect = [
            TransportError("list_nodes", httpx.ConnectError("refused")),
            [{"node": "pve"}],
        ]

        with pytest.raises(ConnectionFailedError):
            await connection.connect()
        await connection.connect()

        assert connection.is_connected

    async def test_invalidate_forces_new_probe(
        self, connection: ConnectionManager, mock_client: AsyncMock
    ) -> None:
        await connection.ensure_connected()

        await connection.invalidate()

        assert connection.state == ConnectionState.DISCONNECTED
        mock_client.close.assert_awaited_once()

        await connection.ensure_connected()
        assert mock_client.list_nodes.await_count == 2

    async def test_invalidate_when_disconnected_is_noop(
        self, connection: ConnectionManager, mock_client: AsyncMock
    ) -> None:
        await connection.invalidate()

        mock_client.close.assert_not_called()

    async def test_close(self, connection: ConnectionManager, mock_client: AsyncMock) -> None:
        await connection.connect()

        await connection.close()

        assert not connection.is_connected
        mock_client.close.assert_awaited_once()
