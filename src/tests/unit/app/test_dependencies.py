"""Tests for service wiring."""

from unittest.mock import AsyncMock, patch

import pytest

from lxcmanager.app import dependencies
from lxcmanager.app.config import ProxmoxConfig, ReconcilerConfig, Settings
from lxcmanager.core.errors import ConnectionFailedError, TransportError


@pytest.fixture
def settings() -> Settings:
    return Settings(
        proxmox=ProxmoxConfig(host="pve:8006", node="pve", token_id="t", token_secret="s"),
        reconciler=ReconcilerConfig(serialize_per_container=True),
    )


@pytest.fixture(autouse=True)
def _reset() -> None:
    dependencies.reset_services()
    yield
    dependencies.reset_services()


class TestServices:
    def test_get_services_before_init(self) -> None:
        with pytest.raises(RuntimeError):
            dependencies.get_services()

    def test_build_services_does_not_connect(self, settings: Settings) -> None:
        with patch.object(dependencies, "create_platform_client") as factory:
            services = dependencies.build_services(settings)

        factory.assert_not_called()
        assert not services.connection.is_connected
        assert services.serialize_per_container is True

    async def test_init_and_close(self, settings: Settings, mock_client: AsyncMock) -> None:
        with patch.object(dependencies, "create_platform_client", return_value=mock_client):
            services = await dependencies.init_services(settings)

        assert dependencies.get_services() is services
        assert services.connection.is_connected

        await dependencies.close_services()

        mock_client.close.assert_awaited_once()
        with pytest.raises(RuntimeError):
            dependencies.get_services()

    async def test_init_fails_on_probe_error(
        self, settings: Settings, mock_client: AsyncMock
    ) -> None:
        mock_client.list_nodes.side_effect = TransportError(
            "list_nodes", ValueError("denied"), remote_status=401
        )

        with patch.object(dependencies, "create_platform_client", return_value=mock_client):
            with pytest.raises(ConnectionFailedError):
                await dependencies.init_services(settings)

        with pytest.raises(RuntimeError):
            dependencies.get_services()
