"""Proxmox VE HTTP client.

Talks to the ``/api2/json`` REST API with an API token. Lifecycle calls
return a task UPID that the reconciler polls for completion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import quote

import httpx

from lxcmanager.app.config import ProxmoxConfig
from lxcmanager.app.metrics import REMOTE_CALL_ERRORS
from lxcmanager.core.errors import TransportError
from lxcmanager.core.interfaces import PlatformClient

logger = logging.getLogger(__name__)


@dataclass
class ProxmoxClientConfig:
    """Proxmox connection configuration.

    ``verify_ssl`` is scoped to this client; Proxmox ships self-signed
    certificates, so it defaults to off.
    """

    host: str
    node: str
    token_id: str
    token_secret: str
    verify_ssl: bool = False
    timeout: float = 30.0


class ProxmoxClient(PlatformClient):
    """HTTP client for the Proxmox VE API (one node)."""

    def __init__(
        self,
        config: ProxmoxClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        host = self._config.host
        if not host.startswith(("http://", "https://")):
            host = f"https://{host}"
        return f"{host.rstrip('/')}/api2/json"

    def _get_headers(self) -> dict[str, str]:
        """Get request headers with API token."""
        return {
            "Authorization": f"PVEAPIToken={self._config.token_id}={self._config.token_secret}",
            "Accept": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._get_headers(),
                timeout=self._config.timeout,
                verify=self._config.verify_ssl,
                transport=self._transport,
            )
        return self._client

    def _node_path(self, suffix: str = "") -> str:
        return f"/nodes/{quote(self._config.node, safe='')}{suffix}"

    async def _request(
        self,
        method: Literal["get", "post", "delete"],
        path: str,
        *,
        operation: str,
    ) -> Any:
        """Make HTTP request and unwrap the ``data`` envelope.

        Raises:
            TransportError: On any network or HTTP status failure.
        """
        client = await self._get_client()
        try:
            resp = await getattr(client, method)(path)
            resp.raise_for_status()
            return resp.json().get("data")
        except httpx.HTTPStatusError as exc:
            REMOTE_CALL_ERRORS.labels(operation=operation).inc()
            raise TransportError(
                operation, exc, remote_status=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            REMOTE_CALL_ERRORS.labels(operation=operation).inc()
            raise TransportError(operation, exc) from exc
        except ValueError as exc:
            # Non-JSON body (e.g. proxy error page)
            REMOTE_CALL_ERRORS.labels(operation=operation).inc()
            raise TransportError(operation, exc) from exc

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # =========================================================================
    # Inventory
    # =========================================================================

    async def list_nodes(self) -> list[dict[str, Any]]:
        return await self._request("get", "/nodes", operation="list_nodes") or []

    async def list_containers(self) -> list[dict[str, Any]]:
        return (
            await self._request("get", self._node_path("/lxc"), operation="list_containers")
            or []
        )

    async def list_interfaces(self, vmid: int) -> list[dict[str, Any]]:
        return (
            await self._request(
                "get",
                self._node_path(f"/lxc/{vmid}/interfaces"),
                operation="list_interfaces",
            )
            or []
        )

    # =========================================================================
    # Lifecycle (return task UPID)
    # =========================================================================

    async def start(self, vmid: int) -> str | None:
        upid = await self._request(
            "post", self._node_path(f"/lxc/{vmid}/status/start"), operation="start"
        )
        logger.info("Started container %s, task: %s", vmid, upid)
        return upid

    async def stop(self, vmid: int) -> str | None:
        upid = await self._request(
            "post", self._node_path(f"/lxc/{vmid}/status/stop"), operation="stop"
        )
        logger.info("Stopped container %s, task: %s", vmid, upid)
        return upid

    async def delete(self, vmid: int) -> str | None:
        upid = await self._request(
            "delete", self._node_path(f"/lxc/{vmid}"), operation="delete"
        )
        logger.info("Deleted container %s, task: %s", vmid, upid)
        return upid

    async def task_status(self, upid: str) -> str:
        # UPIDs contain ':' and must be encoded as one path segment
        data = await self._request(
            "get",
            self._node_path(f"/tasks/{quote(upid, safe='')}/status"),
            operation="task_status",
        )
        return (data or {}).get("status", "")

    # =========================================================================
    # Host
    # =========================================================================

    async def node_status(self) -> dict[str, Any]:
        return await self._request("get", self._node_path("/status"), operation="node_status") or {}

    async def node_version(self) -> dict[str, Any]:
        return (
            await self._request("get", self._node_path("/version"), operation="node_version")
            or {}
        )


def create_platform_client(config: ProxmoxConfig) -> ProxmoxClient:
    """Build a client from PROXMOX_* settings."""
    return ProxmoxClient(
        ProxmoxClientConfig(
            host=config.host,
            node=config.node,
            token_id=config.token_id,
            token_secret=config.token_secret,
            verify_ssl=config.verify_ssl,
            timeout=config.timeout,
        )
    )
