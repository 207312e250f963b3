"""Platform session management.

One ConnectionManager per process, constructed explicitly and passed to
whoever needs the platform (no module-level singleton). The session is
read concurrently by any number of reconciliations; only the initial
probe is guarded so concurrent first calls build a single client.
"""

import asyncio
import logging
from collections.abc import Callable

from lxcmanager.core.errors import ConnectionFailedError, TransportError
from lxcmanager.core.interfaces import PlatformClient
from lxcmanager.core.logging_schema import LogEvent
from lxcmanager.core.models import ConnectionState

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Lazily establishes and caches one authenticated platform session.

    State only moves to CONNECTED through a successful probe, and only back
    to DISCONNECTED through invalidate() after a hard failure.
    """

    def __init__(self, client_factory: Callable[[], PlatformClient]) -> None:
        self._client_factory = client_factory
        self._client: PlatformClient | None = None
        self._state = ConnectionState.DISCONNECTED
        self._connect_lock = asyncio.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def client(self) -> PlatformClient:
        """Connected client.

        Raises:
            ConnectionFailedError: If connect() has not succeeded yet.
        """
        if self._client is None or not self.is_connected:
            raise ConnectionFailedError("Proxmox client not connected")
        return self._client

    async def connect(self) -> None:
        """Build a session and probe it with a node listing. Idempotent.

        Raises:
            ConnectionFailedError: If the probe fails. The state stays
                DISCONNECTED so a later call can retry.
        """
        async with self._connect_lock:
            if self.is_connected:
                return

            client = self._client_factory()
            try:
                await client.list_nodes()
            except TransportError as exc:
                await client.close()
                logger.error(
                    "Failed to connect to Proxmox",
                    extra={
                        "event": LogEvent.CONNECTION_FAILED,
                        "error": exc.message,
                        "remote_status": exc.remote_status,
                    },
                )
                raise ConnectionFailedError() from exc

            self._client = client
            self._state = ConnectionState.CONNECTED
            logger.info("Connected to Proxmox", extra={"event": LogEvent.CONNECTED})

    async def ensure_connected(self) -> PlatformClient:
        """Connect if needed and return the client."""
        if not self.is_connected:
            await self.connect()
        return self.client

    async def invalidate(self) -> None:
        """Drop the session after a hard failure; the next call re-probes."""
        if not self.is_connected:
            return
        self._state = ConnectionState.DISCONNECTED
        client, self._client = self._client, None
        if client is not None:
            await client.close()
        logger.warning(
            "Proxmox session invalidated",
            extra={"event": LogEvent.CONNECTION_INVALIDATED},
        )

    async def close(self) -> None:
        """Close the session on shutdown."""
        client, self._client = self._client, None
        self._state = ConnectionState.DISCONNECTED
        if client is not None:
            await client.close()
