"""Per-container lock for lifecycle actions.

The reconciler lets operations on the same container interleave. When
RECONCILER_SERIALIZE_PER_CONTAINER is set, the API layer takes this lock
around each action so a start and a stop on one container run in order.

A lock lives only while some action holds or waits for it, so deleted
containers leave nothing behind.
"""

import asyncio
import contextlib
from collections.abc import AsyncIterator

_container_locks: dict[int, asyncio.Lock] = {}
_lock_users: dict[int, int] = {}


def get_container_lock(vmid: int) -> asyncio.Lock:
    """Get or create a per-container lock."""
    if vmid not in _container_locks:
        _container_locks[vmid] = asyncio.Lock()
    return _container_locks[vmid]


@contextlib.asynccontextmanager
async def container_guard(vmid: int, enabled: bool) -> AsyncIterator[None]:
    """Hold the container lock when serialization is enabled."""
    if not enabled:
        yield
        return

    lock = get_container_lock(vmid)
    _lock_users[vmid] = _lock_users.get(vmid, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _lock_users[vmid] -= 1
        if _lock_users[vmid] == 0:
            del _lock_users[vmid]
            del _container_locks[vmid]
