"""Convergence Waiter - wait for a derived attribute to show up.

Address assignment happens after the start task has finished, so the
reconciler re-lists containers until the predicate holds or attempts run
out. Running out is not an error: the caller gets the last snapshot and
treats a missing address as "not yet known".
"""

import logging
from collections.abc import Callable

from lxcmanager.app.metrics import CONVERGENCE_ATTEMPTS
from lxcmanager.core.cancellation import CancelToken, pause
from lxcmanager.core.logging_schema import LogEvent
from lxcmanager.core.models import ContainerSnapshot
from lxcmanager.services.inventory import ContainerInventory

logger = logging.getLogger(__name__)

SnapshotPredicate = Callable[[ContainerSnapshot], bool]


def has_address(snapshot: ContainerSnapshot) -> bool:
    return snapshot.address is not None


class ConvergenceWaiter:
    """Bounded retry loop over fresh container listings."""

    DEFAULT_MAX_ATTEMPTS = 5
    DEFAULT_INTERVAL_MS = 1000

    def __init__(self, inventory: ContainerInventory) -> None:
        self._inventory = inventory

    async def await_attribute(
        self,
        container_id: int,
        predicate: SnapshotPredicate = has_address,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        cancel: CancelToken | None = None,
    ) -> ContainerSnapshot | None:
        """Return the last observed snapshot (None if the container is absent).

        Listing failures propagate; the reconciler wraps them.
        """
        interval_s = interval_ms / 1000
        snapshot: ContainerSnapshot | None = None
        attempt = 0

        for attempt in range(1, max_attempts + 1):
            snapshot = await self._inventory.get_container(container_id)

            if snapshot is not None and predicate(snapshot):
                CONVERGENCE_ATTEMPTS.observe(attempt)
                logger.debug(
                    "Attribute converged",
                    extra={
                        "event": LogEvent.CONVERGENCE_COMPLETE,
                        "vmid": container_id,
                        "attempt": attempt,
                    },
                )
                return snapshot

            if attempt == max_attempts:
                break
            if not await pause(interval_s, cancel):
                break

        CONVERGENCE_ATTEMPTS.observe(attempt)
        logger.info(
            "Attribute not converged, returning last snapshot",
            extra={
                "event": LogEvent.CONVERGENCE_EXHAUSTED,
                "vmid": container_id,
                "attempts": attempt,
                "found": snapshot is not None,
            },
        )
        return snapshot
