"""Operation Reconciler - submit a lifecycle action and wait until it settles.

Flow per invocation:
    Idle -> ActionSubmitted -> TaskPolling -> [Converging (start only)] -> Settled

1. ensure_connected()
2. Submit the action, get a task handle (possibly empty)
3. Poll the task (never fails the operation)
4. start  -> wait for the address to appear
   stop   -> re-list and return the refreshed snapshot
   delete -> return None
5. Container missing from the refreshed list -> NotFoundAfterOperation

Hard failures of the action or of the listing raise OperationError. Every
loop is attempt-bounded, so each invocation reaches Settled.

Operations on the same container are not serialized here; see
lxcmanager.app.locks for the opt-in keyed lock.
"""

import logging
import time

from lxcmanager.app.config import ReconcilerConfig
from lxcmanager.app.metrics import OPERATION_DURATION
from lxcmanager.core.cancellation import CancelToken
from lxcmanager.core.errors import (
    ConnectionFailedError,
    OperationError,
    TransportError,
)
from lxcmanager.core.logging_schema import LogEvent
from lxcmanager.core.models import (
    ContainerSnapshot,
    LifecycleAction,
    NotFoundAfterOperation,
    ReconcilePhase,
)
from lxcmanager.reconciler.connection import ConnectionManager
from lxcmanager.reconciler.convergence import ConvergenceWaiter, has_address
from lxcmanager.reconciler.task_poller import TaskPoller
from lxcmanager.services.inventory import ContainerInventory

logger = logging.getLogger(__name__)

ReconcileResult = ContainerSnapshot | NotFoundAfterOperation | None


class OperationReconciler:
    """Runs lifecycle actions to a settled result."""

    def __init__(
        self,
        connection: ConnectionManager,
        inventory: ContainerInventory,
        config: ReconcilerConfig | None = None,
        slow_threshold_ms: float = 20000.0,
    ) -> None:
        self._connection = connection
        self._inventory = inventory
        self._config = config or ReconcilerConfig()
        self._slow_threshold_ms = slow_threshold_ms
        self._poller = TaskPoller(connection)
        self._waiter = ConvergenceWaiter(inventory)

    async def execute(
        self,
        action: LifecycleAction | str,
        container_id: int,
        cancel: CancelToken | None = None,
    ) -> ReconcileResult:
        """Run one lifecycle action.

        Returns:
            start/stop: the settled snapshot, or NotFoundAfterOperation
            delete: None

        Raises:
            OperationError: The action or the refresh listing failed.
        """
        action = LifecycleAction(action)
        start = time.monotonic()
        outcome = "failed"
        try:
            result = await self._execute(action, container_id, cancel)
            outcome = "not_found" if isinstance(result, NotFoundAfterOperation) else "settled"
            return result
        except (ConnectionFailedError, TransportError) as exc:
            if isinstance(exc, TransportError) and exc.is_connection_failure:
                await self._connection.invalidate()
            logger.error(
                "%s error (%s): %s",
                action.capitalize(),
                container_id,
                exc.message,
                extra={
                    "event": LogEvent.OPERATION_FAILED,
                    "action": action,
                    "vmid": container_id,
                    "error_class": exc.kind,
                },
            )
            raise OperationError(action, container_id, exc) from exc
        finally:
            duration = time.monotonic() - start
            OPERATION_DURATION.labels(action=action.value, outcome=outcome).observe(duration)
            if duration * 1000 > self._slow_threshold_ms:
                logger.warning(
                    "Slow operation detected",
                    extra={
                        "event": LogEvent.OPERATION_SLOW,
                        "action": action,
                        "vmid": container_id,
                        "duration_ms": duration * 1000,
                        "threshold_ms": self._slow_threshold_ms,
                    },
                )

    async def _execute(
        self,
        action: LifecycleAction,
        container_id: int,
        cancel: CancelToken | None,
    ) -> ReconcileResult:
        self._log_phase(ReconcilePhase.IDLE, action, container_id)
        client = await self._connection.ensure_connected()

        submit = {
            LifecycleAction.START: client.start,
            LifecycleAction.STOP: client.stop,
            LifecycleAction.DELETE: client.delete,
        }[action]
        upid = await submit(container_id)
        self._log_phase(
            ReconcilePhase.ACTION_SUBMITTED,
            action,
            container_id,
            event=LogEvent.ACTION_SUBMITTED,
            upid=upid,
        )

        self._log_phase(ReconcilePhase.TASK_POLLING, action, container_id, upid=upid)
        await self._poller.poll(
            upid,
            max_attempts=self._config.task_max_attempts,
            interval_ms=self._config.task_interval_ms,
            cancel=cancel,
        )

        if action == LifecycleAction.DELETE:
            self._settle(action, container_id)
            return None

        if action == LifecycleAction.START:
            self._log_phase(ReconcilePhase.CONVERGING, action, container_id)
            snapshot = await self._waiter.await_attribute(
                container_id,
                has_address,
                max_attempts=self._config.address_max_attempts,
                interval_ms=self._config.address_interval_ms,
                cancel=cancel,
            )
        else:
            snapshot = await self._inventory.get_container(container_id)

        if snapshot is None:
            logger.warning(
                "Container not found after %s",
                action,
                extra={
                    "event": LogEvent.OPERATION_NOT_FOUND,
                    "action": action,
                    "vmid": container_id,
                },
            )
            self._settle(action, container_id)
            return NotFoundAfterOperation(action=action, container_id=container_id)

        self._settle(action, container_id, status=snapshot.status, address=snapshot.address)
        return snapshot

    @staticmethod
    def _log_phase(
        phase: ReconcilePhase, action: LifecycleAction, container_id: int, **fields: object
    ) -> None:
        logger.debug(
            "Reconcile phase: %s",
            phase,
            extra={"phase": phase, "action": action, "vmid": container_id, **fields},
        )

    @staticmethod
    def _settle(action: LifecycleAction, container_id: int, **fields: object) -> None:
        logger.info(
            "Operation settled",
            extra={
                "event": LogEvent.OPERATION_SETTLED,
                "phase": ReconcilePhase.SETTLED,
                "action": action,
                "vmid": container_id,
                **fields,
            },
        )
