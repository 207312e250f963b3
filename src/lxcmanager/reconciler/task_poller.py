"""Task Poller - wait for a platform task (UPID) to finish.

Algorithm:
1. Empty handle -> synchronous completion, no status query
2. Query status up to max_attempts times, pausing interval_ms after each
   non-terminal answer
3. Status query fails -> one more pause, then return (lenient fallback:
   the action itself may already have succeeded)
4. Attempts exhausted -> warn and return

Never raises for polling problems. Worst case wall time is
max_attempts * interval_ms plus one status round-trip per attempt.
"""

import logging

from lxcmanager.app.metrics import TASK_POLL_OUTCOMES
from lxcmanager.core.cancellation import CancelToken, pause
from lxcmanager.core.errors import ErrorKind
from lxcmanager.core.logging_schema import LogEvent
from lxcmanager.core.models import PollOutcome, TaskStatus
from lxcmanager.reconciler.connection import ConnectionManager

logger = logging.getLogger(__name__)

# Proxmox reports finished tasks (successful or not) as "stopped"
TERMINAL_STATUS = "stopped"


def classify_task_status(raw: str | None) -> TaskStatus:
    if raw == TERMINAL_STATUS:
        return TaskStatus.TERMINAL
    return TaskStatus.RUNNING


class TaskPoller:
    """Bounded polling loop for one task handle."""

    DEFAULT_MAX_ATTEMPTS = 30
    DEFAULT_INTERVAL_MS = 500

    def __init__(self, connection: ConnectionManager) -> None:
        self._connection = connection

    async def poll(
        self,
        upid: str | None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        cancel: CancelToken | None = None,
    ) -> PollOutcome:
        outcome = await self._poll(upid, max_attempts, interval_ms / 1000, cancel)
        TASK_POLL_OUTCOMES.labels(outcome=outcome.value).inc()
        return outcome

    async def _poll(
        self,
        upid: str | None,
        max_attempts: int,
        interval_s: float,
        cancel: CancelToken | None,
    ) -> PollOutcome:
        if not upid:
            return PollOutcome.SYNCHRONOUS

        for attempt in range(1, max_attempts + 1):
            if cancel is not None and cancel.cancelled:
                return self._cancelled(upid, attempt)

            try:
                client = await self._connection.ensure_connected()
                raw = await client.task_status(upid)
            except Exception as exc:
                # Task endpoint may not be available, fall back to a simple wait
                logger.warning(
                    "Task status unavailable, falling back to fixed wait",
                    extra={
                        "event": LogEvent.TASK_POLL_UNAVAILABLE,
                        "upid": upid,
                        "attempt": attempt,
                        "status": TaskStatus.UNAVAILABLE,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
                if not await pause(interval_s, cancel):
                    return self._cancelled(upid, attempt)
                return PollOutcome.UNAVAILABLE

            if classify_task_status(raw) == TaskStatus.TERMINAL:
                logger.debug(
                    "Task completed",
                    extra={"event": LogEvent.TASK_COMPLETED, "upid": upid, "attempt": attempt},
                )
                return PollOutcome.COMPLETED

            if not await pause(interval_s, cancel):
                return self._cancelled(upid, attempt)

        logger.warning(
            "Task polling timeout, continuing anyway",
            extra={
                "event": LogEvent.TASK_POLL_TIMEOUT,
                "error_class": ErrorKind.POLLING_TIMEOUT,
                "upid": upid,
                "max_attempts": max_attempts,
            },
        )
        return PollOutcome.TIMED_OUT

    @staticmethod
    def _cancelled(upid: str, attempt: int) -> PollOutcome:
        logger.info(
            "Task polling cancelled",
            extra={"event": LogEvent.TASK_POLL_CANCELLED, "upid": upid, "attempt": attempt},
        )
        return PollOutcome.CANCELLED
