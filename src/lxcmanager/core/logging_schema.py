"""Logging field schema - v1.0

Standard fields (added to all logs):
- service: Service name (lxc-manager)
- event: Event type (operation_settled, task_poll_timeout, etc.)
- duration_ms: Duration in milliseconds

High cardinality fields (OK in logs, NOT in metric labels):
- vmid: Container ID
- upid: Proxmox task ID
"""

from enum import StrEnum


class LogEvent(StrEnum):
    """Standard log event types.

    Used with logger.info/warning/error extra dict:
        logger.info("message", extra={"event": LogEvent.OPERATION_SETTLED, ...})
    """

    # Connection events
    CONNECTED = "connected"
    CONNECTION_FAILED = "connection_failed"
    CONNECTION_INVALIDATED = "connection_invalidated"

    # Reconciler events
    ACTION_SUBMITTED = "action_submitted"
    TASK_COMPLETED = "task_completed"
    TASK_POLL_UNAVAILABLE = "task_poll_unavailable"
    TASK_POLL_TIMEOUT = "task_poll_timeout"
    TASK_POLL_CANCELLED = "task_poll_cancelled"
    CONVERGENCE_COMPLETE = "convergence_complete"
    CONVERGENCE_EXHAUSTED = "convergence_exhausted"
    OPERATION_SETTLED = "operation_settled"
    OPERATION_NOT_FOUND = "operation_not_found"
    OPERATION_FAILED = "operation_failed"
    OPERATION_SLOW = "operation_slow"

    # Inventory events
    ADDRESS_LOOKUP_FAILED = "address_lookup_failed"

    # Lifecycle events
    APP_STARTED = "app_started"
    APP_STOPPED = "app_stopped"

    # Error events
    LXC_MANAGER_ERROR = "lxc_manager_error"
    UNHANDLED_EXCEPTION = "unhandled_exception"
