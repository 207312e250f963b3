"""Prometheus metrics definitions for lxc-manager.

Tracks reconciliation latency and how tasks and address convergence end.
"""

from prometheus_client import Counter, Histogram

# =============================================================================
# Histogram Buckets
# =============================================================================
# Lifecycle operations: task polling (<=15s) plus convergence (<=5s)
_BUCKETS_OPERATION = (
    0.1, 0.25, 0.5, 1, 2,
    3, 5, 8, 12, 16,
    20, 30,
)  # 12 buckets

# =============================================================================
# Reconciler Metrics
# =============================================================================

OPERATION_DURATION = Histogram(
    "lxcmanager_operation_duration_seconds",
    "Duration of lifecycle reconciliations",
    ["action", "outcome"],  # action: start/stop/delete, outcome: settled/not_found/failed
    buckets=_BUCKETS_OPERATION,
)

TASK_POLL_OUTCOMES = Counter(
    "lxcmanager_task_poll_outcomes_total",
    "Task poll results",
    ["outcome"],  # synchronous, completed, unavailable, timed_out, cancelled
)

CONVERGENCE_ATTEMPTS = Histogram(
    "lxcmanager_convergence_attempts",
    "List fetches needed before the address appeared or attempts ran out",
    buckets=(1, 2, 3, 4, 5, 7, 10),
)

# =============================================================================
# Platform Metrics
# =============================================================================

REMOTE_CALL_ERRORS = Counter(
    "lxcmanager_remote_call_errors_total",
    "Failed Proxmox API calls",
    ["operation"],
)
