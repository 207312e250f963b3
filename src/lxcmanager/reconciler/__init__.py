"""Asynchronous operation reconciler.

Submits lifecycle actions, waits for the platform task to finish, then
waits for derived attributes (network address) to converge.
"""

from lxcmanager.reconciler.connection import ConnectionManager
from lxcmanager.reconciler.convergence import ConvergenceWaiter, has_address
from lxcmanager.reconciler.operation import OperationReconciler, ReconcileResult
from lxcmanager.reconciler.task_poller import TaskPoller

__all__ = [
    "ConnectionManager",
    "ConvergenceWaiter",
    "OperationReconciler",
    "ReconcileResult",
    "TaskPoller",
    "has_address",
]
