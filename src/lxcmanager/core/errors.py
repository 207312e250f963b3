"""Error handling module for lxc-manager.

This module defines error kinds, error codes, exception classes, and
response models.

Error kinds are a closed set so callers branch on ``exc.kind`` instead of
message text:
- CONNECTION: session could not be established (fatal at startup)
- TRANSPORT: a remote call failed (always propagated)
- NOT_FOUND_AFTER_OPERATION: soft result value, never raised by the reconciler
- POLLING_TIMEOUT: logged only, never raised

Error Response Format:
{
    "error": {
        "code": "OPERATION_FAILED",
        "message": "start of container 101 failed"
    }
}
"""

from enum import Enum, StrEnum

import httpx
from pydantic import BaseModel


class ErrorKind(StrEnum):
    """Closed set of error kinds."""

    CONNECTION = "connection"
    TRANSPORT = "transport"
    NOT_FOUND_AFTER_OPERATION = "not_found_after_operation"
    POLLING_TIMEOUT = "polling_timeout"


class ErrorCode(str, Enum):
    """Error codes."""

    CONFIGURATION_INVALID = "CONFIGURATION_INVALID"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    TRANSPORT_FAILED = "TRANSPORT_FAILED"
    OPERATION_FAILED = "OPERATION_FAILED"
    CONTAINER_NOT_FOUND = "CONTAINER_NOT_FOUND"


class ErrorDetail(BaseModel):
    """Error detail containing code and message."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    """Error response format."""

    error: ErrorDetail


class LxcManagerError(Exception):
    """Base exception for lxc-manager.

    Attributes:
        code: The error code from ErrorCode enum
        message: Human-readable error message
        status_code: HTTP status code to return
    """

    kind: ErrorKind | None = None

    def __init__(self, code: ErrorCode, message: str, status_code: int) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse model."""
        return ErrorResponse(
            error=ErrorDetail(code=self.code.value, message=self.message)
        )


class ConfigurationError(LxcManagerError):
    """500 - Required configuration is missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            ErrorCode.CONFIGURATION_INVALID,
            f"Missing required environment variables: {', '.join(missing)}",
            500,
        )


class ConnectionFailedError(LxcManagerError):
    """503 Service Unavailable - Platform session could not be established."""

    kind = ErrorKind.CONNECTION

    def __init__(
        self, message: str = "Proxmox connection failed. Check your credentials."
    ) -> None:
        super().__init__(ErrorCode.CONNECTION_FAILED, message, 503)


class TransportError(LxcManagerError):
    """502 Bad Gateway - A remote platform call failed.

    Attributes:
        operation: Name of the remote call (e.g., "list_containers")
        cause: Underlying exception
        remote_status: HTTP status returned by the platform, if any
    """

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        operation: str,
        cause: Exception,
        remote_status: int | None = None,
    ) -> None:
        self.operation = operation
        self.cause = cause
        self.remote_status = remote_status
        detail = f"HTTP {remote_status}" if remote_status else type(cause).__name__
        super().__init__(
            ErrorCode.TRANSPORT_FAILED,
            f"Proxmox call {operation} failed ({detail})",
            502,
        )

    @property
    def is_connection_failure(self) -> bool:
        """True when the session itself is unusable (network error or 401).

        403 is a per-object permission failure (e.g. VM.PowerMgmt on one
        container) and leaves the session intact.
        """
        if self.remote_status == 401:
            return True
        return isinstance(self.cause, httpx.TransportError)


class OperationError(LxcManagerError):
    """502 Bad Gateway - A lifecycle operation failed hard.

    Attributes:
        action: Lifecycle action ("start", "stop", "delete")
        container_id: Target container ID
        cause: Underlying error (ConnectionFailedError or TransportError)
    """

    def __init__(self, action: str, container_id: int, cause: Exception) -> None:
        self.action = action
        self.container_id = container_id
        self.cause = cause
        super().__init__(
            ErrorCode.OPERATION_FAILED,
            f"Failed to {action} container {container_id}",
            502,
        )

    @property
    def kind(self) -> ErrorKind:  # type: ignore[override]
        return getattr(self.cause, "kind", None) or ErrorKind.TRANSPORT


class ContainerNotFoundError(LxcManagerError):
    """404 Not Found - Container not found."""

    def __init__(self, message: str = "Container not found") -> None:
        super().__init__(ErrorCode.CONTAINER_NOT_FOUND, message, 404)
