"""Logging configuration for lxc-manager.

Supports two formats:
- text: Human-readable for local development
- json: Structured logging for production (log aggregation)

Reconciler logs carry the container and task in ``extra`` (vmid, upid), so
the same message text is shared by every container. Rate limiting keys on
those fields too; one container's warning never hides another's.
"""

import logging
import sys
import time
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger import json as jsonlogger

from lxcmanager.app.config import LoggingConfig
from lxcmanager.core.logging_schema import LogEvent

# Extra fields that identify what a record is about
CONTEXT_FIELDS = ("event", "vmid", "upid", "action")

# Events that are never rate limited
UNLIMITED_EVENTS = frozenset({LogEvent.TASK_POLL_TIMEOUT, LogEvent.OPERATION_FAILED})

RecordKey = tuple[Any, ...]


def record_key(record: logging.LogRecord) -> RecordKey:
    """Identity of a record for duplicate suppression."""
    context = tuple(getattr(record, field, None) for field in CONTEXT_FIELDS)
    return (record.name, record.levelno, record.getMessage(), *context)


class RateLimitFilter(logging.Filter):
    """Drop a record when an identical one passed within the window.

    Identity is logger, level, message and the context extras
    (see record_key). ERROR and above, and UNLIMITED_EVENTS, always pass.

    Args:
        rate_limit_seconds: Minimum seconds between identical records (default: 5)
        max_cache_size: Maximum number of keys to remember (default: 1000)
    """

    def __init__(
        self,
        rate_limit_seconds: float = 5.0,
        max_cache_size: int = 1000,
        name: str = "",
    ) -> None:
        super().__init__(name)
        self._window = rate_limit_seconds
        self._max_keys = max_cache_size
        self._last_log: OrderedDict[RecordKey, float] = OrderedDict()

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.ERROR:
            return True
        if getattr(record, "event", None) in UNLIMITED_EVENTS:
            return True

        key = record_key(record)
        now = time.monotonic()
        last = self._last_log.get(key)
        if last is not None and now - last < self._window:
            return False

        self._last_log[key] = now
        self._last_log.move_to_end(key)
        while len(self._last_log) > self._max_keys:
            self._last_log.popitem(last=False)
        return True


class LxcManagerJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level, logger, service and pid."""

    def __init__(self, config: LoggingConfig, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._service = config.service_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            level=record.levelname,
            logger=record.name,
            service=self._service,
            pid=record.process,
            filename=record.filename,
            lineno=record.lineno,
        )
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        log_record.pop("color_message", None)


def build_handler(config: LoggingConfig) -> logging.Handler:
    """stdout handler with the configured format and rate limit."""
    if config.format == "json":
        formatter: logging.Formatter = LxcManagerJsonFormatter(config)
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RateLimitFilter(rate_limit_seconds=config.rate_limit_seconds))
    return handler


def setup_logging(config: LoggingConfig) -> None:
    """Route root and uvicorn logs through one handler."""
    handler = build_handler(config)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    for name in ("uvicorn", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = False
        uv_logger.addHandler(handler)

    # Task polling would otherwise log every request
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
