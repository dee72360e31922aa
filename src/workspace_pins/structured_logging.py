"""
Structured logging configuration for workspace-pins.

Emits one JSON object per event on stderr so publish pipelines can keep a
machine-readable trail of every manifest rewrite.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_RESERVED_ATTRIBUTES = frozenset(
    [
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
    ]
)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component", record.name),
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRIBUTES:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class PublishLogger:
    """Structured logger for manifest rewrite events."""

    def __init__(self, name: str = "workspace_pins.publish"):
        self.logger = logging.getLogger(name)
        self._setup_logger()
        self.run_context: Dict[str, Any] = {}

    def _setup_logger(self) -> None:
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.WARNING)
            self.logger.propagate = False

    def set_run_context(
        self, command: Optional[str] = None, dry_run: Optional[bool] = None
    ) -> None:
        self.run_context = {}
        if command:
            self.run_context["command"] = command
        if dry_run is not None:
            self.run_context["dry_run"] = dry_run

    def clear_run_context(self) -> None:
        self.run_context.clear()

    def _log(self, level: str, event_type: str, **kwargs) -> None:
        log_data = {"event_type": event_type, **self.run_context, **kwargs}
        getattr(self.logger, level.lower())(event_type, extra=log_data)

    def info(self, event_type: str, **kwargs) -> None:
        self._log("info", event_type, **kwargs)

    def debug(self, event_type: str, **kwargs) -> None:
        self._log("debug", event_type, **kwargs)


_publish_logger = PublishLogger()


def get_publish_logger() -> PublishLogger:
    """Get the manifest rewrite logger."""
    return _publish_logger


def log_run_start(command: str, dry_run: bool, package_count: int) -> None:
    logger = get_publish_logger()
    logger.set_run_context(command, dry_run)
    logger.info("run_started", package_count=package_count)


def log_run_complete(packages_written: int, changes: int, duration_ms: int) -> None:
    logger = get_publish_logger()
    logger.info(
        "run_completed",
        packages_written=packages_written,
        total_changes=changes,
        duration_ms=duration_ms,
    )
    logger.clear_run_context()


def log_dependency_moved(
    package_name: str, dependency_name: str, from_field: str, to_field: str
) -> None:
    get_publish_logger().info(
        "dependency_moved",
        package_name=package_name,
        dependency_name=dependency_name,
        from_field=from_field,
        to_field=to_field,
    )


def log_dependency_set(
    package_name: str, dependency_name: str, field: str, specifier: str
) -> None:
    get_publish_logger().debug(
        "dependency_set",
        package_name=package_name,
        dependency_name=dependency_name,
        field=field,
        specifier=specifier,
    )


def log_manifest_written(package_name: str, path: str) -> None:
    get_publish_logger().info("manifest_written", package_name=package_name, path=path)


def configure_logging(log_level: str = "WARNING", enable_json: bool = True) -> None:
    """Configure logging for the application."""
    level = getattr(logging, log_level.upper(), logging.WARNING)

    logger = get_publish_logger().logger
    logger.setLevel(level)
    formatter = (
        StructuredFormatter()
        if enable_json
        else logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    for handler in logger.handlers:
        handler.setFormatter(formatter)
