"""
Error handling for workspace-pins.

Defines the manifest exception taxonomy and a central error handler that
records structured error contexts, notifies registered callbacks and keeps
per-category statistics. Errors are reported here and then re-raised by the
caller; nothing is retried or swallowed.
"""

import logging
import sys
import traceback
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional


class ManifestError(Exception):
    """Base class for every failure touching a package manifest."""

    def __init__(
        self,
        message: str,
        package_name: Optional[str] = None,
        path: Optional[Path] = None,
    ):
        super().__init__(message)
        self.package_name = package_name
        self.path = path


class ManifestNotFound(ManifestError):
    """The manifest file does not exist."""


class MalformedManifest(ManifestError):
    """The manifest is not valid JSON, or not shaped like a package manifest."""


class WriteError(ManifestError):
    """The manifest could not be written back to disk."""


class MissingVersionField(ManifestError):
    """The manifest has no usable ``version`` field."""


class ErrorLevel(Enum):
    """Error severity levels."""

    WARNING = "WARNING"
    ERROR = "ERROR"


class ErrorCategory(Enum):
    """Error categories for better classification."""

    PARSING = "PARSING"
    VALIDATION = "VALIDATION"
    CONFIGURATION = "CONFIGURATION"
    FILESYSTEM = "FILESYSTEM"


_CATEGORY_BY_ERROR = {
    ManifestNotFound: ErrorCategory.FILESYSTEM,
    WriteError: ErrorCategory.FILESYSTEM,
    MalformedManifest: ErrorCategory.PARSING,
    MissingVersionField: ErrorCategory.VALIDATION,
}

_SUGGESTIONS = {
    ManifestNotFound: [
        "Check that the workspace root points at the monorepo root",
        "Verify every package in the matrix has a package.json",
    ],
    MalformedManifest: [
        "Check the manifest is a valid JSON object",
        "Make sure dependency sections are objects",
    ],
    WriteError: [
        "Check file permissions on the packages directory",
        "Restore from version control if the manifest was partially written",
    ],
    MissingVersionField: [
        "Run the release versioning step before preparing packages",
    ],
}


@dataclass
class ErrorContext:
    """Structured error context information."""

    level: ErrorLevel
    category: ErrorCategory
    message: str
    module: str
    function: str
    details: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None
    traceback_info: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)


class ErrorLogger:
    """Writes error contexts to a stderr logger."""

    def __init__(self, name: str, level: int = logging.WARNING):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            self.logger.addHandler(handler)
            self.logger.propagate = False

    def log_error_context(self, context: ErrorContext) -> None:
        log_data: Dict[str, Any] = {
            "category": context.category.value,
            "module": context.module,
            "function": context.function,
            "details": context.details,
        }
        if context.exception:
            log_data["exception"] = type(context.exception).__name__
        if context.suggestions:
            log_data["suggestions"] = context.suggestions

        level = getattr(logging, context.level.value)
        self.logger.log(level, f"{context.message} | {log_data}")


# Error callback type
ErrorCallback = Callable[[ErrorContext], None]


class ErrorHandler:
    """
    Centralized error handler for consistent error management.

    Provides logging, callbacks, and error statistics for the manifest
    accessor and the publisher.
    """

    def __init__(
        self,
        logger_name: str = "workspace_pins",
        log_level: int = logging.WARNING,
        enable_callbacks: bool = True,
    ):
        self.logger = ErrorLogger(logger_name, log_level)
        self.enable_callbacks = enable_callbacks
        self.error_callbacks: Dict[ErrorCategory, List[ErrorCallback]] = {}
        self.global_callbacks: List[ErrorCallback] = []
        self.error_stats: Dict[str, int] = {}

    def register_callback(
        self, callback: ErrorCallback, category: Optional[ErrorCategory] = None
    ) -> None:
        """
        Register error callback.

        Args:
            callback: Function to call on errors
            category: Error category to filter, None for all errors
        """
        if not self.enable_callbacks:
            return

        if category is None:
            self.global_callbacks.append(callback)
        else:
            self.error_callbacks.setdefault(category, []).append(callback)

    def handle_error(
        self,
        level: ErrorLevel,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        exception: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ) -> ErrorContext:
        """
        Handle an error with structured logging and callbacks.

        Args:
            level: Error severity level
            category: Error category
            message: Error message
            module: Module where error occurred
            function: Function where error occurred
            exception: Optional exception object
            details: Additional error details
            suggestions: Suggested fixes

        Returns:
            ErrorContext: The created error context
        """
        context = ErrorContext(
            level=level,
            category=category,
            message=message,
            module=module,
            function=function,
            details=details or {},
            exception=exception,
            traceback_info=traceback.format_exc() if exception else None,
            suggestions=suggestions or [],
        )

        stat_key = f"{category.value}_{level.value}"
        self.error_stats[stat_key] = self.error_stats.get(stat_key, 0) + 1

        self.logger.log_error_context(context)

        if self.enable_callbacks:
            for callback in self.error_callbacks.get(category, []):
                callback(context)
            for callback in self.global_callbacks:
                callback(context)

        return context

    def warning(
        self,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        **kwargs,
    ) -> ErrorContext:
        """Handle warning level error."""
        return self.handle_error(
            ErrorLevel.WARNING, category, message, module, function, **kwargs
        )

    def error(
        self,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        **kwargs,
    ) -> ErrorContext:
        """Handle error level error."""
        return self.handle_error(
            ErrorLevel.ERROR, category, message, module, function, **kwargs
        )

    def get_error_stats(self) -> Dict[str, int]:
        """Get error statistics."""
        return self.error_stats.copy()


# Global error handler instance
_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _global_error_handler
    if _global_error_handler is None:
        _global_error_handler = ErrorHandler()
    return _global_error_handler


def setup_error_handling(
    log_level: int = logging.WARNING,
    enable_callbacks: bool = True,
    logger_name: str = "workspace_pins",
) -> ErrorHandler:
    """
    Setup global error handling configuration.

    Args:
        log_level: Logging level
        enable_callbacks: Whether to enable callbacks
        logger_name: Logger name

    Returns:
        ErrorHandler: Configured error handler
    """
    global _global_error_handler
    _global_error_handler = ErrorHandler(logger_name, log_level, enable_callbacks)
    return _global_error_handler


def report_manifest_error(
    error: ManifestError,
    module: str,
    function: str,
    exception: Optional[Exception] = None,
) -> ErrorContext:
    """
    Report a manifest error to the global handler before it is raised.

    Args:
        error: The manifest error about to be raised
        module: Module name
        function: Function name
        exception: Underlying exception, if any
    """
    details: Dict[str, Any] = {}
    if error.package_name is not None:
        details["package_name"] = error.package_name
    if error.path is not None:
        details["path"] = str(error.path)

    category = _CATEGORY_BY_ERROR.get(type(error), ErrorCategory.FILESYSTEM)
    return get_error_handler().error(
        category,
        str(error),
        module,
        function,
        details=details,
        exception=exception or error,
        suggestions=list(_SUGGESTIONS.get(type(error), [])),
    )
