"""
Error handling for generate-license-file.

Provides the exception hierarchy raised by the public API together with a
centralized handler that logs failures, counts them and notifies callbacks
before they are re-raised to the caller.
"""

import logging
import sys
import traceback
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional


class LicenseFileError(Exception):
    """Base class for all generate-license-file failures."""


class DirectoryNotFoundError(LicenseFileError, FileNotFoundError):
    """The project directory to scan does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Cannot find directory {path}")
        self.path = path


class ScannerError(LicenseFileError):
    """The dependency scanner could not produce license metadata."""


class OutputError(LicenseFileError, OSError):
    """The output destination could not be written."""


class ErrorLevel(Enum):
    """Error severity levels."""

    WARNING = "WARNING"
    ERROR = "ERROR"


class ErrorCategory(Enum):
    """Error categories for better classification."""

    INPUT = "INPUT"
    SCANNER = "SCANNER"
    FILESYSTEM = "FILESYSTEM"
    RENDERING = "RENDERING"
    CONFIGURATION = "CONFIGURATION"


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

    def to_dict(self) -> Dict[str, Any]:
        """Convert error context to dictionary for logging."""
        return {
            "level": self.level.value,
            "category": self.category.value,
            "message": self.message,
            "module": self.module,
            "function": self.function,
            "details": self.details,
            "exception_type": type(self.exception).__name__ if self.exception else None,
            "exception_message": str(self.exception) if self.exception else None,
            "traceback": self.traceback_info,
            "suggestions": self.suggestions,
        }


_LEVEL_MAP = {
    ErrorLevel.WARNING: logging.WARNING,
    ErrorLevel.ERROR: logging.ERROR,
}

# Left out of the one-line log summary
_SUMMARY_EXCLUDED = ("level", "message", "traceback")


def _build_logger(name: str, level: int) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)

    return logger


# Error callback type
ErrorCallback = Callable[[ErrorContext], None]


class ErrorHandler:
    """
    Centralized error handler for consistent error management.

    Every failure surfaced by the collector, scanner, renderer and config
    loader passes through here once before it propagates to the caller.
    """

    def __init__(
        self,
        logger_name: str = "generate_license_file",
        log_level: int = logging.WARNING,
    ):
        """
        Initialize error handler.

        Args:
            logger_name: Name for the logger
            log_level: Logging level
        """
        self.logger = _build_logger(logger_name, log_level)
        self.error_callbacks: Dict[ErrorCategory, List[ErrorCallback]] = {}
        self.global_callbacks: List[ErrorCallback] = []
        self.error_stats: Dict[str, int] = {}

    def register_callback(
        self, callback: ErrorCallback, category: Optional[ErrorCategory] = None
    ):
        """
        Register error callback.

        Args:
            callback: Function to call on errors
            category: Error category to filter, None for all errors
        """
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
        Handle an error with logging and callbacks.

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

        log_data = {
            key: value
            for key, value in context.to_dict().items()
            if key not in _SUMMARY_EXCLUDED and value
        }
        self.logger.log(_LEVEL_MAP[level], f"{message} | {log_data}")

        for callback in self.error_callbacks.get(category, []):
            try:
                callback(context)
            except Exception as cb_error:
                # Don't let callback errors break the main flow
                self.logger.error(f"Error in callback: {cb_error}")

        for callback in self.global_callbacks:
            try:
                callback(context)
            except Exception as cb_error:
                self.logger.error(f"Error in global callback: {cb_error}")

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
    """
    Get the global error handler instance.

    Returns:
        ErrorHandler: Global error handler
    """
    global _global_error_handler
    if _global_error_handler is None:
        _global_error_handler = ErrorHandler()
    return _global_error_handler


def log_filesystem_error(
    message: str,
    module: str,
    function: str,
    file_path: Optional[str] = None,
    exception: Optional[Exception] = None,
):
    """
    Convenience function for logging file read/write failures.

    Args:
        message: Error message
        module: Module name
        function: Function name
        file_path: File that could not be read or written
        exception: Optional exception
    """
    details = {}
    if file_path is not None:
        details["file_name"] = Path(file_path).name

    get_error_handler().error(
        ErrorCategory.FILESYSTEM,
        message,
        module,
        function,
        details=details,
        exception=exception,
        suggestions=[
            "Check that the file exists and is readable",
            "Verify the file is UTF-8 encoded",
        ],
    )


def log_scanner_error(
    message: str,
    module: str,
    function: str,
    project_path: Optional[str] = None,
    exception: Optional[Exception] = None,
):
    """Convenience function for logging dependency scanner failures."""
    details = {}
    if project_path is not None:
        details["project_path"] = project_path

    get_error_handler().error(
        ErrorCategory.SCANNER,
        message,
        module,
        function,
        details=details,
        exception=exception,
        suggestions=[
            "Verify the directory contains a package.json",
            "Run 'npm install' so node_modules is populated",
        ],
    )
