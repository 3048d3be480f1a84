"""
Structured logging configuration for generate-license-file.

Emits one JSON object per event so runs can be inspected by log tooling.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_RESERVED_ATTRS = frozenset(
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
    ]
)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component", record.name),
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class EventLogger:
    """Structured logger for named pipeline events."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(f"generate_license_file.{name}")
        self._setup_logger()
        self.run_context: Dict[str, Any] = {}

    def _setup_logger(self) -> None:
        """Setup logger with structured formatting."""
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.WARNING)
            self.logger.propagate = False

    def set_run_context(self, project_path: Optional[str] = None) -> None:
        """Set run context for logging."""
        self.run_context = {}
        if project_path:
            self.run_context["project_path"] = project_path

    def clear_run_context(self) -> None:
        self.run_context.clear()

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        log_data = {"event_type": event_type, **self.run_context, **kwargs}
        self.logger.log(level, event_type, extra=log_data)

    def info(self, event_type: str, **kwargs) -> None:
        self._log(logging.INFO, event_type, **kwargs)

    def warning(self, event_type: str, **kwargs) -> None:
        self._log(logging.WARNING, event_type, **kwargs)

    def error(self, event_type: str, **kwargs) -> None:
        self._log(logging.ERROR, event_type, **kwargs)

    def debug(self, event_type: str, **kwargs) -> None:
        self._log(logging.DEBUG, event_type, **kwargs)


# Global logger instances
_collector_logger = EventLogger("collector")
_scanner_logger = EventLogger("scanner")
_renderer_logger = EventLogger("renderer")

_ALL_LOGGERS = (_collector_logger, _scanner_logger, _renderer_logger)


def get_collector_logger() -> EventLogger:
    """Get license collection logger."""
    return _collector_logger


def get_scanner_logger() -> EventLogger:
    """Get dependency scanner logger."""
    return _scanner_logger


def get_renderer_logger() -> EventLogger:
    """Get report rendering logger."""
    return _renderer_logger


def log_collection_start(project_path: str, scanner: str) -> None:
    """Log collection start event."""
    logger = get_collector_logger()
    logger.set_run_context(project_path=project_path)
    logger.info("collection_started", scanner=scanner)


def log_collection_complete(
    total_dependencies: int, record_count: int, skipped_count: int, duration_ms: int
) -> None:
    """Log collection completion event."""
    logger = get_collector_logger()
    logger.info(
        "collection_completed",
        total_dependencies=total_dependencies,
        license_records=record_count,
        skipped_dependencies=skipped_count,
        duration_ms=duration_ms,
    )
    logger.clear_run_context()


def log_dependency_skipped(identifier: str, reason: str) -> None:
    """Log a dependency that contributes no license record."""
    get_collector_logger().debug(
        "dependency_skipped", dependency=identifier, reason=reason
    )


def log_render_complete(output_path: str, output_format: str, record_count: int) -> None:
    """Log a finished report write."""
    get_renderer_logger().info(
        "report_written",
        output_path=output_path,
        output_format=output_format,
        license_records=record_count,
    )


def configure_logging(log_level: str = "WARNING", enable_json: bool = True) -> None:
    """Configure logging for the application."""
    level = getattr(logging, log_level.upper(), logging.WARNING)

    for event_logger in _ALL_LOGGERS:
        event_logger.logger.setLevel(level)
        if not enable_json:
            for handler in event_logger.logger.handlers:
                handler.setFormatter(
                    logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
                )
