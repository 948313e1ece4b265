"""
Structured logging configuration using structlog.

The library only emits log events; applications decide how they are rendered
by calling ``setup_logging`` (or ``structlog.configure``) once at startup.
Until then the package writes nothing below WARNING.

Standardized log format:
{
    "ts": "2025-11-18T04:30:00.123456Z",
    "level": "warning",
    "service": "insight-rules",
    "event": "rule_body.validation_failed",
    "module": "insight_rules.rules.body",
    "function": "validate_rule_body",
    "line": 42,
    ...additional context...
}
"""
import structlog
import logging
import sys
from typing import Any

from .config import get_settings


def add_service_name(service_name: str):
    """Build a processor that stamps every entry with the service name."""

    def processor(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict["service"] = service_name
        return event_dict

    return processor


def add_module_info(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Add module, function, and line number to log entries."""
    frame = structlog._frames._find_first_app_frame_and_name()[0]
    if frame:
        event_dict["module"] = frame.f_globals.get("__name__", "unknown")
        event_dict["function"] = frame.f_code.co_name
        event_dict["line"] = frame.f_lineno
    return event_dict


def setup_logging(
    json_output: bool | None = None,
    service_name: str = "insight-rules",
    level: str | None = None,
    cache_loggers: bool = True,
):
    """
    Configure structured logging with standardized fields.

    Args:
        json_output: If True, output JSON logs. If False, use console format.
            Defaults to the LOG_JSON setting.
        service_name: Name stamped on every entry.
        level: Minimum level name, e.g. "DEBUG" or "WARNING". Defaults to
            the LOG_LEVEL setting.
        cache_loggers: Freeze loggers on first use. Disable when the
            configuration may change later, as in tests.
    """
    settings = get_settings()
    if json_output is None:
        json_output = settings.LOG_JSON
    if level is None:
        level = settings.LOG_LEVEL
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        add_service_name(service_name),
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.add_log_level,
        add_module_info,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors = shared_processors + [
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=cache_loggers,
    )

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
    )


class LibraryLogger:
    """
    Logger used by the package's own modules.

    Once structlog is configured every call goes through that configuration.
    Before that, only warnings and above are written, to stderr.
    """

    def __getattr__(self, name: str) -> Any:
        if structlog.is_configured():
            return getattr(structlog.get_logger(), name)
        unconfigured = structlog.wrap_logger(
            structlog.PrintLogger(sys.stderr),
            wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        )
        return getattr(unconfigured, name)


def get_logger() -> LibraryLogger:
    """Get a structlog logger that stays quiet until logging is configured."""
    return LibraryLogger()
