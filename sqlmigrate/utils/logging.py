"""Logging helpers for SQLMigrate.

All loggers live under the ``sqlmigrate`` namespace. Library code only
creates loggers and emits records; handlers are installed by
:func:`configure_logging`, which the CLI calls once per invocation.

Each CLI invocation also sets a correlation ID so every record emitted by one
migration run can be grouped together in structured output.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Callable

from sqlmigrate._serialization import encode_json
from sqlmigrate.exceptions import ImproperConfigurationError

if TYPE_CHECKING:
    from logging import LogRecord

__all__ = (
    "ROOT_LOGGER_NAME",
    "CorrelationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_id_var",
    "get_correlation_id",
    "get_logger",
    "log_with_context",
    "set_correlation_id",
)

ROOT_LOGGER_NAME = "sqlmigrate"
SIMPLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

correlation_id_var: ContextVar[str | None] = ContextVar("sqlmigrate_correlation_id", default=None)


def set_correlation_id(correlation_id: str | None) -> None:
    """Tag records emitted from the current context with ``correlation_id``; ``None`` clears it."""
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


class StructuredFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    Fields passed through :func:`log_with_context` are merged into the top
    level of the object, next to the standard record fields.
    """

    def format(self, record: LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        correlation_id = getattr(record, "correlation_id", None) or get_correlation_id()
        if correlation_id:
            entry["correlation_id"] = correlation_id
        entry.update(getattr(record, "extra_fields", {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return encode_json(entry)


class CorrelationIDFilter(logging.Filter):
    """Copy the active correlation ID onto every record that passes through."""

    def filter(self, record: LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id  # type: ignore[attr-defined]
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger inside the ``sqlmigrate`` namespace.

    ``get_logger("migrations.runner")`` and ``get_logger("sqlmigrate.migrations.runner")``
    return the same logger. Without a name the namespace root is returned.
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if not any(isinstance(existing, CorrelationIDFilter) for existing in logger.filters):
        logger.addFilter(CorrelationIDFilter())
    return logger


def _rich_handler() -> logging.Handler:
    from rich.console import Console
    from rich.logging import RichHandler

    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _stream_handler(formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    return handler


_CONSOLE_HANDLERS: dict[str, Callable[[], logging.Handler]] = {
    "rich": _rich_handler,
    "simple": lambda: _stream_handler(logging.Formatter(SIMPLE_FORMAT)),
    "structured": lambda: _stream_handler(StructuredFormatter()),
}


def configure_logging(
    level: str = "INFO",
    format_style: str = "structured",
    log_to_file: str | None = None,
    extra_handlers: list[logging.Handler] | None = None,
) -> None:
    """Install handlers on the ``sqlmigrate`` logger.

    Calling it again replaces the previously installed handlers. Records stop
    propagating to the root logger so they are not printed twice.

    Args:
        level: Level name, e.g. ``"DEBUG"`` or ``"warning"``.
        format_style: ``"structured"`` for JSON lines, ``"simple"`` for plain
            text, ``"rich"`` for a colored console.
        log_to_file: Also write JSON lines to this file.
        extra_handlers: Additional handlers to install as they are.

    Raises:
        ImproperConfigurationError: If ``level`` or ``format_style`` is unknown.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        msg = f"Unknown log level {level!r}"
        raise ImproperConfigurationError(msg)
    handler_factory = _CONSOLE_HANDLERS.get(format_style)
    if handler_factory is None:
        msg = f"Unknown log format {format_style!r}, expected one of {sorted(_CONSOLE_HANDLERS)}"
        raise ImproperConfigurationError(msg)

    handlers = [handler_factory()]
    if log_to_file:
        file_handler = logging.FileHandler(log_to_file)
        file_handler.setFormatter(StructuredFormatter())
        handlers.append(file_handler)
    handlers.extend(extra_handlers or ())

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.propagate = False

    log_with_context(
        root_logger,
        logging.DEBUG,
        "logging.configured",
        log_level=level,
        format_style=format_style,
        handlers=len(handlers),
    )


def log_with_context(logger: logging.Logger, level: int, message: str, **extra_fields: Any) -> None:
    """Emit ``message`` with ``extra_fields`` attached for structured output.

    Plain text formatters only show ``message``; :class:`StructuredFormatter`
    merges the fields into the JSON object.
    """
    logger.log(level, message, extra={"extra_fields": extra_fields}, stacklevel=2)
