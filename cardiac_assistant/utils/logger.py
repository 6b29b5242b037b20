"""
Structured logging for the orchestration core.
Every record carries the request correlation ID and, when known,
the conversation it belongs to.
"""

import logging
import json
from contextlib import contextmanager
from typing import Any, Iterator
from contextvars import ContextVar

correlation_id_ctx: ContextVar[str | None] = ContextVar("correlation_id", default=None)
conversation_id_ctx: ContextVar[str | None] = ContextVar("conversation_id", default=None)


class StructuredFormatter(logging.Formatter):
    """Formats records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }

        correlation_id = correlation_id_ctx.get()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        conversation_id = conversation_id_ctx.get()
        if conversation_id:
            log_data["conversation_id"] = conversation_id

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class PlainFormatter(logging.Formatter):
    """Human readable variant used by the console chat."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, "extra_fields", None)
        if fields:
            rendered = " ".join(f"{key}={value}" for key, value in fields.items())
            line = f"{line} | {rendered}"
        return line


class StructuredLogger:
    """
    Wrapper around a standard logger that takes context as keyword fields.

    Example:
        logger.info("agent_run_started", agent_id=agent_id, run_id=run_id)
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log(
        self, level: int, event: str, exc_info: bool = False, **extra_fields: Any
    ) -> None:
        self.logger.log(
            level, event, extra={"extra_fields": extra_fields}, exc_info=exc_info
        )

    def debug(self, event: str, **extra_fields: Any) -> None:
        self._log(logging.DEBUG, event, **extra_fields)

    def info(self, event: str, **extra_fields: Any) -> None:
        self._log(logging.INFO, event, **extra_fields)

    def warning(self, event: str, **extra_fields: Any) -> None:
        self._log(logging.WARNING, event, **extra_fields)

    def error(self, event: str, exc_info: bool = False, **extra_fields: Any) -> None:
        """
        Log an error event.

        Args:
            event: Event name
            exc_info: If True, include the active exception traceback
            **extra_fields: Additional context fields
        """
        self._log(logging.ERROR, event, exc_info=exc_info, **extra_fields)


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)


def set_correlation_id(correlation_id: str | None) -> None:
    correlation_id_ctx.set(correlation_id)


def get_correlation_id() -> str | None:
    return correlation_id_ctx.get()


@contextmanager
def correlation_context(correlation_id: str | None) -> Iterator[None]:
    """
    Tags every log record emitted inside the block with a request ID.
    The previous ID is restored on exit.
    """
    token = correlation_id_ctx.set(correlation_id)
    try:
        yield
    finally:
        correlation_id_ctx.reset(token)


@contextmanager
def conversation_context(conversation_id: str | None) -> Iterator[None]:
    """
    Tags every log record emitted inside the block with a conversation ID.

    Args:
        conversation_id: Conversation being served, or None for one-off questions
    """
    token = conversation_id_ctx.set(conversation_id)
    try:
        yield
    finally:
        conversation_id_ctx.reset(token)


def configure_logging(level: str = "INFO", use_structured: bool = True) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_structured: If True, use structured JSON logging
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)

    if use_structured:
        formatter = StructuredFormatter(datefmt="%Y-%m-%d %H:%M:%S")
    else:
        formatter = PlainFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # The Azure SDK logs every HTTP request at INFO
    logging.getLogger("azure").setLevel(max(log_level, logging.WARNING))
