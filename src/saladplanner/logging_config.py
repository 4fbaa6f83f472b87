"""Structured logging configuration for the saladplanner service."""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

# Context variables for request/job tracking
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[int | None] = ContextVar("user_id", default=None)
job_ctx: ContextVar[str | None] = ContextVar("job", default=None)

_CONTEXT_VARS: dict[str, ContextVar] = {
    "request_id": request_id_ctx,
    "user_id": user_id_ctx,
    "job": job_ctx,
}


def _current_context() -> dict[str, Any]:
    return {
        name: value for name, var in _CONTEXT_VARS.items() if (value := var.get()) is not None
    }


class StructuredJsonFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(_current_context())

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["location"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, default=str)


class ContextualFormatter(logging.Formatter):
    """Human-readable formatter with context for development."""

    def format(self, record: logging.LogRecord) -> str:
        context_parts = []
        if request_id := request_id_ctx.get():
            context_parts.append(f"req={request_id[:8]}")
        if (user_id := user_id_ctx.get()) is not None:
            context_parts.append(f"user={user_id}")
        if job := job_ctx.get():
            context_parts.append(f"job={job}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        # Local wall clock, same as the reset schedule
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)
        formatted = f"{timestamp} | {level} | {record.name}{context_str} | {record.getMessage()}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that automatically includes context variables."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra", {})
        extra.update(_current_context())
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger for the given module name."""
    return ContextLogger(logging.getLogger(name), {})


def configure_logging(
    log_level: str = "INFO",
    json_format: bool | None = None,
    log_file: str | None = None,
    environment: str = "development",
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format for logs. If None, auto-detect based on environment.
        log_file: Optional file path to write logs to.
        environment: Deployment environment; "production" defaults to JSON when
            stdout is not a terminal.
    """
    if json_format is None:
        json_format = os.getenv("LOG_FORMAT", "").lower() == "json" or (
            not sys.stdout.isatty() and environment.lower() == "production"
        )

    level_str = os.getenv("LOG_LEVEL", log_level).upper()
    level = getattr(logging, level_str, logging.INFO)

    formatter: logging.Formatter = (
        StructuredJsonFormatter() if json_format else ContextualFormatter()
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    module_levels = {
        "saladplanner": level,
        "saladplanner.schedule": level,
        "aiosqlite": logging.WARNING,
        "httpx": logging.WARNING,
        "sqlalchemy.engine": logging.WARNING,
        "uvicorn": logging.INFO,
        "uvicorn.access": logging.WARNING,
    }
    for module_name, module_level in module_levels.items():
        logging.getLogger(module_name).setLevel(module_level)

    get_logger(__name__).info(
        f"Logging configured: level={level_str}, format={'json' if json_format else 'text'}"
    )


class LoggingContext:
    """Context manager for setting logging context."""

    def __init__(
        self,
        request_id: str | None = None,
        user_id: int | None = None,
        job: str | None = None,
    ):
        self._values = {"request_id": request_id, "user_id": user_id, "job": job}
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LoggingContext":
        for name, value in self._values.items():
            if value is not None:
                self._tokens[name] = _CONTEXT_VARS[name].set(value)
        return self

    def __exit__(self, *args: Any) -> None:
        for name, token in self._tokens.items():
            _CONTEXT_VARS[name].reset(token)
        self._tokens.clear()
