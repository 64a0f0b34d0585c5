"""
Application Logger

Every module logs through a child of ``app_logger`` ("questionbank").
Handlers are attached by ``configure_logger``, which ``create_app`` and the
scripts call with the values from ``Settings``.
"""

import os
import sys
import json
import time
import logging
import functools
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, Union

APP_LOGGER_NAME = "questionbank"

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Type variable for the decorator
AsyncF = TypeVar('AsyncF', bound=Callable[..., Awaitable[Any]])

__all__ = [
    'app_logger',
    'configure_logger',
    'get_logger',
    'JsonFormatter',
    'LoggerAdapter',
    'with_context',
    'log_execution_time',
]

app_logger = logging.getLogger(APP_LOGGER_NAME)


class JsonFormatter(logging.Formatter):
    """
    Render each record as one JSON object per line.

    Context attached by ``LoggerAdapter`` is emitted under ``context``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logger(
    level: Union[str, int] = logging.INFO,
    use_json: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the application logger.

    Handlers from an earlier call are closed and replaced.

    Args:
        level: Level name or number; unknown names fall back to INFO
        use_json: Emit JSON lines instead of the text format
        log_file: Also write to this file, creating its directory

    Returns:
        The application logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    formatter = JsonFormatter() if use_json else logging.Formatter(TEXT_FORMAT, DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    for handler in handlers:
        handler.setFormatter(formatter)
        app_logger.addHandler(handler)

    app_logger.setLevel(level)
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for ``name``, placed under the application logger."""
    if name == APP_LOGGER_NAME or name.startswith(f"{APP_LOGGER_NAME}."):
        return logging.getLogger(name)
    return app_logger.getChild(name)


class LoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that tags every message with fixed context fields.

    The fields are appended to the text message and passed to formatters as
    ``record.context``.
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        super().__init__(logger, dict(context or {}))

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        if not self.extra:
            return msg, kwargs

        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**extra.get("context", {}), **self.extra}
        kwargs["extra"] = extra

        fields = ", ".join(f"{key}={value}" for key, value in self.extra.items())
        return f"{msg} ({fields})", kwargs

    def with_context(self, **context) -> 'LoggerAdapter':
        """Return a new adapter carrying this adapter's context plus ``context``."""
        return LoggerAdapter(self.logger, {**self.extra, **context})


def with_context(name: Optional[str] = None, **context) -> LoggerAdapter:
    """Create an adapter over ``get_logger(name)``, or the app logger."""
    return LoggerAdapter(get_logger(name) if name else app_logger, context)


def log_execution_time(logger: Optional[logging.Logger] = None) -> Callable[[AsyncF], AsyncF]:
    """
    Log at DEBUG how long a coroutine function took, whether it returned or raised.

    Args:
        logger: Logger to use; defaults to the application logger
    """
    def decorator(func: AsyncF) -> AsyncF:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            outcome = "failed"
            try:
                result = await func(*args, **kwargs)
                outcome = "completed"
                return result
            finally:
                elapsed_ms = (time.perf_counter() - started) * 1000
                (logger or app_logger).debug(f"{func.__name__} {outcome} in {elapsed_ms:.1f} ms")

        return wrapper  # type: ignore[return-value]
    return decorator
