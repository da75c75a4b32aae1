"""
Structured Logging with Rich.

Console logging for the service, the CLI and the analysis runs. Records
emitted inside a LogContext carry its fields (e.g. run_id) and the
handler shows them as a "[run 1718000000000-42]" tag.

The context lives in a ContextVar, so overlapping runs on the same event
loop each stamp their own records.
"""

import logging
from contextvars import ContextVar, Token
from functools import lru_cache
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

# Chatty client libraries used by the model providers
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "google_genai", "llama_index")

LOG_FORMAT = "%(run_tag)s%(name)s | %(message)s"

_log_context: ContextVar[dict[str, Any] | None] = ContextVar("log_context", default=None)
_base_factory = None


def _context_record_factory(*args, **kwargs) -> logging.LogRecord:  # type: ignore[no-untyped-def]
    record = _base_factory(*args, **kwargs)
    for key, value in (_log_context.get() or {}).items():
        setattr(record, key, value)
    return record


def install_context_factory() -> None:
    """Install the context-stamping record factory once per process."""
    global _base_factory
    if _base_factory is None:
        _base_factory = logging.getLogRecordFactory()
        logging.setLogRecordFactory(_context_record_factory)


class RunTagFilter(logging.Filter):
    """Fill in run_tag for every record, empty outside an analysis run."""

    def filter(self, record: logging.LogRecord) -> bool:
        run_id = getattr(record, "run_id", None)
        record.run_tag = f"[run {run_id}] " if run_id else ""
        return True


def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logger with Rich handler.

    Safe to call more than once; the previous handlers are replaced.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    install_context_factory()

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=True,
        show_path=False,
        markup=False,
    )
    handler.addFilter(RunTagFilter())

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@lru_cache(maxsize=128)
def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module name.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class LogContext:
    """
    Stamp extra attributes onto every record created inside the block.

    Nested contexts add to the enclosing one.

    Usage:
        with LogContext(run_id="1718000000000-42"):
            logger.info("Running pass 1 of 3")
    """

    def __init__(self, **context: str | int | float) -> None:
        self.context = context
        self._token: Token | None = None

    def __enter__(self) -> "LogContext":
        install_context_factory()
        merged = {**(_log_context.get() or {}), **self.context}
        self._token = _log_context.set(merged)
        return self

    def __exit__(self, *args: object) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None
