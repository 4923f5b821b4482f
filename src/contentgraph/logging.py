"""Logging utilities.

Every record carries the current `run_id` and pipeline `stage`, taken from context variables
so concurrent runs in worker threads do not mix up their context.
"""

from __future__ import annotations

import contextlib
import contextvars
import logging
import time
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler


_run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("contentgraph_run_id", default="-")
_stage_var: contextvars.ContextVar[str] = contextvars.ContextVar("contentgraph_stage", default="-")

_FORMAT = "%(asctime)s %(levelname)s run=%(run_id)s stage=%(stage)s %(name)s: %(message)s"


class _ContextFilter(logging.Filter):
    """Inject run context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.run_id = _run_id_var.get()  # type: ignore[attr-defined]
        record.stage = _stage_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def run_context(*, run_id: str, stage: str = "init") -> Iterator[None]:
    """Bind a run id (and initial stage) for the duration of a run."""

    token_run = _run_id_var.set(run_id)
    token_stage = _stage_var.set(stage)
    try:
        yield
    finally:
        _run_id_var.reset(token_run)
        _stage_var.reset(token_stage)


@contextlib.contextmanager
def stage_scope(stage: str, logger: logging.Logger | None = None) -> Iterator[None]:
    """Bind a pipeline stage; with a logger, report its wall time at DEBUG on exit.

    Args:
        stage: Stage name (build, resolve, validate, plan, report).
        logger: Logger receiving the timing line.
    """

    token = _stage_var.set(stage)
    started = time.perf_counter()
    try:
        yield
    finally:
        if logger is not None:
            logger.debug("Stage %s took %.1f ms", stage, (time.perf_counter() - started) * 1000)
        _stage_var.reset(token)


def configure_logging(level: str = "INFO", *, console: Console | None = None) -> None:
    """Configure application logging.

    Safe to call repeatedly: an earlier rich handler is replaced, not duplicated.

    Args:
        level: Logging level name.
        console: Target console; stderr by default so stdout stays free for command output.
    """

    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
    )
    handler.addFilter(_ContextFilter())
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.setLevel(level.upper())
    for old in [h for h in root.handlers if isinstance(h, RichHandler)]:
        root.removeHandler(old)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""

    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """Log the active exception with optional structured context."""

    if context:
        logger.exception("%s | context=%s", msg, context)
    else:
        logger.exception("%s", msg)
