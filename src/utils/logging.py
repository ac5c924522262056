"""structlog setup shared by the API server and the admin CLI.

Both entry points render through one processor chain.  The server writes
to stdout, as JSON when ``Settings.app_env`` is ``"production"`` and as
coloured console lines otherwise.  The CLI writes uncoloured warnings to
stderr so its stdout carries only command output.

Records from standard-library loggers (uvicorn, aiosqlite) go through a
``ProcessorFormatter`` on the root logger, so they land on the same
stream in the same format.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

# Applied to structlog events and, via foreign_pre_chain, to stdlib records.
_SHARED_PROCESSORS: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
)


def _level_number(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


def _renderer(json_output: bool, colors: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=colors)


def _install_root_handler(stream: TextIO, renderer: structlog.types.Processor, level: int) -> None:
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=list(_SHARED_PROCESSORS),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
    colors: bool = True,
) -> None:
    """Configure structlog and the root stdlib logger.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Render JSON lines instead of console output.
        stream: Destination for both structlog and stdlib records.
                Defaults to ``sys.stdout`` as it is at call time.
        colors: Colour console output.  Ignored for JSON.

    Raises:
        ValueError: If *log_level* is not a known level name.
    """
    level = _level_number(log_level)
    target = stream if stream is not None else sys.stdout
    renderer = _renderer(json_output, colors)

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=target),
        cache_logger_on_first_use=True,
    )
    _install_root_handler(target, renderer, level)


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger tagged with *name* (usually ``__name__``).

    The logger is a lazy proxy, so modules may create it at import time
    and pick up whatever ``configure_logging`` later installs.
    """
    return structlog.get_logger(logger_name=name)
