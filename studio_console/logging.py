"""structlog setup: console text owns stdout, log lines go to stderr or a view sink."""

import logging
import sys
from typing import Callable

import structlog

from studio_console.config import get_config

LineSink = Callable[[str], None]


class _SinkLogger:
    """Hands every rendered log line to a callback, one call per line."""

    def __init__(self, sink: LineSink):
        self._sink = sink

    def msg(self, message: str) -> None:
        for line in message.splitlines():
            if line:
                self._sink(line)

    log = debug = info = warning = warn = error = critical = exception = fatal = msg


def configure_logging(verbose: bool = False, sink: LineSink | None = None) -> None:
    """Configure structlog from the `logging` config section.

    `verbose` forces debug level. With a `sink`, rendered lines are handed to
    it (the terminal view prints them dimmed); otherwise they go to stderr.
    """
    settings = get_config().logging
    level = logging.DEBUG if verbose else getattr(logging, settings.level.upper(), logging.WARNING)

    renderer = structlog.dev.ConsoleRenderer() if settings.format == "console" else structlog.processors.JSONRenderer()

    if sink is None:
        factory = structlog.PrintLoggerFactory(file=sys.stderr)
    else:
        def factory(*args):
            return _SinkLogger(sink)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=factory,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name) if name else structlog.get_logger()
