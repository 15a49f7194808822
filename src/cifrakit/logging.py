from __future__ import annotations

import logging
import sys

import structlog


def get_logger(name: str):
    """Return a structlog logger backed by the stdlib logger *name*.

    Until :func:`setup_logging` is called, records go through the stdlib
    ``logging`` tree unconfigured, so debug output is dropped and nothing is
    ever printed to stdout.
    """
    return structlog.wrap_logger(logging.getLogger(name))


def setup_logging(level: int = logging.WARNING) -> None:
    """Configure console logging for the CLI (idempotent).

    Library modules log through :func:`get_logger`; records are routed
    through the stdlib ``logging`` tree, to stderr, so ``--stdout`` output
    stays clean.
    """
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(level)
    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
