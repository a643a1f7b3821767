"""structlog loggers backed by stdlib logging.

Library code logs through ``get_logger``. Events go to the ``smtp_infra``
stdlib logger, which carries only a ``NullHandler`` until the CLI calls
``configure_logging``, so importing the package never writes to stdout.
"""

from __future__ import annotations

import logging

import structlog

LOGGER_NAME = "smtp_infra"

_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="%H:%M:%S"),
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]

_handler: logging.Handler | None = None


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging(verbose: bool = False) -> None:
    """Route structured log events to stderr.

    Warnings and above are shown by default; ``verbose`` lowers the
    threshold to debug so each pipeline stage reports what it did.
    Calling it again replaces the previous handler.
    """
    global _handler
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        root.removeHandler(_handler)
    # Bound at call time; test runners swap sys.stderr per invocation
    _handler = logging.StreamHandler()
    _handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=False),
            ],
        )
    )
    root.addHandler(_handler)
    root.setLevel(level)


def reset_logging() -> None:
    """Detach the CLI handler and return to the silent library default."""
    global _handler
    root = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        root.removeHandler(_handler)
        _handler = None
    root.setLevel(logging.NOTSET)
