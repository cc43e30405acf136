"""Logging setup for funnelctl.

Library modules log through ``logging.getLogger(__name__)``; structlog
formats those records (and any structlog loggers) on stderr, either for a
terminal or as JSON lines with ``--log-json``. stdout stays reserved for
command results.

Per-invocation context (store backend and key) is bound once through
:func:`bind_log_context` and merged into every record.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Third-party loggers that stay at WARNING even under --verbose.
_QUIET_LOGGERS = ("sqlalchemy", "pluggy")


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route stdlib and structlog records through one stderr handler.

    Calling this again replaces the handler, so repeated CLI invocations in
    one process (tests, the shell) never stack output.

    Args:
        verbose: DEBUG for the ``funnelctl`` logger tree; WARNING otherwise.
        log_json: JSON lines instead of the console renderer.
    """
    structlog.contextvars.clear_contextvars()
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("funnelctl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_log_context(**values: Any) -> None:
    """Attach *values* to every subsequent log record in this context."""
    structlog.contextvars.bind_contextvars(**values)
