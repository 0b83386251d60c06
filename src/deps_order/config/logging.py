"""Log routing for deps-order.

Every log line goes to stderr; stdout carries only the ordering or the
run result so it can be piped. Modules log through the stdlib
``logging.getLogger(__name__)``; structlog renders those records.

While a command runs for a package the runner binds ``package`` in the
structlog context, so spawn and failure lines name the package they
belong to in both the console and JSON renderings.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor

LOGGER_NAME = "deps_order"


def _pre_chain(*, log_json: bool) -> list[Processor]:
    """Processors applied to every record before rendering.

    Console lines stay short (no timestamp); JSON lines are timestamped
    in UTC for collection by CI log tooling.
    """
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    if log_json:
        chain.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    return chain


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the single stderr handler for this invocation.

    Args:
        verbose: Show DEBUG lines from ``deps_order``; otherwise WARNING+.
        log_json: One JSON object per line instead of console text.
    """
    pre_chain = _pre_chain(log_json=log_json)
    renderer: Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    # Exactly one handler, however many times this runs in a process
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)
    logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG if verbose else logging.WARNING)
