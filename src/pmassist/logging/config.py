# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""structlog setup for pmassist.

Logs always go to stderr; stdout is reserved for completion text printed by
the CLI. ``PMASSIST_LOG_LEVEL`` sets the threshold (default WARNING) and
``PMASSIST_LOG_FORMAT`` picks human-readable ``console`` output or one JSON
object per line (``json``) for log collectors.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog._config import BoundLoggerLazyProxy

if TYPE_CHECKING:
    from pmassist.settings import Settings

__all__ = ["get_logger", "configure_logging"]


def _renderer(log_format: str) -> structlog.typing.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for pmassist.

    Call once at application startup. Loggers obtained earlier through
    ``get_logger`` pick up the new configuration on their next call.

    Args:
        settings: Settings instance (will be created if None)
    """
    if settings is None:
        from pmassist.settings import Settings

        settings = Settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _renderer(settings.log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a logger, with ``name`` bound as the ``logger`` key.

    Args:
        name: Logger name (typically __name__ of calling module)
    """
    if name is None:
        return structlog.get_logger()
    return BoundLoggerLazyProxy(None, initial_values={"logger": name})
