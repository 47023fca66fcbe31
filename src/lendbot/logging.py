"""Structured logging for the lending bot, built on structlog."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import IO, Any

import structlog


def _stringify_decimals(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Render Decimal amounts and rates exactly instead of via repr()."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
    return event_dict


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format.lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    stream: IO[str] | None = None,
) -> None:
    """Send structlog events and stdlib records (ccxt, asyncio) to one handler.

    ``log_format`` is "json" for machine-readable lines or "console" for
    humans. Strategy context bound with ``strategy_context`` appears on
    every line, including records emitted by third-party stdlib loggers.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            _stringify_decimals,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # ccxt logs every request at DEBUG
    logging.getLogger("ccxt").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)


@contextmanager
def strategy_context(strategy: str, currency: str) -> Iterator[None]:
    """Bind strategy/currency to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(strategy=strategy, currency=currency):
        yield


def format_rate(rate: Decimal) -> dict[str, str]:
    """Render a per-day fractional rate as daily percent and APR for log fields."""
    daily_percent = rate * 100
    return {
        "rate_per_day": f"{daily_percent:.4f}%",
        "apr": f"{daily_percent * 365:.2f}%",
    }
