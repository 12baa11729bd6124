"""Logging configuration for the ride ledger application."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any


def setup_logging(level: int | str | None = None) -> logging.Logger:
    """Configure and return the application logger."""
    logger = logging.getLogger("rideledger")

    if logger.handlers:
        return logger

    if level is None:
        level = os.environ.get("LEDGER_LOG_LEVEL", "INFO").upper()

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str = "rideledger") -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


class LogContext:
    """Log the start and outcome of a ledger operation.

    Callers attach results with ``record()``; they are included in the
    completion line, e.g. ``Completed ledger hydration (source=remote, transactions=12)``.
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: Any) -> None:
        self.logger = logger
        self.operation = operation
        self.context = context
        self.outcome: dict[str, Any] = {}

    def record(self, **outcome: Any) -> None:
        self.outcome.update(outcome)

    def _describe(self, values: dict[str, Any]) -> str:
        if not values:
            return ""
        return " (" + ", ".join(f"{key}={value}" for key, value in values.items()) + ")"

    def __enter__(self) -> "LogContext":
        self.logger.info(f"Starting {self.operation}{self._describe(self.context)}")
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: Any) -> bool:
        if exc_type is not None:
            self.logger.error(f"Failed {self.operation}: {exc_val}", exc_info=True)
        else:
            self.logger.info(f"Completed {self.operation}{self._describe(self.outcome)}")
        return False


# Initialize default logger
logger = setup_logging()
