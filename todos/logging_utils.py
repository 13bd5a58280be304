"""Logging utilities with acting-user correlation context."""

from __future__ import annotations

import contextvars
import logging
from typing import Optional

username_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("username", default=None)


class CorrelationFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.username = username_var.get() or "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format=(
                "%(asctime)s level=%(levelname)s logger=%(name)s "
                "username=%(username)s message=\"%(message)s\""
            ),
        )
    for handler in root_logger.handlers:
        if not any(isinstance(f, CorrelationFilter) for f in handler.filters):
            handler.addFilter(CorrelationFilter())


def set_username(value: Optional[str]) -> contextvars.Token:
    return username_var.set(value)


def reset_username(token: contextvars.Token) -> None:
    username_var.reset(token)


def get_username() -> Optional[str]:
    return username_var.get()
