"""User-facing notices emitted after schedule actions."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Receives confirmation and error notices for the member."""

    def success(self, title: str, description: str) -> None:
        ...

    def error(self, title: str, description: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that writes notices to the log."""

    def success(self, title: str, description: str) -> None:
        logger.info(title, extra={"notice": "success", "description": description})

    def error(self, title: str, description: str) -> None:
        logger.warning(title, extra={"notice": "error", "description": description})


def failure_reason(error: Exception, fallback: str) -> str:
    """Prefer the reason reported by the server, if any."""
    return getattr(error, "detail", None) or fallback
