import logging
from typing import List, Protocol, Tuple

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Where user-facing notices go (toasts in the browser, logs on the server)."""

    def info(self, title: str, description: str = "") -> None: ...

    def error(self, title: str, description: str = "") -> None: ...


class LoggingNotifier:
    def info(self, title: str, description: str = "") -> None:
        logger.info("%s: %s", title, description)

    def error(self, title: str, description: str = "") -> None:
        logger.error("%s: %s", title, description)


class RecordingNotifier:
    """Keeps every notice in order; handy for tests and headless sessions."""

    def __init__(self):
        self.notices: List[Tuple[str, str, str]] = []

    def info(self, title: str, description: str = "") -> None:
        self.notices.append(("info", title, description))

    def error(self, title: str, description: str = "") -> None:
        self.notices.append(("error", title, description))

    def titles(self, level: str = None) -> List[str]:
        return [t for lvl, t, _ in self.notices if level is None or lvl == level]
