"""User-visible notices.

Control actions and routing diagnostics end with a message for the user
(an upload confirmation, a "tag me" hint, a playback failure).  Rather than
blocking on a dialog they are emitted as :class:`Notice` objects on a
:class:`NoticeBus`; a front end subscribes and renders them however it
likes, and tests simply collect them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

INFO = "info"
WARNING = "warning"
ERROR = "error"

_LOG_LEVELS = {
    INFO: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Notice:
    kind: str
    level: str
    title: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def render(self) -> str:
        return f"[TV Custom Sound] {self.title}\n\n{self.message}"


NoticeCallback = Callable[[Notice], None]


class NoticeBus:
    """Fan notices out to subscribers and mirror them into the log."""

    def __init__(self) -> None:
        self._subscribers: List[NoticeCallback] = []

    def subscribe(self, callback: NoticeCallback) -> Callable[[], None]:
        """Register ``callback``; the returned callable unsubscribes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def emit(self, notice: Notice) -> Notice:
        logger.log(_LOG_LEVELS.get(notice.level, logging.INFO), "%s: %s", notice.title, notice.message)
        for callback in list(self._subscribers):
            try:
                callback(notice)
            except Exception:
                # A broken front end must not break routing.
                logger.exception("Notice subscriber failed for %s", notice.kind)
        return notice

    def info(self, kind: str, title: str, message: str, **data: Any) -> Notice:
        return self.emit(Notice(kind, INFO, title, message, data))

    def warning(self, kind: str, title: str, message: str, **data: Any) -> Notice:
        return self.emit(Notice(kind, WARNING, title, message, data))

    def error(self, kind: str, title: str, message: str, **data: Any) -> Notice:
        return self.emit(Notice(kind, ERROR, title, message, data))
