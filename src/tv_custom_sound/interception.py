"""Interception registration for a playback substrate.

The substrate (a browser bridge, a media player wrapper, a test double)
owns the real playback calls.  It registers :meth:`PlaybackInterceptor.before_play`
as its hook, or routes its two entry points through :meth:`construct` and
:meth:`play`:

- *construct and play*: a new element is created from a source.
- *play on an existing element*: an element that already has a source is
  asked to play.

Either way the source is run through the router just before playback and
substituted when the router returns a replacement.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, TypeVar

from .fingerprint import preview
from .router import SoundRouter

logger = logging.getLogger(__name__)

E = TypeVar("E")


class AudioElement(Protocol):
    src: str


class PlaybackInterceptor:
    def __init__(self, router: SoundRouter) -> None:
        self.router = router

    def before_play(self, source: Optional[str]) -> Optional[str]:
        """Return the source to play: the replacement, or ``source`` unchanged."""
        replacement = self.router.decide(source)
        if replacement:
            logger.debug("-> Replacing %s with custom sound", preview(source))
            return replacement
        return source

    def construct(self, source: Optional[str], factory: Callable[[Optional[str]], E]) -> E:
        """Build an element through ``factory`` with the substituted source."""
        logger.debug("Audio() intercepted | src: %s", preview(source))
        return factory(self.before_play(source))

    def play(self, element: AudioElement, play: Callable[[AudioElement], Any]) -> Any:
        """Substitute ``element``'s source in place, then call ``play(element)``."""
        source = getattr(element, "src", "") or getattr(element, "current_src", "") or ""
        logger.debug("play() intercepted | src: %s", preview(source))
        replacement = self.before_play(source)
        if replacement and replacement != source:
            element.src = replacement
        return play(element)
