"""Fingerprint extraction for sound sources.

A sound source is either a remote address (``https://.../ding.mp3``) or a
self-describing ``data:`` URI that carries its bytes inline.  Remote
addresses are stable identifiers for an asset and are used verbatim.  For
embedded payloads a fixed window from *inside* the base64 payload is used:
sounds of the same family share their leading header bytes, so sampling an
interior window is more discriminating than the start and much cheaper than
hashing the whole payload.

All functions in this module are pure.
"""

from __future__ import annotations

from typing import Optional

from . import tuning


def is_embedded(source: Optional[str]) -> bool:
    """Return ``True`` if ``source`` carries its own payload (``data:`` URI)."""
    return bool(source) and source.startswith(tuning.EMBEDDED_SCHEME)


def fingerprint(source: Optional[str]) -> Optional[str]:
    """Return the fingerprint key for ``source`` or ``None`` when absent.

    - empty/absent input yields ``None``
    - ``data:`` URIs yield ``payload[100:300]``; a payload too short to reach
      the window yields ``None``
    - ``data:`` URIs without a comma yield the first 200 characters
    - anything else is returned unchanged
    """
    if not source:
        return None
    if not is_embedded(source):
        return source
    _, sep, payload = source.partition(tuning.PAYLOAD_SEPARATOR)
    if not sep:
        return source[: tuning.FINGERPRINT_FALLBACK_PREFIX]
    window = payload[tuning.FINGERPRINT_WINDOW_START : tuning.FINGERPRINT_WINDOW_END]
    return window or None


def preview(text: Optional[str], limit: int = tuning.SOURCE_PREVIEW_CHARS) -> str:
    """Return a short, log-safe rendering of ``text``."""
    if not text:
        return repr(text)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
