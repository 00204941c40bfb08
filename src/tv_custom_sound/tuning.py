"""Centralized constants for fingerprinting and sound routing.

Window offsets, preview lengths and storage key names are defined here
and referenced by the rest of the package (single source of truth).
"""

from __future__ import annotations

from typing import Tuple

# ---------------------------------------------------------------------------
# Fingerprint window (characters of the base64 payload after the comma).
# The first bytes of an encoded sound are header and encoder metadata shared
# across a whole family of sounds, so the window starts inside the payload.
FINGERPRINT_WINDOW_START = 100
FINGERPRINT_WINDOW_END = 300

# Used when a data: URI carries no payload separator.
FINGERPRINT_FALLBACK_PREFIX = 200

EMBEDDED_SCHEME = "data:"
PAYLOAD_SEPARATOR = ","

# ---------------------------------------------------------------------------
# Log/notice previews
SOURCE_PREVIEW_CHARS = 80
TAG_PREVIEW_CHARS = 30
HINT_PREVIEW_CHARS = 50

# ---------------------------------------------------------------------------
# Categories
DEFAULT_CATEGORIES: Tuple[str, ...] = ("trade", "alert")
CATEGORY_ID_PATTERN = r"^[a-z][a-z0-9_]*$"

# ---------------------------------------------------------------------------
# Persisted key layout
KEY_PREFIX = "tv_custom_sound"
ENABLED_KEY = f"{KEY_PREFIX}_enabled"
SOUND_MAP_KEY = f"{KEY_PREFIX}_map"


def asset_key(category: str) -> str:
    """Return the storage key holding the replacement asset of ``category``."""
    return f"{KEY_PREFIX}_{category}_base64"


# Base64 carries 3 bytes in every 4 characters.
BASE64_BYTES_PER_CHAR = 0.75
