"""TV Custom Sound package

Replace a platform's built-in sounds with your own.  Intercepted sound
sources are fingerprinted and routed to a user-supplied replacement per
category; which category a sound belongs to is learned by tagging the
next sound that plays.

Public classes are re-exported here for convenience.
"""

from .category_service import CategoryService  # noqa: F401
from .config_service import ConfigService  # noqa: F401
from .control import ControlSurface  # noqa: F401
from .fingerprint import fingerprint  # noqa: F401
from .interception import PlaybackInterceptor  # noqa: F401
from .notices import Notice, NoticeBus  # noqa: F401
from .router import SoundRouter  # noqa: F401
from .state import RouterState  # noqa: F401
from .store import JsonFileStore, MemoryStore  # noqa: F401

__all__ = [
    "CategoryService",
    "ConfigService",
    "ControlSurface",
    "fingerprint",
    "PlaybackInterceptor",
    "Notice",
    "NoticeBus",
    "SoundRouter",
    "RouterState",
    "JsonFileStore",
    "MemoryStore",
]
