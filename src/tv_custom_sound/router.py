"""Sound routing and tag-mode learning.

The :class:`SoundRouter` decides, for every intercepted playback, whether
the sound should be replaced and with which of the user's assets.  It owns
the :class:`~tv_custom_sound.state.RouterState` outright: the control
surface and the interception shim only call its methods.

Decision order for :meth:`SoundRouter.decide`:

1. Routing disabled: no replacement.
2. The source *is* one of our assets: no replacement (the shim sees our
   own substituted playback again).
3. No fingerprint can be taken: no replacement.
4. Tag mode: the pending tag is consumed and the fingerprint learned.
5. Learned lookup.
6. Exactly one asset configured: it replaces everything.
7. Several assets configured, nothing learned: warn and use the first
   declared category that has an asset.
8. Nothing configured: no replacement.

Every mutation is written through to the store straight away.  The
in-memory state always changes first, so a failing store never alters
the decisions of the running process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from . import tuning
from .category_service import CategoryService
from .errors import StorageError
from .fingerprint import fingerprint, preview
from .notices import NoticeBus
from .state import RouterState
from .store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetStatus:
    category: str
    label: str
    loaded: bool
    size_kb: Optional[float]


@dataclass(frozen=True)
class RouterStatus:
    enabled: bool
    assets: List[AssetStatus]
    learned_count: int
    pending_tag: Optional[str]

    def to_dict(self) -> Dict[str, object]:
        return {
            "enabled": self.enabled,
            "assets": {
                a.category: {"label": a.label, "loaded": a.loaded, "size_kb": a.size_kb}
                for a in self.assets
            },
            "learned_tags": self.learned_count,
            "pending_tag": self.pending_tag,
        }


def estimate_size_kb(asset: str) -> float:
    """Approximate decoded size of a base64 asset in KB, one decimal."""
    return round(len(asset) * tuning.BASE64_BYTES_PER_CHAR / 1024, 1)


class SoundRouter:
    """Classify intercepted sounds and pick their replacement."""

    def __init__(
        self,
        state: RouterState,
        store: KeyValueStore,
        categories: Optional[CategoryService] = None,
        bus: Optional[NoticeBus] = None,
    ) -> None:
        self._state = state
        self._store = store
        self.categories = categories or CategoryService()
        self.bus = bus or NoticeBus()

    @classmethod
    def from_store(
        cls,
        store: KeyValueStore,
        categories: Optional[CategoryService] = None,
        bus: Optional[NoticeBus] = None,
    ) -> "SoundRouter":
        categories = categories or CategoryService()
        state = RouterState.from_store(store, categories)
        router = cls(state, store, categories, bus)
        logger.info(
            "Sound routing initialised | enabled: %s | assets: %s | learned mappings: %d",
            state.enabled,
            ", ".join(f"{c}={'yes' if router.asset_for(c) else 'no'}" for c in categories),
            len(state.learned),
        )
        return router

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def enabled(self) -> bool:
        return self._state.enabled

    @property
    def pending_tag(self) -> Optional[str]:
        return self._state.pending_tag

    @property
    def learned_count(self) -> int:
        return len(self._state.learned)

    def learned_category(self, source: Optional[str]) -> Optional[str]:
        """Return the learned category for ``source``'s fingerprint, if any."""
        fp = fingerprint(source)
        if fp is None:
            return None
        return self._state.learned.get(fp)

    def asset_for(self, category: str) -> Optional[str]:
        return self._state.assets.get(category) or None

    def configured_categories(self) -> List[str]:
        """Declared categories that currently have an asset, in declaration order."""
        return [c for c in self.categories if self.asset_for(c)]

    def is_own_asset(self, source: Optional[str]) -> bool:
        if not source:
            return False
        return any(source == asset for asset in self._state.assets.values() if asset)

    def status(self) -> RouterStatus:
        assets = []
        for category in self.categories:
            asset = self.asset_for(category)
            assets.append(
                AssetStatus(
                    category=category,
                    label=self.categories.get_label(category),
                    loaded=asset is not None,
                    size_kb=estimate_size_kb(asset) if asset else None,
                )
            )
        return RouterStatus(
            enabled=self._state.enabled,
            assets=assets,
            learned_count=len(self._state.learned),
            pending_tag=self._state.pending_tag,
        )

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------
    def decide(self, source: Optional[str]) -> Optional[str]:
        """Return the replacement asset for ``source`` or ``None``."""
        if not self._state.enabled:
            return None
        if self.is_own_asset(source):
            return None

        fp = fingerprint(source)
        if fp is None:
            return None

        if self._state.pending_tag is not None:
            return self._resolve_pending_tag(fp)

        category = self._state.learned.get(fp)
        if category is not None:
            logger.info("Matched fingerprint -> %s", category)
            asset = self.asset_for(category) if category in self.categories else None
            if asset:
                return asset

        configured = self.configured_categories()
        if len(configured) == 1:
            return self.asset_for(configured[0])
        if configured:
            return self._ambiguous_fallback(fp, configured)
        return None

    def _resolve_pending_tag(self, fp: str) -> Optional[str]:
        tag = self._state.pending_tag
        self._state.pending_tag = None

        if self._collides_with_asset(fp):
            logger.warning(
                "Not tagging '%s': fingerprint matches a replacement sound (%s)",
                tag,
                preview(fp, tuning.TAG_PREVIEW_CHARS),
            )
            return None

        self._state.learned[fp] = tag
        try:
            self._store.set(tuning.SOUND_MAP_KEY, dict(self._state.learned))
        except StorageError as exc:
            logger.warning("Learned tag kept in memory only: %s", exc)

        label = self.categories.get_label(tag)
        self.bus.info(
            "tagged",
            "Sound tagged",
            f'Tagged sound as "{label}" (fingerprint: {preview(fp, tuning.TAG_PREVIEW_CHARS)})',
            category=tag,
            fingerprint=fp,
        )
        return self.asset_for(tag)

    def _collides_with_asset(self, fp: str) -> bool:
        return any(fingerprint(asset) == fp for asset in self._state.assets.values() if asset)

    def _ambiguous_fallback(self, fp: str, configured: List[str]) -> Optional[str]:
        default = configured[0]
        hints = " or ".join(f'"Tag Next -> {self.categories.get_label(c)}"' for c in configured)
        self.bus.warning(
            "ambiguous",
            "Unknown sound",
            f"Unknown sound detected! Use {hints} to teach me.\n"
            f"Fingerprint: {preview(fp, tuning.HINT_PREVIEW_CHARS)}",
            fingerprint=fp,
            fallback=default,
            candidates=list(configured),
        )
        return self.asset_for(default)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def set_pending_tag(self, category: str) -> None:
        """Tag the next decided sound as ``category`` (replaces any pending tag)."""
        self._state.pending_tag = self.categories.require(category)
        logger.info("Tag mode ON - next intercepted sound will be tagged as %s", category.upper())

    def clear_pending_tag(self) -> None:
        self._state.pending_tag = None

    def set_asset(self, category: str, asset: str) -> None:
        self.categories.require(category)
        if not asset:
            raise ValueError("Replacement asset must not be empty; use clear_asset()")
        self._state.assets[category] = asset
        self._store.set(tuning.asset_key(category), asset)

    def clear_asset(self, category: str) -> None:
        self.categories.require(category)
        self._state.assets.pop(category, None)
        self._store.set(tuning.asset_key(category), "")
        logger.info("%s sound cleared", self.categories.get_label(category))

    def reset_learned_map(self) -> int:
        """Forget every learned fingerprint; return how many were dropped."""
        count = len(self._state.learned)
        self._state.learned = {}
        self._store.set(tuning.SOUND_MAP_KEY, {})
        logger.info("Learned tags reset (%d cleared)", count)
        return count

    def set_enabled(self, enabled: bool) -> None:
        self._state.enabled = bool(enabled)
        self._store.set(tuning.ENABLED_KEY, self._state.enabled)
        logger.info("Toggled: %s", "ON" if self._state.enabled else "OFF")

    def toggle_enabled(self) -> bool:
        self.set_enabled(not self._state.enabled)
        return self._state.enabled
