from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from . import tuning
from .store import KeyValueStore


@dataclass(slots=True)
class RouterState:
    """Everything the router owns: assets, learned map, pending tag, flag."""

    assets: Dict[str, str] = field(default_factory=dict)
    learned: Dict[str, str] = field(default_factory=dict)
    pending_tag: Optional[str] = None
    enabled: bool = True

    @classmethod
    def from_store(cls, store: KeyValueStore, categories: Iterable[str]) -> "RouterState":
        assets: Dict[str, str] = {}
        for category in categories:
            value = store.get(tuning.asset_key(category), "")
            if isinstance(value, str) and value:
                assets[category] = value

        learned: Dict[str, str] = {}
        loaded_map = store.get(tuning.SOUND_MAP_KEY, {})
        if isinstance(loaded_map, dict):
            for fp, category in loaded_map.items():
                if isinstance(fp, str) and isinstance(category, str):
                    learned[fp] = category

        enabled = store.get(tuning.ENABLED_KEY, True)
        return cls(
            assets=assets,
            learned=learned,
            pending_tag=None,
            enabled=enabled if isinstance(enabled, bool) else True,
        )
