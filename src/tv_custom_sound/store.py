"""Persistent key-value storage for router state.

The router persists each piece of its state under its own key the moment
it changes (see :mod:`tv_custom_sound.tuning` for the key names).  Any
object with ``get(key, default)`` and ``set(key, value)`` can serve as the
store; two implementations are provided:

- :class:`MemoryStore` keeps values in a dict (tests, headless embedding).
- :class:`JsonFileStore` writes one ``<key>.json`` file per key, validating
  every value against the key's JSON schema before it is written and after
  it is read back.

Reads never fail: a missing, unreadable or invalid file yields the default
with a warning.  Writes raise :class:`~tv_custom_sound.errors.StorageError`.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol

import jsonschema

from .errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


@dataclass
class MemoryStore:
    """Dict-backed store; values are copied in both directions."""

    data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self.data:
            return default
        return copy.deepcopy(self.data[key])

    def set(self, key: str, value: Any) -> None:
        self.data[key] = copy.deepcopy(value)


@dataclass
class JsonFileStore:
    """Store each key in its own JSON file under ``directory``."""

    directory: Path
    schemas: Mapping[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.directory = Path(self.directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _schema_for(self, key: str) -> Optional[Dict[str, Any]]:
        return self.schemas.get(key)

    def get(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as f:
                value = json.load(f)
        except (OSError, UnicodeDecodeError, JSONDecodeError) as exc:
            logger.warning("Could not read %s: %s; using default", path, exc)
            return default
        schema = self._schema_for(key)
        if schema is not None:
            try:
                jsonschema.validate(instance=value, schema=schema)
            except jsonschema.ValidationError as exc:
                logger.warning("Ignoring invalid value in %s: %s", path, exc.message)
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        schema = self._schema_for(key)
        if schema is not None:
            try:
                jsonschema.validate(instance=value, schema=schema)
            except jsonschema.ValidationError as exc:
                raise StorageError(key, exc.message) from exc
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8", newline="\n") as f:
                json.dump(value, f, indent=2)
        except OSError as exc:
            raise StorageError(key, str(exc)) from exc
