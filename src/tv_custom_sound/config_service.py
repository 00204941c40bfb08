"""Configuration management for TV Custom Sound.

This module centralises all logic related to finding and loading
configuration files.  It supports both AppData and portable
installation modes, resolves the appropriate configuration
directory, and exposes helper functions to read/write JSON
configuration files with JSON schema validation.  Besides
``config.json`` (category list, log level) and ``labels.json``
(category display labels) the configuration directory holds a
``store/`` folder with one JSON file per persisted router key.

Portable mode is controlled via a ``portable.flag`` file located
alongside the application or by passing ``--portable`` to the
CLI.  The flag file takes precedence over the command line, and an
explicit ``config_dir`` takes precedence over both.

Example usage::

    from tv_custom_sound.config_service import ConfigService

    config_service = ConfigService(app_dir=Path.cwd())
    categories = config_service.build_categories()
    store = config_service.open_store(categories)

"""

from __future__ import annotations

import json
import logging
import os
import platform
from dataclasses import dataclass, field
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import jsonschema

from . import tuning
from .category_service import CategoryService
from .store import JsonFileStore

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"


def _get_appdata_root(app_name: str = "TVCustomSound") -> Path:
    """Return the platform-specific base directory for config files."""
    system = platform.system().lower()
    if system == "windows":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / app_name
        # Fallback to user profile
        return Path.home() / f"AppData/Roaming/{app_name}"
    # On Linux/macOS use XDG_CONFIG_HOME or ~/.config
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / app_name
    return Path.home() / ".config" / app_name


def _load_json(path: Path) -> Any:
    if not path.exists():
        return None
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _save_json(data: Any, file_path: Path) -> None:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(data, f, indent=2)


def _validate_json(data: Any, schema: Optional[Dict[str, Any]]) -> None:
    if not schema:
        return
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc.message}") from exc


@dataclass
class ConfigService:
    """Resolve and manage TV Custom Sound configuration."""

    app_dir: Path
    config_dir: Optional[Path] = None
    portable_flag_filename: str = "portable.flag"
    config_filename: str = "config.json"
    labels_filename: str = "labels.json"
    store_dirname: str = "store"
    schema_dir: Path = SCHEMA_DIR
    schema_names: Tuple[str, ...] = (
        "config.schema.json",
        "labels.schema.json",
        "asset.schema.json",
        "enabled.schema.json",
        "sound_map.schema.json",
    )
    _cached_mode: Optional[bool] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.app_dir = Path(self.app_dir)
        if self.config_dir is not None:
            self.config_dir = Path(self.config_dir)

    def _portable_flag_exists(self) -> bool:
        return (self.app_dir / self.portable_flag_filename).exists()

    def detect_mode(self, cli_portable: bool = False) -> bool:
        """Return ``True`` if portable mode should be used.

        Portable mode is selected if any of the following conditions hold
        (checked in order):

        1. A ``portable.flag`` file exists in the application directory.
        2. ``cli_portable`` is truthy.

        The result is cached for subsequent calls.
        """
        if self._cached_mode is None:
            if self._portable_flag_exists():
                self._cached_mode = True
            else:
                self._cached_mode = bool(cli_portable)
        return self._cached_mode

    def get_config_dir(self, cli_portable: bool = False) -> Path:
        """Return the resolved configuration directory."""
        if self.config_dir is not None:
            return self.config_dir
        if self.detect_mode(cli_portable=cli_portable):
            return self.app_dir
        return _get_appdata_root()

    def get_config_path(self, cli_portable: bool = False) -> Path:
        return self.get_config_dir(cli_portable) / self.config_filename

    def get_labels_path(self, cli_portable: bool = False) -> Path:
        return self.get_config_dir(cli_portable) / self.labels_filename

    def get_store_dir(self, cli_portable: bool = False) -> Path:
        return self.get_config_dir(cli_portable) / self.store_dirname

    def get_schema_path(self, schema_name: str) -> Path:
        return self.schema_dir / schema_name

    def load_schema(self, schema_name: str) -> Optional[Dict[str, Any]]:
        schema_path = self.get_schema_path(schema_name)
        if not schema_path.exists():
            return None
        return _load_json(schema_path)

    def _load_validated(self, path: Path, schema_name: str, what: str) -> Dict[str, Any]:
        try:
            data = _load_json(path)
        except (OSError, UnicodeDecodeError, JSONDecodeError) as exc:
            logger.warning("Could not read %s: %s. Using defaults.", path, exc)
            return {}
        if data is None:
            return {}
        try:
            _validate_json(data, self.load_schema(schema_name))
        except ValueError as exc:
            logger.warning("%s. Ignoring invalid %s.", exc, what)
            return {}
        return data

    def load_config(self, cli_portable: bool = False) -> Dict[str, Any]:
        """Load configuration from the resolved path, validating against schema."""
        return self._load_validated(self.get_config_path(cli_portable), self.schema_names[0], "configuration")

    def save_config(self, config: Dict[str, Any], cli_portable: bool = False) -> None:
        """Write configuration to disk, validating against the schema first."""
        _validate_json(config, self.load_schema(self.schema_names[0]))
        _save_json(config, self.get_config_path(cli_portable))

    # ------------------------------------------------------------------
    # Category labels
    # ------------------------------------------------------------------
    def load_labels(self, cli_portable: bool = False) -> Dict[str, str]:
        """Load category display labels; empty when missing or invalid."""
        return self._load_validated(self.get_labels_path(cli_portable), self.schema_names[1], "labels")

    def save_labels(self, labels: Dict[str, str], cli_portable: bool = False) -> None:
        _validate_json(labels, self.load_schema(self.schema_names[1]))
        _save_json(labels, self.get_labels_path(cli_portable))

    def build_categories(self, cli_portable: bool = False) -> CategoryService:
        config = self.load_config(cli_portable)
        categories = config.get("categories") or list(tuning.DEFAULT_CATEGORIES)
        return CategoryService(categories=categories, labels=self.load_labels(cli_portable))

    # ------------------------------------------------------------------
    # Router state store
    # ------------------------------------------------------------------
    def store_schemas(self, categories: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Map every persisted key to the schema its values must satisfy."""
        asset_schema = self.load_schema(self.schema_names[2])
        enabled_schema = self.load_schema(self.schema_names[3])
        map_schema = self.load_schema(self.schema_names[4])
        schemas: Dict[str, Dict[str, Any]] = {}
        if asset_schema:
            for category in categories:
                schemas[tuning.asset_key(category)] = asset_schema
        if enabled_schema:
            schemas[tuning.ENABLED_KEY] = enabled_schema
        if map_schema:
            schemas[tuning.SOUND_MAP_KEY] = map_schema
        return schemas

    def open_store(self, categories: Iterable[str], cli_portable: bool = False) -> JsonFileStore:
        return JsonFileStore(self.get_store_dir(cli_portable), self.store_schemas(categories))
