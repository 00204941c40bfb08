"""User-facing control actions.

:class:`ControlSurface` implements the actions a menu, a set of buttons or
the command line offers the user: upload, test and clear a sound per
category, tag the next sound, reset learned tags, toggle routing and show
status.  Every action finishes with a notice on the router's bus.

Confirmation prompts and test playback are collaborators handed in by the
front end.  Without a ``confirm`` callable every prompt is accepted, which
is what headless callers want.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from .assets import read_asset
from .errors import AssetReadError, StorageError
from .notices import NoticeBus
from .router import RouterStatus, SoundRouter

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]
PlayerCallback = Callable[[str], Any]


def _accept(_prompt: str) -> bool:
    return True


class ControlSurface:
    def __init__(
        self,
        router: SoundRouter,
        confirm: Optional[ConfirmCallback] = None,
        player: Optional[PlayerCallback] = None,
    ) -> None:
        self.router = router
        self.confirm = confirm or _accept
        self.player = player
        # StorageError of the most recent action, None when it was saved.
        self.last_error: Optional[StorageError] = None

    @property
    def bus(self) -> NoticeBus:
        return self.router.bus

    def _label(self, category: str) -> str:
        return self.router.categories.get_label(category)

    # ------------------------------------------------------------------
    # Sounds
    # ------------------------------------------------------------------
    def upload(self, category: str, path: Path) -> bool:
        """Load ``path`` as the replacement sound of ``category``."""
        self.last_error = None
        category = self.router.categories.require(category)
        label = self._label(category)
        try:
            asset = read_asset(path)
        except AssetReadError as exc:
            logger.warning("Failed to read file: %s", exc)
            self.bus.error("upload_failed", "Upload failed", "Failed to read the audio file.", category=category)
            return False
        try:
            self.router.set_asset(category, asset.data_uri)
        except StorageError as exc:
            self.last_error = exc
            self.bus.error("upload_failed", "Upload failed", f"Could not save the {label} sound: {exc}", category=category)
            return False
        logger.info("%s sound uploaded: %s | size: %d bytes", label, asset.name, asset.size_bytes)
        self.bus.info(
            "uploaded",
            "Sound uploaded",
            f"{label} sound uploaded!\n\nFile: {asset.name}\nSize: {asset.size_kb:.1f} KB",
            category=category,
            name=asset.name,
            size_bytes=asset.size_bytes,
        )
        return True

    def test(self, category: str) -> bool:
        """Play the raw asset of ``category``, bypassing the router."""
        category = self.router.categories.require(category)
        label = self._label(category)
        asset = self.router.asset_for(category)
        if not asset:
            self.bus.info("test_missing", "Nothing to test", f"No {label} sound uploaded yet.", category=category)
            return False
        if self.player is None:
            self.bus.error("test_failed", "Playback failed", "Playback failed: no player available", category=category)
            return False
        logger.info("Testing %s sound...", label)
        try:
            self.player(asset)
        except Exception as exc:
            logger.warning("Playback failed: %s", exc)
            self.bus.error("test_failed", "Playback failed", f"Playback failed: {exc}", category=category)
            return False
        return True

    def clear(self, category: str) -> bool:
        self.last_error = None
        category = self.router.categories.require(category)
        label = self._label(category)
        if not self.router.asset_for(category):
            self.bus.info("clear_missing", "Nothing to clear", f"No {label} sound to clear.", category=category)
            return False
        if not self.confirm(f"Remove {label} sound?"):
            return False
        try:
            self.router.clear_asset(category)
        except StorageError as exc:
            self.last_error = exc
            self.bus.error("clear_failed", "Clear failed", f"Could not remove the {label} sound: {exc}", category=category)
            return False
        self.bus.info("cleared", "Sound removed", f"{label} sound removed.", category=category)
        return True

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------
    def tag_next(self, category: str) -> None:
        category = self.router.categories.require(category)
        label = self._label(category)
        self.router.set_pending_tag(category)
        self.bus.info(
            "tag_mode",
            f"Tag mode: {label.upper()}",
            f"Now trigger a {label} sound.\n"
            f"The next sound that plays will be remembered as a {label} sound.",
            category=category,
        )

    def reset_tags(self) -> int:
        """Reset the learned map after confirmation; return entries cleared."""
        self.last_error = None
        count = self.router.learned_count
        if count == 0:
            self.bus.info("reset_empty", "Nothing to reset", "No learned tags to reset.")
            return 0
        if not self.confirm(f"Reset {count} learned tag(s)?"):
            return 0
        try:
            cleared = self.router.reset_learned_map()
        except StorageError as exc:
            self.last_error = exc
            self.bus.error("reset_failed", "Reset failed", f"Could not reset learned tags: {exc}")
            return 0
        self.bus.info("reset", "Tags reset", f"All learned tags cleared ({cleared}).", cleared=cleared)
        return cleared

    # ------------------------------------------------------------------
    # Toggle & status
    # ------------------------------------------------------------------
    def toggle(self) -> bool:
        self.last_error = None
        try:
            enabled = self.router.toggle_enabled()
        except StorageError as exc:
            self.last_error = exc
            enabled = self.router.enabled
            self.bus.error("toggle_failed", "Toggle not saved", f"Could not save the setting: {exc}", enabled=enabled)
            return enabled
        self.bus.info("toggled", "Toggled", "Enabled" if enabled else "Disabled", enabled=enabled)
        return enabled

    def status(self) -> RouterStatus:
        status = self.router.status()
        lines = [f"Enabled: {'Yes' if status.enabled else 'No'}"]
        for asset in status.assets:
            loaded = f"Loaded ({asset.size_kb:.1f} KB)" if asset.loaded else "Not set"
            lines.append(f"{asset.label} sound: {loaded}")
        lines.append(f"Learned tags: {status.learned_count}")
        if status.pending_tag:
            lines.append(f"Tag mode: {self._label(status.pending_tag)}")
        self.bus.info("status", "Status", "\n".join(lines), **status.to_dict())
        return status
