"""
Control surface actions: upload, test, clear, tag, reset, toggle, status.

Every action must end with a notice; failures must leave state unchanged
and be reported instead of raised.
"""

import base64
from pathlib import Path
from typing import List

import pytest

from tv_custom_sound import tuning
from tv_custom_sound.assets import read_asset
from tv_custom_sound.control import ControlSurface
from tv_custom_sound.errors import AssetReadError, StorageError, UnknownCategoryError
from tv_custom_sound.notices import Notice
from tv_custom_sound.router import SoundRouter
from tv_custom_sound.state import RouterState

from conftest import FailingStore, make_source


@pytest.fixture
def sound_file(tmp_path: Path) -> Path:
    path = tmp_path / "cash-register.mp3"
    path.write_bytes(b"ID3" + bytes(range(256)) * 8)
    return path


@pytest.fixture
def control(router: SoundRouter) -> ControlSurface:
    return ControlSurface(router)


def _kinds(notices: List[Notice]) -> List[str]:
    return [n.kind for n in notices]


# ============================================================================
# ASSET INGESTION
# ============================================================================

def test_read_asset_builds_data_uri(sound_file: Path):
    asset = read_asset(sound_file)
    assert asset.name == "cash-register.mp3"
    assert asset.size_bytes == 3 + 256 * 8
    assert asset.mime_type == "audio/mpeg"
    head, payload = asset.data_uri.split(",", 1)
    assert head == "data:audio/mpeg;base64"
    assert base64.b64decode(payload) == sound_file.read_bytes()


def test_read_asset_missing_or_empty(tmp_path: Path):
    with pytest.raises(AssetReadError):
        read_asset(tmp_path / "missing.wav")
    empty = tmp_path / "empty.wav"
    empty.write_bytes(b"")
    with pytest.raises(AssetReadError):
        read_asset(empty)


# ============================================================================
# UPLOAD / TEST / CLEAR
# ============================================================================

def test_upload_sets_asset_and_confirms(control: ControlSurface, router: SoundRouter, sound_file: Path, notices):
    assert control.upload("trade", sound_file)
    assert router.asset_for("trade") == read_asset(sound_file).data_uri
    uploaded = notices[-1]
    assert uploaded.kind == "uploaded"
    assert "cash-register.mp3" in uploaded.message
    assert "KB" in uploaded.message


def test_upload_unreadable_file_leaves_state(control: ControlSurface, router: SoundRouter, tmp_path: Path, notices):
    assert not control.upload("trade", tmp_path / "nope.mp3")
    assert router.asset_for("trade") is None
    assert notices[-1].kind == "upload_failed"
    assert notices[-1].level == "error"
    assert notices[-1].message == "Failed to read the audio file."


def test_upload_storage_failure_reported(sound_file: Path, notices, bus):
    router = SoundRouter(RouterState(), FailingStore(), bus=bus)
    control = ControlSurface(router)
    assert not control.upload("alert", sound_file)
    assert notices[-1].kind == "upload_failed"
    assert "disk full" in notices[-1].message
    assert isinstance(control.last_error, StorageError)


def test_upload_unknown_category(control: ControlSurface, sound_file: Path):
    with pytest.raises(UnknownCategoryError):
        control.upload("volume", sound_file)


def test_test_plays_raw_asset_bypassing_router(router: SoundRouter, asset_a: str):
    played = []
    router.set_asset("trade", asset_a)
    router.set_pending_tag("alert")
    control = ControlSurface(router, player=played.append)

    assert control.test("trade")
    assert played == [asset_a]
    assert router.pending_tag == "alert", "Test playback must not reach the router"


def test_test_without_asset(control: ControlSurface, notices):
    assert not control.test("alert")
    assert notices[-1].kind == "test_missing"
    assert notices[-1].message == "No Alert sound uploaded yet."


def test_test_playback_failure(router: SoundRouter, asset_a: str, notices):
    def broken_player(_asset):
        raise RuntimeError("device busy")

    router.set_asset("trade", asset_a)
    control = ControlSurface(router, player=broken_player)
    assert not control.test("trade")
    assert notices[-1].kind == "test_failed"
    assert notices[-1].message == "Playback failed: device busy"


def test_clear_requires_confirmation(router: SoundRouter, asset_a: str, notices):
    prompts = []
    router.set_asset("trade", asset_a)

    declined = ControlSurface(router, confirm=lambda q: prompts.append(q) or False)
    assert not declined.clear("trade")
    assert router.asset_for("trade") == asset_a
    assert prompts == ["Remove Trade sound?"]

    accepted = ControlSurface(router, confirm=lambda q: True)
    assert accepted.clear("trade")
    assert router.asset_for("trade") is None
    assert notices[-1].kind == "cleared"


def test_clear_nothing(control: ControlSurface, notices):
    assert not control.clear("alert")
    assert notices[-1].message == "No Alert sound to clear."


def test_clear_storage_failure_reported(asset_a: str, notices, bus):
    router = SoundRouter(RouterState(assets={"trade": asset_a}), FailingStore(), bus=bus)
    control = ControlSurface(router)
    assert not control.clear("trade")
    assert notices[-1].kind == "clear_failed"
    assert notices[-1].level == "error"
    assert "disk full" in notices[-1].message
    assert control.last_error.key == tuning.asset_key("trade")


def test_declined_clear_is_not_an_error(router: SoundRouter, asset_a: str):
    router.set_asset("trade", asset_a)
    control = ControlSurface(router, confirm=lambda q: False)
    assert not control.clear("trade")
    assert control.last_error is None


# ============================================================================
# TAGGING / RESET / TOGGLE / STATUS
# ============================================================================

def test_tag_next_sets_pending_tag(control: ControlSurface, router: SoundRouter, notices):
    control.tag_next("alert")
    assert router.pending_tag == "alert"
    assert notices[-1].kind == "tag_mode"
    assert notices[-1].title == "Tag mode: ALERT"


def test_reset_tags_reports_count(router: SoundRouter, notices):
    prompts = []
    control = ControlSurface(router, confirm=lambda q: prompts.append(q) or True)
    for marker in "xyz":
        router.set_pending_tag("trade")
        router.decide(make_source(marker))

    assert control.reset_tags() == 3
    assert prompts == ["Reset 3 learned tag(s)?"]
    assert router.learned_count == 0
    assert notices[-1].data["cleared"] == 3


def test_reset_tags_empty_and_declined(router: SoundRouter, notices):
    assert ControlSurface(router).reset_tags() == 0
    assert notices[-1].kind == "reset_empty"

    router.set_pending_tag("trade")
    router.decide(make_source("x"))
    assert ControlSurface(router, confirm=lambda q: False).reset_tags() == 0
    assert router.learned_count == 1


def test_reset_tags_storage_failure_reported(notices, bus):
    router = SoundRouter(RouterState(learned={"fp": "trade"}), FailingStore(), bus=bus)
    control = ControlSurface(router)
    assert control.reset_tags() == 0
    assert notices[-1].kind == "reset_failed"
    assert "disk full" in notices[-1].message
    assert control.last_error.key == tuning.SOUND_MAP_KEY


def test_toggle(control: ControlSurface, router: SoundRouter, notices):
    assert control.toggle() is False
    assert not router.enabled
    assert notices[-1].message == "Disabled"
    assert control.toggle() is True
    assert notices[-1].message == "Enabled"
    assert control.last_error is None


def test_toggle_storage_failure_reported(notices, bus):
    router = SoundRouter(RouterState(), FailingStore(), bus=bus)
    control = ControlSurface(router)
    assert control.toggle() is False
    assert notices[-1].kind == "toggle_failed"
    assert notices[-1].data["enabled"] is False
    assert control.last_error.key == tuning.ENABLED_KEY


def test_status_notice(control: ControlSurface, router: SoundRouter, asset_a: str, notices):
    router.set_asset("trade", asset_a)
    status = control.status()
    assert status.learned_count == 0
    message = notices[-1].message
    assert "Enabled: Yes" in message
    assert "Trade sound: Loaded (" in message
    assert "Alert sound: Not set" in message
    assert "Learned tags: 0" in message
