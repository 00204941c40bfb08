from dataclasses import dataclass
from typing import List, Optional

import pytest

from tv_custom_sound.interception import PlaybackInterceptor
from tv_custom_sound.router import SoundRouter

from conftest import make_source


@dataclass
class FakeAudio:
    """Minimal stand-in for a platform audio element."""

    src: str = ""
    current_src: str = ""


@pytest.fixture
def interceptor(router: SoundRouter) -> PlaybackInterceptor:
    return PlaybackInterceptor(router)


def test_before_play_passes_through_without_assets(interceptor: PlaybackInterceptor):
    source = make_source("p")
    assert interceptor.before_play(source) == source
    assert interceptor.before_play(None) is None


def test_construct_path_substitutes(interceptor: PlaybackInterceptor, router: SoundRouter, asset_a: str):
    router.set_asset("trade", asset_a)
    element = interceptor.construct(make_source("p"), FakeAudio)
    assert element.src == asset_a


def test_play_path_rewrites_element(interceptor: PlaybackInterceptor, router: SoundRouter, asset_a: str):
    router.set_asset("trade", asset_a)
    played: List[str] = []
    element = FakeAudio(src=make_source("p"))

    result = interceptor.play(element, lambda el: played.append(el.src) or "promise")
    assert result == "promise"
    assert element.src == asset_a
    assert played == [asset_a]


def test_play_path_falls_back_to_current_src(interceptor: PlaybackInterceptor, router: SoundRouter, asset_b: str):
    router.set_asset("alert", asset_b)
    element = FakeAudio(src="", current_src="https://example.com/ding.mp3")
    interceptor.play(element, lambda el: None)
    assert element.src == asset_b


def test_replaced_playback_is_not_replaced_again(interceptor: PlaybackInterceptor, router: SoundRouter, asset_a: str, asset_b: str):
    router.set_asset("trade", asset_a)
    router.set_asset("alert", asset_b)
    router.set_pending_tag("alert")

    element = interceptor.construct(make_source("p"), FakeAudio)
    assert element.src == asset_b
    # The substrate plays the substituted element; the shim sees it again.
    interceptor.play(element, lambda el: None)
    assert element.src == asset_b
    assert router.learned_count == 1


def test_disabled_router_leaves_element_untouched(interceptor: PlaybackInterceptor, router: SoundRouter, asset_a: str):
    router.set_asset("trade", asset_a)
    router.set_enabled(False)
    original: Optional[str] = make_source("p")
    element = FakeAudio(src=original)
    interceptor.play(element, lambda el: None)
    assert element.src == original
