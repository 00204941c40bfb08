import sys
from pathlib import Path
from typing import List

import pytest

# Add the src directory to sys.path so that tv_custom_sound can be imported
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from tv_custom_sound.category_service import CategoryService
from tv_custom_sound.errors import StorageError
from tv_custom_sound.notices import Notice, NoticeBus
from tv_custom_sound.router import SoundRouter
from tv_custom_sound.store import MemoryStore

HEADER = ("SUQzBAAAAAAAI1RTU0UAAAAPAAADTGF2ZjU4Ljc2LjEwMAAAAAAAAAAA" * 2)[:100]


def make_source(marker: str, header: str = HEADER, mime: str = "audio/mp3") -> str:
    """Build a data: URI whose fingerprint window is ``marker`` repeated."""
    assert len(header) == 100
    return f"data:{mime};base64,{header}{marker * 200}TAIL"


class FailingStore(MemoryStore):
    """Store whose writes always fail."""

    def set(self, key, value):
        raise StorageError(key, "disk full")


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def notices() -> List[Notice]:
    return []


@pytest.fixture
def bus(notices: List[Notice]) -> NoticeBus:
    bus = NoticeBus()
    bus.subscribe(notices.append)
    return bus


@pytest.fixture
def router(store: MemoryStore, bus: NoticeBus) -> SoundRouter:
    return SoundRouter.from_store(store, CategoryService(), bus)


@pytest.fixture
def asset_a() -> str:
    return make_source("A")


@pytest.fixture
def asset_b() -> str:
    return make_source("B")
