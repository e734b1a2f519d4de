import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from savedata import InMemorySlotStorage, SaveDataSettings, SaveManager, Store  # noqa: E402


@pytest.fixture()
def settings(tmp_path: Path) -> SaveDataSettings:
    return SaveDataSettings(save_root=tmp_path / "SaveData")


@pytest.fixture()
def store() -> Store:
    return Store()


@pytest.fixture()
def manager(store: Store, settings: SaveDataSettings) -> SaveManager:
    return SaveManager(store=store, settings=settings)


@pytest.fixture()
def memory_manager(store: Store, settings: SaveDataSettings) -> SaveManager:
    return SaveManager(store=store, storage=InMemorySlotStorage(), settings=settings)
