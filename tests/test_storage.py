import os
from pathlib import Path

import pytest

from savedata import (
    FileSlotStorage,
    InMemorySlotStorage,
    InvalidSlotError,
    SaveStorageError,
    SlotNotFoundError,
)


@pytest.fixture()
def storage(tmp_path: Path) -> FileSlotStorage:
    return FileSlotStorage(tmp_path / "SaveData")


def test_root_is_created(tmp_path: Path):
    root = tmp_path / "nested" / "SaveData"
    FileSlotStorage(root)
    assert root.is_dir()


def test_write_and_read_slot(storage: FileSlotStorage):
    assert not storage.exists("Save1")
    storage.create_slot("Save1")
    assert not storage.exists("Save1")

    storage.write("Save1", b'{"a": 1}')
    assert storage.exists("Save1")
    assert storage.read("Save1") == b'{"a": 1}'
    assert storage.slot_path("Save1") == storage.root / "Save1" / "save.json"


def test_overwrite_leaves_no_temp_files(storage: FileSlotStorage):
    storage.create_slot("Save1")
    storage.write("Save1", b"one")
    storage.write("Save1", b"two")
    assert storage.read("Save1") == b"two"
    assert os.listdir(storage.slot_dir("Save1")) == ["save.json"]


def test_failed_replace_keeps_previous_file(storage: FileSlotStorage, monkeypatch):
    storage.create_slot("Save1")
    storage.write("Save1", b"good")

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", boom)
    with pytest.raises(SaveStorageError):
        storage.write("Save1", b"bad")
    monkeypatch.undo()

    assert storage.read("Save1") == b"good"
    assert os.listdir(storage.slot_dir("Save1")) == ["save.json"]


def test_write_without_slot_dir_fails(storage: FileSlotStorage):
    with pytest.raises(SaveStorageError):
        storage.write("Missing", b"data")


def test_read_missing_slot(storage: FileSlotStorage):
    with pytest.raises(SlotNotFoundError):
        storage.read("Nope")


def test_custom_filename(tmp_path: Path):
    storage = FileSlotStorage(tmp_path, filename="data.sav")
    storage.create_slot("s")
    storage.write("s", b"x")
    assert (tmp_path / "s" / "data.sav").read_bytes() == b"x"


def test_listing_and_emptiness(storage: FileSlotStorage):
    assert storage.is_empty()
    assert storage.list_slots() == []

    (storage.root / "notes.txt").write_text("stray", encoding="utf-8")
    assert not storage.is_empty()
    assert storage.list_slots() == []

    for slot in ("Save2", "Save1"):
        storage.create_slot(slot)
    assert storage.list_slots() == ["Save1", "Save2"]


def test_missing_root_is_empty(tmp_path: Path):
    storage = FileSlotStorage(tmp_path / "gone")
    (tmp_path / "gone").rmdir()
    assert storage.is_empty()
    assert storage.list_slots() == []


@pytest.mark.parametrize("slot_id", ["", "   ", ".", "..", "a/b", "nul\x00", None])
def test_invalid_slot_ids(storage: FileSlotStorage, slot_id):
    with pytest.raises(InvalidSlotError):
        storage.exists(slot_id)


def test_in_memory_storage():
    storage = InMemorySlotStorage()
    assert storage.is_empty()
    storage.create_slot("a")
    assert not storage.exists("a")
    assert storage.list_slots() == ["a"]
    with pytest.raises(SlotNotFoundError):
        storage.read("a")

    storage.write("a", b"data")
    assert storage.exists("a")
    assert storage.read("a") == b"data"
    assert not storage.is_empty()
    with pytest.raises(InvalidSlotError):
        storage.write("../x", b"")


def test_unreadable_root_raises_storage_error(storage: FileSlotStorage, monkeypatch):
    storage.create_slot("Save1")

    def denied(self):
        raise PermissionError("permission denied")

    monkeypatch.setattr(Path, "iterdir", denied)
    with pytest.raises(SaveStorageError):
        storage.list_slots()
    with pytest.raises(SaveStorageError):
        storage.is_empty()
