from __future__ import annotations

import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from .errors import InvalidSlotError, SaveStorageError, SlotNotFoundError
from .paths import ensure_dir

logger = logging.getLogger(__name__)


def validate_slot_id(slot_id: str) -> str:
    """Return slot_id if it can be used as a single path component."""
    if not isinstance(slot_id, str) or not slot_id.strip():
        raise InvalidSlotError("Slot id must be a non-empty string")
    if slot_id in (".", "..") or "\x00" in slot_id:
        raise InvalidSlotError(f"Invalid slot id: {slot_id!r}")
    for sep in (os.sep, os.altsep, "/"):
        if sep and sep in slot_id:
            raise InvalidSlotError(f"Slot id must not contain path separators: {slot_id!r}")
    return slot_id


class SlotStorage(ABC):
    """Slot-addressed byte blob store."""

    @abstractmethod
    def exists(self, slot_id: str) -> bool:
        """Return True if the slot holds saved bytes."""

    @abstractmethod
    def create_slot(self, slot_id: str) -> None:
        """Create the slot's storage location if it does not exist yet."""

    @abstractmethod
    def write(self, slot_id: str, data: bytes) -> None:
        """Replace the slot's bytes. Must not leave a partially written slot."""

    @abstractmethod
    def read(self, slot_id: str) -> bytes:
        """Return the slot's bytes or raise SlotNotFoundError."""

    @abstractmethod
    def list_slots(self) -> List[str]:
        """Return the known slot ids, sorted."""

    def is_empty(self) -> bool:
        return not self.list_slots()


class FileSlotStorage(SlotStorage):
    """Filesystem-backed slots: ``<root>/<slot_id>/<filename>``.

    Writes go to a temporary file in the slot directory which is fsynced and then
    moved over the target with os.replace, so a failed save leaves the previous
    file untouched.
    """

    def __init__(self, root: Path, filename: str = "save.json") -> None:
        self.root = Path(root)
        self.filename = filename
        try:
            ensure_dir(self.root)
        except OSError as exc:
            raise SaveStorageError(f"Cannot create save root {self.root}: {exc}") from exc

    def slot_dir(self, slot_id: str) -> Path:
        return self.root / validate_slot_id(slot_id)

    def slot_path(self, slot_id: str) -> Path:
        return self.slot_dir(slot_id) / self.filename

    def exists(self, slot_id: str) -> bool:
        return self.slot_path(slot_id).is_file()

    def create_slot(self, slot_id: str) -> None:
        try:
            ensure_dir(self.slot_dir(slot_id))
        except OSError as exc:
            raise SaveStorageError(f"Cannot create slot {slot_id!r}: {exc}") from exc

    def write(self, slot_id: str, data: bytes) -> None:
        path = self.slot_path(slot_id)
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            logger.debug("Replacing %s with %s", path, tmp_name)
            os.replace(tmp_name, path)
        except OSError as exc:
            raise SaveStorageError(f"Failed to write slot {slot_id!r} to {path}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                try:
                    os.remove(tmp_name)
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp_name, exc_info=True)

    def read(self, slot_id: str) -> bytes:
        path = self.slot_path(slot_id)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise SlotNotFoundError(f"Save slot not found: {slot_id!r}") from exc
        except OSError as exc:
            raise SaveStorageError(f"Failed to read slot {slot_id!r} from {path}: {exc}") from exc

    def list_slots(self) -> List[str]:
        if not self.root.is_dir():
            return []
        try:
            return sorted(p.name for p in self.root.iterdir() if p.is_dir())
        except OSError as exc:
            raise SaveStorageError(f"Failed to list slots in {self.root}: {exc}") from exc

    def is_empty(self) -> bool:
        # Any stray file counts too, not only slot directories
        if not self.root.is_dir():
            return True
        try:
            return next(self.root.iterdir(), None) is None
        except OSError as exc:
            raise SaveStorageError(f"Failed to inspect {self.root}: {exc}") from exc


class InMemorySlotStorage(SlotStorage):
    """Dict-backed slots for tests and embedding."""

    def __init__(self) -> None:
        self._slots: Dict[str, Optional[bytes]] = {}
        self._lock = threading.Lock()

    def exists(self, slot_id: str) -> bool:
        with self._lock:
            return self._slots.get(validate_slot_id(slot_id)) is not None

    def create_slot(self, slot_id: str) -> None:
        with self._lock:
            self._slots.setdefault(validate_slot_id(slot_id), None)

    def write(self, slot_id: str, data: bytes) -> None:
        with self._lock:
            self._slots[validate_slot_id(slot_id)] = bytes(data)

    def read(self, slot_id: str) -> bytes:
        with self._lock:
            data = self._slots.get(validate_slot_id(slot_id))
        if data is None:
            raise SlotNotFoundError(f"Save slot not found: {slot_id!r}")
        return data

    def list_slots(self) -> List[str]:
        with self._lock:
            return sorted(self._slots)
