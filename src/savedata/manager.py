from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from .codec import decode_save, encode_save
from .config import SaveDataSettings
from .errors import (
    InvalidSlotError,
    MutationError,
    SaveSerializationError,
    SaveStorageError,
    SlotNotFoundError,
)
from .models import SaveData
from .storage import FileSlotStorage, SlotStorage, validate_slot_id
from .store import Store

logger = logging.getLogger(__name__)


@dataclass
class SaveResult:
    success: bool
    message: str
    slot_id: str = ""
    code: str = "OK"  # OK | NOT_FOUND | INVALID_SLOT | MUTATION_ERROR | SERIALIZATION_ERROR | IO_ERROR | UNKNOWN

    def __bool__(self) -> bool:
        return self.success


class SaveManager:
    """Coordinates saving and loading a Store to named slots.

    Save and load first bring the store's mutation queue to a consistent point,
    so a save contains exactly the mutations submitted before it and a load
    replaces the state in order with respect to other mutations. Each operation
    holds its lock for the whole flush/serialize/write (or read/deserialize/
    replace) sequence. With ``settings.shared_lock`` (the default) save and load
    share one lock; otherwise each only excludes itself.

    Failures are reported through SaveResult rather than raised. A load that
    fails before its replacement is queued leaves the store as it was; a failed
    save leaves the previous slot file.
    """

    def __init__(
        self,
        store: Optional[Store] = None,
        storage: Optional[SlotStorage] = None,
        *,
        settings: Optional[SaveDataSettings] = None,
    ) -> None:
        self.settings = settings or SaveDataSettings()
        self.store = store or Store(on_error=self.settings.on_mutation_error)
        self.storage = storage or FileSlotStorage(self.settings.save_root, self.settings.slot_filename)
        self._save_lock = threading.RLock()
        self._load_lock = self._save_lock if self.settings.shared_lock else threading.RLock()

    # Public API

    def save(self, slot_id: str) -> SaveResult:
        with self._save_lock:
            try:
                validate_slot_id(slot_id)
                data = self.store.snapshot()
                self.storage.create_slot(slot_id)
                payload = encode_save(data, indent=self.settings.indent)
                logger.debug("Serialized %d bytes for slot %r", len(payload), slot_id)
                self.storage.write(slot_id, payload)
            except InvalidSlotError as exc:
                logger.warning("Save rejected: %s", exc)
                return SaveResult(False, str(exc), slot_id, code="INVALID_SLOT")
            except MutationError as exc:
                logger.error("Save of slot %r aborted by failed mutation: %s", slot_id, exc)
                return SaveResult(False, str(exc), slot_id, code="MUTATION_ERROR")
            except (SaveStorageError, OSError) as exc:
                logger.error("I/O error while saving slot %r: %s", slot_id, exc)
                return SaveResult(False, str(exc), slot_id, code="IO_ERROR")
            except Exception as exc:
                logger.exception("Unexpected error while saving slot %r", slot_id)
                return SaveResult(False, str(exc), slot_id, code="UNKNOWN")
        logger.info("Saved slot %r", slot_id)
        return SaveResult(True, "Saved.", slot_id)

    def load(self, slot_id: str) -> SaveResult:
        with self._load_lock:
            try:
                validate_slot_id(slot_id)
                self.store.flush()
                if not self.storage.exists(slot_id):
                    logger.warning("No save found in slot %r", slot_id)
                    return SaveResult(False, f"No save in slot {slot_id!r}", slot_id, code="NOT_FOUND")
                data = decode_save(self.storage.read(slot_id))
            except InvalidSlotError as exc:
                logger.warning("Load rejected: %s", exc)
                return SaveResult(False, str(exc), slot_id, code="INVALID_SLOT")
            except SlotNotFoundError as exc:
                logger.warning("Slot %r disappeared before it could be read", slot_id)
                return SaveResult(False, str(exc), slot_id, code="NOT_FOUND")
            except (SaveStorageError, OSError) as exc:
                logger.error("I/O error while loading slot %r: %s", slot_id, exc)
                return SaveResult(False, str(exc), slot_id, code="IO_ERROR")
            except SaveSerializationError as exc:
                logger.error("Slot %r is corrupt: %s", slot_id, exc)
                return SaveResult(False, str(exc), slot_id, code="SERIALIZATION_ERROR")
            except MutationError as exc:
                logger.error("Load of slot %r aborted by failed mutation: %s", slot_id, exc)
                return SaveResult(False, str(exc), slot_id, code="MUTATION_ERROR")
            except Exception as exc:
                logger.exception("Unexpected error while loading slot %r", slot_id)
                return SaveResult(False, str(exc), slot_id, code="UNKNOWN")
            self._commit_restore(slot_id, data)
        logger.info("Loaded slot %r", slot_id)
        return SaveResult(True, "Loaded.", slot_id)

    def _commit_restore(self, slot_id: str, data: SaveData) -> None:
        """Apply a loaded state; once queued the replacement is committed.

        Other callers' failing mutations ahead of the replacement are logged and
        the queue is flushed again until the replacement has been applied.
        """
        try:
            self.store.restore(data)
            return
        except MutationError as exc:
            logger.error("Mutation failed while applying slot %r; continuing: %s", slot_id, exc)
        while True:
            try:
                self.store.flush()
                return
            except MutationError as exc:
                logger.error("Mutation failed while applying slot %r; continuing: %s", slot_id, exc)

    # Introspection; best effort, no locking

    def has_slot(self, slot_id: str) -> bool:
        return self.storage.exists(slot_id)

    def list_slots(self) -> List[str]:
        return self.storage.list_slots()

    def count_slots(self) -> int:
        return len(self.storage.list_slots())

    def is_empty(self) -> bool:
        return self.storage.is_empty()

    # Lifecycle

    def close(self) -> None:
        """Apply any queued mutations before the manager is dropped."""
        self.store.flush()

    def __enter__(self) -> "SaveManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
