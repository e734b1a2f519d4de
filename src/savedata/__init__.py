"""Thread-safe save data for games and tools.

This package provides:
- A Store of general key/value entries and named inventories whose writes are
  queued on a double-buffered MutationQueue and applied in submission order
- A SaveManager that saves and loads the Store to named slots from a
  consistent snapshot
- A versioned JSON codec and slot storage backends (atomic files, in-memory)
"""

from .config import SaveDataSettings
from .codec import decode_save, encode_save
from .errors import (
    InvalidSlotError,
    MutationError,
    SaveDataError,
    SaveSerializationError,
    SaveStorageError,
    SaveValidationError,
    SlotNotFoundError,
)
from .manager import SaveManager, SaveResult
from .models import SCHEMA_VERSION, GeneralEntry, Inventory, Item, SaveData
from .queue import MutationQueue
from .storage import FileSlotStorage, InMemorySlotStorage, SlotStorage
from .store import Store

__version__ = "0.1.0"

__all__ = [
    "SCHEMA_VERSION",
    "GeneralEntry",
    "Item",
    "Inventory",
    "SaveData",
    "MutationQueue",
    "Store",
    "SaveManager",
    "SaveResult",
    "SaveDataSettings",
    "SlotStorage",
    "FileSlotStorage",
    "InMemorySlotStorage",
    "encode_save",
    "decode_save",
    "SaveDataError",
    "SaveValidationError",
    "SaveSerializationError",
    "SaveStorageError",
    "SlotNotFoundError",
    "InvalidSlotError",
    "MutationError",
]
