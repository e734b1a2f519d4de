from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .errors import SaveDataError, SaveValidationError
from .models import Inventory, Item, SaveData
from .queue import MutationQueue

logger = logging.getLogger(__name__)


# Mutation commands. Each applies itself to the store's current SaveData and may
# return a replacement SaveData.


@dataclass(frozen=True)
class SetValue:
    key: str
    value: str

    def apply(self, data: SaveData) -> None:
        data.entries[self.key] = self.value


@dataclass(frozen=True)
class CreateInventory:
    name: str

    def apply(self, data: SaveData) -> None:
        if self.name not in data.inventories:
            data.inventories[self.name] = Inventory(name=self.name)


@dataclass(frozen=True)
class UpsertItem:
    inventory: str
    item_id: str
    name: Optional[str] = None
    quantity: Optional[int] = None

    def apply(self, data: SaveData) -> None:
        inv = data.inventories.get(self.inventory)
        if inv is None:
            logger.debug("Ignoring upsert of %r: inventory %r does not exist", self.item_id, self.inventory)
            return
        item = inv.find(self.item_id)
        if item is None:
            inv.items.append(Item(self.item_id, self.name or "", self.quantity or 0))
            return
        if self.quantity is not None:
            item.quantity += self.quantity
        if self.name is not None:
            item.name = self.name


@dataclass(frozen=True)
class RemoveInventory:
    name: str

    def apply(self, data: SaveData) -> None:
        data.inventories.pop(self.name, None)


@dataclass(frozen=True)
class ReplaceData:
    data: SaveData

    def apply(self, data: SaveData) -> SaveData:
        return self.data


@dataclass
class Capture:
    result: Optional[SaveData] = None

    def apply(self, data: SaveData) -> None:
        self.result = data.copy()


def _require_str(value: object, what: str) -> None:
    if not value or not isinstance(value, str):
        raise SaveValidationError(f"{what} must be a non-empty string")


class Store:
    """In-memory general data and inventories.

    All writes are queued on a MutationQueue and applied in submission order.
    Reads look at the current in-memory state directly and return copies, so
    they may observe a drain in progress but never hand out live references.
    Use snapshot() for a consistent view.
    """

    def __init__(self, data: Optional[SaveData] = None, *, on_error: str = "raise") -> None:
        self._data = data.copy() if data is not None else SaveData()
        self._queue = MutationQueue(self._apply, on_error=on_error)

    @property
    def queue(self) -> MutationQueue:
        return self._queue

    def _apply(self, mutation) -> None:
        replacement = mutation.apply(self._data)
        if replacement is not None:
            self._data = replacement

    # General data

    def set_value(self, key: str, value: str) -> None:
        _require_str(key, "key")
        if not isinstance(value, str):
            raise SaveValidationError("value must be a string")
        self._queue.enqueue(SetValue(key, value))

    def get_value(self, key: str) -> Optional[str]:
        return self._data.entries.get(key)

    def has_key(self, key: str) -> bool:
        return key in self._data.entries

    def keys(self) -> List[str]:
        return list(self._data.entries)

    # Inventories

    def create_inventory(self, name: str) -> None:
        _require_str(name, "inventory name")
        self._queue.enqueue(CreateInventory(name))

    def upsert_item(
        self,
        inventory: str,
        item_id: str,
        name: Optional[str] = None,
        quantity: Optional[int] = None,
    ) -> None:
        """Add an item, or update an existing one.

        For an existing item a given ``name`` replaces its name and a given
        ``quantity`` is *added* to its quantity. A new item gets ``name`` (or "")
        and ``quantity`` (or 0). Silently ignored if the inventory does not exist
        when the mutation runs.
        """
        _require_str(inventory, "inventory name")
        _require_str(item_id, "item_id")
        if name is not None and not isinstance(name, str):
            raise SaveValidationError("name must be a string")
        if quantity is not None and (isinstance(quantity, bool) or not isinstance(quantity, int)):
            raise SaveValidationError("quantity must be an integer")
        self._queue.enqueue(UpsertItem(inventory, item_id, name, quantity))

    def remove_inventory(self, name: str) -> None:
        _require_str(name, "inventory name")
        self._queue.enqueue(RemoveInventory(name))

    def list_items(self, inventory: str) -> Optional[List[Item]]:
        inv = self._data.inventories.get(inventory)
        if inv is None:
            return None
        return [item.copy() for item in list(inv.items)]

    def get_item(self, inventory: str, item_id: str) -> Optional[Item]:
        inv = self._data.inventories.get(inventory)
        if inv is None:
            return None
        item = inv.find(item_id)
        return item.copy() if item is not None else None

    def inventory_exists(self, name: str) -> bool:
        return name in self._data.inventories

    def inventory_names(self) -> List[str]:
        return list(self._data.inventories)

    # Consistency

    def flush(self) -> None:
        """Block until all mutations submitted before this call are applied."""
        self._queue.flush()

    def snapshot(self) -> SaveData:
        """Return a deep copy reflecting exactly the mutations submitted before this call."""
        capture = Capture()
        self._queue.enqueue(capture)
        self._queue.flush()
        if capture.result is None:
            raise SaveDataError("Snapshot was not captured by the mutation queue")
        return capture.result

    def restore(self, data: SaveData) -> None:
        """Replace the whole state, ordered after previously submitted mutations."""
        self._queue.enqueue(ReplaceData(data.copy()))
        self._queue.flush()
