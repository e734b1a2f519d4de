from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import SaveValidationError

# Increment when making breaking schema changes
SCHEMA_VERSION = 1


@dataclass
class GeneralEntry:
    """A single string-keyed, string-valued record outside the inventory model."""

    key: str
    value: str = ""

    def __post_init__(self) -> None:
        if not self.key or not isinstance(self.key, str):
            raise SaveValidationError("GeneralEntry.key must be a non-empty string")
        if not isinstance(self.value, str):
            raise SaveValidationError("GeneralEntry.value must be a string")

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "value": self.value}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "GeneralEntry":
        return GeneralEntry(key=data["key"], value=data.get("value", ""))


@dataclass
class Item:
    """An item stored in an inventory.

    Quantity is a plain integer; updates to existing items are additive and are
    not clamped, so it may go negative if callers subtract past zero.
    """

    item_id: str
    name: str = ""
    quantity: int = 0

    def __post_init__(self) -> None:
        if not self.item_id or not isinstance(self.item_id, str):
            raise SaveValidationError("Item.item_id must be a non-empty string")
        if not isinstance(self.name, str):
            raise SaveValidationError("Item.name must be a string")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise SaveValidationError("Item.quantity must be an integer")

    def copy(self) -> "Item":
        return Item(item_id=self.item_id, name=self.name, quantity=self.quantity)

    def to_dict(self) -> Dict[str, Any]:
        # Wrapped layout: {"item_id", "item": {...}}
        return {
            "item_id": self.item_id,
            "item": {"item_id": self.item_id, "item_name": self.name, "quantity": self.quantity},
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Item":
        body = data.get("item") or {}
        if not isinstance(body, dict):
            raise SaveValidationError("Item record must contain an 'item' object")
        quantity = body.get("quantity", 0)
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise SaveValidationError(f"Item.quantity must be an integer, got {quantity!r}")
        return Item(
            item_id=data.get("item_id") or body.get("item_id"),
            name=body.get("item_name", ""),
            quantity=quantity,
        )


@dataclass
class Inventory:
    """A named, ordered collection of items with unique item ids."""

    name: str
    items: List[Item] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise SaveValidationError("Inventory.name must be a non-empty string")
        seen = set()
        for item in self.items:
            if item.item_id in seen:
                raise SaveValidationError(
                    f"Duplicate item id {item.item_id!r} in inventory {self.name!r}"
                )
            seen.add(item.item_id)

    def find(self, item_id: str) -> Optional[Item]:
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.name, "inventory": [i.to_dict() for i in self.items]}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Inventory":
        raw_items = data.get("inventory", [])
        if not isinstance(raw_items, list):
            raise SaveValidationError("Inventory.inventory must be a list")
        return Inventory(name=data["key"], items=[Item.from_dict(it) for it in raw_items])


@dataclass
class SaveData:
    """Top-level save object: general entries plus inventories.

    Both mappings preserve insertion order so serialization is deterministic.
    Keys are unique by construction (one entry per key, one inventory per name).
    """

    entries: Dict[str, str] = field(default_factory=dict)
    inventories: Dict[str, Inventory] = field(default_factory=dict)

    def copy(self) -> "SaveData":
        return SaveData(entries=dict(self.entries), inventories=deepcopy(self.inventories))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "general_data": [GeneralEntry(k, v).to_dict() for k, v in self.entries.items()],
            "inventories": [inv.to_dict() for inv in self.inventories.values()],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "SaveData":
        raw_entries = data.get("general_data", [])
        raw_inventories = data.get("inventories", [])
        if not isinstance(raw_entries, list) or not isinstance(raw_inventories, list):
            raise SaveValidationError("general_data and inventories must be lists")

        save = SaveData()
        for raw in raw_entries:
            entry = GeneralEntry.from_dict(raw)
            if entry.key in save.entries:
                raise SaveValidationError(f"Duplicate general data key {entry.key!r}")
            save.entries[entry.key] = entry.value
        for raw in raw_inventories:
            inv = Inventory.from_dict(raw)
            if inv.name in save.inventories:
                raise SaveValidationError(f"Duplicate inventory {inv.name!r}")
            save.inventories[inv.name] = inv
        return save
