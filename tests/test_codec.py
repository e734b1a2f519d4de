import json

import pytest

from savedata import (
    SCHEMA_VERSION,
    Inventory,
    Item,
    SaveData,
    SaveSerializationError,
    decode_save,
    encode_save,
)


def make_save() -> SaveData:
    return SaveData(
        entries={"level": "3", "name": "Sæl ☠", "empty": ""},
        inventories={
            "bag": Inventory("bag", [Item("sword", "Sword", 8), Item("debt", "Debt", -2)]),
            "empty-chest": Inventory("empty-chest"),
        },
    )


def test_round_trip_preserves_everything():
    save = make_save()
    decoded = decode_save(encode_save(save))
    assert decoded == save
    assert list(decoded.entries) == ["level", "name", "empty"]
    assert list(decoded.inventories) == ["bag", "empty-chest"]
    assert decoded.inventories["bag"].items[1].quantity == -2


def test_encoded_layout():
    payload = json.loads(encode_save(make_save()).decode("utf-8"))
    assert payload["schema_version"] == SCHEMA_VERSION
    assert payload["general_data"][0] == {"key": "level", "value": "3"}
    bag = payload["inventories"][0]
    assert bag["key"] == "bag"
    assert bag["inventory"][0] == {
        "item_id": "sword",
        "item": {"item_id": "sword", "item_name": "Sword", "quantity": 8},
    }


def test_compact_and_unicode_output():
    raw = encode_save(make_save(), indent=None)
    assert b"\n" not in raw
    assert "Sæl ☠".encode("utf-8") in raw


def test_empty_save_round_trip():
    assert decode_save(encode_save(SaveData())) == SaveData()


@pytest.mark.parametrize(
    "raw",
    [
        b"\xff\xfe not utf8",
        b"{ this is not valid json ",
        b"[]",
        b'"just a string"',
        json.dumps({"schema_version": 99}).encode(),
        json.dumps({"general_data": {"key": "a"}}).encode(),
        json.dumps({"general_data": [{"value": "no key"}]}).encode(),
        json.dumps({"general_data": [{"key": "a", "value": 1}]}).encode(),
        json.dumps({"general_data": [{"key": "a"}, {"key": "a"}]}).encode(),
        json.dumps({"inventories": [{"key": "bag"}, {"key": "bag"}]}).encode(),
        json.dumps({"inventories": ["bag"]}).encode(),
        json.dumps(
            {"inventories": [{"key": "bag", "inventory": [{"item_id": "a", "item": {"quantity": 1.5}}]}]}
        ).encode(),
        json.dumps(
            {
                "inventories": [
                    {
                        "key": "bag",
                        "inventory": [
                            {"item_id": "a", "item": {"quantity": 1}},
                            {"item_id": "a", "item": {"quantity": 2}},
                        ],
                    }
                ]
            }
        ).encode(),
    ],
)
def test_malformed_input_raises(raw):
    with pytest.raises(SaveSerializationError):
        decode_save(raw)


def test_missing_sections_default_to_empty():
    assert decode_save(b"{}") == SaveData()
