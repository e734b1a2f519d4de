from __future__ import annotations

import json
from typing import Any, Dict, Optional

from .errors import SaveSerializationError, SaveValidationError
from .models import SCHEMA_VERSION, SaveData


def encode_save(data: SaveData, *, indent: Optional[int] = 2) -> bytes:
    """Encode SaveData to UTF-8 JSON bytes."""
    return json.dumps(data.to_dict(), ensure_ascii=False, indent=indent).encode("utf-8")


def decode_save(raw: bytes) -> SaveData:
    """Decode JSON bytes into SaveData.

    Raises SaveSerializationError for anything that is not a well-formed save of
    the current schema version. Other versions are rejected, not migrated.
    """
    try:
        payload: Dict[str, Any] = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise SaveSerializationError(f"Save is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise SaveSerializationError(f"Invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise SaveSerializationError("Save payload must be a JSON object")

    version = payload.get("schema_version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise SaveSerializationError(
            f"Unsupported save schema version {version!r} (expected {SCHEMA_VERSION})"
        )

    try:
        return SaveData.from_dict(payload)
    except (SaveValidationError, KeyError, TypeError, AttributeError) as e:
        raise SaveSerializationError(f"Invalid save record: {e}") from e
