from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import SaveValidationError
from .paths import ENV_SAVE_DIR, default_save_root

logger = logging.getLogger(__name__)

ENV_SHARED_LOCK = "SAVEDATA_SHARED_LOCK"
ENV_ON_MUTATION_ERROR = "SAVEDATA_ON_MUTATION_ERROR"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class SaveDataSettings(BaseModel):
    """Settings for a SaveManager and the Store it owns."""

    save_root: Path = Field(default_factory=lambda: default_save_root(), description="Directory holding save slots")
    slot_filename: str = Field("save.json", description="File name written inside each slot directory")
    indent: Optional[int] = Field(2, description="JSON indent for save files; None for compact output")
    shared_lock: bool = Field(
        True, description="Serialize save and load against each other, not only against themselves"
    )
    on_mutation_error: Literal["raise", "log"] = Field(
        "raise", description="Whether a failing mutation aborts the drain or is logged and skipped"
    )

    @field_validator("slot_filename")
    @classmethod
    def plain_filename(cls, v: str) -> str:
        if not v or Path(v).name != v:
            raise ValueError("slot_filename must be a plain file name")
        return v

    @field_validator("indent")
    @classmethod
    def non_negative_indent(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("indent must be >= 0")
        return v

    @classmethod
    def from_env(cls, **overrides: Any) -> "SaveDataSettings":
        """Build settings from SAVEDATA_* environment variables, then explicit overrides."""
        data: Dict[str, Any] = {}
        save_dir = os.getenv(ENV_SAVE_DIR)
        if save_dir:
            data["save_root"] = Path(save_dir).expanduser()
        shared = os.getenv(ENV_SHARED_LOCK, "").strip().lower()
        if shared in _TRUTHY:
            data["shared_lock"] = True
        elif shared in _FALSY:
            data["shared_lock"] = False
        elif shared:
            logger.warning("Ignoring %s=%r: expected a boolean", ENV_SHARED_LOCK, shared)
        policy = os.getenv(ENV_ON_MUTATION_ERROR)
        if policy:
            data["on_mutation_error"] = policy.strip().lower()
        data.update(overrides)
        return cls._validated(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "SaveDataSettings":
        """Load settings from a YAML (or JSON) mapping."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise SaveValidationError(f"Settings file {path} must contain a mapping")
        logger.debug("Loaded settings from %s", path)
        return cls._validated(raw)

    @classmethod
    def _validated(cls, data: Dict[str, Any]) -> "SaveDataSettings":
        try:
            return cls(**data)
        except ValidationError as e:
            raise SaveValidationError(f"Invalid settings: {e}") from e
