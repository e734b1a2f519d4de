from __future__ import annotations

import logging
import os
from pathlib import Path

from platformdirs import PlatformDirs

logger = logging.getLogger(__name__)

APP_NAME = "SaveData"

# Environment variable override (useful for tests and portable installs)
ENV_SAVE_DIR = "SAVEDATA_DIR"


def default_save_root(app_name: str = APP_NAME) -> Path:
    """Return the directory holding save slots.

    Honors SAVEDATA_DIR; otherwise ``<user data dir>/SaveData`` as resolved by
    platformdirs (e.g. ~/.local/share/<app>/SaveData on Linux).
    """
    override = os.getenv(ENV_SAVE_DIR)
    if override:
        return Path(override).expanduser()
    dirs = PlatformDirs(appname=app_name, appauthor=False)
    return Path(dirs.user_data_dir) / "SaveData"


def ensure_dir(path: Path) -> Path:
    if not path.exists():
        logger.debug("Creating directory %s", path)
    path.mkdir(parents=True, exist_ok=True)
    return path
