import logging
import os

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(threadName)s %(name)s: %(message)s"


def resolve_level(default_level: int = logging.INFO) -> int:
    """Return the level named by SAVEDATA_LOG_LEVEL (name or number), else default_level."""
    level_name = os.getenv("SAVEDATA_LOG_LEVEL", "").strip()
    if not level_name:
        return default_level
    if level_name.isdigit():
        return int(level_name)
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else default_level


def configure_logging(default_level: int = logging.INFO) -> int:
    """Configure the root logger for host applications embedding savedata.

    Thread names are part of the format since mutations may be applied on
    whichever thread drains the queue. Returns the level in effect.
    """
    level = resolve_level(default_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("savedata").setLevel(level)
    return level
