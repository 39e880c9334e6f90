# modpack/app/globals.py
from __future__ import annotations
from typing import Any

from modpack.app.config import getGlobalConfig

__all__ = ["config", "configBool"]



def config(path: str, default: Any = None) -> Any:
    """
    Read a dotted path from the merged configuration.

    Returns `default` when the path is not found.

    Example:
      value = config("archive.extension")          # returns ".ttmp2"
      value = config("non.existing.path", 300)     # returns 300
    """
    val = getGlobalConfig().get(path)
    return default if val is None else val



def configBool(path: str, default: bool = False) -> bool:
    """
    Read a boolean from the merged configuration.
    """
    val = config(path, None)
    if isinstance(val, bool):
        return val
    if val is None:
        return default
    return bool(val)
