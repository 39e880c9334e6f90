# modpack/core/ids.py
from __future__ import annotations

import uuid6

__all__ = ["uuidv7", "randomMemberName"]



def uuidv7(*, prefix: str = "") -> str:
    """Returns a UUIDv7 string (time-ordered), optionally prefixed."""
    return prefix + str(uuid6.uuid7())



def randomMemberName(extension: str) -> str:
    """
    Returns a fresh archive member name like "0190f5c2a1d87c3e9b7e4f1a2b3c4d5e.png".

    Names are never derived from caller filenames, so two options pointing at the same
    source image still get distinct members.
    """
    if not isinstance(extension, str):
        raise TypeError("extension must be a str")
    if extension and not extension.startswith("."):
        extension = "." + extension
    return f"{uuid6.uuid7().hex}{extension}"
