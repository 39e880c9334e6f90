# modpack/container/buckets.py
from __future__ import annotations
from collections.abc import Mapping

from modpack.app.globals import config

__all__ = ["bucketForPath"]



def bucketForPath(fullPath: str, folderKeys: Mapping[str, str] | None = None) -> str:
    """
    Returns the bucket id for a destination path from its first folder segment,
    e.g. "chara/equipment/e0001/texture/v01_c0101e0001_top_d.tex" -> "040000".

    Raises ValueError for paths without a folder or with an unknown folder key.
    """
    keys = folderKeys if folderKeys is not None else config("buckets.folderKeys", {})
    folderKey, sep, _rest = fullPath.partition("/")
    if not sep or not folderKey:
        raise ValueError(f"Could not find bucket for path without folder: {fullPath}")
    bucketId = keys.get(folderKey)
    if not bucketId:
        raise ValueError(f"Could not find bucket for path: {fullPath}")
    return bucketId
