# modpack/core/dictpath.py
from __future__ import annotations
from typing import Any
from collections.abc import Mapping, MutableMapping

__all__ = ["getByPath", "setByPath", "deleteByPath"]



def _splitPath(path: str) -> list[str]:
    """
    Splits a dotted path into segments. Empty paths and empty segments ("a..b", "a.") are invalid.
    """
    if not isinstance(path, str) or not path:
        raise ValueError("Path must be a non-empty string")
    parts = path.split(".")
    if any(part == "" for part in parts):
        raise ValueError(f"Path '{path}' contains empty segment(s)")
    return parts



def getByPath(data: Mapping[str, Any] | None, path: str, default: Any = None) -> Any:
    """
    Returns the value at dotted `path` inside nested mappings, or `default` when any
    segment is missing or a non-mapping is hit on the way.
    """
    try:
        parts = _splitPath(path)
    except ValueError:
        return default

    node: Any = data
    for part in parts:
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node



def setByPath(data: MutableMapping[str, Any], path: str, value: Any, *, createIfMissing: bool = True) -> None:
    parts = _splitPath(path)
    node: MutableMapping[str, Any] = data
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, MutableMapping):
            if not createIfMissing:
                raise KeyError(f"Segment '{part}' of '{path}' is missing or not a mapping")
            # Non-mapping intermediate values get replaced
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value



def deleteByPath(data: MutableMapping[str, Any], path: str, *, pruneEmptyParents: bool = False) -> bool:
    """
    Deletes the leaf at `path`. Returns False if nothing was there.
    With pruneEmptyParents=True, parents left empty by the delete are removed too.
    """
    parts = _splitPath(path)
    chain: list[tuple[MutableMapping[str, Any], str]] = []
    node: Any = data
    for part in parts[:-1]:
        if not isinstance(node, MutableMapping) or part not in node:
            return False
        chain.append((node, part))
        node = node[part]

    if not isinstance(node, MutableMapping) or parts[-1] not in node:
        return False
    del node[parts[-1]]

    if pruneEmptyParents:
        for parent, key in reversed(chain):
            child = parent[key]
            if isinstance(child, MutableMapping) and not child:
                del parent[key]
            else:
                break
    return True
