# modpack/core/jsonutils.py
from __future__ import annotations

import base64
import json
from collections.abc import Mapping, Iterable
from dataclasses import is_dataclass, asdict
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

__all__ = ["safeJsonDumps", "serializeError", "tryJSONify"]



# ------------------------------------------------
#                JSON serialization
# ------------------------------------------------

def safeJsonDumps(obj: object) -> str:
    """
    Serializes an object or pydantic model to a compact JSON string.
    Uses deterministic separators (",", ":") and disallows NaN/infinity.
    Models are dumped by alias so the output matches the wire names.
    If direct JSON encoding fails, falls back to tryJSONify and retries.
    """
    payload: Any
    if isinstance(obj, BaseModel):
        payload = obj.model_dump(mode="json", by_alias=True)
    else:
        payload = obj

    try:
        return json.dumps(payload, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except Exception:
        safePayload = tryJSONify(payload, _maxDepth=None)
        return json.dumps(safePayload, ensure_ascii=False, allow_nan=False, separators=(",", ":"))



# ------------------------------------------------
#              Error / Exception helpers
# ------------------------------------------------

def serializeError(err: Any) -> dict[str, Any]:
    """
    Converts Exception or arbitrary object into a JSON-serializable dict.

    Examples:
        ValueError("bad") -> {"type": "ValueError", "message": "bad"}
        "error text"      -> {"message": "error text"}
        None              -> {}
    """
    if err is None:
        return {}

    if isinstance(err, str):
        return {"message": err}

    if isinstance(err, BaseException):
        return {
            "type": err.__class__.__name__,
            "message": str(err),
            "args": [repr(arg) for arg in getattr(err, "args", [])],
        }

    try:
        json.dumps(err)
        return err
    except Exception:
        return {"type": type(err).__name__, "repr": repr(err)}



# ------------------------------------------------
#              Generic JSON safety
# ------------------------------------------------

def tryJSONify(obj: Any, *, _seen: set[int] | None = None, _depth: int = 0, _maxDepth: int | None = 10) -> Any:
    """
    Attempts to make any object JSON-serializable.

    Rules:
      • Basic scalars (None, bool, int, float, str) are preserved.
      • Exceptions → serializeError().
      • bytes/bytearray/memoryview → {"__b64__": "..."} (payload bytes never end up inline otherwise).
      • date/datetime → ISO8601, Path → string.
      • pydantic models → by-alias dump; dataclasses → dict.
      • sets/tuples/iterables → list, Mappings → dict with str keys.
      • fallback → repr(obj)
    """
    if _seen is None:
        _seen = set()

    oid = id(obj)
    if oid in _seen:
        return f"<circular_ref {type(obj).__name__}>"
    if isinstance(_maxDepth, int) and _depth > _maxDepth:
        return f"<max_depth_exceeded {type(obj).__name__}>"
    _seen.add(oid)

    nextKw = {"_seen": _seen, "_depth": _depth + 1, "_maxDepth": _maxDepth}

    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj

    if isinstance(obj, BaseException):
        return serializeError(obj)

    if isinstance(obj, (bytes, bytearray, memoryview)):
        return {"__b64__": base64.b64encode(bytes(obj)).decode("ascii")}

    if isinstance(obj, (date, datetime)):
        return obj.isoformat()

    if isinstance(obj, Enum):
        return tryJSONify(obj.value, **nextKw)

    if isinstance(obj, BaseModel):
        return tryJSONify(obj.model_dump(by_alias=True), **nextKw)

    if is_dataclass(obj) and not isinstance(obj, type):
        return tryJSONify(asdict(obj), **nextKw)

    if isinstance(obj, Path):
        return obj.as_posix()

    if isinstance(obj, (set, frozenset, tuple)):
        return [tryJSONify(value, **nextKw) for value in obj]

    if isinstance(obj, Mapping):
        return {str(key): tryJSONify(value, **nextKw) for key, value in obj.items()}

    if isinstance(obj, Iterable):
        return [tryJSONify(value, **nextKw) for value in obj]

    return repr(obj)
