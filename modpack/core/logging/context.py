# modpack/core/logging/context.py
from __future__ import annotations
import contextlib
import contextvars
from collections.abc import Iterator

# Per-operation log context (package name, archive path, operation)
_logContextVar: contextvars.ContextVar[dict[str, object] | None] = contextvars.ContextVar("modpack.logctx", default=None)

def setLogContext(**kvs):
    """Set or update per-log context values (package, archive, op, etc.)."""
    current = dict(_logContextVar.get() or {}) # use copy
    for key, value in kvs.items():
        if value is not None:
            current[key] = value
    _logContextVar.set(current)

def clearLogContext():
    """Clear context after an operation is fully handled."""
    _logContextVar.set(None)

def getLogContext():
    """Return current context dict or None."""
    return _logContextVar.get()

@contextlib.contextmanager
def logContext(**kvs) -> Iterator[None]:
    """Scoped setLogContext(); restores the previous context on exit."""
    token = _logContextVar.set(dict(_logContextVar.get() or {}))
    try:
        setLogContext(**kvs)
        yield
    finally:
        _logContextVar.reset(token)
