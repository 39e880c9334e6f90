# modpack/install/__init__.py
from .guard import RecomputationGuard, guardFor
from .installer import EntryOutcome, ModPackInstaller, dedupeByPath, payloadKindForPath, writeEntry

__all__ = [
    "RecomputationGuard",
    "guardFor",
    "EntryOutcome",
    "ModPackInstaller",
    "dedupeByPath",
    "payloadKindForPath",
    "writeEntry",
]
