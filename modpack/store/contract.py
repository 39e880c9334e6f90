# modpack/store/contract.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from modpack.manifest.models import Provenance
from .registry import InstalledMod, ModRegistry

__all__ = [
    "PAYLOAD_KIND_STANDARD",
    "PAYLOAD_KIND_MODEL",
    "PAYLOAD_KIND_TEXTURE",
    "WriteResult",
    "ContentStore",
]

PAYLOAD_KIND_STANDARD = 2
PAYLOAD_KIND_MODEL = 3
PAYLOAD_KIND_TEXTURE = 4



@dataclass(frozen=True, slots=True)
class WriteResult:
    record: InstalledMod
    created: bool



@runtime_checkable
class ContentStore(Protocol):
    """
    The narrow contract a target content store offers to builders and installers.

    write() raises UnsupportedPayloadKindError when the payload kind cannot be stored at all
    and StoreWriteError for every other failure. Stores serialize their own mutations.
    """

    def readBytes(self, bucketId: str, offset: int, length: int) -> bytes | None:
        ...

    def write(
        self,
        data: bytes,
        existing: InstalledMod | None,
        fullPath: str,
        category: str,
        name: str,
        bucketId: str,
        source: str,
        payloadKind: int,
        modPack: Provenance | None,
    ) -> WriteResult:
        ...

    def loadRegistry(self) -> ModRegistry:
        ...

    def saveRegistry(self, registry: ModRegistry) -> None:
        ...

    def suspendBackgroundRecomputation(self) -> None:
        ...

    def resumeBackgroundRecomputation(self) -> None:
        ...
