# modpack/store/folder.py
from __future__ import annotations
import logging
import os
import re
import threading
from collections.abc import Iterable
from pathlib import Path

import json5

from modpack.app.globals import config
from modpack.core.errors import StoreWriteError, UnsupportedPayloadKindError
from modpack.core.ids import uuidv7
from modpack.manifest.models import Provenance
from .contract import ContentStore, WriteResult
from .registry import InstalledMod, ModRegistry

logger = logging.getLogger(__name__)

__all__ = ["FolderContentStore"]

# ------------------------------------------------------------------ #
# Layout under the store root
# ------------------------------------------------------------------ #
# <bucketId>.dat      # append-only payload bytes for one bucket
# modlist.json5       # installed registry (name from store.registryFile)
#

_BUCKET_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")



class FolderContentStore(ContentStore):
    """
    Directory-backed content store.

    Every write appends to the bucket file and upserts the registry on disk. While
    background recomputation is suspended, written paths are queued and handed to
    recomputeDependents() in one go when it resumes.
    """

    def __init__(self, root: Path | str, *, supportedPayloadKinds: Iterable[int] | None = None) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        kinds = supportedPayloadKinds if supportedPayloadKinds is not None else config("store.supportedPayloadKinds", [2, 3, 4])
        self.supportedPayloadKinds = frozenset(int(kind) for kind in kinds)
        self.registryPath = self.root / str(config("store.registryFile", "modlist.json5"))
        self._lock = threading.RLock()
        self._suspended = False
        self._pendingRecompute: list[str] = []
        self.recomputedPaths: list[str] = []

    # ----- Buckets -----

    def bucketPath(self, bucketId: str) -> Path:
        if not bucketId or not _BUCKET_ID_RE.fullmatch(bucketId):
            raise StoreWriteError(f"Invalid bucket id '{bucketId}'")
        return self.root / f"{bucketId}.dat"

    def readBytes(self, bucketId: str, offset: int, length: int) -> bytes | None:
        try:
            path = self.bucketPath(bucketId)
        except StoreWriteError:
            return None
        if offset < 0 or length < 0 or not path.is_file():
            return None
        if offset + length > path.stat().st_size:
            return None
        with path.open("rb") as file:
            file.seek(offset)
            return file.read(length)

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
        if payloadKind not in self.supportedPayloadKinds:
            raise UnsupportedPayloadKindError(payloadKind, fullPath=fullPath)

        with self._lock:
            path = self.bucketPath(bucketId)
            try:
                with path.open("ab") as file:
                    dataOffset = file.tell()
                    file.write(data)
            except OSError as err:
                raise StoreWriteError(f"Failed to write bucket '{bucketId}': {err}", fullPath=fullPath) from err

            fields = {
                "name": name,
                "category": category,
                "fullPath": fullPath,
                "datFile": bucketId,
                "source": source,
                "payloadKind": payloadKind,
                "dataOffset": dataOffset,
                "modSize": len(data),
                "enabled": True,
                "modPack": modPack,
            }
            if existing is not None:
                record = existing.model_copy(update=fields)
            else:
                record = InstalledMod(id=uuidv7(), **fields)

            registry = self.loadRegistry()
            registry.upsert(record)
            self.saveRegistry(registry)

            if self._suspended:
                self._pendingRecompute.append(fullPath)
            else:
                self.recomputeDependents([fullPath])

        logger.debug("Wrote %d bytes for '%s' into bucket %s @ %d", len(data), fullPath, bucketId, dataOffset)
        return WriteResult(record=record, created=existing is None)

    # ----- Registry -----

    def loadRegistry(self) -> ModRegistry:
        with self._lock:
            if not self.registryPath.exists():
                return ModRegistry()
            raw = json5.loads(self.registryPath.read_text(encoding="utf-8"))
            if raw is None:
                return ModRegistry()
            if not isinstance(raw, dict):
                raise TypeError(f"Registry '{self.registryPath}' must be an object")
            return ModRegistry.model_validate(raw)

    def saveRegistry(self, registry: ModRegistry) -> None:
        with self._lock:
            text = json5.dumps(registry.model_dump(mode="json"), ensure_ascii=False, indent=2, quote_keys=True)
            # Write to a sibling and swap so readers never see a half-written registry
            tmpPath = self.registryPath.with_suffix(self.registryPath.suffix + ".tmp")
            tmpPath.write_text(text + "\n", encoding="utf-8")
            os.replace(tmpPath, self.registryPath)

    # ----- Background recomputation -----

    @property
    def recomputationSuspended(self) -> bool:
        return self._suspended

    def suspendBackgroundRecomputation(self) -> None:
        with self._lock:
            self._suspended = True

    def resumeBackgroundRecomputation(self) -> None:
        with self._lock:
            self._suspended = False
            pending, self._pendingRecompute = self._pendingRecompute, []
        if pending:
            self.recomputeDependents(pending)

    def recomputeDependents(self, paths: list[str]) -> None:
        """
        Hook for stores that track files derived from other files. The folder store keeps
        no dependency graph; it only records which paths were handed over.
        """
        self.recomputedPaths.extend(paths)
        logger.debug("Recomputed dependents for %d path(s)", len(paths))
