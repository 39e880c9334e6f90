# modpack/install/installer.py
from __future__ import annotations
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Literal

from modpack.container.buckets import bucketForPath
from modpack.container.reader import ModPackReader
from modpack.core.errors import StoreWriteError, UnsupportedPayloadKindError
from modpack.core.logging import logContext
from modpack.core.progress import CountProgress, reportProgress
from modpack.manifest.models import Entry, LegacyEntry
from modpack.store.contract import (
    PAYLOAD_KIND_MODEL,
    PAYLOAD_KIND_STANDARD,
    PAYLOAD_KIND_TEXTURE,
    ContentStore,
)
from modpack.store.registry import InstalledMod, ModRegistry
from .guard import RecomputationGuard, guardFor

logger = logging.getLogger(__name__)

__all__ = [
    "EntryOutcome",
    "ModPackInstaller",
    "dedupeByPath",
    "payloadKindForPath",
    "writeEntry",
]

READING_MESSAGE = "Reading package content..."
STARTING_MESSAGE = "Starting import..."

OutcomeStatus = Literal["ok", "recoverable", "fatal"]



@dataclass(frozen=True, slots=True)
class EntryOutcome:
    status: OutcomeStatus
    message: str = ""
    record: InstalledMod | None = None



# ------------------------------------------------------------------ #
# Per-entry helpers
# ------------------------------------------------------------------ #

def dedupeByPath(entries: Iterable[Entry]) -> list[Entry]:
    """
    Keeps the last entry for every destination path. Survivors keep their relative order,
    e.g. [A@p1, B@p2, C@p1] -> [B@p2, C@p1].
    """
    ordered = list(entries)
    lastIndex = {entry.fullPath: idx for idx, entry in enumerate(ordered)}
    return [entry for idx, entry in enumerate(ordered) if lastIndex[entry.fullPath] == idx]



def payloadKindForPath(fullPath: str) -> int:
    suffix = Path(fullPath).suffix
    if suffix == ".tex":
        return PAYLOAD_KIND_TEXTURE
    if suffix == ".mdl":
        return PAYLOAD_KIND_MODEL
    return PAYLOAD_KIND_STANDARD



def writeEntry(
    store: ContentStore,
    data: bytes,
    entry: Entry,
    existing: InstalledMod | None,
    source: str,
) -> EntryOutcome:
    """
    Writes one payload and turns the store's verdict into an EntryOutcome.

    This is the only place store exceptions become values. An unsupported payload kind is
    fatal for the batch; other write failures only cost this entry. Anything else propagates.
    """
    try:
        result = store.write(
            data,
            existing,
            entry.fullPath,
            entry.category,
            entry.name,
            entry.datFile or bucketForPath(entry.fullPath),
            source,
            payloadKindForPath(entry.fullPath),
            entry.modPackEntry,
        )
    except UnsupportedPayloadKindError as err:
        logger.error("Aborting install at '%s': %s", entry.fullPath, err)
        return EntryOutcome("fatal", str(err))
    except (StoreWriteError, OSError, ValueError) as err:
        logger.warning("Failed to install '%s': %s", entry.fullPath, err)
        return EntryOutcome("recoverable", str(err))
    return EntryOutcome("ok", record=result.record)



def _asEntries(entries: Iterable[Entry | LegacyEntry]) -> Iterator[Entry]:
    for entry in entries:
        if isinstance(entry, LegacyEntry):
            # Legacy lines without a destination have nothing to install
            if entry.fullPath:
                yield entry.toEntry()
        else:
            yield entry



def _readPayload(blob: BinaryIO, entry: Entry) -> bytes | None:
    blob.seek(entry.modOffset)
    data = blob.read(entry.modSize)
    return data if len(data) == entry.modSize else None



def _errorBlock(entry: Entry, message: str) -> str:
    return f"Name: {entry.name}\nPath: {entry.fullPath}\nOffset: {entry.modOffset}\nError: {message}\n\n"



# ------------------------------------------------------------------ #
# Installer
# ------------------------------------------------------------------ #

class ModPackInstaller:
    """
    Applies a package's entries to a content store as one batch.

    Background recomputation stays suspended for the whole batch through the store's shared
    RecomputationGuard. The registry is read once up front and written at most once at the end.
    When another batch changed the registry in between, the save re-applies this batch's records
    onto a fresh copy instead of overwriting the other batch's work.
    """

    def __init__(
        self,
        store: ContentStore,
        source: str,
        guard: RecomputationGuard | None = None,
        reader: ModPackReader | None = None,
    ) -> None:
        self.store = store
        self.source = source
        self.guard = guard if guard is not None else guardFor(store)
        self.reader = reader if reader is not None else ModPackReader()

    def installModPack(
        self,
        archive: Path | str,
        entries: Iterable[Entry | LegacyEntry],
        progress: CountProgress | None = None,
    ) -> tuple[int, str]:
        """
        Installs `entries` from `archive` and returns (processed, errorText).

        `processed` counts every attempted entry, failed ones included. `errorText` is empty
        when every write went through.
        """
        survivors = dedupeByPath(_asEntries(entries))
        if not survivors:
            return 0, ""

        total = len(survivors)
        processed = 0
        report: list[str] = []

        with logContext(op="install", archive=str(archive)), self.guard:
            with self.guard.registryLock:
                revision = self.guard.registryRevision
                registry = self.store.loadRegistry()
            written: list[InstalledMod] = []
            reportProgress(progress, (0, total, READING_MESSAGE))

            with self.reader.openBlob(archive) as blob:
                reportProgress(progress, (0, total, STARTING_MESSAGE))
                for entry in survivors:
                    outcome = self._installEntry(blob, entry, registry)
                    processed += 1

                    if outcome.status == "ok":
                        if outcome.record is not None:
                            registry.upsert(outcome.record)
                            written.append(outcome.record)
                            self.guard.markRegistryChanged()
                    elif outcome.status == "recoverable":
                        report.append(_errorBlock(entry, outcome.message))
                    else:
                        report.append(outcome.message + "\n")

                    reportProgress(progress, (processed, total, ""))
                    if outcome.status == "fatal":
                        break

            self._recordPackage(survivors[0], registry, written, revision)

        logger.info(
            "Installed %d/%d entr(ies) from '%s' (%d failure(s))",
            processed, total, archive, len(report),
        )
        return processed, "".join(report)

    def _installEntry(self, blob: BinaryIO, entry: Entry, registry: ModRegistry) -> EntryOutcome:
        data = _readPayload(blob, entry)
        if data is None:
            logger.warning("Package data for '%s' ends before offset+size", entry.fullPath)
            return EntryOutcome("recoverable", "Package data ends before the end of this entry")
        return writeEntry(self.store, data, entry, registry.findByPath(entry.fullPath), self.source)

    def _recordPackage(
        self,
        first: Entry,
        registry: ModRegistry,
        written: list[InstalledMod],
        revision: int,
    ) -> None:
        """Remembers the package the batch came from. Only packages with provenance are recorded."""
        provenance = first.modPackEntry
        if provenance is None:
            return
        with self.guard.registryLock:
            # Every change since the load should be one of this batch's own writes
            if self.guard.registryRevision != revision + len(written):
                logger.debug("Registry changed by another batch, re-applying %d record(s)", len(written))
                registry = self.store.loadRegistry()
                for record in written:
                    registry.upsert(record)
            if not registry.hasModPackNamed(provenance.name):
                registry.modPacks.append(provenance)
            self.store.saveRegistry(registry)
            self.guard.markRegistryChanged()
