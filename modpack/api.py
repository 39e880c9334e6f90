# modpack/api.py
from __future__ import annotations
import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from modpack.container.builder import ModPackBuilder, SimplePackData, WizardPackData
from modpack.container.images import PreviewImage
from modpack.container.reader import ModPackReader
from modpack.core.progress import CountProgress, FractionProgress
from modpack.install.installer import ModPackInstaller
from modpack.manifest.models import Entry, LegacyEntry, Manifest
from modpack.store.contract import ContentStore

logger = logging.getLogger(__name__)

__all__ = [
    "buildWizardPackage",
    "buildSimplePackage",
    "readPackageMetadata",
    "readLegacyPackageMetadata",
    "getPackageVersion",
    "installPackage",
]

# ------------------------------------------------------------------ #
# Each call is one long-running unit of work moved off the event loop.
# Progress callbacks run on the worker thread.
# ------------------------------------------------------------------ #

async def buildWizardPackage(
    data: WizardPackData,
    packageDirectory: Path | str,
    source: str,
    progress: FractionProgress | None = None,
    overwrite: bool = False,
) -> int:
    builder = ModPackBuilder(packageDirectory, source)
    return await asyncio.to_thread(builder.createWizardModPack, data, progress, overwrite)



async def buildSimplePackage(
    data: SimplePackData,
    store: ContentStore,
    packageDirectory: Path | str,
    source: str,
    progress: CountProgress | None = None,
    overwrite: bool = False,
) -> int:
    builder = ModPackBuilder(packageDirectory, source, store)
    return await asyncio.to_thread(builder.createSimpleModPack, data, progress, overwrite)



async def readPackageMetadata(archive: Path | str) -> tuple[Manifest, dict[str, PreviewImage]]:
    return await asyncio.to_thread(ModPackReader().readManifestAndImages, archive)



async def readLegacyPackageMetadata(archive: Path | str) -> list[LegacyEntry] | None:
    return await asyncio.to_thread(ModPackReader().readLegacy, archive)



async def getPackageVersion(archive: Path | str) -> str | None:
    return await asyncio.to_thread(ModPackReader().readVersion, archive)



async def installPackage(
    store: ContentStore,
    archive: Path | str,
    entries: Iterable[Entry | LegacyEntry],
    source: str,
    progress: CountProgress | None = None,
) -> tuple[int, str]:
    """
    Installs `entries` from `archive` into `store`. Returns (processed, errorText).
    """
    installer = ModPackInstaller(store, source)
    # Materialize before leaving the loop thread; generators are not thread safe
    return await asyncio.to_thread(installer.installModPack, archive, list(entries), progress)
