# modpack/container/builder.py
from __future__ import annotations
import contextlib
import logging
import os
import tempfile
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from semantic_version import Version

from modpack.app.globals import config
from modpack.core.errors import PayloadMissingError
from modpack.core.ids import randomMemberName
from modpack.core.logging import logContext
from modpack.core.progress import CountProgress, FractionProgress, reportProgress
from modpack.manifest.codec import encodeManifest
from modpack.manifest.models import (
    Entry,
    Group,
    Option,
    Page,
    Provenance,
    SimpleManifest,
    WizardManifest,
)
from modpack.store.contract import ContentStore
from .buckets import bucketForPath
from .naming import resolveOutputPath

logger = logging.getLogger(__name__)

__all__ = [
    "PackInfo",
    "WizardModData",
    "WizardOptionData",
    "WizardGroupData",
    "WizardPageData",
    "WizardPackData",
    "SimpleModData",
    "SimplePackData",
    "ModPackBuilder",
    "archiveCompression",
]

CREATING_MESSAGE = "Creating mod package..."



# ------------------------------------------------------------------ #
# Builder inputs
# ------------------------------------------------------------------ #

@dataclass(slots=True)
class PackInfo:
    name: str
    author: str = ""
    version: str | Version = "1.0.0"
    description: str = ""
    url: str = ""



@dataclass(slots=True)
class WizardModData:
    """One payload supplied inline for a wizard option."""
    name: str
    category: str
    data: bytes
    isDefault: bool = False
    # Resolved from the destination path's folder when None
    bucketId: str | None = None



@dataclass(slots=True)
class WizardOptionData:
    name: str
    description: str = ""
    groupName: str = ""
    selectionType: str | None = None
    isChecked: bool = False
    # Preview image as a file on disk or raw bytes
    image: Path | str | bytes | None = None
    # destination path -> payload
    mods: dict[str, WizardModData] = field(default_factory=dict)



@dataclass(slots=True)
class WizardGroupData:
    groupName: str
    selectionType: str = "Single"
    options: list[WizardOptionData] = field(default_factory=list)



@dataclass(slots=True)
class WizardPageData:
    pageIndex: int
    groups: list[WizardGroupData] = field(default_factory=list)



@dataclass(slots=True)
class WizardPackData(PackInfo):
    pages: list[WizardPageData] = field(default_factory=list)



@dataclass(slots=True)
class SimpleModData:
    """A payload already living in the content store, referenced by (bucket, offset, size)."""
    name: str
    category: str
    fullPath: str
    modSize: int
    bucketId: str
    modOffset: int
    isDefault: bool = False



@dataclass(slots=True)
class SimplePackData(PackInfo):
    entries: list[SimpleModData] = field(default_factory=list)



# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #

def archiveCompression() -> int:
    return zipfile.ZIP_STORED if config("archive.compression", "deflated") == "stored" else zipfile.ZIP_DEFLATED



def _normalizeVersion(version: str | Version) -> str:
    if isinstance(version, Version):
        return str(version)
    try:
        return str(Version.coerce(str(version).strip()))
    except ValueError as err:
        raise ValueError(f"Invalid package version '{version}'") from err



@contextlib.contextmanager
def _stagingFiles() -> Iterator[tuple[Path, Path]]:
    """
    Two scratch files (blob, manifest) scoped to one build. Removed on every exit path.
    """
    paths: list[Path] = []
    try:
        for suffix in (".mpd", ".mpl"):
            fd, name = tempfile.mkstemp(prefix="modpack-", suffix=suffix)
            os.close(fd)
            paths.append(Path(name))
        yield paths[0], paths[1]
    finally:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove staging file '%s'", path, exc_info=True)



def _appendPayload(blob: BinaryIO, data: bytes) -> int:
    """Appends `data` and returns the offset it was written at."""
    offset = blob.tell()
    blob.write(data)
    return offset



# ------------------------------------------------------------------ #
# Builder
# ------------------------------------------------------------------ #

class ModPackBuilder:
    """
    Assembles manifest + blob (+ preview images) into one package archive.

    `source` identifies the tool building packages; `store` is only needed for simple
    builds, which copy their payloads out of the content store.
    """

    def __init__(self, packageDirectory: Path | str, source: str, store: ContentStore | None = None) -> None:
        self.packageDirectory = Path(packageDirectory)
        self.source = source
        self.store = store
        self.lastOutputPath: Path | None = None

    # ----- Wizard -----

    def createWizardModPack(
        self,
        data: WizardPackData,
        progress: FractionProgress | None = None,
        overwrite: bool = False,
    ) -> int:
        """
        Builds a wizard package and returns the number of pages written.
        Progress is reported once per page as pagesDone / pagesTotal.
        """
        with logContext(op="build.wizard", package=data.name), _stagingFiles() as (blobPath, manifestPath):
            folderKeys = config("buckets.folderKeys", {})
            images: dict[str, Path | bytes] = {}
            pages: list[Page] = []
            pagesTotal = len(data.pages)

            with blobPath.open("wb") as blob:
                for pagesDone, pageData in enumerate(data.pages, start=1):
                    groups: list[Group] = []
                    for groupData in pageData.groups:
                        options: list[Option] = []
                        for optionData in groupData.options:
                            imagePath = ""
                            if optionData.image is not None:
                                imagePath = randomMemberName(config("archive.imageExtension", ".png"))
                                images[imagePath] = _checkedImage(optionData.image)

                            entries: list[Entry] = []
                            for fullPath, mod in optionData.mods.items():
                                offset = _appendPayload(blob, mod.data)
                                entries.append(Entry(
                                    name=mod.name,
                                    category=mod.category,
                                    fullPath=fullPath,
                                    isDefault=mod.isDefault,
                                    modSize=len(mod.data),
                                    modOffset=offset,
                                    datFile=mod.bucketId or bucketForPath(fullPath, folderKeys),
                                ))

                            options.append(Option(
                                name=optionData.name,
                                description=optionData.description,
                                imagePath=imagePath,
                                groupName=optionData.groupName or groupData.groupName,
                                selectionType=optionData.selectionType or groupData.selectionType,
                                isChecked=optionData.isChecked,
                                modsJsons=entries,
                            ))
                        groups.append(Group(
                            groupName=groupData.groupName,
                            selectionType=groupData.selectionType,
                            optionList=options,
                        ))
                    pages.append(Page(pageIndex=pageData.pageIndex, modGroups=groups))
                    reportProgress(progress, pagesDone / pagesTotal)

            manifest = WizardManifest(
                ttmpVersion=config("manifest.wizardVersion", "1.0w"),
                minimumFrameworkVersion=config("manifest.minimumFrameworkVersion", "1.0.0.0"),
                name=data.name,
                author=data.author,
                version=_normalizeVersion(data.version),
                description=data.description,
                url=data.url,
                pages=pages,
            )
            manifestPath.write_text(encodeManifest(manifest), encoding="utf-8")
            outPath = self._writeArchive(data.name, manifestPath, blobPath, images, overwrite)

        logger.info("Built wizard package '%s' (%d page(s)) at '%s'", data.name, pagesTotal, outPath)
        return pagesTotal

    # ----- Simple -----

    def createSimpleModPack(
        self,
        data: SimplePackData,
        progress: CountProgress | None = None,
        overwrite: bool = False,
    ) -> int:
        """
        Builds a simple package from payloads fetched out of the content store.
        Returns the number of entries written. Raises PayloadMissingError when any payload
        cannot be read; no archive is produced in that case.
        """
        if self.store is None:
            raise ValueError("A content store is required to build simple packages")

        with logContext(op="build.simple", package=data.name), _stagingFiles() as (blobPath, manifestPath):
            version = _normalizeVersion(data.version)
            provenance = Provenance(name=data.name, author=data.author, version=version, url=data.url)
            entriesTotal = len(data.entries)
            entries: list[Entry] = []

            with blobPath.open("wb") as blob:
                for mod in data.entries:
                    raw = self.store.readBytes(mod.bucketId, mod.modOffset, mod.modSize)
                    if raw is None or len(raw) != mod.modSize:
                        raise PayloadMissingError(
                            name=mod.name,
                            fullPath=mod.fullPath,
                            offset=mod.modOffset,
                            bucketId=mod.bucketId,
                        )
                    offset = _appendPayload(blob, raw)
                    entries.append(Entry(
                        name=mod.name,
                        category=mod.category,
                        fullPath=mod.fullPath,
                        modSize=mod.modSize,
                        modOffset=offset,
                        datFile=mod.bucketId,
                        isDefault=mod.isDefault,
                        modPackEntry=provenance,
                    ))
                    reportProgress(progress, (len(entries), entriesTotal, ""))

            reportProgress(progress, (0, entriesTotal, CREATING_MESSAGE))

            manifest = SimpleManifest(
                ttmpVersion=config("manifest.simpleVersion", "1.0s"),
                minimumFrameworkVersion=config("manifest.minimumFrameworkVersion", "1.0.0.0"),
                name=data.name,
                author=data.author,
                version=version,
                description=data.description,
                url=data.url,
                entries=entries,
            )
            manifestPath.write_text(encodeManifest(manifest), encoding="utf-8")
            outPath = self._writeArchive(data.name, manifestPath, blobPath, {}, overwrite)

        logger.info("Built simple package '%s' (%d entr(ies)) at '%s'", data.name, len(entries), outPath)
        return len(entries)

    # ----- Archive -----

    def _writeArchive(
        self,
        name: str,
        manifestPath: Path,
        blobPath: Path,
        images: dict[str, Path | bytes],
        overwrite: bool,
    ) -> Path:
        self.packageDirectory.mkdir(parents=True, exist_ok=True)
        outPath = resolveOutputPath(
            self.packageDirectory,
            name,
            config("archive.extension", ".ttmp2"),
            overwrite=overwrite,
        )
        try:
            with zipfile.ZipFile(outPath, "w", compression=archiveCompression()) as zf:
                zf.write(manifestPath, arcname=config("archive.manifestMember", "TTMPL.mpl"))
                zf.write(blobPath, arcname=config("archive.blobMember", "TTMPD.mpd"))
                for member, image in images.items():
                    if isinstance(image, bytes):
                        zf.writestr(member, image)
                    else:
                        zf.write(image, arcname=member)
        except BaseException:
            # Never leave a half-written package behind
            outPath.unlink(missing_ok=True)
            raise

        self.lastOutputPath = outPath
        return outPath



def _checkedImage(image: Path | str | bytes) -> Path | bytes:
    if isinstance(image, (bytes, bytearray)):
        return bytes(image)
    path = Path(image)
    if not path.is_file():
        raise FileNotFoundError(f"Preview image '{path}' not found")
    return path
