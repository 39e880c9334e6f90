# modpack/container/reader.py
from __future__ import annotations
import contextlib
import logging
import shutil
import tempfile
import zipfile
from collections.abc import Iterator
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from modpack.app.globals import config
from modpack.core.errors import ManifestFormatError, ModPackArchiveError
from modpack.manifest.codec import decodeLegacy, decodeManifest, versionOf
from modpack.manifest.models import LegacyEntry, Manifest
from .images import PreviewImage, decodePreviewImage

logger = logging.getLogger(__name__)

__all__ = ["ModPackReader"]



@contextlib.contextmanager
def _openArchive(archive: Path | str) -> Iterator[zipfile.ZipFile]:
    path = Path(archive)
    if not path.is_file():
        raise ModPackArchiveError(f"Package '{path}' does not exist", archive=str(path))
    try:
        zf = zipfile.ZipFile(path, "r")
    except zipfile.BadZipFile as err:
        raise ModPackArchiveError(f"Package '{path}' is not a valid archive: {err}", archive=str(path)) from err
    with zf:
        yield zf



def _findMember(zf: zipfile.ZipFile, configuredName: str, archive: Path | str) -> str:
    """
    Exact member name first, then any member sharing its extension (older writers varied the stem).
    """
    names = zf.namelist()
    if configuredName in names:
        return configuredName
    suffix = PurePosixPath(configuredName).suffix.lower()
    if suffix:
        for name in names:
            if PurePosixPath(name).suffix.lower() == suffix:
                return name
    raise ModPackArchiveError(f"Package '{archive}' has no '{configuredName}' member", archive=str(archive))



def _manifestText(zf: zipfile.ZipFile, archive: Path | str) -> str:
    member = _findMember(zf, config("archive.manifestMember", "TTMPL.mpl"), archive)
    raw = zf.read(member)
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as err:
        raise ManifestFormatError(f"Manifest in '{archive}' is not valid UTF-8") from err



class ModPackReader:
    """
    Read side of the package container. Only openBlob() ever touches the blob member.
    """

    def readManifestAndImages(self, archive: Path | str) -> tuple[Manifest, dict[str, PreviewImage]]:
        imageExtension = str(config("archive.imageExtension", ".png")).lower()
        with _openArchive(archive) as zf:
            manifest = decodeManifest(_manifestText(zf, archive))
            images: dict[str, PreviewImage] = {}
            for info in zf.infolist():
                if info.is_dir() or not info.filename.lower().endswith(imageExtension):
                    continue
                images[info.filename] = decodePreviewImage(info.filename, zf.read(info))

        logger.debug("Read %s manifest with %d image(s) from '%s'", manifest.generation, len(images), archive)
        return manifest, images

    def readLegacy(self, archive: Path | str) -> list[LegacyEntry] | None:
        with _openArchive(archive) as zf:
            return decodeLegacy(_manifestText(zf, archive))

    def readVersion(self, archive: Path | str) -> str | None:
        with _openArchive(archive) as zf:
            return versionOf(_manifestText(zf, archive))

    @contextlib.contextmanager
    def openBlob(self, archive: Path | str) -> Iterator[BinaryIO]:
        """
        Copies the blob member into an anonymous temporary file and yields it for random access.
        The copy is gone once the context exits.
        """
        with _openArchive(archive) as zf:
            member = _findMember(zf, config("archive.blobMember", "TTMPD.mpd"), archive)
            with tempfile.TemporaryFile(prefix="modpack-blob-") as scratch:
                with zf.open(member, "r") as src:
                    shutil.copyfileobj(src, scratch)
                scratch.seek(0)
                yield scratch
