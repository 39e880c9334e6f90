# modpack/container/naming.py
from __future__ import annotations
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

__all__ = ["resolveOutputPath"]



def resolveOutputPath(directory: Path | str, name: str, extension: str, *, overwrite: bool = False) -> Path:
    """
    Picks the archive path for a package called `name`.

    `<directory>/<name><extension>` when free. Otherwise, with overwrite the existing file is
    deleted; without it the lowest free `<name>(1)`, `<name>(2)`, ... is used.
    """
    if not name or not name.strip():
        raise ValueError("Package name must not be empty")
    if any(sep in name for sep in ("/", "\\")):
        raise ValueError(f"Package name '{name}' must not contain path separators")
    if extension and not extension.startswith("."):
        extension = "." + extension

    directory = Path(directory)
    candidate = directory / f"{name}{extension}"
    if not candidate.exists():
        return candidate

    if overwrite:
        logger.info("Overwriting existing package '%s'", candidate)
        candidate.unlink()
        return candidate

    fileNum = 1
    while True:
        candidate = directory / f"{name}({fileNum}){extension}"
        if not candidate.exists():
            return candidate
        fileNum += 1
