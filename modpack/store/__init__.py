# modpack/store/__init__.py
from .contract import (
    PAYLOAD_KIND_MODEL,
    PAYLOAD_KIND_STANDARD,
    PAYLOAD_KIND_TEXTURE,
    ContentStore,
    WriteResult,
)
from .folder import FolderContentStore
from .registry import InstalledMod, ModRegistry

__all__ = [
    "PAYLOAD_KIND_MODEL",
    "PAYLOAD_KIND_STANDARD",
    "PAYLOAD_KIND_TEXTURE",
    "ContentStore",
    "WriteResult",
    "FolderContentStore",
    "InstalledMod",
    "ModRegistry",
]
