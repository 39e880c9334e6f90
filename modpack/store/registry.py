# modpack/store/registry.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from modpack.manifest.models import Provenance

__all__ = ["InstalledMod", "ModRegistry"]



class InstalledMod(BaseModel):
    """One installed payload as the content store remembers it."""
    model_config = ConfigDict(extra="ignore")

    id: str                                 # UUIDv7, stable across re-installs of the same path
    name: str = ""
    category: str = ""
    fullPath: str
    datFile: str = ""                       # bucket id
    source: str = ""                        # tool that performed the install
    payloadKind: int = 2
    dataOffset: int = 0                     # where the bytes live inside the bucket
    modSize: int = 0
    enabled: bool = True
    modPack: Provenance | None = None



class ModRegistry(BaseModel):
    """Installed entries plus the packages that were applied."""
    model_config = ConfigDict(extra="ignore")

    mods: list[InstalledMod] = Field(default_factory=list)
    modPacks: list[Provenance] = Field(default_factory=list)

    def findByPath(self, fullPath: str) -> InstalledMod | None:
        for mod in self.mods:
            if mod.fullPath == fullPath:
                return mod
        return None

    def upsert(self, record: InstalledMod) -> None:
        """Replaces the record with the same id (or same path), appends otherwise."""
        for idx, mod in enumerate(self.mods):
            if mod.id == record.id or mod.fullPath == record.fullPath:
                self.mods[idx] = record
                return
        self.mods.append(record)

    def hasModPackNamed(self, name: str) -> bool:
        # TODO: key on name+author+version once existing registries are migrated
        return any(pack.name == name for pack in self.modPacks)
