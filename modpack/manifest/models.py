# modpack/manifest/models.py
from __future__ import annotations
from typing import Annotated, Any, Literal, TypeAlias

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

__all__ = [
    "SelectionType",
    "Provenance",
    "Entry",
    "LegacyEntry",
    "Option",
    "Group",
    "Page",
    "WizardManifest",
    "SimpleManifest",
    "LegacyManifest",
    "Manifest",
    "WIZARD_VERSION",
    "SIMPLE_VERSION",
    "MINIMUM_FRAMEWORK_VERSION",
]

WIZARD_VERSION = "1.0w"
SIMPLE_VERSION = "1.0s"
MINIMUM_FRAMEWORK_VERSION = "1.0.0.0"



def _nullToEmpty(value: Any) -> Any:
    # Older writers emit null for unset strings
    return "" if value is None else value



def _normalizeSelectionType(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "single":
            return "Single"
        if lowered in ("multi", "multiple"):
            return "Multi"
    if value is None:
        return "Single"
    return value



WireStr = Annotated[str, BeforeValidator(_nullToEmpty)]
SelectionType = Annotated[Literal["Single", "Multi"], BeforeValidator(_normalizeSelectionType)]



class _WireModel(BaseModel):
    """Wire names are PascalCase; python names stay camelCase. Unknown keys are ignored."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")



class Provenance(_WireModel):
    """Which package produced an entry. Lowercase keys on the wire."""
    name: WireStr = ""
    author: WireStr = ""
    version: WireStr = ""
    url: WireStr = ""



class Entry(_WireModel):
    """One payload's placement record."""
    name: WireStr = Field(default="", alias="Name")
    category: WireStr = Field(default="", alias="Category")
    fullPath: str = Field(alias="FullPath", min_length=1)
    modOffset: int = Field(default=0, alias="ModOffset", ge=0)
    modSize: int = Field(default=0, alias="ModSize", ge=0)
    datFile: WireStr = Field(default="", alias="DatFile")
    isDefault: bool = Field(default=False, alias="IsDefault")
    modPackEntry: Provenance | None = Field(default=None, alias="ModPackEntry")

    @property
    def blobRange(self) -> tuple[int, int]:
        return (self.modOffset, self.modOffset + self.modSize)



class LegacyEntry(_WireModel):
    """First-generation line record. Every field is optional."""
    name: WireStr = Field(default="", alias="Name")
    category: WireStr = Field(default="", alias="Category")
    fullPath: WireStr = Field(default="", alias="FullPath")
    modOffset: int = Field(default=0, alias="ModOffset")
    modSize: int = Field(default=0, alias="ModSize")
    datFile: WireStr = Field(default="", alias="DatFile")

    def toEntry(self) -> Entry:
        return Entry(
            name=self.name,
            category=self.category,
            fullPath=self.fullPath,
            modOffset=self.modOffset,
            modSize=self.modSize,
            datFile=self.datFile,
        )



class Option(_WireModel):
    name: WireStr = Field(default="", alias="Name")
    description: WireStr = Field(default="", alias="Description")
    imagePath: WireStr = Field(default="", alias="ImagePath")   # archive member name, "" when none
    modsJsons: list[Entry] = Field(default_factory=list, alias="ModsJsons")
    groupName: WireStr = Field(default="", alias="GroupName")
    selectionType: SelectionType = Field(default="Single", alias="SelectionType")
    isChecked: bool = Field(default=False, alias="IsChecked")



class Group(_WireModel):
    groupName: WireStr = Field(default="", alias="GroupName")
    selectionType: SelectionType = Field(default="Single", alias="SelectionType")
    optionList: list[Option] = Field(default_factory=list, alias="OptionList")



class Page(_WireModel):
    pageIndex: int = Field(default=0, alias="PageIndex")
    modGroups: list[Group] = Field(default_factory=list, alias="ModGroups")



class _ManifestHeader(_WireModel):
    ttmpVersion: WireStr = Field(default="", alias="TTMPVersion")
    name: WireStr = Field(default="", alias="Name")
    author: WireStr = Field(default="", alias="Author")
    version: WireStr = Field(default="", alias="Version")
    description: WireStr = Field(default="", alias="Description")
    url: WireStr = Field(default="", alias="Url")
    minimumFrameworkVersion: WireStr = Field(default=MINIMUM_FRAMEWORK_VERSION, alias="MinimumFrameworkVersion")

    def provenance(self) -> Provenance:
        return Provenance(name=self.name, author=self.author, version=self.version, url=self.url)



class WizardManifest(_ManifestHeader):
    generation: Literal["wizard"] = Field(default="wizard", exclude=True)
    ttmpVersion: WireStr = Field(default=WIZARD_VERSION, alias="TTMPVersion")
    pages: list[Page] = Field(default_factory=list, alias="ModPackPages")

    def allEntries(self) -> list[Entry]:
        """Every entry in traversal order (page → group → option)."""
        return [
            entry
            for page in self.pages
            for group in page.modGroups
            for option in group.optionList
            for entry in option.modsJsons
        ]

    def checkedEntries(self) -> list[Entry]:
        """Entries of options flagged as checked by default, in traversal order."""
        return [
            entry
            for page in self.pages
            for group in page.modGroups
            for option in group.optionList if option.isChecked
            for entry in option.modsJsons
        ]



class SimpleManifest(_ManifestHeader):
    generation: Literal["simple"] = Field(default="simple", exclude=True)
    ttmpVersion: WireStr = Field(default=SIMPLE_VERSION, alias="TTMPVersion")
    entries: list[Entry] = Field(default_factory=list, alias="SimpleModsList")

    def allEntries(self) -> list[Entry]:
        return list(self.entries)



class LegacyManifest(BaseModel):
    """Read-only first generation: bare entries, no header."""
    generation: Literal["legacy"] = "legacy"
    entries: list[LegacyEntry] = Field(default_factory=list)

    def allEntries(self) -> list[Entry]:
        return [entry.toEntry() for entry in self.entries if entry.fullPath]



Manifest: TypeAlias = WizardManifest | SimpleManifest | LegacyManifest
