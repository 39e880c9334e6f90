# modpack/manifest/__init__.py
from .models import (
    Entry,
    Group,
    LegacyEntry,
    LegacyManifest,
    Manifest,
    Option,
    Page,
    Provenance,
    SimpleManifest,
    WizardManifest,
)
from .codec import canInstall, decodeLegacy, decodeManifest, encodeManifest, parseVersionTag, versionOf

__all__ = [
    "Entry",
    "Group",
    "LegacyEntry",
    "LegacyManifest",
    "Manifest",
    "Option",
    "Page",
    "Provenance",
    "SimpleManifest",
    "WizardManifest",
    "canInstall",
    "decodeLegacy",
    "decodeManifest",
    "encodeManifest",
    "parseVersionTag",
    "versionOf",
]
