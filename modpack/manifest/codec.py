# modpack/manifest/codec.py
from __future__ import annotations
import json
import logging
import re
from collections.abc import Callable, Mapping
from typing import Any, Literal

from pydantic import ValidationError
from semantic_version import NpmSpec, Version

from modpack.core.errors import ManifestFormatError
from modpack.core.jsonutils import safeJsonDumps
from .models import LegacyEntry, LegacyManifest, Manifest, SimpleManifest, WizardManifest

logger = logging.getLogger(__name__)

__all__ = [
    "Generation",
    "encodeManifest",
    "decodeManifest",
    "decodeLegacy",
    "versionOf",
    "parseVersionTag",
    "canInstall",
]

Generation = Literal["wizard", "simple", "legacy"]

_VERSION_KEY = "TTMPVersion"
_VERSION_TAG_RE = re.compile(r"^(?P<number>[0-9]+(?:\.[0-9]+)*)(?P<suffix>[sw]?)$")
# Only CR, LF and CRLF end a legacy line; JSON strings may carry other line separators raw
_LEGACY_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
# Newest manifest major this reader understands
SUPPORTED_MANIFEST_RANGE = NpmSpec("<2.0.0")



# ------------------------------------------------------------------ #
# Encoding
# ------------------------------------------------------------------ #

def encodeManifest(manifest: Manifest) -> str:
    """
    Serializes a wizard or simple manifest to its compact JSON text.

    The version tag has to agree with the populated variant. Legacy manifests are a
    read-only compatibility path and are never written.
    """
    if isinstance(manifest, WizardManifest):
        expected = "w"
    elif isinstance(manifest, SimpleManifest):
        expected = "s"
    else:
        raise ManifestFormatError("Legacy manifests are read-only and cannot be encoded")

    if not manifest.ttmpVersion.endswith(expected):
        raise ManifestFormatError(
            f"Version tag '{manifest.ttmpVersion}' does not match a {manifest.generation} manifest"
            f" (expected suffix '{expected}')"
        )
    return safeJsonDumps(manifest)



# ------------------------------------------------------------------ #
# Decoding
# ------------------------------------------------------------------ #

def _loadObject(text: str) -> Mapping[str, Any] | None:
    try:
        raw = json.loads(text)
    except ValueError:
        return None
    return raw if isinstance(raw, Mapping) else None



def _tagOf(raw: Mapping[str, Any] | None) -> str | None:
    if raw is None:
        return None
    tag = raw.get(_VERSION_KEY)
    return tag if isinstance(tag, str) else None



def _tryWizard(text: str, raw: Mapping[str, Any] | None) -> Manifest | None:
    if raw is None:
        return None
    tag = _tagOf(raw)
    if tag is not None and tag.endswith("s"):
        return None
    if not (tag is not None and tag.endswith("w")) and not isinstance(raw.get("ModPackPages"), list):
        return None
    try:
        return WizardManifest.model_validate(raw)
    except ValidationError as err:
        logger.debug("Wizard-shape decode failed: %s", err)
        return None



def _trySimple(text: str, raw: Mapping[str, Any] | None) -> Manifest | None:
    if raw is None:
        return None
    tag = _tagOf(raw)
    if tag is not None and tag.endswith("w"):
        return None
    if not (tag is not None and tag.endswith("s")) and not isinstance(raw.get("SimpleModsList"), list):
        return None
    try:
        return SimpleManifest.model_validate(raw)
    except ValidationError as err:
        logger.debug("Simple-shape decode failed: %s", err)
        return None



def _tryLegacy(text: str, raw: Mapping[str, Any] | None) -> Manifest | None:
    # A tagged document that failed its own shape is broken, not legacy
    if raw is not None and _VERSION_KEY in raw:
        return None
    entries = decodeLegacy(text)
    if entries is None:
        return None
    return LegacyManifest(entries=entries)



_DECODE_ATTEMPTS: tuple[Callable[[str, Mapping[str, Any] | None], Manifest | None], ...] = (
    _tryWizard,
    _trySimple,
    _tryLegacy,
)



def decodeManifest(text: str) -> Manifest:
    """
    Decodes manifest text into one of the three generations.

    Attempts run in a fixed order (wizard, simple, legacy); the first one that accepts the
    text wins. Raises ManifestFormatError when none does.
    """
    if not isinstance(text, str):
        raise ManifestFormatError(f"Manifest text must be a str, not '{type(text).__name__}'")
    text = text.lstrip("\ufeff")
    raw = _loadObject(text)
    for attempt in _DECODE_ATTEMPTS:
        manifest = attempt(text, raw)
        if manifest is not None:
            return manifest
    raise ManifestFormatError("Manifest does not match any known package format")



def decodeLegacy(text: str) -> list[LegacyEntry] | None:
    """
    Decodes first-generation line-delimited manifest text.

    The first line is skipped when it contains "version" (case-insensitive); every other
    non-empty line must be one JSON object. Returns None when any line fails, or when a
    version line is not followed by anything. Callers must treat None as "unreadable".
    """
    lines = _LEGACY_LINE_BREAK_RE.split(text.lstrip("\ufeff"))
    if not lines:
        return None

    if "version" in lines[0].lower():
        lines = lines[1:]
        if not lines:
            return None

    entries: list[LegacyEntry] = []
    for line in lines:
        if not line.strip():
            continue
        try:
            entries.append(LegacyEntry.model_validate_json(line))
        except ValidationError:
            return None
    return entries if entries else None



# ------------------------------------------------------------------ #
# Version helpers
# ------------------------------------------------------------------ #

def versionOf(text: str) -> str | None:
    """
    Returns the manifest's version tag without building the full structure.
    None when the text carries no tag (legacy packages).
    """
    return _tagOf(_loadObject(text.lstrip("\ufeff")))



def parseVersionTag(tag: str) -> tuple[Version, Generation]:
    """
    Splits a tag like "1.0w" into (Version("1.0.0"), "wizard").
    A tag without suffix is treated as simple, the way pre-wizard writers tagged their output.
    """
    mtch = _VERSION_TAG_RE.match((tag or "").strip())
    if not mtch:
        raise ValueError(f"Invalid manifest version tag '{tag}'")
    generation: Generation = "wizard" if mtch.group("suffix") == "w" else "simple"
    return Version.coerce(mtch.group("number")), generation



def canInstall(tag: str | None) -> bool:
    """Cheap "can I install this?" check on a tag returned by versionOf()."""
    if tag is None:
        return True
    try:
        version, _generation = parseVersionTag(tag)
    except ValueError:
        return False
    return version in SUPPORTED_MANIFEST_RANGE
