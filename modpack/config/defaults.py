# modpack/config/defaults.py
from __future__ import annotations
from typing import Any

__all__ = ["DEFAULT_CONFIG", "CONFIG_SCHEMA"]



DEFAULT_CONFIG: dict[str, Any] = {
    "archive": {
        "extension": ".ttmp2",
        "manifestMember": "TTMPL.mpl",
        "blobMember": "TTMPD.mpd",
        "imageExtension": ".png",
        "compression": "deflated",
    },
    "manifest": {
        "wizardVersion": "1.0w",
        "simpleVersion": "1.0s",
        "minimumFrameworkVersion": "1.0.0.0",
    },
    "buckets": {
        # First folder segment of a destination path -> bucket id
        "folderKeys": {
            "common": "000000",
            "bgcommon": "010000",
            "bg": "020000",
            "cut": "030000",
            "chara": "040000",
            "shader": "050000",
            "ui": "060000",
            "sound": "070000",
            "vfx": "080000",
            "exd": "0a0000",
            "game_script": "0b0000",
            "music": "0c0000",
        },
    },
    "store": {
        "supportedPayloadKinds": [2, 3, 4],
        "registryFile": "modlist.json5",
    },
    "logging": {
        "level": "INFO",
        "json": False,
        "file": None,
    },
    "debug": {
        "devModeEnabled": False,
    },
}



_NON_EMPTY = {"type": "string", "minLength": 1}
_SUFFIX = {"type": "string", "pattern": r"^\.[A-Za-z0-9]+$"}

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "archive": {
            "type": "object",
            "properties": {
                "extension": _SUFFIX,
                "manifestMember": {"type": "string", "pattern": r"\.mpl$"},
                "blobMember": {"type": "string", "pattern": r"\.mpd$"},
                "imageExtension": _SUFFIX,
                "compression": {"enum": ["deflated", "stored"]},
            },
        },
        "manifest": {
            "type": "object",
            "properties": {
                "wizardVersion": {"type": "string", "pattern": r"^[0-9]+(\.[0-9]+)*w$"},
                "simpleVersion": {"type": "string", "pattern": r"^[0-9]+(\.[0-9]+)*s$"},
                "minimumFrameworkVersion": _NON_EMPTY,
            },
        },
        "buckets": {
            "type": "object",
            "properties": {
                "folderKeys": {"type": "object", "additionalProperties": _NON_EMPTY},
            },
        },
        "store": {
            "type": "object",
            "properties": {
                "supportedPayloadKinds": {"type": "array", "items": {"type": "integer"}},
                "registryFile": _NON_EMPTY,
            },
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {"enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
                "json": {"type": "boolean"},
                "file": {"type": ["string", "null"]},
            },
        },
        "debug": {
            "type": "object",
            "properties": {
                "devModeEnabled": {"type": "boolean"},
            },
        },
    },
}
