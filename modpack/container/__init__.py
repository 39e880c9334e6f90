# modpack/container/__init__.py
from .builder import (
    ModPackBuilder,
    PackInfo,
    SimpleModData,
    SimplePackData,
    WizardGroupData,
    WizardModData,
    WizardOptionData,
    WizardPackData,
    WizardPageData,
)
from .buckets import bucketForPath
from .images import PreviewImage, decodePreviewImage
from .naming import resolveOutputPath
from .reader import ModPackReader

__all__ = [
    "ModPackBuilder",
    "PackInfo",
    "SimpleModData",
    "SimplePackData",
    "WizardGroupData",
    "WizardModData",
    "WizardOptionData",
    "WizardPackData",
    "WizardPageData",
    "bucketForPath",
    "PreviewImage",
    "decodePreviewImage",
    "resolveOutputPath",
    "ModPackReader",
]
