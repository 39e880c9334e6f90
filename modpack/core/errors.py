# modpack/core/errors.py
from __future__ import annotations

__all__ = [
    "ModPackError",
    "ManifestFormatError",
    "ModPackArchiveError",
    "PayloadMissingError",
    "StoreWriteError",
    "UnsupportedPayloadKindError",
]



class ModPackError(Exception):
    """Base class for everything this package raises on purpose."""
    pass



class ManifestFormatError(ModPackError):
    """Manifest text matches none of the known generations (or cannot be produced)."""
    pass



class ModPackArchiveError(ModPackError):
    """Archive is not a readable zip or is missing one of its required members."""
    def __init__(self, message: str, *, archive: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.archive = archive



class PayloadMissingError(ModPackError):
    """
    Raised by the simple build when the content store returns nothing for an entry.
    A payload disappeared between selection and build time; the whole build is aborted.
    """
    def __init__(
        self,
        *,
        name: str,
        fullPath: str,
        offset: int,
        bucketId: str,
    ) -> None:
        self.name = name
        self.fullPath = fullPath
        self.offset = offset
        self.bucketId = bucketId
        super().__init__(
            "Unable to obtain data for the following mod\n\n"
            f"Name: {name}\nFull Path: {fullPath}\n"
            f"Mod Offset: {offset}\nData File: {bucketId}\n\n"
            "Unselect the above mod and try again."
        )



class StoreWriteError(ModPackError):
    """A content store write failed for one payload."""
    def __init__(self, message: str, *, fullPath: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fullPath = fullPath



class UnsupportedPayloadKindError(StoreWriteError):
    """The store cannot accept this payload kind at all. Fatal for the rest of an install batch."""
    def __init__(self, payloadKind: int, *, fullPath: str | None = None) -> None:
        super().__init__(f"Payload kind {payloadKind} is not supported by this content store", fullPath=fullPath)
        self.payloadKind = payloadKind
