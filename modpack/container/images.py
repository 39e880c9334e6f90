# modpack/container/images.py
from __future__ import annotations
import struct
from dataclasses import dataclass

__all__ = ["PreviewImage", "decodePreviewImage"]

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"



@dataclass(frozen=True, slots=True)
class PreviewImage:
    """An option preview image as stored in the archive."""
    name: str
    data: bytes
    width: int | None = None
    height: int | None = None

    @property
    def isPng(self) -> bool:
        return self.data.startswith(_PNG_SIGNATURE)



def decodePreviewImage(name: str, data: bytes) -> PreviewImage:
    """
    Wraps image bytes, reading the dimensions from the PNG IHDR chunk when present.
    Anything that is not a well-formed PNG header keeps width/height as None.
    """
    width = height = None
    # signature(8) + length(4) + "IHDR"(4) + width(4) + height(4)
    if data.startswith(_PNG_SIGNATURE) and len(data) >= 24 and data[12:16] == b"IHDR":
        width, height = struct.unpack(">II", data[16:24])
    return PreviewImage(name=name, data=data, width=width, height=height)
