import sys
import tempfile
from pathlib import Path

import pytest

from modpack.app.config import resetConfig
from modpack.core.errors import StoreWriteError
from modpack.core.ids import uuidv7
from modpack.manifest.models import Provenance
from modpack.store.contract import WriteResult
from modpack.store.registry import InstalledMod, ModRegistry



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



# ----------------------------
# Fake content store
# ----------------------------

class FakeContentStore:
    """
    In-memory ContentStore. Records every call so tests can assert on ordering.

    `failures` maps a destination path to the exception write() raises for it.
    """

    def __init__(self) -> None:
        self.buckets: dict[str, bytearray] = {}
        self.registry = ModRegistry()
        self.failures: dict[str, BaseException] = {}
        self.writes: list[tuple[str, bytes, int]] = []
        self.events: list[str] = []
        self.loadCount = 0
        self.saveCount = 0
        self.suspended = False

    def seed(self, bucketId: str, data: bytes) -> int:
        bucket = self.buckets.setdefault(bucketId, bytearray())
        offset = len(bucket)
        bucket.extend(data)
        return offset

    def readBytes(self, bucketId: str, offset: int, length: int) -> bytes | None:
        bucket = self.buckets.get(bucketId)
        if bucket is None or offset < 0 or offset + length > len(bucket):
            return None
        return bytes(bucket[offset:offset + length])

    def write(
        self,
        data: bytes,
        existing: InstalledMod | None,
        fullPath: str,
        category: str,
        name: str,
        bucketId: str,
        source: str,
        payloadKind: int,
        modPack: Provenance | None,
    ) -> WriteResult:
        self.events.append(f"write:{fullPath}")
        failure = self.failures.get(fullPath)
        if failure is not None:
            raise failure
        dataOffset = self.seed(bucketId, data)
        self.writes.append((fullPath, bytes(data), payloadKind))
        fields = {
            "name": name,
            "category": category,
            "fullPath": fullPath,
            "datFile": bucketId,
            "source": source,
            "payloadKind": payloadKind,
            "dataOffset": dataOffset,
            "modSize": len(data),
            "modPack": modPack,
        }
        record = existing.model_copy(update=fields) if existing is not None else InstalledMod(id=uuidv7(), **fields)
        return WriteResult(record=record, created=existing is None)

    def loadRegistry(self) -> ModRegistry:
        self.loadCount += 1
        self.events.append("load")
        return self.registry.model_copy(deep=True)

    def saveRegistry(self, registry: ModRegistry) -> None:
        self.saveCount += 1
        self.events.append("save")
        self.registry = registry.model_copy(deep=True)

    def suspendBackgroundRecomputation(self) -> None:
        self.events.append("suspend")
        self.suspended = True

    def resumeBackgroundRecomputation(self) -> None:
        self.events.append("resume")
        self.suspended = False

    def bytesAt(self, fullPath: str) -> bytes | None:
        mod = self.registry.findByPath(fullPath)
        if mod is None:
            return None
        return self.readBytes(mod.datFile, mod.dataOffset, mod.modSize)



# ----------------------------
# Fixtures
# ----------------------------

@pytest.fixture(autouse=True)
def freshConfig():
    resetConfig()
    yield
    resetConfig()


@pytest.fixture()
def fakeStore() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture()
def scratchDir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirects tempfile scratch files into a directory the test can inspect."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


@pytest.fixture()
def genericWriteError() -> StoreWriteError:
    return StoreWriteError("disk full")
