# tests/modpack/install/test_installer.py
from __future__ import annotations
import zipfile
from pathlib import Path

import pytest

from modpack.core.errors import UnsupportedPayloadKindError
from modpack.install.guard import guardFor
from modpack.install.installer import ModPackInstaller, dedupeByPath, payloadKindForPath
from modpack.manifest.models import Entry, LegacyEntry, Provenance
from modpack.store.registry import InstalledMod


PROVENANCE = Provenance(name="Boots", author="Ada", version="1.0.0", url="")


# ----------------------------
# Helpers
# ----------------------------

def writePackage(path: Path, blob: bytes) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("TTMPL.mpl", '{"TTMPVersion":"1.0s","SimpleModsList":[]}')
        zf.writestr("TTMPD.mpd", blob)
    return path


def entry(name: str, fullPath: str, offset: int, size: int, provenance: Provenance | None = None) -> Entry:
    return Entry(
        name=name,
        category="Gear",
        fullPath=fullPath,
        modOffset=offset,
        modSize=size,
        datFile="040000",
        modPackEntry=provenance,
    )


@pytest.fixture()
def package(tmp_path: Path) -> Path:
    # A=0..4, B=4..6, C=6..9, D=9..10
    return writePackage(tmp_path / "boots.ttmp2", b"AAAABBCCCD")


# ----------------------------
# Dedup
# ----------------------------

def test_dedupe_keepsLastOccurrence_inOriginalOrder() -> None:
    entries = [entry("A", "p1", 0, 4), entry("B", "p2", 4, 2), entry("C", "p1", 6, 3)]
    assert [e.name for e in dedupeByPath(entries)] == ["B", "C"]


def test_install_duplicatePaths_lastWriteWins(package: Path, fakeStore) -> None:
    entries = [
        entry("A", "chara/p1.tex", 0, 4),
        entry("B", "chara/p2.tex", 4, 2, PROVENANCE),
        entry("C", "chara/p1.tex", 6, 3, PROVENANCE),
    ]

    processed, errors = ModPackInstaller(fakeStore, "tests").installModPack(package, entries)

    assert (processed, errors) == (2, "")
    assert [path for path, _data, _kind in fakeStore.writes] == ["chara/p2.tex", "chara/p1.tex"]
    assert len(fakeStore.registry.mods) == 2
    assert fakeStore.bytesAt("chara/p1.tex") == b"CCC"
    assert fakeStore.bytesAt("chara/p2.tex") == b"BB"


# ----------------------------
# Outcomes
# ----------------------------

def test_fatalStopsBatch_afterRecoverableFailure(package: Path, fakeStore, genericWriteError) -> None:
    fakeStore.failures["chara/one.tex"] = genericWriteError
    fakeStore.failures["chara/two.tex"] = UnsupportedPayloadKindError(4, fullPath="chara/two.tex")
    entries = [
        entry("One", "chara/one.tex", 0, 4),
        entry("Two", "chara/two.tex", 4, 2),
        entry("Three", "chara/three.tex", 6, 3),
    ]

    processed, errors = ModPackInstaller(fakeStore, "tests").installModPack(package, entries)

    assert processed == 2
    assert "Name: One\nPath: chara/one.tex\nOffset: 0\nError: disk full\n\n" in errors
    assert "Payload kind 4 is not supported" in errors
    assert "write:chara/three.tex" not in fakeStore.events
    assert fakeStore.events[-1] == "resume"


def test_recoverableFailures_continue(package: Path, fakeStore, genericWriteError) -> None:
    fakeStore.failures["chara/one.tex"] = genericWriteError
    entries = [entry("One", "chara/one.tex", 0, 4), entry("Two", "chara/two.tex", 4, 2)]

    processed, errors = ModPackInstaller(fakeStore, "tests").installModPack(package, entries)

    assert processed == 2
    assert errors.count("Name: ") == 1
    assert fakeStore.bytesAt("chara/two.tex") is None  # no provenance, registry not saved
    assert [path for path, _data, _kind in fakeStore.writes] == ["chara/two.tex"]


def test_shortBlobRead_isRecoverable(package: Path, fakeStore) -> None:
    entries = [entry("Past", "chara/past.tex", 8, 50), entry("Ok", "chara/ok.tex", 0, 4)]

    processed, errors = ModPackInstaller(fakeStore, "tests").installModPack(package, entries)

    assert processed == 2
    assert "Path: chara/past.tex" in errors
    assert [path for path, _data, _kind in fakeStore.writes] == ["chara/ok.tex"]


def test_unresolvableBucket_isRecoverable(package: Path, fakeStore) -> None:
    orphan = Entry(name="Orphan", fullPath="nowhere.tex", modOffset=0, modSize=4)

    processed, errors = ModPackInstaller(fakeStore, "tests").installModPack(package, [orphan])

    assert processed == 1
    assert "Path: nowhere.tex" in errors


# ----------------------------
# Guard and registry
# ----------------------------

def test_suspendResume_aroundSuccessfulBatch(package: Path, fakeStore) -> None:
    ModPackInstaller(fakeStore, "tests").installModPack(package, [entry("A", "chara/a.tex", 0, 4)])

    assert fakeStore.events[0] == "suspend"
    assert fakeStore.events[-1] == "resume"
    assert fakeStore.suspended is False


def test_suspendResume_whenEveryWriteFails(package: Path, fakeStore, genericWriteError) -> None:
    fakeStore.failures["chara/a.tex"] = genericWriteError
    fakeStore.failures["chara/b.tex"] = genericWriteError

    processed, errors = ModPackInstaller(fakeStore, "tests").installModPack(
        package, [entry("A", "chara/a.tex", 0, 4), entry("B", "chara/b.tex", 4, 2)],
    )

    assert processed == 2 and errors.count("Error: disk full") == 2
    assert fakeStore.events[0] == "suspend" and fakeStore.events[-1] == "resume"


def test_suspendResume_whenUnexpectedErrorEscapes(package: Path, fakeStore) -> None:
    fakeStore.failures["chara/a.tex"] = RuntimeError("store exploded")

    with pytest.raises(RuntimeError):
        ModPackInstaller(fakeStore, "tests").installModPack(package, [entry("A", "chara/a.tex", 0, 4)])

    assert fakeStore.events[-1] == "resume"
    assert fakeStore.suspended is False
    assert guardFor(fakeStore).holders == 0


def test_nestedBatches_resumeOnlyAtOutermostExit(package: Path, fakeStore) -> None:
    installer = ModPackInstaller(fakeStore, "tests")

    with guardFor(fakeStore):
        installer.installModPack(package, [entry("A", "chara/a.tex", 0, 4)])
        installer.installModPack(package, [entry("B", "chara/b.tex", 4, 2)])
        assert fakeStore.suspended is True
        assert "resume" not in fakeStore.events

    assert fakeStore.events.count("suspend") == 1
    assert fakeStore.events[-1] == "resume"


def test_registry_readOnce_writtenOnce_withProvenance(package: Path, fakeStore) -> None:
    entries = [entry("A", "chara/a.tex", 0, 4, PROVENANCE), entry("B", "chara/b.mdl", 4, 2, PROVENANCE)]

    ModPackInstaller(fakeStore, "tests").installModPack(package, entries)

    assert fakeStore.loadCount == 1
    assert fakeStore.saveCount == 1
    assert fakeStore.registry.modPacks == [PROVENANCE]
    assert {mod.fullPath for mod in fakeStore.registry.mods} == {"chara/a.tex", "chara/b.mdl"}
    assert all(mod.source == "tests" for mod in fakeStore.registry.mods)


def test_registry_packageRecordedOnce_byName(package: Path, fakeStore) -> None:
    installer = ModPackInstaller(fakeStore, "tests")
    installer.installModPack(package, [entry("A", "chara/a.tex", 0, 4, PROVENANCE)])
    newer = PROVENANCE.model_copy(update={"version": "2.0.0"})
    installer.installModPack(package, [entry("A", "chara/a.tex", 0, 4, newer)])

    assert [pack.name for pack in fakeStore.registry.modPacks] == ["Boots"]
    assert fakeStore.saveCount == 2


def test_registry_notSaved_withoutProvenance(package: Path, fakeStore) -> None:
    ModPackInstaller(fakeStore, "tests").installModPack(package, [entry("A", "chara/a.tex", 0, 4)])

    assert fakeStore.loadCount == 1
    assert fakeStore.saveCount == 0


def test_existingRecord_isReused(package: Path, fakeStore) -> None:
    fakeStore.registry.mods.append(InstalledMod(id="keep-me", fullPath="chara/a.tex", datFile="040000"))

    ModPackInstaller(fakeStore, "tests").installModPack(package, [entry("A", "chara/a.tex", 0, 4, PROVENANCE)])

    assert [mod.id for mod in fakeStore.registry.mods] == ["keep-me"]
    assert fakeStore.bytesAt("chara/a.tex") == b"AAAA"


def test_interleavedBatch_keepsBothBatchesRecords(package: Path, fakeStore) -> None:
    other = PROVENANCE.model_copy(update={"name": "Other"})
    installer = ModPackInstaller(fakeStore, "tests")
    nested: list[tuple[int, str]] = []

    def runSecondBatch(update: tuple[int, int, str]) -> None:
        # Second batch lands after the first batch wrote its first entry
        if update[0] == 1 and not nested:
            nested.append(installer.installModPack(package, [entry("B1", "chara/b1.tex", 6, 3, other)]))

    entries = [entry("A1", "chara/a1.tex", 0, 4, PROVENANCE), entry("A2", "chara/a2.tex", 4, 2, PROVENANCE)]
    result = installer.installModPack(package, entries, runSecondBatch)

    assert result == (2, "")
    assert nested == [(1, "")]
    assert sorted(mod.fullPath for mod in fakeStore.registry.mods) == ["chara/a1.tex", "chara/a2.tex", "chara/b1.tex"]
    assert [pack.name for pack in fakeStore.registry.modPacks] == ["Other", "Boots"]
    # The outer batch reloads once before saving
    assert fakeStore.loadCount == 3
    assert fakeStore.saveCount == 2


def test_emptyEntries_touchNothing(tmp_path: Path, fakeStore) -> None:
    missing = tmp_path / "never-opened.ttmp2"

    assert ModPackInstaller(fakeStore, "tests").installModPack(missing, []) == (0, "")
    assert fakeStore.events == []


# ----------------------------
# Misc
# ----------------------------

def test_progressSequence(package: Path, fakeStore) -> None:
    progress: list[tuple[int, int, str]] = []
    entries = [entry("A", "chara/a.tex", 0, 4), entry("B", "chara/b.tex", 4, 2)]

    ModPackInstaller(fakeStore, "tests").installModPack(package, entries, progress.append)

    assert progress == [
        (0, 2, "Reading package content..."),
        (0, 2, "Starting import..."),
        (1, 2, ""),
        (2, 2, ""),
    ]


@pytest.mark.parametrize(
    ("fullPath", "kind"),
    [
        ("chara/a.tex", 4),
        ("chara/a.TEX", 2),
        ("chara/a.mdl", 3),
        ("sound/a.scd", 2),
        ("exd/root.exl", 2),
    ],
)
def test_payloadKindForPath(fullPath: str, kind: int) -> None:
    assert payloadKindForPath(fullPath) == kind


def test_legacyEntries_installed_pathlessSkipped(package: Path, fakeStore) -> None:
    entries = [
        LegacyEntry(name="Boots", fullPath="chara/boots.tex", modOffset=0, modSize=4, datFile="040000"),
        LegacyEntry(),
    ]

    processed, errors = ModPackInstaller(fakeStore, "tests").installModPack(package, entries)

    assert (processed, errors) == (1, "")
    assert fakeStore.writes == [("chara/boots.tex", b"AAAA", 4)]
