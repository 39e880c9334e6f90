# tests/modpack/container/test_output_naming.py
from __future__ import annotations
from pathlib import Path

import pytest

from modpack.container.naming import resolveOutputPath


def test_freeName_isUsedAsIs(tmp_path: Path) -> None:
    assert resolveOutputPath(tmp_path, "Foo", ".ttmp2") == tmp_path / "Foo.ttmp2"


def test_collision_picksLowestFreeSuffix(tmp_path: Path) -> None:
    (tmp_path / "Foo.ttmp2").write_bytes(b"a")
    (tmp_path / "Foo(1).ttmp2").write_bytes(b"b")

    assert resolveOutputPath(tmp_path, "Foo", ".ttmp2") == tmp_path / "Foo(2).ttmp2"


def test_collision_reusesGapBeforeHigherNumbers(tmp_path: Path) -> None:
    (tmp_path / "Foo.ttmp2").write_bytes(b"a")
    (tmp_path / "Foo(2).ttmp2").write_bytes(b"c")

    assert resolveOutputPath(tmp_path, "Foo", ".ttmp2") == tmp_path / "Foo(1).ttmp2"


def test_overwrite_deletesExisting(tmp_path: Path) -> None:
    existing = tmp_path / "Foo.ttmp2"
    existing.write_bytes(b"old")

    result = resolveOutputPath(tmp_path, "Foo", ".ttmp2", overwrite=True)

    assert result == existing
    assert not existing.exists()


def test_extension_withoutDot_isNormalized(tmp_path: Path) -> None:
    assert resolveOutputPath(tmp_path, "Foo", "ttmp2") == tmp_path / "Foo.ttmp2"


@pytest.mark.parametrize("name", ["", "   ", "a/b", "a\\b"])
def test_invalidNames_raise(tmp_path: Path, name: str) -> None:
    with pytest.raises(ValueError):
        resolveOutputPath(tmp_path, name, ".ttmp2")
