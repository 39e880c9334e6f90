# tests/modpack/install/test_recomputation_guard.py
from __future__ import annotations
import threading

import pytest

from modpack.install.guard import RecomputationGuard, guardFor


def test_guard_suspendsOnFirst_resumesOnLast(fakeStore) -> None:
    guard = RecomputationGuard(fakeStore)

    with guard:
        with guard:
            assert guard.holders == 2
        assert fakeStore.events == ["suspend"]
    assert fakeStore.events == ["suspend", "resume"]
    assert guard.holders == 0


def test_guard_releasesOnException(fakeStore) -> None:
    guard = RecomputationGuard(fakeStore)

    with pytest.raises(KeyError):
        with guard:
            raise KeyError("boom")

    assert fakeStore.events == ["suspend", "resume"]


def test_guard_unbalancedRelease_raises(fakeStore) -> None:
    with pytest.raises(RuntimeError):
        RecomputationGuard(fakeStore).release()


def test_guardFor_isSharedPerStore(fakeStore) -> None:
    otherStore = type(fakeStore)()

    assert guardFor(fakeStore) is guardFor(fakeStore)
    assert guardFor(fakeStore) is not guardFor(otherStore)


def test_guard_concurrentHolders_resumeOnce(fakeStore) -> None:
    guard = RecomputationGuard(fakeStore)
    barrier = threading.Barrier(8)

    def work() -> None:
        with guard:
            barrier.wait(timeout=5)

    threads = [threading.Thread(target=work) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert fakeStore.events.count("suspend") == 1
    assert fakeStore.events.count("resume") == 1
    assert fakeStore.suspended is False
