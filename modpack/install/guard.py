# modpack/install/guard.py
from __future__ import annotations
import logging
import threading
import weakref

from modpack.store.contract import ContentStore

logger = logging.getLogger(__name__)

__all__ = ["RecomputationGuard", "guardFor"]



class RecomputationGuard:
    """
    Reference-counted suspension of a store's background recomputation.

    The first holder suspends, the last one to leave resumes. Nested and concurrent
    batches against the same store therefore never resume early.

    The guard also tracks registry changes for its store. `registryRevision` moves on every
    write and save an installer makes, so a batch can tell whether anyone else changed the
    registry since it loaded its snapshot.
    """

    def __init__(self, store: ContentStore) -> None:
        self.store = store
        self._lock = threading.Lock()
        self._holders = 0
        self.registryLock = threading.RLock()
        self._registryRevision = 0

    @property
    def holders(self) -> int:
        return self._holders

    @property
    def registryRevision(self) -> int:
        return self._registryRevision

    def markRegistryChanged(self) -> None:
        with self.registryLock:
            self._registryRevision += 1

    def acquire(self) -> None:
        with self._lock:
            if self._holders == 0:
                self.store.suspendBackgroundRecomputation()
                logger.debug("Background recomputation suspended")
            self._holders += 1

    def release(self) -> None:
        with self._lock:
            if self._holders == 0:
                raise RuntimeError("RecomputationGuard released more often than acquired")
            self._holders -= 1
            if self._holders == 0:
                self.store.resumeBackgroundRecomputation()
                logger.debug("Background recomputation resumed")

    def __enter__(self) -> RecomputationGuard:
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()



_GUARDS: weakref.WeakKeyDictionary[ContentStore, RecomputationGuard] = weakref.WeakKeyDictionary()
_GUARDS_LOCK = threading.Lock()



def guardFor(store: ContentStore) -> RecomputationGuard:
    """The one guard shared by every installer working on `store`."""
    with _GUARDS_LOCK:
        guard = _GUARDS.get(store)
        if guard is None:
            guard = RecomputationGuard(store)
            _GUARDS[store] = guard
        return guard
