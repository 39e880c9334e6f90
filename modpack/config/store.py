# modpack/config/store.py
from __future__ import annotations
import copy
import logging
from typing import Any, Callable, Literal
from collections.abc import Mapping

from .types import ConfigProvider, ChangeListener, ValidatorFn

logger = logging.getLogger(__name__)

__all__ = ["ConfigStore", "deepMerge"]

Target = Literal["runtime", "user"]



def deepMerge(base: dict[str, Any], top: Mapping[str, Any]) -> dict[str, Any]:
    """Merges `top` into `base` in place. Nested mappings merge, everything else replaces."""
    for key, value in top.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deepMerge(current, value)
        else:
            base[key] = value
    return base



class ConfigStore:
    """
    Minimal layered config store:
      - read: first hit from the topmost provider down
      - write: dispatch to a target provider ("runtime" override or "user" file)
      - validate: on set(), validate the *effective* merged document, roll back on failure
    """

    def __init__(self, *, namespace: str, validator: ValidatorFn | None, providers: list[ConfigProvider]):
        self.namespace = namespace
        self._validator = validator
        self._providers = providers
        self._listeners: list[ChangeListener] = []

        # Index providers by role (best-effort, by class name)
        self._roleIdx: dict[str, int] = {}
        for idx, provider in enumerate(self._providers):
            name = provider.__class__.__name__.lower()
            if "override" in name and "runtime" not in self._roleIdx:
                self._roleIdx["runtime"] = idx
            if "file" in name and "user" not in self._roleIdx:
                self._roleIdx["user"] = idx

    # ----- Helpers -----

    def _resolveTargetIdx(self, target: Target) -> int:
        if target not in self._roleIdx:
            raise KeyError(f"No provider mapped for target '{target}' in {self.namespace}")
        return self._roleIdx[target]

    def _merged(self) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        # Bottom to top
        for provider in self._providers:
            deepMerge(merged, provider.to_dict())
        return merged

    def validate(self) -> None:
        if self._validator is not None:
            self._validator(self._merged())

    def get(self, key: str) -> Any | None:
        """
        Topmost non-None value wins. When that value is a mapping, the mapping layers below it
        are merged underneath so partial overrides keep the shipped keys.
        """
        hits = [value for value in (provider.get(key) for provider in self._providers) if value is not None]
        if not hits:
            return None
        if not isinstance(hits[-1], Mapping):
            return hits[-1]

        merged: dict[str, Any] = {}
        for value in hits:  # bottom to top
            if isinstance(value, Mapping):
                deepMerge(merged, copy.deepcopy(dict(value)))
            else:
                merged = {}
        return merged

    def set(self, key: str, value: Any, *, target: Target = "runtime", actor: str = "system") -> None:
        oldValue = self.get(key)
        idx = self._resolveTargetIdx(target)
        previousLayerValue = self._providers[idx].get(key)
        self._providers[idx].set(key, value)

        try:
            self.validate()
        except Exception:
            # rollback the target layer only
            self._providers[idx].set(key, previousLayerValue)
            raise

        newValue = self.get(key)
        if oldValue != newValue:
            context = {"namespace": self.namespace, "actor": actor, "target": target}
            for fn in list(self._listeners):
                try:
                    fn(key, oldValue, newValue, context)
                except Exception:
                    logger.exception("Config listener failed for '%s'", key)

    def save(self, target: Target = "user") -> None:
        self._providers[self._resolveTargetIdx(target)].save()

    def subscribe(self, fn: ChangeListener) -> Callable[[], None]:
        self._listeners.append(fn)
        def _unsub() -> None:
            try:
                self._listeners.remove(fn)
            except ValueError:
                pass
        return _unsub

    def snapshot(self) -> dict[str, Any]:
        return {
            "namespace": self.namespace,
            "values": self._merged(),
            "layers": [provider.__class__.__name__ for provider in self._providers],
        }
