# modpack/config/types.py
from __future__ import annotations
from typing import Any, Callable, Protocol, TypeAlias
from collections.abc import Mapping

__all__ = ["ConfigProvider", "ChangeListener", "ValidatorFn"]

# (key, oldValue, newValue, context)
ChangeListener: TypeAlias = Callable[[str, Any, Any, dict[str, Any]], None]
ValidatorFn: TypeAlias = Callable[[Any], Any]



class ConfigProvider(Protocol):
    def get(self, key: str) -> Any | None: ...
    def set(self, key: str, value: Any) -> None: ...
    def to_dict(self) -> Mapping[str, Any]: ...
    def save(self) -> None: ...
