# modpack/config/service.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import fastjsonschema

from modpack.config.defaults import CONFIG_SCHEMA, DEFAULT_CONFIG
from modpack.config.providers import DefaultsProvider, FileProvider, OverrideProvider
from modpack.config.store import ConfigStore
from modpack.config.types import ConfigProvider, ValidatorFn

logger = logging.getLogger(__name__)

__all__ = ["ConfigService", "ConfigValidationError", "compileValidator"]



class ConfigValidationError(ValueError):
    pass



def compileValidator(schema: dict[str, Any]) -> ValidatorFn:
    """Compiles a JSON Schema and wraps fastjsonschema errors into ConfigValidationError."""
    compiled = fastjsonschema.compile(schema)

    def _validate(document: Any) -> Any:
        try:
            return compiled(document)
        except fastjsonschema.JsonSchemaException as err:
            raise ConfigValidationError(f"Invalid configuration: {err.message}") from err

    return _validate



@dataclass
class ConfigService:
    store: ConfigStore

    @classmethod
    def bootstrap(cls, userConfigPath: Path | str | None = None) -> "ConfigService":
        """
        Builds the layered store: shipped defaults <- user json5 file (optional) <- runtime overrides.
        The merged result is validated once up front so a broken user file fails fast.
        """
        providers: list[ConfigProvider] = [DefaultsProvider(data=DEFAULT_CONFIG)]
        if userConfigPath is not None:
            providers.append(FileProvider(path=userConfigPath))
        providers.append(OverrideProvider())

        store = ConfigStore(
            namespace="config:modpack",
            validator=compileValidator(CONFIG_SCHEMA),
            providers=providers,
        )
        store.validate()
        if userConfigPath is not None:
            logger.debug("Loaded user configuration from '%s'", userConfigPath)
        return cls(store=store)
