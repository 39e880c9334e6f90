# modpack/app/config.py
from __future__ import annotations
import logging
from pathlib import Path

from modpack.app.context import PROCESS_REGISTRY
from modpack.config.service import ConfigService
from modpack.config.store import ConfigStore

logger = logging.getLogger(__name__)

__all__ = ["initConfig", "resetConfig", "getGlobalConfig"]

# ------------------------------------------------------------------ #
# Module singletons
# ------------------------------------------------------------------ #

_CONFIG_SERVICE: ConfigService | None = None

# ------------------------------------------------------------------ #
# Core initialization
# ------------------------------------------------------------------ #

def initConfig(userConfigPath: Path | str | None = None, *, force: bool = False) -> ConfigService:
    """
    Initialize the config subsystem (idempotent unless force=True).
    """
    global _CONFIG_SERVICE
    if _CONFIG_SERVICE is not None and not force:
        return _CONFIG_SERVICE
    _CONFIG_SERVICE = ConfigService.bootstrap(userConfigPath)
    PROCESS_REGISTRY.register("config.service", _CONFIG_SERVICE, overwrite=True)
    logger.info("Config initialized (%s)", "defaults + user file" if userConfigPath else "defaults")
    return _CONFIG_SERVICE



def resetConfig() -> None:
    """Drops the process config so the next access bootstraps defaults again."""
    global _CONFIG_SERVICE
    _CONFIG_SERVICE = None
    PROCESS_REGISTRY.unregister("config.service")



def getGlobalConfig() -> ConfigStore:
    service = _CONFIG_SERVICE or initConfig()
    return service.store
