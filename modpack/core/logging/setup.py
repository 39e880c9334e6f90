# modpack/core/logging/setup.py
from __future__ import annotations
import logging
import logging.handlers

from modpack.app.globals import config, configBool
from .formatters import DevFormatter, JsonFormatter

__all__ = ["configureLogging", "getLogger"]

_ROOT_LOGGER = "modpack"



def configureLogging() -> logging.Logger:
    """
    Configure the "modpack" logger tree from the active configuration.

    Dev (debug.devModeEnabled):
      - Console pretty logs at DEBUG
    Default:
      - Console at `logging.level`, pretty or JSON (`logging.json`)
      - Optional rotating JSON file log (`logging.file`)

    Calling it again replaces the previously installed handlers.
    """
    devMode = configBool("debug.devModeEnabled", False)
    levelName = str(config("logging.level", "INFO")).upper()
    level = logging.DEBUG if devMode else getattr(logging, levelName, logging.INFO)

    root = logging.getLogger(_ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(level)

    consoleHandler = logging.StreamHandler()
    consoleHandler.setLevel(level)
    useJson = configBool("logging.json", False) and not devMode
    consoleHandler.setFormatter(JsonFormatter() if useJson else DevFormatter())
    root.addHandler(consoleHandler)

    logFile = config("logging.file", None)
    if logFile:
        fileHandler = logging.handlers.RotatingFileHandler(
            str(logFile),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        fileHandler.setLevel(level)
        fileHandler.setFormatter(JsonFormatter())
        root.addHandler(fileHandler)

    return root



def getLogger(name: str) -> logging.Logger:
    name = str(name).strip()
    if name == _ROOT_LOGGER or name.startswith(_ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}")
