# tests/modpack/core/test_logging_setup.py
from __future__ import annotations
import json
import logging
import logging.handlers
import sys
from pathlib import Path

import pytest

from modpack.app.config import getGlobalConfig
from modpack.core.jsonutils import safeJsonDumps, serializeError, tryJSONify
from modpack.core.logging import (
    clearLogContext,
    configureLogging,
    getLogContext,
    getLogger,
    logContext,
    setLogContext,
)
from modpack.core.logging.formatters import DevFormatter, JsonFormatter


@pytest.fixture(autouse=True)
def restoreModpackLogger():
    root = logging.getLogger("modpack")
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    clearLogContext()


def makeRecord(msg: str, level: int = logging.INFO, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord("modpack.tests", level, __file__, 1, msg, None, exc_info)


# ----------------------------
# Context
# ----------------------------

def test_logContext_isScoped() -> None:
    setLogContext(op="outer")
    with logContext(package="Boots", archive=None):
        assert getLogContext() == {"op": "outer", "package": "Boots"}
    assert getLogContext() == {"op": "outer"}

    clearLogContext()
    assert getLogContext() is None


# ----------------------------
# Formatters
# ----------------------------

def test_devFormatter_rendersContext() -> None:
    with logContext(op="install", archive="boots.ttmp2"):
        line = DevFormatter().format(makeRecord("Installed 2 entries"))

    assert line == "INFO: [modpack.tests] Installed 2 entries [install/boots.ttmp2]"


def test_jsonFormatter_oneLineRecord_withException() -> None:
    try:
        raise ValueError("bad entry")
    except ValueError:
        record = makeRecord("failed", logging.ERROR, sys.exc_info())

    with logContext(package="Boots"):
        payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "error"
    assert payload["msg"] == "failed"
    assert payload["ctx"] == {"package": "Boots"}
    assert payload["exc"]["type"] == "ValueError"
    assert "Traceback" in payload["exc"]["stack"]


# ----------------------------
# configureLogging
# ----------------------------

def test_configureLogging_defaults() -> None:
    root = configureLogging()

    assert root.name == "modpack"
    assert root.level == logging.INFO
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, DevFormatter)


def test_configureLogging_jsonAndFile(tmp_path: Path) -> None:
    store = getGlobalConfig()
    store.set("logging.json", True)
    store.set("logging.level", "WARNING")
    store.set("logging.file", str(tmp_path / "modpack.log"))

    root = configureLogging()

    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)

    getLogger("tests").warning("written to file")
    for handler in root.handlers:
        handler.flush()
    lines = (tmp_path / "modpack.log").read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1])["msg"] == "written to file"


def test_configureLogging_devMode_forcesDebugPretty() -> None:
    store = getGlobalConfig()
    store.set("logging.json", True)
    store.set("debug.devModeEnabled", True)

    root = configureLogging()

    assert root.level == logging.DEBUG
    assert isinstance(root.handlers[0].formatter, DevFormatter)


def test_getLogger_prefixesName() -> None:
    assert getLogger("tests").name == "modpack.tests"
    assert getLogger("modpack.install").name == "modpack.install"


# ----------------------------
# jsonutils
# ----------------------------

def test_safeJsonDumps_fallsBackForOddValues() -> None:
    out = json.loads(safeJsonDumps({"path": Path("a/b"), "raw": b"\x00\x01", "set": {1}}))

    assert out == {"path": "a/b", "raw": {"__b64__": "AAE="}, "set": [1]}


def test_serializeError_shapes() -> None:
    assert serializeError(None) == {}
    assert serializeError("text") == {"message": "text"}
    assert serializeError(KeyError("k"))["type"] == "KeyError"
    assert tryJSONify(RuntimeError("x"))["message"] == "x"
