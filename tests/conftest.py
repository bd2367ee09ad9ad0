"""
Pytest configuration file.

Provides a fresh registry per test and restores the root logger after tests
that call setup_logging.
"""
import logging
import sys
from pathlib import Path

import pytest

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from flagfile.config import SettingRegistry  # noqa: E402


@pytest.fixture
def registry():
    """Registry with the settings used by the server example."""
    reg = SettingRegistry("server")
    reg.define_string("db-url", "localhost:5432", "Database URL")
    reg.define_string("server-host", "localhost", "Server host")
    reg.define_int("server-port", 8080, "Server port")
    reg.define_bool("debug", False, "Enable debug mode")
    return reg


@pytest.fixture
def string_registry():
    """Registry with plain string settings plus one int setting."""
    reg = SettingRegistry("test")
    reg.define_string("key1", "", "key1 flag")
    reg.define_string("key2", "", "key2 flag")
    reg.define_string("key3", "", "key3 flag")
    reg.define_int("int_flag", 0, "int flag")
    return reg


@pytest.fixture
def write_config(tmp_path):
    """Write text to a config file under tmp_path and return its path."""
    counter = {"n": 0}

    def _write(content: str, name: str = None) -> str:
        counter["n"] += 1
        path = tmp_path / (name or f"config_{counter['n']}.conf")
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
