"""
Tests for SettingRegistry: definition, assignment, command-line parsing,
usage output and export.
"""

import json
from datetime import timedelta

import pytest
import yaml

from flagfile.config import (
    DuplicateSettingError,
    HelpRequested,
    InvalidSettingNameError,
    InvalidSettingValueError,
    SettingKind,
    SettingNotFoundError,
    SettingRegistry,
    UsageError,
)


# ============================================================================
# Definition
# ============================================================================

def test_define_and_lookup(registry):
    setting = registry.lookup("server-port")

    assert setting.kind is SettingKind.INT
    assert setting.default == 8080
    assert setting.usage == "Server port"
    assert registry.lookup("missing") is None
    assert "debug" in registry
    assert len(registry) == 4


def test_duplicate_definition(registry):
    with pytest.raises(DuplicateSettingError):
        registry.define_int("server-port", 1)


@pytest.mark.parametrize("name", ["", "-port", "a=b"])
def test_invalid_names(name):
    with pytest.raises(InvalidSettingNameError):
        SettingRegistry().define_string(name)


def test_func_requires_callback():
    with pytest.raises(ValueError):
        SettingRegistry().define("hook", SettingKind.FUNC)


def test_iteration_is_sorted(registry):
    assert [s.name for s in registry] == ["db-url", "debug", "server-host", "server-port"]


def test_from_schema():
    reg = SettingRegistry.from_schema({
        "timeout": {"type": "duration", "default": "30s", "help": "Request timeout"},
        "workers": {"type": "integer", "default": 4},
        "ratio": 0.5,
        "verbose": False,
        "name": "svc",
    })

    assert reg.get("timeout") == timedelta(seconds=30)
    assert reg.lookup("timeout").usage == "Request timeout"
    assert reg.get("workers") == 4
    assert reg.lookup("ratio").kind is SettingKind.FLOAT
    assert reg.lookup("verbose").kind is SettingKind.BOOL
    assert reg.lookup("name").kind is SettingKind.STRING


def test_from_schema_file(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text("port:\n  type: int\n  default: 80\n", encoding="utf-8")

    reg = SettingRegistry.from_schema_file(str(path))

    assert reg.get("port") == 80


def test_from_schema_rejects_func():
    with pytest.raises(ValueError):
        SettingRegistry.from_schema({"hook": {"type": "func"}})


# ============================================================================
# Assignment
# ============================================================================

def test_set_converts_text(registry):
    registry.set("server-port", "9090")
    registry.set("debug", "true")

    assert registry.get("server-port") == 9090
    assert registry.get("debug") is True
    assert [s.name for s in registry.visit()] == ["debug", "server-port"]


def test_set_unknown(registry):
    with pytest.raises(SettingNotFoundError) as exc_info:
        registry.set("nope", "1")
    assert exc_info.value.name == "nope"

    with pytest.raises(SettingNotFoundError):
        registry.get("nope")


def test_set_invalid_value(registry):
    with pytest.raises(InvalidSettingValueError):
        registry.set("debug", "maybe")
    assert registry.get("debug") is False


def test_reset(registry):
    registry.set("server-port", "1")
    registry.reset()

    assert registry.get("server-port") == 8080
    assert registry.visit() == []


# ============================================================================
# Command line
# ============================================================================

def test_parse_flag_forms(registry):
    remaining = registry.parse(["--server-port=9090", "-db-url", "db:1", "-debug", "run", "-x"])

    assert remaining == ["run", "-x"]
    assert registry.get("server-port") == 9090
    assert registry.get("db-url") == "db:1"
    assert registry.get("debug") is True
    assert registry.lookup("debug").source == "command-line"


def test_parse_bool_does_not_consume_next_argument(registry):
    assert registry.parse(["--debug", "false"]) == ["false"]
    assert registry.get("debug") is True


def test_parse_bool_with_explicit_value(registry):
    registry.set("debug", "true")
    registry.parse(["--debug=false"])
    assert registry.get("debug") is False


def test_parse_terminator(registry):
    assert registry.parse(["--", "-debug"]) == ["-debug"]
    assert registry.get("debug") is False


def test_parse_single_dash_is_positional(registry):
    assert registry.parse(["-", "x"]) == ["-", "x"]


def test_parse_undefined_flag(registry):
    with pytest.raises(UsageError, match="not defined"):
        registry.parse(["--nope"])


def test_parse_missing_argument(registry):
    with pytest.raises(UsageError, match="needs an argument"):
        registry.parse(["-server-port"])


@pytest.mark.parametrize("arg", ["---x", "-=1"])
def test_parse_bad_syntax(registry, arg):
    with pytest.raises(UsageError, match="bad flag syntax"):
        registry.parse([arg])


def test_parse_invalid_value(registry):
    with pytest.raises(InvalidSettingValueError):
        registry.parse(["-server-port=abc"])


def test_help_requested(registry):
    with pytest.raises(HelpRequested) as exc_info:
        registry.parse(["--help"])

    usage = exc_info.value.usage
    assert usage.startswith("Usage of server:")
    assert "-server-port int" in usage
    assert "(default 8080)" in usage
    assert '(default "localhost:5432")' in usage


def test_help_name_can_be_defined(registry):
    registry.define_bool("h", False, "Show help")
    registry.parse(["-h"])
    assert registry.get("h") is True


# ============================================================================
# Export
# ============================================================================

def test_dumps_yaml_and_json():
    reg = SettingRegistry()
    reg.define_duration("timeout", "90s")
    reg.define_int("workers", 4)
    reg.define_func("hook", "", lambda value: None)

    assert yaml.safe_load(reg.dumps("yaml")) == {"timeout": "1m30s", "workers": 4}
    assert json.loads(reg.dumps("json")) == {"timeout": "1m30s", "workers": 4}
    with pytest.raises(ValueError):
        reg.dumps("toml")


def test_save(registry, tmp_path):
    registry.set("server-port", "9090")
    path = tmp_path / "out" / "settings.yaml"

    registry.save(str(path))

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data["server-port"] == 9090
    assert data["debug"] is False


def test_export_only_set(registry):
    registry.set("debug", "1")
    assert registry.export(only_set=True) == {"debug": True}
    assert registry.values()["server-port"] == 8080


def test_parse_overflowing_duration():
    reg = SettingRegistry()
    reg.define_duration("timeout", "1s")

    with pytest.raises(InvalidSettingValueError):
        reg.parse(["-timeout=9999999999999h"])

    assert reg.get("timeout") == timedelta(seconds=1)
