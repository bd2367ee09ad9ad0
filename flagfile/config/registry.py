"""
Setting Registry
================

Owned collection of named, typed settings. Applications define each
setting once, then populate it from config files and the command line.
Both sources assign through SettingRegistry.set, so a value accepted on the
command line is accepted in a file and vice versa.

A registry is passed explicitly to everything that reads or writes it;
there is no module-level default instance.
"""

import json
import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence

import yaml

from .errors import (
    DuplicateSettingError,
    HelpRequested,
    InvalidSettingNameError,
    SettingNotFoundError,
    UsageError,
)
from .settings import Setting, SettingKind, format_value

logger = logging.getLogger(__name__)

COMMAND_LINE = "command-line"


class SettingRegistry:
    """
    Maps setting names to Setting records.
    """

    def __init__(self, name: str = "flagfile"):
        """
        Initialize an empty registry.

        Args:
            name: Program name shown in usage output
        """
        self.name = name
        self._settings: Dict[str, Setting] = {}

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------
    def define(self, name: str, kind: SettingKind, default: Any = None, usage: str = "",
               callback: Optional[Callable[[str], Any]] = None) -> Setting:
        """
        Register a new setting.

        Args:
            name: Setting name, as written in files and after '--' on the command line
            kind: Value kind
            default: Default value (text defaults are parsed)
            usage: Help text
            callback: Called with the raw text for FUNC settings

        Returns:
            The registered Setting
        """
        self._check_name(name)
        if name in self._settings:
            raise DuplicateSettingError(name)
        if kind is SettingKind.FUNC and callback is None:
            raise ValueError(f"func setting {name!r} requires a callback")

        setting = Setting(name=name, kind=kind, usage=usage, default=default, callback=callback)
        self._settings[name] = setting
        logger.debug(f"Defined setting {name} ({kind.value}, default {setting.default_text!r})")
        return setting

    def define_string(self, name: str, default: str = "", usage: str = "") -> Setting:
        return self.define(name, SettingKind.STRING, default, usage)

    def define_int(self, name: str, default: int = 0, usage: str = "") -> Setting:
        return self.define(name, SettingKind.INT, default, usage)

    def define_float(self, name: str, default: float = 0.0, usage: str = "") -> Setting:
        return self.define(name, SettingKind.FLOAT, default, usage)

    def define_bool(self, name: str, default: bool = False, usage: str = "") -> Setting:
        return self.define(name, SettingKind.BOOL, default, usage)

    def define_duration(self, name: str, default: Any = timedelta(0), usage: str = "") -> Setting:
        return self.define(name, SettingKind.DURATION, default, usage)

    def define_func(self, name: str, usage: str, callback: Callable[[str], Any]) -> Setting:
        """Register a setting whose every assignment calls `callback` with the raw text."""
        return self.define(name, SettingKind.FUNC, None, usage, callback=callback)

    @classmethod
    def from_schema(cls, schema: Mapping[str, Any], name: str = "flagfile") -> "SettingRegistry":
        """
        Build a registry from a mapping of setting declarations.

        Each entry is either a mapping with 'type', 'default' and 'help'
        keys, or a bare default whose type is inferred.

        Args:
            schema: {setting name: declaration}
            name: Program name shown in usage output

        Returns:
            New registry
        """
        registry = cls(name)
        for setting_name, spec in schema.items():
            if not isinstance(spec, Mapping):
                spec = {"type": _infer_kind(spec).value, "default": spec}

            kind = SettingKind.from_name(str(spec.get("type", "string")))
            if kind is SettingKind.FUNC:
                raise ValueError(f"setting {setting_name!r}: func settings cannot be declared in a schema")

            registry.define(
                str(setting_name),
                kind,
                spec.get("default"),
                str(spec.get("help", spec.get("usage", ""))),
            )
        return registry

    @classmethod
    def from_schema_file(cls, path: str, name: str = "flagfile") -> "SettingRegistry":
        """Build a registry from a YAML schema file."""
        with open(path, "r", encoding="utf-8") as f:
            schema = yaml.safe_load(f) or {}
        if not isinstance(schema, dict):
            raise ValueError(f"schema file {path} must contain a mapping")
        return cls.from_schema(schema, name)

    def _check_name(self, name: str):
        if not name:
            raise InvalidSettingNameError(name, "name is empty")
        if name.startswith("-"):
            raise InvalidSettingNameError(name, "name starts with '-'")
        if "=" in name:
            raise InvalidSettingNameError(name, "name contains '='")

    # ------------------------------------------------------------------
    # Lookup and assignment
    # ------------------------------------------------------------------
    def lookup(self, name: str) -> Optional[Setting]:
        return self._settings.get(name)

    def get(self, name: str) -> Any:
        """Return the typed current value of a setting."""
        setting = self._settings.get(name)
        if setting is None:
            raise SettingNotFoundError(name)
        return setting.value

    def set(self, name: str, value: str, source: Optional[str] = None):
        """
        Assign a setting from text.

        Args:
            name: Setting name
            value: Raw text value
            source: Label recorded as the origin of the value

        Raises:
            SettingNotFoundError: name is not registered
            InvalidSettingValueError: value fails the setting's conversion
        """
        setting = self._settings.get(name)
        if setting is None:
            raise SettingNotFoundError(name)
        setting.set(value, source if source is not None else "set")

    def reset(self):
        """Restore every setting to its default."""
        for setting in self._settings.values():
            setting.reset()

    def __contains__(self, name: str) -> bool:
        return name in self._settings

    def __iter__(self) -> Iterator[Setting]:
        return iter(self.visit_all())

    def __len__(self) -> int:
        return len(self._settings)

    def visit_all(self) -> List[Setting]:
        """All settings, sorted by name."""
        return [self._settings[name] for name in sorted(self._settings)]

    def visit(self) -> List[Setting]:
        """Settings assigned at least once, sorted by name."""
        return [s for s in self.visit_all() if s.is_set]

    def values(self) -> Dict[str, Any]:
        """Typed values of all non-func settings."""
        return {s.name: s.value for s in self.visit_all() if s.kind is not SettingKind.FUNC}

    def snapshot(self) -> Dict[str, str]:
        """Text values of all non-func settings."""
        return {s.name: s.text for s in self.visit_all() if s.kind is not SettingKind.FUNC}

    # ------------------------------------------------------------------
    # Command line
    # ------------------------------------------------------------------
    def parse(self, args: Sequence[str]) -> List[str]:
        """
        Apply command-line arguments to the registry.

        Accepts -name, --name, -name=value, --name=value and, for non-bool
        settings, -name value. Parsing stops at the first non-flag argument
        or after a '--' terminator.

        Args:
            args: Arguments without the program name

        Returns:
            Remaining positional arguments
        """
        args = list(args)
        while args:
            arg = args[0]
            if len(arg) < 2 or not arg.startswith("-"):
                break

            args.pop(0)
            name = arg[2:] if arg.startswith("--") else arg[1:]
            if arg == "--":
                break
            if not name or name.startswith("-") or name.startswith("="):
                raise UsageError(f"bad flag syntax: {arg}")

            name, has_value, value = name.partition("=")
            setting = self._settings.get(name)
            if setting is None:
                if name in ("h", "help"):
                    raise HelpRequested(self.format_usage())
                raise UsageError(f"flag provided but not defined: -{name}")

            if setting.is_bool:
                if not has_value:
                    value = "true"
            elif not has_value:
                if not args:
                    raise UsageError(f"flag needs an argument: -{name}")
                value = args.pop(0)

            self.set(name, value, COMMAND_LINE)

        return args

    def format_usage(self) -> str:
        """Describe every setting in the style of a flag help listing."""
        lines = [f"Usage of {self.name}:"]
        for setting in self.visit_all():
            header = f"  -{setting.name}"
            if not setting.is_bool and setting.kind is not SettingKind.FUNC:
                header += f" {setting.kind.value}"
            lines.append(header)

            usage = setting.usage.replace("\n", "\n    \t")
            if setting.default_text not in ("", "0", "0s", "0.0", "false"):
                default = setting.default_text
                if setting.kind is SettingKind.STRING:
                    default = f"{default!r}".replace("'", '"')
                usage += f" (default {default})"
            lines.append(f"    \t{usage}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def export(self, only_set: bool = False) -> Dict[str, Any]:
        """Values as YAML/JSON-friendly data; durations become text."""
        data = {}
        for setting in (self.visit() if only_set else self.visit_all()):
            if setting.kind is SettingKind.FUNC:
                continue
            value = setting.value
            if setting.kind is SettingKind.DURATION:
                value = format_value(setting.kind, value)
            data[setting.name] = value
        return data

    def dumps(self, format: str = "yaml", only_set: bool = False) -> str:
        data = self.export(only_set)
        if format.lower() == "yaml":
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=True)
        elif format.lower() == "json":
            return json.dumps(data, indent=2, sort_keys=True) + "\n"
        raise ValueError(f"Unsupported format: {format}")

    def save(self, filepath: str, format: str = "yaml"):
        """
        Save the current values to a file.

        Args:
            filepath: Output file path
            format: File format ("yaml" or "json")
        """
        text = self.dumps(format)

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(text, encoding="utf-8")

        logger.info(f"Settings saved to {filepath}")


def _infer_kind(value: Any) -> SettingKind:
    if isinstance(value, bool):
        return SettingKind.BOOL
    if isinstance(value, int):
        return SettingKind.INT
    if isinstance(value, float):
        return SettingKind.FLOAT
    return SettingKind.STRING
