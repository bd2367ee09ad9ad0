"""
Setting Types
=============

Closed set of setting kinds and the Setting record held by the registry.

Every kind has a parser (text -> typed value) and a formatter (typed value
-> text). Assignment from a config file and from the command line both go
through Setting.set, so the two sources share one set of rules.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .errors import FlagfileError, InvalidSettingValueError


class SettingKind(Enum):
    """Value kinds a setting can hold."""
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DURATION = "duration"
    FUNC = "func"

    @classmethod
    def from_name(cls, name: str) -> "SettingKind":
        """Resolve a kind from its schema name, accepting common aliases."""
        key = name.strip().lower()
        key = _KIND_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise ValueError(f"unknown setting type {name!r} (expected one of: {valid})") from None


_KIND_ALIASES = {
    "str": "string",
    "integer": "int",
    "boolean": "bool",
    "double": "float",
}

# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

_TRUE_STRINGS = frozenset(["1", "t", "T", "TRUE", "true", "True"])
_FALSE_STRINGS = frozenset(["0", "f", "F", "FALSE", "false", "False"])


def parse_bool(text: str) -> bool:
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"parse error: {text!r} is not a boolean")


_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


def parse_int(text: str) -> int:
    """Parse a 64-bit integer literal; base prefixes and '_' separators are allowed."""
    if text != text.strip() or not text or not text.isascii():
        raise ValueError(f"parse error: {text!r} is not an integer")
    try:
        value = int(text, 0)
    except ValueError:
        raise ValueError(f"parse error: {text!r} is not an integer") from None
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


def parse_float(text: str) -> float:
    if text != text.strip() or not text or not text.isascii():
        raise ValueError(f"parse error: {text!r} is not a number")
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"parse error: {text!r} is not a number") from None
    # 'inf' spelled out is allowed; an overflowing literal like 1e999 is not
    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError(f"value out of range: {text!r}")
    return value


# Microseconds per unit
_DURATION_UNITS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,  # micro sign
    "μs": 1,  # greek mu
    "ms": 1000,
    "s": 1000 * 1000,
    "m": 60 * 1000 * 1000,
    "h": 60 * 60 * 1000 * 1000,
}

_DURATION_PART = re.compile(r"([0-9]+\.?[0-9]*|\.[0-9]+)([a-zµμ]+)")

# Durations are bounded like a signed 64-bit nanosecond count
_MAX_DURATION_MICROS = _INT64_MAX // 1000


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration such as '300ms', '-1.5h' or '2h45m'.

    Args:
        text: Signed sequence of decimal numbers, each with a unit suffix

    Returns:
        Parsed duration
    """
    original = text
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {original!r}")

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if not match:
            raise ValueError(f"invalid duration {original!r}")
        number, unit = match.groups()
        if unit not in _DURATION_UNITS:
            raise ValueError(f"unknown unit {unit!r} in duration {original!r}")
        total += float(number) * _DURATION_UNITS[unit]
        pos = match.end()

    if not math.isfinite(total) or total > _MAX_DURATION_MICROS:
        raise ValueError(f"invalid duration {original!r}")
    return timedelta(microseconds=sign * round(total))


def format_duration(value: timedelta) -> str:
    """Render a duration the way it is written in config files, e.g. '1h30m0s'."""
    micros = (value.days * 86400 + value.seconds) * 1000000 + value.microseconds
    if micros == 0:
        return "0s"

    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros < 1000:
        return f"{sign}{micros}µs"
    if micros < 1000000:
        return f"{sign}{_trim_fraction(micros, 1000)}ms"

    hours, rest = divmod(micros, 3600 * 1000000)
    minutes, rest = divmod(rest, 60 * 1000000)
    seconds = _trim_fraction(rest, 1000000)

    out = sign
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return out + f"{seconds}s"


def _trim_fraction(amount: int, unit: int) -> str:
    whole, frac = divmod(amount, unit)
    if not frac:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{frac:0{digits}d}".rstrip("0")


def format_bool(value: bool) -> str:
    return "true" if value else "false"


_PARSERS: Dict[SettingKind, Callable[[str], Any]] = {
    SettingKind.STRING: str,
    SettingKind.INT: parse_int,
    SettingKind.FLOAT: parse_float,
    SettingKind.BOOL: parse_bool,
    SettingKind.DURATION: parse_duration,
}

_ZERO_VALUES: Dict[SettingKind, Any] = {
    SettingKind.STRING: "",
    SettingKind.INT: 0,
    SettingKind.FLOAT: 0.0,
    SettingKind.BOOL: False,
    SettingKind.DURATION: timedelta(0),
    SettingKind.FUNC: None,
}


def parse_value(kind: SettingKind, text: str) -> Any:
    return _PARSERS[kind](text)


def format_value(kind: SettingKind, value: Any) -> str:
    if kind is SettingKind.FUNC or value is None:
        return ""
    if kind is SettingKind.BOOL:
        return format_bool(value)
    if kind is SettingKind.DURATION:
        return format_duration(value)
    return str(value)


def coerce_default(kind: SettingKind, default: Any) -> Any:
    """
    Normalise a declared default to the kind's Python type.

    Text defaults are parsed with the kind's parser; None becomes the
    kind's zero value.
    """
    if default is None:
        return _ZERO_VALUES[kind]
    if kind is SettingKind.FUNC:
        return None
    if isinstance(default, str) and kind is not SettingKind.STRING:
        return parse_value(kind, default)
    if kind is SettingKind.FLOAT and isinstance(default, int) and not isinstance(default, bool):
        return float(default)
    if kind is SettingKind.DURATION and isinstance(default, (int, float)) and not isinstance(default, bool):
        return timedelta(seconds=default)

    expected = {
        SettingKind.STRING: str,
        SettingKind.INT: int,
        SettingKind.FLOAT: float,
        SettingKind.BOOL: bool,
        SettingKind.DURATION: timedelta,
    }[kind]
    if not isinstance(default, expected) or (kind is SettingKind.INT and isinstance(default, bool)):
        raise TypeError(f"default {default!r} is not a valid {kind.value}")
    return default


# ---------------------------------------------------------------------------
# Setting record
# ---------------------------------------------------------------------------

@dataclass
class Setting:
    """A named, typed program setting."""

    name: str
    kind: SettingKind
    usage: str = ""
    default: Any = None
    callback: Optional[Callable[[str], Any]] = field(default=None, repr=False)

    value: Any = field(init=False)
    is_set: bool = field(default=False, init=False)
    source: str = field(default="default", init=False)

    def __post_init__(self):
        self.default = coerce_default(self.kind, self.default)
        self.value = self.default

    @property
    def text(self) -> str:
        """Current value as text."""
        return format_value(self.kind, self.value)

    @property
    def default_text(self) -> str:
        return format_value(self.kind, self.default)

    @property
    def is_bool(self) -> bool:
        return self.kind is SettingKind.BOOL

    def set(self, text: str, source: Optional[str] = None):
        """
        Convert text to the setting's type and assign it.

        A failed conversion leaves the current value untouched.

        Args:
            text: Raw value
            source: Label recorded as the origin of the value
        """
        if self.kind is SettingKind.FUNC:
            try:
                self.callback(text)
            except FlagfileError:
                raise
            except Exception as e:
                raise InvalidSettingValueError(self.name, text, str(e)) from e
        else:
            try:
                self.value = parse_value(self.kind, text)
            except (ValueError, OverflowError) as e:
                raise InvalidSettingValueError(self.name, text, str(e)) from e

        self.is_set = True
        if source is not None:
            self.source = source

    def reset(self):
        self.value = self.default
        self.is_set = False
        self.source = "default"
