"""Config file loader.

Reads "name = value" lines from a text file and assigns each one to a
SettingRegistry, with the same conversion rules as the command line.

File format:
- Blank lines are ignored.
- Lines whose first non-whitespace character is '#' are comments.
- Every other line is split at its first '='; whitespace around the name
  and the value is trimmed. Values may be empty and may contain '='.

Loading is fail-fast: the first bad line raises and stops the scan.
Assignments made before it stay in effect.
"""
from __future__ import annotations

import logging
import os
from typing import IO, Iterable, Iterator, Optional, Tuple

from .errors import (
    FormatError,
    InvalidSettingValueError,
    InvalidValueError,
    OpenError,
    ReadError,
    SettingNotFoundError,
    UnknownSettingError,
)
from .registry import SettingRegistry
from .settings import Setting, SettingKind

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
SEPARATOR = "="


def iter_entries(lines: Iterable[str], path: Optional[str] = None) -> Iterator[Tuple[int, str, str]]:
    """
    Classify lines and yield (line_number, name, value) for each entry.

    Args:
        lines: Raw lines, consumed lazily
        path: File path used in FormatError messages

    Raises:
        FormatError: a non-comment line has no separator
    """
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        name, found, value = line.partition(SEPARATOR)
        if not found:
            raise FormatError(line, line_number, path)

        yield line_number, name.strip(), value.strip()


class ConfigFileLoader:
    """Applies config files to a registry."""

    def __init__(self, registry: SettingRegistry):
        self.registry = registry

    def __call__(self, path: str):
        self.load(path)

    # ------------------------------------------------------------------
    def load(self, path: str | os.PathLike[str]):
        """
        Read a config file and assign its entries in file order.

        Args:
            path: File to read

        Raises:
            OpenError: the file could not be opened
            FormatError: a line has no '=' separator
            UnknownSettingError: a name is not registered (including '')
            InvalidValueError: a value fails the setting's conversion
            ReadError: reading failed after the file was opened
        """
        path = os.fspath(path)
        try:
            f = open(path, "r", encoding="utf-8")
        except OSError as e:
            raise OpenError(path, e) from e

        applied = 0
        with f:
            try:
                for line_number, name, value in iter_entries(f, path):
                    self._apply(path, line_number, name, value)
                    applied += 1
            except (OSError, UnicodeDecodeError) as e:
                raise ReadError(path, e) from e

        logger.info(f"Loaded {applied} setting(s) from {path}")

    # ------------------------------------------------------------------
    def _apply(self, path: str, line_number: int, name: str, value: str):
        try:
            self.registry.set(name, value, source=f"file:{path}:{line_number}")
        except SettingNotFoundError as e:
            raise UnknownSettingError(name, path, line_number) from e
        except InvalidSettingValueError as e:
            raise InvalidValueError(name, value, path, line_number, e) from e
        logger.debug(f"{path}:{line_number}: {name} = {value!r}")


def load(path: str | os.PathLike[str], registry: SettingRegistry):
    """Load one config file into `registry`."""
    ConfigFileLoader(registry).load(path)


def register_config_file_flag(registry: SettingRegistry, name: str = "config-file",
                              usage: str = "Configuration file (repeatable)") -> Setting:
    """
    Define a setting that loads a config file each time it is assigned.

    Given on the command line more than once, files load in order and
    later values override earlier ones.
    """
    return registry.define_func(name, usage, ConfigFileLoader(registry))


def dump(registry: SettingRegistry, stream: IO[str], only_set: bool = False,
         sources: bool = False):
    """
    Write settings in config file format.

    Args:
        registry: Settings to write
        stream: Text stream
        only_set: Skip settings still at their default
        sources: Precede each entry with a comment naming where its value came from

    Raises:
        ValueError: a value has surrounding whitespace or a line break,
            which the format cannot carry; nothing is written in that case
    """
    settings = registry.visit() if only_set else registry.visit_all()
    lines = []
    for setting in settings:
        if setting.kind is SettingKind.FUNC:
            continue
        text = setting.text
        if text != text.strip() or "\n" in text or "\r" in text:
            raise ValueError(
                f"setting {setting.name!r} has value {text!r} that cannot be written to a config file"
            )
        if sources:
            lines.append(f"# {setting.name}: {setting.source}\n")
        lines.append(f"{setting.name} = {text}\n")
    stream.writelines(lines)
