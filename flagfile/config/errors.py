"""
Configuration Errors
====================

Exception hierarchy shared by the setting registry and the config file
loader. Registry errors describe a single assignment; load errors add the
file context (path and line) around them.
"""

from typing import Optional


class FlagfileError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Registry errors
# ---------------------------------------------------------------------------

class RegistryError(FlagfileError):
    """Raised by SettingRegistry operations."""


class SettingNotFoundError(RegistryError):
    """No setting is registered under the given name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"no such setting: {name!r}")


class InvalidSettingValueError(RegistryError):
    """A value could not be converted to the setting's type."""

    def __init__(self, name: str, value: str, reason: str = ""):
        self.name = name
        self.value = value
        self.reason = reason
        message = f"invalid value {value!r} for setting {name!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DuplicateSettingError(RegistryError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"setting redefined: {name!r}")


class InvalidSettingNameError(RegistryError):
    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__(f"invalid setting name {name!r}: {reason}")


class UsageError(RegistryError):
    """Malformed command-line arguments."""


class HelpRequested(RegistryError):
    """-h or --help was given and no setting claims that name."""

    def __init__(self, usage: str):
        self.usage = usage
        super().__init__("help requested")


# ---------------------------------------------------------------------------
# Load errors
# ---------------------------------------------------------------------------

class LoadError(FlagfileError):
    """Raised when a configuration file cannot be applied."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class OpenError(LoadError):
    def __init__(self, path: str, cause: OSError):
        reason = cause.strerror or str(cause)
        super().__init__(f"failed to open file '{path}': {reason}", path)


class ReadError(LoadError):
    def __init__(self, path: str, cause: Exception):
        super().__init__(f"failed to read file '{path}': {cause}", path)


class FormatError(LoadError):
    """A non-comment line has no '=' separator."""

    def __init__(self, line: str, line_number: int, path: Optional[str] = None):
        self.line = line
        self.line_number = line_number
        where = f"{path}:{line_number}" if path else f"line {line_number}"
        super().__init__(f"{where}: failed to split line (expected to find an '='): {line}", path)


class UnknownSettingError(LoadError):
    def __init__(self, name: str, path: str, line_number: int):
        self.name = name
        self.line_number = line_number
        super().__init__(f"{path}:{line_number}: unknown setting '{name}'", path)


class InvalidValueError(LoadError):
    def __init__(self, name: str, value: str, path: str, line_number: int, cause: Exception):
        self.name = name
        self.value = value
        self.line_number = line_number
        super().__init__(
            f"{path}:{line_number}: failed to set '{name}' to value '{value}': {cause}",
            path,
        )
