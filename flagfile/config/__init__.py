"""Configuration package.

Provides the setting registry, the config file loader and layered resolution.
"""
from .config_file import ConfigFileLoader, dump, iter_entries, load, register_config_file_flag  # noqa: F401
from .errors import (  # noqa: F401
    DuplicateSettingError,
    FlagfileError,
    FormatError,
    HelpRequested,
    InvalidSettingNameError,
    InvalidSettingValueError,
    InvalidValueError,
    LoadError,
    OpenError,
    ReadError,
    RegistryError,
    SettingNotFoundError,
    UnknownSettingError,
    UsageError,
)
from .layered import load_layered  # noqa: F401
from .registry import SettingRegistry  # noqa: F401
from .settings import Setting, SettingKind  # noqa: F401
