"""
flagfile
========

Load "name = value" config files into typed, pre-registered settings using
the same rules as command-line flags.
"""

from .config import (
    ConfigFileLoader,
    FlagfileError,
    LoadError,
    Setting,
    SettingKind,
    SettingRegistry,
    load,
    load_layered,
    register_config_file_flag,
)

__version__ = "1.0.0"

__all__ = [
    'ConfigFileLoader',
    'FlagfileError',
    'LoadError',
    'Setting',
    'SettingKind',
    'SettingRegistry',
    'load',
    'load_layered',
    'register_config_file_flag',
]
