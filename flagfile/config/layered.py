"""
Layered Setting Resolution
==========================

Populates a registry from its sources in priority order:
1. Defaults: declared with each setting
2. Default files: well-known config files, loaded when present
3. Command line: flags and --config-file options, in argument order

Each layer overrides the previous one value by value. Settings a later
layer does not mention keep their earlier values.
"""

import logging
import os
from typing import Iterable, List, Sequence

from .config_file import ConfigFileLoader, register_config_file_flag
from .registry import SettingRegistry

logger = logging.getLogger(__name__)


def load_layered(registry: SettingRegistry, args: Sequence[str],
                 default_files: Iterable[str] = (),
                 flag_name: str = "config-file") -> List[str]:
    """
    Resolve settings from default files and the command line.

    Args:
        registry: Registry with all settings already defined
        args: Command-line arguments without the program name
        default_files: Config files to load first; missing ones are skipped
        flag_name: Name of the repeatable config file flag

    Returns:
        Positional arguments left after flag parsing
    """
    if flag_name not in registry:
        register_config_file_flag(registry, flag_name)

    loader = ConfigFileLoader(registry)
    for path in default_files:
        if not os.path.exists(path):
            logger.debug(f"Default config file {path} not found, skipping")
            continue
        loader.load(path)

    remaining = registry.parse(args)
    logger.debug(f"Resolved {len(registry.visit())} setting(s), {len(remaining)} positional argument(s)")
    return remaining
