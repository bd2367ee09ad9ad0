#!/usr/bin/env python3
"""
flagfile command-line tool.

Settings are declared in a YAML schema file:

    db-url:
      type: string
      default: localhost:5432
      help: Database URL
    server-port:
      type: int
      default: 8080
    debug: false

Usage:
    flagfile check schema.yaml global.conf local.conf
    flagfile show schema.yaml --config-file global.conf --set debug=true
"""

import io
import logging
import sys

import click
import yaml

from .config import (
    FlagfileError,
    LoadError,
    SettingRegistry,
    dump,
    load,
)
from .config.registry import COMMAND_LINE
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)


def _load_schema(schema_path: str) -> SettingRegistry:
    try:
        return SettingRegistry.from_schema_file(schema_path, name="flagfile")
    except (OSError, yaml.YAMLError, ValueError, TypeError, FlagfileError) as e:
        raise click.ClickException(f"invalid schema {schema_path}: {e}") from e


@click.group()
@click.option("--log-level", default="WARNING", show_default=True,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Logging level")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False),
              help="Also log to this file")
@click.option("--log-max-size", default="10MB", show_default=True,
              help="Rotate the log file at this size (e.g. 512KB, 10MB)")
def main(log_level: str, log_file: str, log_max_size: str):
    """Check and resolve name = value config files against a settings schema."""
    setup_logging(log_level=log_level, log_file=log_file, max_file_size=log_max_size)


@main.command()
@click.argument("schema", type=click.Path(exists=True, dir_okay=False))
@click.argument("configs", nargs=-1, required=True)
def check(schema: str, configs):
    """Load each CONFIG in order and report the first error."""
    registry = _load_schema(schema)
    for path in configs:
        try:
            load(path, registry)
        except LoadError as e:
            logger.debug(f"Check failed for {path}", exc_info=True)
            raise click.ClickException(str(e)) from e
        click.echo(f"OK {path}")


@main.command()
@click.argument("schema", type=click.Path(exists=True, dir_okay=False))
@click.option("--config-file", "config_files", multiple=True,
              help="Config file to load; repeat to layer files, later ones win")
@click.option("--set", "overrides", multiple=True, metavar="NAME=VALUE",
              help="Override a setting after all files are loaded")
@click.option("--format", "output_format", default="conf", show_default=True,
              type=click.Choice(["conf", "yaml", "json"]), help="Output format")
@click.option("--only-set", is_flag=True, help="Print only settings that were assigned")
@click.option("--sources", is_flag=True, help="Annotate conf output with each value's origin")
def show(schema: str, config_files, overrides, output_format: str, only_set: bool, sources: bool):
    """Print settings resolved from defaults, config files and --set overrides."""
    registry = _load_schema(schema)

    try:
        for path in config_files:
            load(path, registry)
        for override in overrides:
            name, found, value = override.partition("=")
            if not found:
                raise click.BadParameter(f"expected NAME=VALUE, got {override!r}",
                                         param_hint="--set")
            registry.set(name.strip(), value.strip(), COMMAND_LINE)
    except FlagfileError as e:
        raise click.ClickException(str(e)) from e

    if output_format == "conf":
        buffer = io.StringIO()
        try:
            dump(registry, buffer, only_set=only_set, sources=sources)
        except ValueError as e:
            raise click.ClickException(f"{e}; use --format yaml or json") from e
        click.echo(buffer.getvalue(), nl=False)
    else:
        click.echo(registry.dumps(output_format, only_set=only_set), nl=False)


if __name__ == "__main__":
    sys.exit(main())
