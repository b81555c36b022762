"""
CLI commands for SASC configuration files.

Provides the ``sasc-config`` command group to create, inspect, validate
and edit ``.sasc.yml`` files.
"""

from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from ..config import CONFIG_FILENAMES, SascConfig, validate_config
from ..errors import InvalidArgumentError


console = Console()

DEFAULT_CONFIG_FILE = CONFIG_FILENAMES[0]


def _load(path):
    """Load the config at ``path``, or the nearest one, or the defaults."""
    if path:
        return SascConfig.load_from_file(path)
    return SascConfig.find_and_load(Path.cwd())


@click.group(name="sasc-config")
def config_cli():
    """Manage SASC configuration files."""
    pass


@config_cli.command(name="init")
@click.option(
    "--path",
    type=click.Path(dir_okay=False),
    default=DEFAULT_CONFIG_FILE,
    help="Path for config file"
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def config_init(ctx, path, force):
    """Write a configuration file with the default settings."""
    config_path = Path(path)

    if config_path.exists() and not force:
        if not click.confirm(f"Config file {path} already exists. Overwrite?"):
            console.print("[yellow]Aborted[/yellow]")
            return

    try:
        SascConfig().save_to_file(config_path)
    except OSError as e:
        console.print(f"[red]✗ Failed to create config file: {e}[/red]")
        ctx.exit(1)
    console.print(f"[green]✓ Created config file at {path}[/green]")


@config_cli.command(name="show")
@click.option(
    "--path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config file"
)
@click.pass_context
def config_show(ctx, path):
    """Display the effective configuration."""
    try:
        config = _load(path)
    except (InvalidArgumentError, OSError, yaml.YAMLError) as e:
        console.print(f"[red]✗ {e}[/red]")
        ctx.exit(1)

    yaml_str = yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False,
                         allow_unicode=True)
    syntax = Syntax(yaml_str, "yaml", theme="monokai", line_numbers=True)
    console.print(Panel(
        syntax,
        title="[bold cyan]SASC Configuration[/bold cyan]",
        border_style="cyan"
    ))


@config_cli.command(name="validate")
@click.option(
    "--path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config file"
)
@click.pass_context
def config_validate(ctx, path):
    """Validate a configuration file."""
    try:
        config = _load(path)
    except (InvalidArgumentError, OSError, yaml.YAMLError) as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        ctx.exit(1)

    issues = validate_config(config)
    errors = [i for i in issues if not i.startswith("Warning:")]
    for issue in issues:
        style = "yellow" if issue.startswith("Warning:") else "red"
        console.print(f"[{style}]- {issue}[/{style}]")

    if errors:
        console.print("[red]✗ Configuration has validation errors[/red]")
        ctx.exit(1)
    console.print("[green]✓ Configuration is valid[/green]")


@config_cli.command(name="set")
@click.argument("parameter")
@click.argument("value")
@click.option(
    "--path",
    type=click.Path(dir_okay=False),
    default=DEFAULT_CONFIG_FILE,
    help="Path to config file"
)
@click.pass_context
def config_set(ctx, parameter, value, path):
    """Set a parameter, e.g. ``threshold 40`` or ``discovery.extension py``."""
    config_path = Path(path)
    try:
        config = SascConfig.load_from_file(config_path) if config_path.exists() else SascConfig()
        data = config.to_dict()

        keys = parameter.split(".")
        section = data
        for key in keys[:-1]:
            if not isinstance(section.get(key), dict):
                raise InvalidArgumentError(f"Unknown parameter: {parameter}", argument=parameter)
            section = section[key]
        if keys[-1] not in section:
            raise InvalidArgumentError(f"Unknown parameter: {parameter}", argument=parameter)

        # YAML parsing turns "40" into 40, "true" into True and "null" into None
        section[keys[-1]] = yaml.safe_load(value)
        config = SascConfig.from_dict(data)
        config.save_to_file(config_path)
    except (InvalidArgumentError, OSError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid value for {parameter}: {e}[/red]")
        ctx.exit(1)

    console.print(f"[green]✓ Set {parameter} = {section[keys[-1]]!r}[/green]")


def main():
    """Entry point for the sasc-config script."""
    config_cli()
