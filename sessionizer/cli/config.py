"""Config commands for the sessionizer CLI."""

import shlex
import subprocess

import click
import yaml

from sessionizer import paths, store
from sessionizer.cli import cli
from sessionizer.cli.helpers import config_path, find_editor, handle_errors, load_config


@cli.group("config")
def config_group():
    """Manage the sessionizer configuration."""


@config_group.command("init")
@click.option("-f", "--force", is_flag=True, default=False,
              help="Overwrite an existing configuration file.")
@handle_errors
def config_init(force: bool):
    """Create an empty configuration file."""
    path = config_path()
    store.init_config(path, force=force)
    click.echo(f"Created configuration at {path}")


@config_group.command("path")
def config_path_cmd():
    """Print the configuration file path."""
    click.echo(str(config_path()))


@config_group.command("show")
@handle_errors
def config_show():
    """Print the configuration document."""
    data = load_config()
    click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False,
                         allow_unicode=True).rstrip())


@config_group.command("edit")
@handle_errors
def config_edit():
    """Open the configuration file in $EDITOR and validate it afterwards."""
    path = config_path()
    if not path.exists():
        store.init_config(path)
    editor = find_editor()
    ret = subprocess.call([*shlex.split(editor), str(path)])
    if ret != 0:
        click.echo(f"Editor exited with status {ret}", err=True)
        raise SystemExit(1)
    # Surface syntax errors now rather than on the next command
    store.load(path)
    click.echo(f"Configuration at {path} is valid")


@config_group.command("debug")
@click.option("--on/--off", "enabled", default=None,
              help="Turn persistent debug logging on or off.")
def config_debug(enabled: bool | None):
    """Show or toggle DEBUG-level logging to the command log."""
    if enabled is not None:
        paths.set_debug(enabled)
    state = "on" if paths.debug_enabled() else "off"
    click.echo(f"Debug logging is {state} ({paths.log_file()})")
