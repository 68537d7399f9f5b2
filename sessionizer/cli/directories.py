"""Directory commands for the sessionizer CLI.

Registers the ``directories`` group: track and untrack scan roots, list
them, and print every directory they currently match.
"""

import click

from sessionizer import directories as dirs_mod
from sessionizer import store
from sessionizer.cli import cli
from sessionizer.cli.helpers import config_path, handle_errors, load_config


@cli.group("directories")
def directories_group():
    """Manage the directories scanned for new sessions."""


@directories_group.command("add")
@click.argument("directory")
@click.option("-m", "--mindepth", type=click.IntRange(min=0), default=None,
              help="Minimum depth to scan from DIRECTORY (default 1).")
@click.option("-M", "--maxdepth", type=click.IntRange(min=0), default=None,
              help="Maximum depth to scan from DIRECTORY (default 1).")
@click.option("-g", "--grep", default=None,
              help="Only keep directories whose path matches this regex.")
@handle_errors
def directories_add(directory: str, mindepth: int | None, maxdepth: int | None,
                    grep: str | None):
    """Track DIRECTORY, or update it if it is already tracked."""
    def apply(data):
        roots = dirs_mod.add_root(dirs_mod.load_roots(data), directory,
                                  mindepth, maxdepth, grep)
        dirs_mod.store_roots(data, roots)

    store.locked_update(config_path(), apply)
    click.echo(f"Tracking {dirs_mod.normalize_path(directory)}")


@directories_group.command("remove")
@click.argument("key", metavar="DIRECTORY_OR_ID")
@handle_errors
def directories_remove(key: str):
    """Stop tracking a directory, given by path or id."""
    removed = []

    def apply(data):
        roots = dirs_mod.load_roots(data)
        root = dirs_mod.find_root(roots, key)
        if root is None:
            return False
        removed.append(root)
        dirs_mod.store_roots(data, dirs_mod.remove_root(roots, root.id))

    store.locked_update(config_path(), apply)
    if removed:
        click.echo(f"Removed {removed[0].path} ({removed[0].id})")
    else:
        click.echo(f"{key} is not tracked")


@directories_group.command("list")
@handle_errors
def directories_list():
    """List tracked directories."""
    roots = dirs_mod.load_roots(load_config())
    if not roots:
        click.echo("No directories tracked.")
        return
    for root in roots:
        grep = f"  grep={root.grep}" if root.grep else ""
        click.echo(f"{root.id}  {root.path}  depth={root.mindepth}..{root.maxdepth}{grep}")


@directories_group.command("evaluate")
@handle_errors
def directories_evaluate():
    """Print every directory the tracked roots currently match."""
    for path in dirs_mod.evaluate(dirs_mod.load_roots(load_config())):
        click.echo(path)
