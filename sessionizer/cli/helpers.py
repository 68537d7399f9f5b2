"""Shared helpers for the sessionizer CLI package.

Contains the HelpGroup class, config-path lookup, error reporting and
the read-modify-write wrapper used by every mutating sessions command.
"""

import functools
import os
import shutil
from pathlib import Path
from typing import Callable, TypeVar

import click

from sessionizer import store
from sessionizer.errors import SessionizerError, UserInputMismatch
from sessionizer.paths import configure_logger
from sessionizer.registry import SessionRegistry

_log = configure_logger("sessionizer.cli")

T = TypeVar("T")

# Shared Click settings: make -h and --help both work everywhere
CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


class HelpGroup(click.Group):
    """Click Group that treats 'help' as an alias for --help everywhere.

    Applied to the top-level group and auto-inherited by all child groups
    via ``group_class = type`` (Click uses ``type(self)`` as default cls).

    Handles two cases:
    - ``sessionizer sessions help`` — 'help' as the command name on a group
    - ``sessionizer sessions go help`` — 'help' as an arg to a leaf command
    """

    group_class = type  # auto-propagate HelpGroup to child groups

    def resolve_command(self, ctx, args):
        if args and args[0] == "help":
            if super().get_command(ctx, "help") is not None:
                return super().resolve_command(ctx, args)
            args = ["--help"] + args[1:]
        cmd_name, cmd, remaining = super().resolve_command(ctx, args)
        if (remaining and remaining[0] == "help"
                and cmd is not None and not isinstance(cmd, click.Group)):
            remaining = ["--help"] + remaining[1:]
        return cmd_name, cmd, remaining


def config_path() -> Path:
    """Config file chosen by the top-level -c/--config option."""
    ctx = click.get_current_context()
    obj = ctx.find_object(dict) or {}
    return store.resolve_config_path(obj.get("config"))


def load_config() -> dict:
    return store.load(config_path())


def handle_errors(f):
    """Map sessionizer exceptions to CLI output and exit codes.

    ``UserInputMismatch`` is an expected outcome: print it and exit 0.
    ``SessionizerError`` is a failure: print to stderr and exit 1.
    """
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except UserInputMismatch as e:
            _log.info("%s", e)
            click.echo(str(e))
        except SessionizerError as e:
            _log.error("%s", e)
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(1)
    return wrapper


def update_sessions(fn: Callable[[SessionRegistry], T]) -> T:
    """Run *fn* on the registry under the config lock, then attach if needed.

    The document is saved only when *fn* returns normally and the session
    list changed.  Attaching takes over the terminal until the user
    detaches, so it runs after the save and outside the lock.  If the
    attach itself fails, the activation is already saved; that gap is
    accepted and ``sessions sync`` repairs it.
    """
    holder: dict = {}

    def apply(data: dict) -> bool:
        registry = SessionRegistry(data["sessions"])
        holder["result"] = fn(registry)
        holder["registry"] = registry
        return registry.changed

    store.locked_update(config_path(), apply)
    holder["registry"].attach_pending()
    return holder["result"]


def find_editor() -> str:
    """Return the user's preferred editor."""
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR")
    if editor:
        return editor
    for candidate in ("vim", "vi", "nano"):
        if shutil.which(candidate):
            return candidate
    return "vi"
