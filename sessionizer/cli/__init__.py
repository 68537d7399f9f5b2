"""Click CLI definitions for sessionizer.

The ``cli`` group and ``main`` entry point live here.  Command groups are
split into submodules:
- cli.config       — create, show and edit the configuration file
- cli.directories  — tracked directory roots and discovery
- cli.sessions     — session history, rotation and tmux sync
"""

import signal
import sys

import click

from sessionizer import __version__
from sessionizer.cli.helpers import CONTEXT_SETTINGS, HelpGroup
from sessionizer.paths import configure_logger

_log = configure_logger("sessionizer.cli")


@click.group(cls=HelpGroup, context_settings=CONTEXT_SETTINGS)
@click.option("-c", "--config", "config", default=None, envvar="SESSIONIZER_CONFIG",
              help="Custom path for the configuration file (or set SESSIONIZER_CONFIG)")
@click.version_option(__version__, "-V", "--version")
@click.pass_context
def cli(ctx, config: str | None):
    """Handle tmux sessions based on your file system."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _on_interrupt(signum, frame):
    _log.error("Ctrl-C received, stopping the program")
    sys.exit(1)


# ---------------------------------------------------------------------------
# Import submodules to register their commands on ``cli``.
# This must be at the bottom of the file, after ``cli`` is defined.
# ---------------------------------------------------------------------------
from sessionizer.cli import config, directories, sessions  # noqa: E402, F401


def main():
    signal.signal(signal.SIGINT, _on_interrupt)
    cli()
