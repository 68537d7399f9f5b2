"""Session commands for the sessionizer CLI.

Registers the ``sessions`` group.  Every command that changes the history
goes through ``update_sessions`` so the config is written once, after all
tmux side effects succeeded.  Pickers run before the config lock is taken
because the fzf Ctrl-X binding calls back into ``sessions remove``.
"""

import click

from sessionizer import directories as dirs_mod
from sessionizer import fzf
from sessionizer.cli import cli
from sessionizer.cli.helpers import handle_errors, load_config, update_sessions
from sessionizer.errors import UserInputMismatch
from sessionizer.registry import Direction, SessionRegistry


def _resolve(registry: SessionRegistry, session: str) -> str:
    """Accept either a tracked identifier verbatim or any path spelling of it."""
    if session in registry:
        return session
    return dirs_mod.normalize_path(session)


@cli.group("sessions")
def sessions_group():
    """Handle tmux sessions created through sessionizer."""


@sessions_group.command("list")
@handle_errors
def sessions_list():
    """List tracked sessions, most recent first."""
    registry = SessionRegistry(load_config()["sessions"])
    for session in reversed(registry.history()):
        click.echo(session)


sessions_group.add_command(sessions_list, "history")


@sessions_group.command("go")
@click.argument("session", required=False)
@handle_errors
def sessions_go(session: str | None):
    """Go to SESSION, or pick one of the tracked sessions."""
    registry = SessionRegistry(load_config()["sessions"])
    if session is None:
        session = registry.choose(fzf.sessions)
    else:
        session = _resolve(registry, session)
    update_sessions(lambda r: r.go(session))


@sessions_group.command("new")
@click.argument("directory", required=False)
@handle_errors
def sessions_new(directory: str | None):
    """Start (or resume) a session in DIRECTORY, or pick a discovered one."""
    if directory is None:
        candidates = dirs_mod.evaluate(dirs_mod.load_roots(load_config()))
        directory = fzf.directories(candidates)
    directory = dirs_mod.normalize_path(directory)

    def apply(registry: SessionRegistry) -> None:
        if directory in registry:
            registry.activate(directory)
        else:
            registry.add(directory, activate=True)

    update_sessions(apply)


@sessions_group.command("add")
@click.argument("session")
@click.option("-a", "--activate", is_flag=True, default=False,
              help="Also switch to the new session.")
@handle_errors
def sessions_add(session: str, activate: bool):
    """Track SESSION and create its tmux session."""
    session = dirs_mod.normalize_path(session)
    update_sessions(lambda r: r.add(session, activate=activate))
    click.echo(f"Added {session}")


@sessions_group.command("remove")
@click.argument("sessions", nargs=-1, required=True)
@handle_errors
def sessions_remove(sessions: tuple[str, ...]):
    """Stop tracking SESSIONS. Their tmux sessions keep running."""
    messages: list[str] = []

    def apply(registry: SessionRegistry) -> None:
        for session in sessions:
            session = _resolve(registry, session)
            try:
                registry.remove(session)
                messages.append(f"Removed {session}")
            except UserInputMismatch as e:
                messages.append(str(e))

    update_sessions(apply)
    for message in messages:
        click.echo(message)


def _rotate(direction: Direction, show: bool) -> None:
    if show:
        registry = SessionRegistry(load_config()["sessions"])
        click.echo(registry.target(direction))
        return
    update_sessions(lambda r: r.rotate(direction))


@sessions_group.command("next")
@click.option("-s", "--show", is_flag=True, default=False,
              help="Show the next session but don't transition to it.")
@handle_errors
def sessions_next(show: bool):
    """Go to, or show, the oldest session."""
    _rotate(Direction.NEXT, show)


@sessions_group.command("previous")
@click.option("-s", "--show", is_flag=True, default=False,
              help="Show the previous session but don't transition to it.")
@handle_errors
def sessions_previous(show: bool):
    """Go to, or show, the session before the current one."""
    _rotate(Direction.PREVIOUS, show)


@sessions_group.command("sync")
@click.option("-r", "--reverse", is_flag=True, default=False,
              help="Replace the history with the live tmux sessions instead.")
@handle_errors
def sessions_sync(reverse: bool):
    """Make tmux match the tracked sessions (or the reverse)."""
    update_sessions(lambda r: r.sync(reverse=reverse))
    click.echo("Synced sessions from tmux" if reverse else "Synced sessions to tmux")
