"""Tmux session management for sessionizer.

Every function here is a single blocking ``tmux`` invocation.  Session
identifiers are directory paths; the tmux session *name* is derived with
:func:`session_name` because tmux does not allow ``.`` in names.
"""

import os
import subprocess

from sessionizer.errors import TmuxError
from sessionizer.paths import configure_logger, log_shell_command

_log = configure_logger("sessionizer.tmux")

# tmux rejects '.' in session names; this is visually close and safe
NAME_SEPARATOR = "·"


def session_name(session: str) -> str:
    """Return the tmux session name for a session identifier."""
    return session.replace(".", NAME_SEPARATOR)


def _tmux_cmd(*args: str) -> list[str]:
    """Build a tmux command, honouring SESSIONIZER_TMUX_SOCKET if set."""
    cmd = ["tmux"]
    sp = os.environ.get("SESSIONIZER_TMUX_SOCKET")
    if sp:
        cmd.extend(["-S", sp])
    cmd.extend(args)
    return cmd


def _run(*args: str, check: bool = True, capture: bool = True) -> subprocess.CompletedProcess:
    """Run a tmux command.

    Raises TmuxError if tmux cannot be spawned, or if it exits non-zero
    and *check* is set.  *capture* is turned off for commands that take
    over the terminal (attach).
    """
    cmd = _tmux_cmd(*args)
    log_shell_command(cmd, prefix="tmux")
    try:
        if capture:
            result = subprocess.run(cmd, capture_output=True, text=True)
        else:
            result = subprocess.run(cmd)
    except OSError as e:
        raise TmuxError(cmd, f"failed to spawn tmux: {e}") from e
    if result.returncode != 0:
        log_shell_command(cmd, prefix="tmux", returncode=result.returncode)
        if check:
            raise TmuxError(cmd, f"tmux {args[0]} failed", result.returncode,
                            result.stderr or "")
    elif result.stdout:
        _log.debug("tmux %s output:\n%s", args[0], result.stdout.rstrip())
    return result


def in_tmux() -> bool:
    """Check if we're currently inside a tmux session."""
    return bool(os.environ.get("TMUX"))


def has_session(session: str) -> bool:
    """Check if a tmux session exists for *session*.

    A non-zero exit means "no such session", not an error.
    """
    result = _run("has-session", "-t", f"={session_name(session)}", check=False)
    return result.returncode == 0


def new_session(session: str) -> None:
    """Create a detached session rooted at the *session* directory."""
    _run("new-session", "-d", "-s", session_name(session), "-c", session)


def attach(session: str) -> bool:
    """Attach the terminal to a session. Blocks until the client detaches."""
    _run("attach-session", "-t", f"={session_name(session)}", capture=False)
    return True


def switch_client(session: str) -> None:
    """Switch the current tmux client to a session."""
    _run("switch-client", "-t", f"={session_name(session)}")


def is_server_active() -> bool:
    """Check whether a tmux server is running.

    ``tmux info`` fails when there is no server; that is a normal state.
    """
    result = _run("info", check=False)
    return result.returncode == 0


def list_sessions() -> list[str]:
    """List live session names in server order.

    Each ``tmux ls`` line looks like ``name: 1 windows (created ...)``.
    An absent server yields an empty list.
    """
    result = _run("list-sessions", check=False)
    if result.returncode != 0:
        stderr = result.stderr or ""
        if "no server running" in stderr or "error connecting" in stderr:
            return []
        raise TmuxError(_tmux_cmd("list-sessions"), "tmux list-sessions failed",
                        result.returncode, stderr)
    return [line.split(":", 1)[0]
            for line in result.stdout.splitlines() if line.strip()]


def current_session() -> str:
    """Get the current tmux session name (must be called from within tmux).

    Targets $TMUX_PANE when set; display-message without a target uses the
    "current client", which can be wrong for background processes.
    """
    pane = os.environ.get("TMUX_PANE")
    if pane:
        result = _run("display-message", "-p", "-t", pane, "#{session_name}")
    else:
        result = _run("display-message", "-p", "#{session_name}")
    return result.stdout.strip()


def kill_session(session: str) -> None:
    """Kill a tmux session by session name or identifier."""
    _run("kill-session", "-t", f"={session_name(session)}")
