"""Interactive selection through fzf.

fzf reads candidates on stdin and prints the selection on stdout while
drawing its UI on the terminal.  Candidates are fed from a background
thread so a large list can't fill the pipe and deadlock us while we wait
for fzf to exit.
"""

import subprocess
import threading
from typing import Sequence

from sessionizer.errors import PickerError
from sessionizer.paths import configure_logger, log_shell_command

_log = configure_logger("sessionizer.fzf")

SESSIONS_HEADER = "Press CTRL-X to delete a session."
SESSIONS_BINDING = (
    "ctrl-x:execute-silent(sessionizer sessions remove {+})"
    "+reload(sessionizer sessions list)"
)
DIRECTORIES_HEADER = "Select a directory from the list to start a new session"


def pick(candidates: Sequence[str], header: str, extra_args: Sequence[str] = ()) -> str:
    """Let the user choose one of *candidates* and return it.

    Raises PickerError if fzf is missing, exits non-zero (Esc/Ctrl-C or
    no match), or prints nothing.
    """
    cmd = ["fzf", "--header", header, *extra_args]
    log_shell_command(cmd, prefix="fzf")
    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        raise PickerError(f"Failed to spawn fzf: {e}") from e

    payload = "\n".join(candidates)

    def _feed():
        try:
            proc.stdin.write(payload)
        except BrokenPipeError:
            # fzf exited before reading everything; its exit code says why
            _log.debug("fzf closed stdin early")
        finally:
            try:
                proc.stdin.close()
            except BrokenPipeError:
                pass

    writer = threading.Thread(target=_feed, daemon=True, name="fzf-feed")
    writer.start()
    try:
        output = proc.stdout.read()
        returncode = proc.wait()
    finally:
        writer.join(timeout=2)
        proc.stdout.close()
        if proc.poll() is None:
            proc.kill()
            proc.wait()

    if returncode != 0:
        log_shell_command(cmd, prefix="fzf", returncode=returncode)
        raise PickerError(f"fzf exited with status {returncode}")
    selection = output.strip()
    if not selection:
        raise PickerError("fzf returned no selection")
    # Multi-select isn't enabled; the first line is the choice
    return selection.splitlines()[0].strip()


def sessions(candidates: Sequence[str]) -> str:
    """Pick a tracked session; Ctrl-X removes the highlighted entries."""
    return pick(candidates, SESSIONS_HEADER, ["--bind", SESSIONS_BINDING])


def directories(candidates: Sequence[str]) -> str:
    """Pick a discovered directory to start a session in."""
    return pick(candidates, DIRECTORIES_HEADER)
