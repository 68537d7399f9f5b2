"""Exception hierarchy for sessionizer.

Two families:

- ``SessionizerError`` — hard failures (tmux or fzf failed, config broken,
  bad filter pattern).  The CLI prints them to stderr and exits non-zero.
- ``UserInputMismatch`` — expected outcomes of bad user input (unknown
  session, duplicate add, rotating a short history).  The CLI prints the
  message and exits 0 without saving anything.
"""


class SessionizerError(Exception):
    """Base class for hard failures."""


class TmuxError(SessionizerError):
    """A tmux command failed to spawn or exited non-zero."""

    def __init__(self, cmd: list[str], message: str, returncode: int | None = None,
                 stderr: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        detail = f"{message}"
        if returncode is not None:
            detail += f" (exit {returncode})"
        if stderr:
            detail += f": {stderr.strip()}"
        super().__init__(detail)


class PickerError(SessionizerError):
    """fzf failed, was aborted, or returned nothing."""


class ConfigError(SessionizerError):
    """The configuration document could not be read or written."""


class InvalidPattern(SessionizerError):
    """A directory filter is not a valid regular expression."""


class InvalidRoot(SessionizerError):
    """A directory root has inconsistent depth bounds."""


class NoSessionsToSync(SessionizerError):
    """Reverse sync found no live tmux sessions."""


class UserInputMismatch(Exception):
    """Base class for soft, no-op outcomes."""


class SessionNotFound(UserInputMismatch):
    pass


class SessionExists(UserInputMismatch):
    pass


class NotADirectory(UserInputMismatch):
    pass


class CannotRemoveCurrent(UserInputMismatch):
    pass


class NoMoreSessions(UserInputMismatch):
    pass


class OnlyOneSession(UserInputMismatch):
    pass


class NoSessions(UserInputMismatch):
    pass
