"""Session registry: the recency-ordered list of tracked sessions.

A session identifier is a directory path.  The list holds each identifier
at most once; the last element is the most recently activated session and
the first is the oldest.  ``SessionRegistry`` is a view over the
``sessions`` list of a configuration document and mutates it in place;
the caller loads and saves the document around each operation.

Failed tmux calls propagate as ``TmuxError`` before the list is touched,
so nothing half-done is ever saved.  Bad user input raises a
``UserInputMismatch`` subclass, also before any mutation.
"""

import enum
import os
from typing import Callable, Optional

from sessionizer import fzf
from sessionizer import tmux as tmux_mod
from sessionizer.errors import (
    CannotRemoveCurrent,
    NoMoreSessions,
    NoSessions,
    NoSessionsToSync,
    NotADirectory,
    OnlyOneSession,
    SessionExists,
    SessionNotFound,
)
from sessionizer.paths import configure_logger
from sessionizer.tmux import NAME_SEPARATOR, session_name

_log = configure_logger("sessionizer.registry")


def _path_for_name(name: str) -> str:
    """Map a tmux session name back to the directory it was created for.

    tmux cannot hold ``.`` in session names, so a name such as
    ``/src/my·proj`` stands for ``/src/my.proj`` when only the latter is a
    directory.  Any other name is returned unchanged.
    """
    if NAME_SEPARATOR not in name or os.path.isdir(name):
        return name
    dotted = name.replace(NAME_SEPARATOR, ".")
    return dotted if os.path.isdir(dotted) else name


class Direction(enum.Enum):
    NEXT = "next"
    PREVIOUS = "previous"


class SessionRegistry:
    """Rotation, CRUD and tmux reconciliation over a session list.

    *client* is anything exposing the functions of :mod:`sessionizer.tmux`;
    tests pass an in-memory fake.
    """

    def __init__(self, sessions: list[str], client=None):
        self.sessions = sessions
        self.client = client if client is not None else tmux_mod
        self._snapshot = list(sessions)
        # Session to attach to once the caller has saved; attaching blocks
        # until the user detaches, so it must happen last.
        self.pending_attach: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.sessions != self._snapshot

    def history(self) -> list[str]:
        """Tracked sessions, oldest first."""
        return list(self.sessions)

    def __contains__(self, session: str) -> bool:
        return session in self.sessions

    def __len__(self) -> int:
        return len(self.sessions)

    # -- activation ---------------------------------------------------------

    def ensure_session(self, session: str) -> None:
        """Create the tmux session for *session* unless it is already live."""
        if not self.client.has_session(session):
            _log.info("Creating tmux session for %s", session)
            self.client.new_session(session)

    def foreground(self, session: str) -> None:
        """Bring an existing session to the front.

        Inside a running server we switch the current client; otherwise the
        terminal has to attach, which is deferred to :meth:`attach_pending`.
        """
        if self.client.is_server_active() and self.client.in_tmux():
            self.client.switch_client(session)
        else:
            self.pending_attach = session

    def ensure_activated(self, session: str) -> None:
        self.ensure_session(session)
        self.foreground(session)

    def attach_pending(self) -> None:
        """Attach to the session queued by :meth:`foreground`, if any."""
        session, self.pending_attach = self.pending_attach, None
        if session is not None:
            self.client.attach(session)

    def _move_to_end(self, session: str) -> None:
        if session in self.sessions:
            self.sessions.remove(session)
        self.sessions.append(session)

    def activate(self, session: str) -> None:
        """Make *session* live and in the foreground, and the most recent entry."""
        if not os.path.isdir(session):
            raise NotADirectory(f"Directory {session} does not exist")
        self.ensure_activated(session)
        self._move_to_end(session)
        _log.info("Activated %s", session)

    # -- commands -----------------------------------------------------------

    def choose(self, pick: Callable[[list[str]], str] = fzf.sessions) -> str:
        """Let the user pick a tracked session, most recent first."""
        if not self.sessions:
            raise NoSessions("No sessions")
        return pick(list(reversed(self.sessions)))

    def go(self, session: Optional[str] = None,
           pick: Callable[[list[str]], str] = fzf.sessions) -> str:
        """Activate a tracked session, asking the picker when none is given."""
        if session is None:
            session = self.choose(pick)
        if session not in self.sessions:
            raise SessionNotFound(f"Session {session} not found")
        self.activate(session)
        return session

    def add(self, session: str, activate: bool = False) -> None:
        """Track a new session and create it in tmux.

        With *activate* the freshly created session is also brought to the
        foreground.
        """
        if session in self.sessions:
            raise SessionExists(f"Session {session} already exists")
        if not os.path.isdir(session):
            raise NotADirectory(f"Directory {session} does not exist")
        self.ensure_session(session)
        if activate:
            self.foreground(session)
        self.sessions.append(session)
        _log.info("Added %s", session)

    def remove(self, session: str) -> None:
        """Stop tracking *session*. The tmux session itself is left running."""
        if session not in self.sessions:
            raise SessionNotFound(f"Session {session} not found")
        if self.client.in_tmux():
            current = self.client.current_session()
            if current == session_name(session):
                raise CannotRemoveCurrent(f"Cannot remove the current session {session}")
        self.sessions.remove(session)
        _log.info("Removed %s", session)

    def target(self, direction: Direction) -> str:
        """The session a rotation in *direction* would activate."""
        if not self.sessions:
            raise NoMoreSessions("No more sessions")
        if len(self.sessions) == 1:
            raise OnlyOneSession("Only one session")
        if direction is Direction.NEXT:
            return self.sessions[0]
        return self.sessions[-2]

    def rotate(self, direction: Direction, show: bool = False) -> str:
        """Rotate the history and activate the new most recent session.

        NEXT takes the oldest session and makes it the most recent.
        PREVIOUS demotes the most recent session to the front and activates
        the one behind it.  With *show* the target is only returned.
        """
        session = self.target(direction)
        if show:
            return session
        if direction is Direction.NEXT:
            self.activate(session)
        else:
            if not os.path.isdir(session):
                raise NotADirectory(f"Directory {session} does not exist")
            self.ensure_activated(session)
            self.sessions.insert(0, self.sessions.pop())
        return session

    def next(self, show: bool = False) -> str:
        return self.rotate(Direction.NEXT, show)

    def previous(self, show: bool = False) -> str:
        return self.rotate(Direction.PREVIOUS, show)

    def sync(self, reverse: bool = False) -> None:
        """Reconcile the registry with the live tmux sessions.

        Forward: tmux is made to match the registry. Untracked live sessions
        are killed and tracked ones without a live session are created.
        Reverse: the registry is replaced by the live sessions in server
        order and the last one is activated.
        """
        live = self.client.list_sessions()
        if reverse:
            if not live:
                raise NoSessionsToSync("No tmux sessions to sync")
            by_name = {session_name(s): s for s in self.sessions}
            pulled = list(dict.fromkeys(by_name.get(name) or _path_for_name(name)
                                        for name in live))
            # Names come from tmux, so they are live by construction
            self.ensure_activated(pulled[-1])
            self.sessions[:] = pulled
            _log.info("Pulled %d sessions from tmux", len(self.sessions))
            return

        tracked = {session_name(s) for s in self.sessions}
        for name in live:
            if name not in tracked:
                _log.info("Killing untracked tmux session %s", name)
                self.client.kill_session(name)
        live_names = set(live)
        for session in self.sessions:
            if session_name(session) not in live_names:
                _log.info("Creating tmux session for %s", session)
                self.client.new_session(session)
