"""Shared test helpers for sessionizer tests."""

import pytest

from sessionizer import store
from sessionizer.errors import TmuxError
from sessionizer.tmux import session_name


class FakeTmux:
    """In-memory stand-in for :mod:`sessionizer.tmux`.

    ``live`` holds tmux session names in server order.  Every call is
    recorded in ``calls`` as ``(function, argument)``.  Functions listed
    in ``failing`` raise TmuxError.
    """

    def __init__(self, live=None, server=True, inside=True, current="", failing=()):
        self.live = [session_name(s) for s in (live or [])]
        self.server = server
        self.inside = inside
        self.current = current
        self.failing = set(failing)
        self.calls: list[tuple[str, str | None]] = []

    def _call(self, fn, arg=None):
        self.calls.append((fn, arg))
        if fn in self.failing:
            raise TmuxError(["tmux", fn], f"tmux {fn} failed", 1)

    def called(self, fn):
        return [arg for name, arg in self.calls if name == fn]

    def has_session(self, session):
        self._call("has_session", session)
        return session_name(session) in self.live

    def new_session(self, session):
        self._call("new_session", session)
        self.live.append(session_name(session))

    def attach(self, session):
        self._call("attach", session)
        return True

    def switch_client(self, session):
        self._call("switch_client", session)

    def is_server_active(self):
        self._call("is_server_active")
        return self.server

    def in_tmux(self):
        return self.inside

    def list_sessions(self):
        self._call("list_sessions")
        return list(self.live)

    def current_session(self):
        self._call("current_session")
        return self.current

    def kill_session(self, session):
        self._call("kill_session", session)
        self.live.remove(session_name(session))


@pytest.fixture
def fake_tmux():
    return FakeTmux()


@pytest.fixture
def dirs(tmp_path):
    """Three existing session directories a, b, c."""
    paths = []
    for name in ("a", "b", "c"):
        d = tmp_path / "src" / name
        d.mkdir(parents=True)
        paths.append(str(d))
    return paths


@pytest.fixture
def config_file(tmp_path):
    """An empty configuration document on disk."""
    path = tmp_path / "config.yaml"
    store.init_config(path)
    return path


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.sessionizer and any ambient config."""
    monkeypatch.setenv("SESSIONIZER_HOME", str(tmp_path / ".sessionizer"))
    monkeypatch.delenv("SESSIONIZER_CONFIG", raising=False)
    monkeypatch.delenv("SESSIONIZER_TMUX_SOCKET", raising=False)
    monkeypatch.delenv("SESSIONIZER_DEBUG", raising=False)
