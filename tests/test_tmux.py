"""Tests for sessionizer.tmux — tmux helper functions."""

import os
from unittest.mock import patch, MagicMock

import pytest

from sessionizer.errors import TmuxError
from sessionizer.tmux import (
    attach,
    current_session,
    has_session,
    in_tmux,
    is_server_active,
    kill_session,
    list_sessions,
    new_session,
    session_name,
    switch_client,
)


# ---------------------------------------------------------------------------
# session_name / in_tmux
# ---------------------------------------------------------------------------

class TestSessionName:
    def test_replaces_dots(self):
        assert session_name("/home/me/my.project") == "/home/me/my·project"

    def test_plain_path_unchanged(self):
        assert session_name("/home/me/src") == "/home/me/src"


class TestInTmux:
    def test_in_tmux(self):
        with patch.dict(os.environ, {"TMUX": "/tmp/tmux-1000/default,123,0"}):
            assert in_tmux() is True

    def test_not_in_tmux(self):
        env = os.environ.copy()
        env.pop("TMUX", None)
        with patch.dict(os.environ, env, clear=True):
            assert in_tmux() is False


# ---------------------------------------------------------------------------
# has_session / is_server_active
# ---------------------------------------------------------------------------

class TestHasSession:
    @patch("sessionizer.tmux.subprocess.run")
    def test_exists(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        assert has_session("/src/a") is True
        cmd = mock_run.call_args[0][0]
        assert cmd[-2:] == ["-t", "=/src/a"]

    @patch("sessionizer.tmux.subprocess.run")
    def test_not_exists_is_not_an_error(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="can't find session")
        assert has_session("/src/a") is False

    @patch("sessionizer.tmux.subprocess.run")
    def test_uses_safe_name(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        has_session("/src/my.app")
        assert "=/src/my·app" in mock_run.call_args[0][0]


class TestIsServerActive:
    @patch("sessionizer.tmux.subprocess.run")
    def test_active(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        assert is_server_active() is True
        assert "info" in mock_run.call_args[0][0]

    @patch("sessionizer.tmux.subprocess.run")
    def test_no_server(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="no server running")
        assert is_server_active() is False


# ---------------------------------------------------------------------------
# new_session / attach / switch_client / kill_session
# ---------------------------------------------------------------------------

class TestNewSession:
    @patch("sessionizer.tmux.subprocess.run")
    def test_detached_with_safe_name_and_real_cwd(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        new_session("/src/my.app")
        cmd = mock_run.call_args[0][0]
        assert "new-session" in cmd
        assert "-d" in cmd
        assert cmd[cmd.index("-s") + 1] == "/src/my·app"
        assert cmd[cmd.index("-c") + 1] == "/src/my.app"

    @patch("sessionizer.tmux.subprocess.run")
    def test_failure_raises(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="duplicate session")
        with pytest.raises(TmuxError, match="duplicate session"):
            new_session("/src/a")

    @patch("sessionizer.tmux.subprocess.run", side_effect=FileNotFoundError("tmux"))
    def test_spawn_failure_raises(self, mock_run):
        with pytest.raises(TmuxError, match="failed to spawn"):
            new_session("/src/a")


class TestAttach:
    @patch("sessionizer.tmux.subprocess.run")
    def test_attach_keeps_terminal(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        assert attach("/src/a") is True
        assert mock_run.call_args[1] == {}
        assert "attach-session" in mock_run.call_args[0][0]

    @patch("sessionizer.tmux.subprocess.run")
    def test_attach_failure(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stderr=None)
        with pytest.raises(TmuxError):
            attach("/src/a")


class TestSwitchClient:
    @patch("sessionizer.tmux.subprocess.run")
    def test_targets_exact_name(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        switch_client("/src/a.b")
        cmd = mock_run.call_args[0][0]
        assert cmd[1:] == ["switch-client", "-t", "=/src/a·b"]

    @patch("sessionizer.tmux.subprocess.run")
    def test_failure(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="no current client")
        with pytest.raises(TmuxError):
            switch_client("/src/a")


class TestKillSession:
    @patch("sessionizer.tmux.subprocess.run")
    def test_kill(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        kill_session("scratch")
        assert mock_run.call_args[0][0][1:] == ["kill-session", "-t", "=scratch"]

    @patch("sessionizer.tmux.subprocess.run")
    def test_failure(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="can't find session")
        with pytest.raises(TmuxError):
            kill_session("scratch")


# ---------------------------------------------------------------------------
# list_sessions / current_session
# ---------------------------------------------------------------------------

class TestListSessions:
    @patch("sessionizer.tmux.subprocess.run")
    def test_parses_names(self, mock_run):
        mock_run.return_value = MagicMock(
            returncode=0,
            stdout=("/src/a: 1 windows (created Mon Jan  1 10:00:00 2024)\n"
                    "scratch: 2 windows (created Mon Jan  1 10:05:00 2024) (attached)\n"
                    "\n"),
            stderr="",
        )
        assert list_sessions() == ["/src/a", "scratch"]

    @patch("sessionizer.tmux.subprocess.run")
    def test_no_server_is_empty(self, mock_run):
        mock_run.return_value = MagicMock(
            returncode=1, stdout="", stderr="no server running on /tmp/tmux-1000/default")
        assert list_sessions() == []

    @patch("sessionizer.tmux.subprocess.run")
    def test_other_failure_raises(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="permission denied")
        with pytest.raises(TmuxError):
            list_sessions()


class TestCurrentSession:
    @patch("sessionizer.tmux.subprocess.run")
    def test_uses_tmux_pane(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="/src/a\n", stderr="")
        with patch.dict(os.environ, {"TMUX_PANE": "%3"}):
            assert current_session() == "/src/a"
        cmd = mock_run.call_args[0][0]
        assert "-t" in cmd and "%3" in cmd

    @patch("sessionizer.tmux.subprocess.run")
    def test_without_pane(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="scratch\n", stderr="")
        env = os.environ.copy()
        env.pop("TMUX_PANE", None)
        with patch.dict(os.environ, env, clear=True):
            assert current_session() == "scratch"
        assert "-t" not in mock_run.call_args[0][0]


class TestSocket:
    @patch("sessionizer.tmux.subprocess.run")
    def test_custom_socket(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        with patch.dict(os.environ, {"SESSIONIZER_TMUX_SOCKET": "/tmp/sock"}):
            is_server_active()
        assert mock_run.call_args[0][0][:3] == ["tmux", "-S", "/tmp/sock"]
