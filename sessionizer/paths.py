"""Centralized path management for sessionizer.

Everything sessionizer writes lives under ~/.sessionizer/ unless
$SESSIONIZER_HOME points elsewhere:
- config.yaml           - Tracked directories and session history
- debug/sessionizer.log - Command log (rotated at 10MB)
- debug/enabled         - If present, log at DEBUG level
"""

import logging
import os
import shlex
from pathlib import Path

LOG_NAME = "sessionizer.log"


def sessionizer_home() -> Path:
    """Return the sessionizer home directory (~/.sessionizer/)."""
    override = os.environ.get("SESSIONIZER_HOME")
    d = Path(override).expanduser() if override else Path.home() / ".sessionizer"
    d.mkdir(parents=True, exist_ok=True)
    return d


def default_config_path() -> Path:
    """Return the default configuration file path."""
    return sessionizer_home() / "config.yaml"


def debug_dir() -> Path:
    """Return the debug/logs directory (~/.sessionizer/debug/)."""
    d = sessionizer_home() / "debug"
    d.mkdir(parents=True, exist_ok=True)
    return d


def log_file() -> Path:
    return debug_dir() / LOG_NAME


def debug_enabled() -> bool:
    """Check if debug logging is enabled.

    Either $SESSIONIZER_DEBUG is set to something other than "0"/"false",
    or the ~/.sessionizer/debug/enabled marker file exists.
    """
    env = os.environ.get("SESSIONIZER_DEBUG", "").strip().lower()
    if env and env not in ("0", "false", "no"):
        return True
    try:
        return (debug_dir() / "enabled").exists()
    except OSError:
        return False


def set_debug(enabled: bool = True) -> None:
    """Enable or disable persistent debug logging."""
    marker = debug_dir() / "enabled"
    if enabled:
        marker.touch()
    elif marker.exists():
        marker.unlink()


def configure_logger(name: str, max_bytes: int = 10_000_000) -> logging.Logger:
    """Configure a logger that always writes to file with rotation.

    Args:
        name: Logger name (e.g., "sessionizer.tmux")
        max_bytes: Maximum log file size before rotation (default 10MB)

    Returns:
        Configured logger instance
    """
    from logging.handlers import RotatingFileHandler

    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    try:
        handler: logging.Handler = RotatingFileHandler(
            log_file(),
            maxBytes=max_bytes,
            backupCount=1,
        )
    except OSError:
        # Read-only home: keep running without a log file
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(handler)
    logger.propagate = False

    if debug_enabled():
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    return logger


_shell_log = configure_logger("sessionizer.shell")


def log_shell_command(cmd: list[str] | str, prefix: str = "shell", returncode: int | None = None) -> None:
    """Log a shell command to the central command log.

    Args:
        cmd: Command list or string to log
        prefix: Prefix for the log entry (e.g., "tmux", "fzf")
        returncode: If provided, logs as completion with return code
    """
    cmd_str = shlex.join(cmd) if isinstance(cmd, list) else cmd
    if returncode is None:
        _shell_log.info("%s: %s", prefix, cmd_str)
    elif returncode == 0:
        _shell_log.debug("%s done: %s", prefix, cmd_str)
    else:
        _shell_log.warning("%s failed (rc=%s): %s", prefix, returncode, cmd_str)
