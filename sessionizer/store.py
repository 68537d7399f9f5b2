"""YAML read/write for the sessionizer configuration document.

The document holds the tracked directory roots and the session history::

    directories:
      - {id: dir-1a2b3c4, path: /home/me/src, mindepth: 1, maxdepth: 1, grep: null}
    sessions:
      - /home/me/src/a
      - /home/me/src/b

The last entry of ``sessions`` is the most recently activated session.
"""

import errno
import fcntl
import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Optional

import yaml

from sessionizer.errors import ConfigError
from sessionizer.paths import configure_logger, default_config_path

_log = configure_logger("sessionizer.store")


def resolve_config_path(override: Optional[str] = None) -> Path:
    """Return the config path from an override (flag/env) or the default."""
    if override:
        return Path(override).expanduser()
    return default_config_path()


def new_document() -> dict:
    return {"directories": [], "sessions": []}


def load(path: Path) -> dict:
    """Load and validate the configuration document at *path*."""
    if not path.exists():
        raise ConfigError(
            f"No configuration found at {path}. "
            "Run 'sessionizer config init' to create one."
        )
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed configuration {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e

    if data is None:
        data = new_document()
    if not isinstance(data, dict):
        raise ConfigError(f"Malformed configuration {path}: expected a mapping")
    _validate(data, path)
    return data


def _validate(data: dict, path: Path) -> None:
    """Backfill missing keys and enforce the no-duplicate session invariant."""
    for key in ("directories", "sessions"):
        if data.get(key) is None:
            data[key] = []
        elif not isinstance(data[key], list):
            raise ConfigError(f"Malformed configuration {path}: '{key}' must be a list")

    sessions = [str(s) for s in data["sessions"]]
    # Keep the last occurrence so recency order survives
    deduped = list(dict.fromkeys(reversed(sessions)))
    deduped.reverse()
    if len(deduped) != len(sessions):
        _log.warning("Dropped %d duplicate session entries from %s",
                     len(sessions) - len(deduped), path)
    data["sessions"] = deduped


def save(data: dict, path: Path) -> None:
    """Write the document to *path* atomically (temp file + rename)."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                          allow_unicode=True)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
    except OSError as e:
        raise ConfigError(f"Could not write {path}: {e}") from e
    _log.debug("Saved configuration to %s", path)


def init_config(path: Path, force: bool = False) -> dict:
    """Create a fresh configuration document.

    Refuses to overwrite an existing file unless *force* is set.
    """
    if path.exists() and not force:
        raise ConfigError(
            f"Configuration already exists at {path}. Use --force to overwrite it."
        )
    data = new_document()
    save(data, path)
    _log.info("Initialized configuration at %s", path)
    return data


# ---------------------------------------------------------------------------
# Advisory file locking for read-modify-write operations
# ---------------------------------------------------------------------------

LOCK_TIMEOUT_SECONDS = 2.0


class StoreLockTimeout(ConfigError):
    """Raised when the config lock cannot be acquired within the timeout."""


def _lock_path(path: Path) -> Path:
    return path.with_name(path.name + ".lock")


@contextmanager
def _lock(path: Path, timeout: float = LOCK_TIMEOUT_SECONDS):
    """Acquire an exclusive advisory lock on <config>.lock.

    Yields the open lock file. The lock is released when the context
    manager exits (even on exception).
    """
    lock_path = _lock_path(path)
    deadline = time.monotonic() + timeout
    try:
        fd = open(lock_path, "w")
    except OSError as e:
        raise ConfigError(f"Could not open lock file {lock_path}: {e}") from e
    try:
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except OSError as e:
                if e.errno not in (errno.EACCES, errno.EAGAIN):
                    raise
                if time.monotonic() >= deadline:
                    fd.close()
                    raise StoreLockTimeout(
                        f"Could not acquire lock on {lock_path} within "
                        f"{timeout}s. Another sessionizer process may be writing "
                        f"the configuration."
                    ) from None
                time.sleep(0.05)
        yield fd
    finally:
        if not fd.closed:
            try:
                fcntl.flock(fd, fcntl.LOCK_UN)
            except OSError:
                pass
            fd.close()


def locked_update(
    path: Path,
    fn: Callable[[dict], bool | None],
    timeout: float = LOCK_TIMEOUT_SECONDS,
) -> dict:
    """Atomic read-modify-write of the configuration document.

    Acquires the lock, loads fresh state from disk, calls ``fn(data)`` to
    apply mutations in place, saves, and releases the lock.  If ``fn``
    returns ``False`` the document is left untouched on disk; if it raises,
    nothing is saved.  Returns the (possibly updated) data dict.
    """
    with _lock(path, timeout):
        data = load(path)
        if fn(data) is not False:
            save(data, path)
    return data
