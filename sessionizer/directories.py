"""Directory discovery: turn tracked roots into session candidates.

A root is a directory plus depth bounds and an optional regex filter.
:func:`evaluate` walks every root and returns the sorted, deduplicated
list of matching directories, which feeds the fzf picker.
"""

import hashlib
import os
import re
from dataclasses import dataclass, asdict
from typing import Optional

from sessionizer.errors import ConfigError, InvalidPattern, InvalidRoot
from sessionizer.paths import configure_logger

_log = configure_logger("sessionizer.directories")

DEFAULT_DEPTH = 1


@dataclass
class DirectoryRoot:
    id: str
    path: str
    mindepth: int = DEFAULT_DEPTH
    maxdepth: int = DEFAULT_DEPTH
    grep: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "DirectoryRoot":
        path = normalize_path(str(d["path"]))
        return cls(
            id=d.get("id") or generate_root_id(path),
            path=path,
            mindepth=_depth(d.get("mindepth")),
            maxdepth=_depth(d.get("maxdepth")),
            grep=None if d.get("grep") is None else str(d["grep"]),
        )

    def to_dict(self) -> dict:
        return asdict(self)


def _depth(value) -> int:
    return DEFAULT_DEPTH if value is None else int(value)


def normalize_path(path: str) -> str:
    """Expand ``~`` and make *path* absolute without resolving symlinks."""
    return os.path.abspath(os.path.expanduser(path))


def generate_root_id(path: str, existing_ids: set[str] | None = None) -> str:
    """Generate a root ID from a hash of its path.

    Uses sha256(path) truncated to 7 hex chars, producing IDs like
    'dir-a3f2b1c'. If the ID collides with an existing one, extends
    the hash until unique.
    """
    digest = hashlib.sha256(path.encode()).hexdigest()
    min_len = 7
    for length in range(min_len, len(digest) + 1):
        root_id = f"dir-{digest[:length]}"
        if existing_ids is None or root_id not in existing_ids:
            return root_id
    for i in range(2, 1000):
        root_id = f"dir-{digest[:min_len]}-{i}"
        if existing_ids is None or root_id not in existing_ids:
            return root_id
    raise RuntimeError("Could not generate unique root ID")


def load_roots(data: dict) -> list[DirectoryRoot]:
    """Read the roots out of a configuration document."""
    try:
        return [DirectoryRoot.from_dict(d) for d in data.get("directories") or []]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Malformed directory entry: {e!r}") from e


def store_roots(data: dict, roots: list[DirectoryRoot]) -> None:
    """Write *roots* back into a configuration document."""
    data["directories"] = [r.to_dict() for r in roots]


def compile_pattern(grep: Optional[str]) -> re.Pattern:
    """Compile a root filter; no filter matches every path."""
    if grep is None:
        return re.compile("")
    try:
        return re.compile(grep)
    except re.error as e:
        raise InvalidPattern(f"Invalid pattern {grep!r}: {e}") from e


def _check_depths(mindepth: int, maxdepth: int) -> None:
    if mindepth < 0 or maxdepth < 0:
        raise InvalidRoot(f"Depths must be non-negative (got {mindepth}..{maxdepth})")
    if maxdepth < mindepth:
        raise InvalidRoot(f"maxdepth {maxdepth} is smaller than mindepth {mindepth}")


def _walk(path: str, depth: int, root: DirectoryRoot, pattern: re.Pattern,
          found: set[str]) -> None:
    """Collect matching directories under *path*, which sits at *depth*."""
    if root.mindepth <= depth and pattern.search(path):
        found.add(path)
    if depth >= root.maxdepth:
        return
    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as e:
        _log.debug("Skipping %s: %s", path, e)
        return
    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            _log.debug("Skipping %s: %s", entry.path, e)
            continue
        if is_dir:
            _walk(entry.path, depth + 1, root, pattern, found)


def evaluate(roots: list[DirectoryRoot]) -> list[str]:
    """Return every directory matched by *roots*, deduplicated and sorted.

    Depth 0 is the root itself.  Unreadable subtrees and broken entries
    are skipped, never fatal.  Symlinks below the root are not followed
    and not kept.
    """
    found: set[str] = set()
    for root in roots:
        pattern = compile_pattern(root.grep)
        path = normalize_path(root.path)
        if not os.path.isdir(path):
            _log.debug("Root %s is not a directory, skipping", path)
            continue
        _walk(path, 0, root, pattern, found)
    _log.debug("Evaluated %d roots into %d directories", len(roots), len(found))
    return sorted(found)


def find_root(roots: list[DirectoryRoot], key: str) -> Optional[DirectoryRoot]:
    """Find a root by id or path."""
    path = normalize_path(key)
    for root in roots:
        if root.id == key or root.path == path:
            return root
    return None


def add_root(
    roots: list[DirectoryRoot],
    path: str,
    mindepth: Optional[int] = None,
    maxdepth: Optional[int] = None,
    grep: Optional[str] = None,
) -> list[DirectoryRoot]:
    """Insert or update the root for *path*.

    Fields left as ``None`` keep the existing root's value, or default to
    depth 1 and no filter for a new root.  An existing root keeps its id;
    the updated root moves to the end of the list.
    """
    path = normalize_path(path)
    existing = next((r for r in roots if r.path == path), None)
    if existing is not None:
        root = DirectoryRoot(
            id=existing.id,
            path=path,
            mindepth=existing.mindepth if mindepth is None else mindepth,
            maxdepth=existing.maxdepth if maxdepth is None else maxdepth,
            grep=existing.grep if grep is None else grep,
        )
    else:
        root = DirectoryRoot(
            id=generate_root_id(path, {r.id for r in roots}),
            path=path,
            mindepth=DEFAULT_DEPTH if mindepth is None else mindepth,
            maxdepth=DEFAULT_DEPTH if maxdepth is None else maxdepth,
            grep=grep,
        )
    _check_depths(root.mindepth, root.maxdepth)
    compile_pattern(root.grep)
    _log.info("Tracking %s (depth %d..%d, grep=%r)",
              root.path, root.mindepth, root.maxdepth, root.grep)
    return [r for r in roots if r.path != path] + [root]


def remove_root(roots: list[DirectoryRoot], key: str) -> list[DirectoryRoot]:
    """Drop every root whose id or path equals *key*. Missing keys are a no-op."""
    path = normalize_path(key)
    return [r for r in roots if r.id != key and r.path != path]
