# locate.py
# SPDX-License-Identifier: MIT
"""Find the file most likely holding a package's license.

The search starts in the package directory and climbs the ancestors of its
import path. The first directory holding any license-like file wins, even
if a farther ancestor has a better named one: a package's own license,
however weakly named, overrides the license of an enclosing project.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterator
from pathlib import Path

from .log import get_logger

log = get_logger(__name__)

__all__ = [
    "DirectoryReadError",
    "LICENSE_NAME_RE",
    "score_license_name",
    "iter_search_dirs",
    "best_license_file",
    "find_license",
]

# Alternatives are tried in order, each group maps to one entry of _NAME_SCORES.
LICENSE_NAME_RE = re.compile(
    r"((?:un)?licen[sc]e)"
    r"|((?:un)?licen[sc]e\.(?:md|markdown|txt))"
    r"|(copy(?:ing|right)(?:\.[^.]+)?)"
    r"|(licen[sc]e[-._0-9]*(?:\.[^.]+)?)",
    re.IGNORECASE,
)
_NAME_SCORES = (1.0, 0.9, 0.8, 0.7)


class DirectoryReadError(RuntimeError):
    """Raised when a directory (or a located license file) cannot be read."""

    def __init__(self, path: str | os.PathLike[str], cause: OSError):
        super().__init__(f"cannot read {os.fspath(path)}: {cause}")
        self.path = os.fspath(path)
        self.cause = cause


def score_license_name(name: str) -> float:
    """Weight how likely a file name designates a license file.

    Returns:
        float: 1.0 for ``LICENSE``/``LICENCE``, 0.9 with a ``.md``,
        ``.markdown`` or ``.txt`` extension, 0.8 for ``COPYING`` or
        ``COPYRIGHT`` with at most one extension, 0.7 for a versioned
        ``LICENSE`` name, and 0.0 for anything else.
    """
    m = LICENSE_NAME_RE.fullmatch(name)
    if m is None:
        return 0.0
    return _NAME_SCORES[m.lastindex - 1]


def iter_search_dirs(package_dir: str, import_path: str, source_root: str) -> Iterator[Path]:
    """Yield the package directory, then each import path ancestor under ``source_root``.

    The walk is a plain string walk over ``/``-separated import path
    segments; it stops below ``source_root`` itself.
    """
    parts = [part for part in import_path.split("/") if part]
    if package_dir:
        yield Path(package_dir)
    elif source_root and parts:
        yield Path(source_root, *parts)
    if not source_root:
        return
    for depth in range(len(parts) - 1, 0, -1):
        yield Path(source_root, *parts[:depth])


def best_license_file(directory: Path) -> Path | None:
    """Return the best scoring regular file of ``directory``, if any.

    Entries are visited by name and ties keep the first one, so the outcome
    does not depend on directory listing order. Symlinks are not regular
    files and are skipped.

    Raises:
        DirectoryReadError: If ``directory`` cannot be listed.
    """
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        raise DirectoryReadError(directory, exc) from exc
    best_score = 0.0
    best_name = ""
    for entry in entries:
        if not entry.is_file(follow_symlinks=False):
            continue
        score = score_license_name(entry.name)
        if score > best_score:
            best_score = score
            best_name = entry.name
    if not best_name:
        return None
    return directory / best_name


def find_license(package_dir: str, import_path: str, source_root: str) -> str | None:
    """Locate the license file of one package.

    Args:
        package_dir (str): Directory of the package itself.
        import_path (str): ``/``-separated import path of the package.
        source_root (str): Directory under which import paths resolve.

    Returns:
        str | None: Absolute path of the nearest license-like file, or None
        when no directory up to the top of the import path holds one.

    Raises:
        DirectoryReadError: If a directory on the way cannot be read.
    """
    for directory in iter_search_dirs(package_dir, import_path, source_root):
        found = best_license_file(directory)
        if found is not None:
            log.debug("License file for %s: %s", import_path, found)
            return os.path.abspath(found)
    log.debug("No license file found for %s", import_path)
    return None
