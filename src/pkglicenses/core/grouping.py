# grouping.py
# SPDX-License-Identifier: MIT
"""Collapse report rows that point at the same license file.

Rows sharing a file are replaced by a single row labelled with the deepest
common import path prefix of the group, e.g. ``a/x``, ``a/y`` and ``a/z``
become ``a``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .log import get_logger
from .records import License

log = get_logger(__name__)

__all__ = ["GroupingConflictError", "longest_common_prefix", "group_licenses"]


class GroupingConflictError(RuntimeError):
    """Raised when packages share a license file but no import path prefix."""

    def __init__(self, path: str, packages: Sequence[str]):
        listed = ", ".join(packages)
        super().__init__(
            f"packages share the same license but not common prefix: {path} ({listed})"
        )
        self.path = path
        self.packages = tuple(packages)


class _PathTrie:
    """Prefix tree over ``/``-separated segments, stored as parallel lists.

    Node 0 is the root; ``children[i]`` maps a segment to a node index.
    """

    def __init__(self) -> None:
        self.names: list[str] = [""]
        self.children: list[dict[str, int]] = [{}]

    def add(self, path: str) -> None:
        node = 0
        for part in path.split("/"):
            child = self.children[node].get(part)
            if child is None:
                child = len(self.names)
                self.names.append(part)
                self.children.append({})
                self.children[node][part] = child
            node = child

    def common_prefix(self) -> str:
        prefix: list[str] = []
        node = 0
        while len(self.children[node]) == 1:
            node = next(iter(self.children[node].values()))
            prefix.append(self.names[node])
        return "/".join(prefix)


def longest_common_prefix(paths: Iterable[str]) -> str:
    """Return the longest common prefix of import paths, segment-wise."""
    trie = _PathTrie()
    for path in paths:
        trie.add(path)
    return trie.common_prefix()


def group_licenses(rows: Sequence[License]) -> list[License]:
    """Group rows by license file path.

    Rows without a path (no license found, or a resolution error) pass
    through unchanged. Output keeps the order in which each group or
    single row first appears in ``rows``; a group keeps the match of its
    first row.

    Raises:
        GroupingConflictError: If rows share a file path but their import
            paths have no common prefix.
    """
    by_path: dict[str, list[License]] = {}
    for row in rows:
        if row.path:
            by_path.setdefault(row.path, []).append(row)

    merged: dict[str, License] = {}
    for path, group in by_path.items():
        if len(group) == 1:
            merged[path] = group[0]
            continue
        packages = [row.package for row in group]
        prefix = longest_common_prefix(packages)
        if not prefix:
            raise GroupingConflictError(path, packages)
        log.debug("Grouped %d packages under %s (%s)", len(group), prefix, path)
        merged[path] = group[0].with_package(prefix)

    kept: list[License] = []
    for row in rows:
        if not row.path:
            kept.append(row)
            continue
        representative = merged.pop(row.path, None)
        if representative is not None:
            kept.append(representative)
    return kept
