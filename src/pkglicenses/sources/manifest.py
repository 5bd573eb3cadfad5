# manifest.py
# SPDX-License-Identifier: MIT

"""Dependency resolver reading a static package manifest.

The manifest is either a JSON document::

    {"packages": [{"import_path": "a/b", "dir": "...", "deps": ["c/d"]}],
     "standard": ["fmt"]}

(a bare list of package objects is accepted too), or a JSONL file with one
package object per line. Relative ``dir`` and ``source_root`` values are
resolved against the manifest's directory.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..core.interfaces import MissingPackageError, ResolutionError
from ..core.log import get_logger
from ..core.records import PackageInfo

log = get_logger(__name__)

__all__ = ["ManifestEntry", "ManifestResolver", "load_manifest"]


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    info: PackageInfo
    deps: tuple[str, ...] = ()


def _resolve_dir(base: Path, value: Any) -> str:
    if not value:
        return ""
    path = Path(str(value))
    if not path.is_absolute():
        path = base / path
    return str(path)


def _entry_from_mapping(obj: Mapping[str, Any], base: Path, where: str) -> ManifestEntry:
    import_path = obj.get("import_path")
    if not isinstance(import_path, str) or not import_path:
        raise ResolutionError(f"{where}: package entry without an import_path")
    deps = obj.get("deps") or ()
    if isinstance(deps, str) or not isinstance(deps, Iterable):
        raise ResolutionError(f"{where}: deps of {import_path} must be a list")
    info = PackageInfo(
        import_path=import_path,
        name=str(obj.get("name") or ""),
        source_root=_resolve_dir(base, obj.get("source_root")),
        dir=_resolve_dir(base, obj.get("dir")),
        error=str(obj.get("error") or ""),
    )
    return ManifestEntry(info=info, deps=tuple(str(d) for d in deps))


def _iter_jsonl(text: str, path: Path) -> Iterable[tuple[Any, str]]:
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        where = f"{path}:{lineno}"
        try:
            yield json.loads(line), where
        except json.JSONDecodeError as exc:
            raise ResolutionError(f"{where}: invalid JSON: {exc}") from exc


def load_manifest(path: str | Path) -> tuple[list[ManifestEntry], set[str]]:
    """Read a manifest file.

    Returns:
        tuple[list[ManifestEntry], set[str]]: Package entries in file order
        and the standard import paths.

    Raises:
        ResolutionError: If the file cannot be read or is malformed.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ResolutionError(f"could not read manifest {p}: {exc}") from exc
    base = p.parent

    standard: set[str] = set()
    raw: list[tuple[Any, str]]
    if p.suffix.lower() == ".jsonl":
        raw = list(_iter_jsonl(text, p))
    else:
        try:
            doc = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ResolutionError(f"{p}: invalid JSON: {exc}") from exc
        if isinstance(doc, Mapping):
            standard = {str(s) for s in doc.get("standard") or ()}
            doc = doc.get("packages") or []
        if not isinstance(doc, list):
            raise ResolutionError(f"{p}: expected a list of packages")
        raw = [(obj, f"{p}[{i}]") for i, obj in enumerate(doc)]

    entries: list[ManifestEntry] = []
    for obj, where in raw:
        if not isinstance(obj, Mapping):
            raise ResolutionError(f"{where}: package entry must be an object")
        entries.append(_entry_from_mapping(obj, base, where))
    log.debug("Loaded %d packages from manifest %s", len(entries), p)
    return entries, standard


class ManifestResolver:
    """Resolve packages from a manifest instead of a build tool.

    Args:
        entries (Sequence[ManifestEntry]): Known packages; later duplicates
            of an import path are ignored.
        standard (Iterable[str]): Import paths excluded from reports.
    """

    def __init__(self, entries: Sequence[ManifestEntry], standard: Iterable[str] = ()) -> None:
        self._entries: dict[str, ManifestEntry] = {}
        self._standard = set(standard)
        for entry in entries:
            self._entries.setdefault(entry.info.import_path, entry)

    @classmethod
    def from_path(cls, path: str | Path) -> ManifestResolver:
        entries, standard = load_manifest(path)
        return cls(entries, standard)

    @property
    def import_paths(self) -> list[str]:
        """Every known import path, in manifest order."""
        return list(self._entries)

    def standard_packages(self) -> set[str]:
        return set(self._standard)

    def list_packages(self, root: str) -> list[PackageInfo]:
        """Return the ``deps`` closure of ``root``: sorted dependencies, then the root.

        A dependency missing from the manifest is returned as an error entry.

        Raises:
            MissingPackageError: If ``root`` is not in the manifest.
        """
        entries = self._entries
        if root not in entries:
            raise MissingPackageError(root, f"cannot find package {root!r} in manifest")
        seen = {root}
        stack = list(entries[root].deps)
        while stack:
            name = stack.pop()
            if name in seen:
                continue
            seen.add(name)
            entry = entries.get(name)
            if entry is not None:
                stack.extend(entry.deps)
        seen.discard(root)
        packages = [self._info(name) for name in sorted(seen)]
        packages.append(entries[root].info)
        return packages

    def _info(self, import_path: str) -> PackageInfo:
        entry = self._entries.get(import_path)
        if entry is None:
            return PackageInfo(
                import_path=import_path,
                name=import_path,
                error=f"cannot find package {import_path!r} in manifest",
            )
        return entry.info
