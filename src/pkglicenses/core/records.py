# records.py
# SPDX-License-Identifier: MIT
"""Data model shared by the locator, scorer, reducer, and report sinks."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any

__all__ = [
    "WordSet",
    "Template",
    "PackageInfo",
    "MatchResult",
    "License",
    "NO_MATCH",
    "format_license_label",
]

# Normalized token -> index of its first occurrence in the token stream.
WordSet = Mapping[str, int]


@dataclass(frozen=True, slots=True, eq=False)
class Template:
    """Reference license text reduced to its word set.

    Attributes:
        title (str): Display name, e.g. ``"MIT License"``.
        nickname (str): Optional short alias carried through for display.
        words (Mapping[str, int]): Read-only word set of the license body.
        name (str): Asset name the template was parsed from.
    """

    title: str
    nickname: str = ""
    words: WordSet = field(default_factory=dict)
    name: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.words, MappingProxyType):
            object.__setattr__(self, "words", MappingProxyType(dict(self.words)))


@dataclass(frozen=True, slots=True)
class PackageInfo:
    """One dependency as reported by a resolver.

    Attributes:
        import_path (str): Unique, ``/``-delimited package identifier.
        name (str): Display name of the package.
        source_root (str): Directory under which import paths resolve; the
            package directory is ``source_root/import_path``.
        dir (str): Package directory when the resolver knows it; derived
            from ``source_root`` otherwise.
        error (str): Resolution error, empty when the package resolved.
    """

    import_path: str
    name: str = ""
    source_root: str = ""
    dir: str = ""
    error: str = ""

    @property
    def package_dir(self) -> str:
        if self.dir:
            return self.dir
        if not self.source_root:
            return ""
        return str(Path(self.source_root, *self.import_path.split("/")))


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Best template for one license file.

    ``score`` lies in [0, 1]. ``extra_words`` are candidate tokens absent
    from the template, ordered by their first appearance in the candidate;
    ``missing_words`` are template tokens absent from the candidate, ordered
    by their first appearance in the template.
    """

    template: Template | None = None
    score: float = 0.0
    extra_words: tuple[str, ...] = ()
    missing_words: tuple[str, ...] = ()


NO_MATCH = MatchResult()


@dataclass(frozen=True, slots=True)
class License:
    """Report row for one package, or for a group of packages after grouping.

    Attributes:
        package (str): Import path, or the common prefix of a group.
        path (str): License file path, empty when none was found.
        match (MatchResult): Scoring outcome shared by every row pointing at
            the same license file.
        error (str): Resolution error for the package, if any.
    """

    package: str
    path: str = ""
    match: MatchResult = NO_MATCH
    error: str = ""

    @property
    def template(self) -> Template | None:
        return self.match.template

    @property
    def score(self) -> float:
        return self.match.score

    @property
    def title(self) -> str:
        return self.match.template.title if self.match.template else ""

    @property
    def nickname(self) -> str:
        return self.match.template.nickname if self.match.template else ""

    def with_package(self, package: str) -> License:
        return replace(self, package=package)

    def to_dict(self, *, include_words: bool = False) -> dict[str, Any]:
        """Return a JSON-friendly mapping of this row.

        Rows carrying a resolution error have no ``score`` key since the
        package was never scored.
        """
        data: dict[str, Any] = {
            "package": self.package,
            "license": self.title,
            "nickname": self.nickname,
            "path": self.path,
        }
        if self.error:
            data["error"] = self.error
        else:
            data["score"] = self.score
        if include_words:
            data["extra_words"] = list(self.match.extra_words)
            data["missing_words"] = list(self.match.missing_words)
        return data


def format_license_label(row: License, confidence: float = 0.9) -> str:
    """Render the license column of a report row.

    Matches at or above ``confidence`` read ``"MIT License (95%)"``, weaker
    ones ``"? (MIT License, 25%)"``, and rows without a template ``"?"``.
    """
    if row.template is None:
        return "?"
    percent = int(100 * row.score)
    if row.score >= confidence:
        return f"{row.template.title} ({percent:2d}%)"
    return f"? ({row.template.title}, {percent:2d}%)"
