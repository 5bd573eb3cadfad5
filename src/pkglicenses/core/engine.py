# engine.py
# SPDX-License-Identifier: MIT
"""Run the license engine over a dependency list.

Flow: the resolver lists packages, the locator picks a license file for
each, the scorer matches each distinct file once (see
:class:`~pkglicenses.core.scoring.MatchCache`), and the reducer optionally
groups rows sharing a file.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence

from .grouping import group_licenses
from .interfaces import DependencyResolver, MissingPackageError
from .locate import find_license
from .log import get_logger
from .records import License, PackageInfo, Template
from .scoring import MatchCache
from .templates import load_templates

log = get_logger(__name__)

__all__ = ["list_licenses", "resolve_packages", "build_report"]


def list_licenses(
    packages: Iterable[PackageInfo],
    templates: Sequence[Template],
    *,
    standard: Collection[str] = (),
    cache: MatchCache | None = None,
) -> list[License]:
    """Build one report row per non-standard package.

    Args:
        packages (Iterable[PackageInfo]): Packages in report order.
        templates (Sequence[Template]): Reference corpus.
        standard (Collection[str]): Import paths to leave out.
        cache (MatchCache | None): Match memo; a fresh one is used when
            omitted.

    Returns:
        list[License]: Rows in input order.

    Raises:
        DirectoryReadError: If a directory or license file cannot be read.
    """
    if cache is None:
        cache = MatchCache(templates)
    rows: list[License] = []
    for info in packages:
        if info.import_path in standard:
            continue
        if info.error:
            log.warning("Could not resolve %s: %s", info.import_path, info.error)
            rows.append(License(package=info.import_path, error=info.error))
            continue
        path = find_license(info.package_dir, info.import_path, info.source_root)
        if path is None:
            rows.append(License(package=info.import_path))
            continue
        rows.append(License(package=info.import_path, path=path, match=cache.match_file(path)))
    log.debug(
        "Scored %d license files for %d rows (%d cache hits)",
        len(cache),
        len(rows),
        cache.hits,
    )
    return rows


def resolve_packages(resolver: DependencyResolver, roots: Sequence[str]) -> list[PackageInfo]:
    """Collect the packages of every root, dropping duplicates.

    A root the resolver cannot find becomes an error entry instead of
    aborting the run; any other resolution failure propagates.
    """
    packages: list[PackageInfo] = []
    seen: set[str] = set()
    for root in roots:
        try:
            infos: Sequence[PackageInfo] = resolver.list_packages(root)
        except MissingPackageError as exc:
            infos = [PackageInfo(import_path=root, name=root, error=str(exc).strip())]
        for info in infos:
            if info.import_path in seen:
                continue
            seen.add(info.import_path)
            packages.append(info)
    return packages


def build_report(
    resolver: DependencyResolver,
    roots: Sequence[str],
    *,
    templates: Sequence[Template] | None = None,
    group: bool = True,
) -> list[License]:
    """Produce the license report for ``roots``.

    Args:
        resolver (DependencyResolver): Dependency source.
        roots (Sequence[str]): Root package identifiers.
        templates (Sequence[Template] | None): Corpus override; the bundled
            corpus is loaded when omitted.
        group (bool): Collapse rows sharing a license file.

    Returns:
        list[License]: Report rows.

    Raises:
        ResolutionError: If dependency enumeration fails.
        DirectoryReadError: If the filesystem cannot be read.
        GroupingConflictError: If grouping finds unrelated packages sharing
            a license file.
        CorpusLoadError: If the bundled corpus is malformed.
    """
    if templates is None:
        templates = load_templates()
    standard = resolver.standard_packages()
    packages = resolve_packages(resolver, roots)
    rows = list_licenses(packages, templates, standard=standard)
    if group:
        rows = group_licenses(rows)
    log.info("Reported %d rows for %d packages", len(rows), len(packages))
    return rows
