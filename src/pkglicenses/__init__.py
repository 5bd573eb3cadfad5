# __init__.py
# SPDX-License-Identifier: MIT
"""
Top-level package exports for :mod:`pkglicenses`.

pkglicenses lists the dependencies of a package, finds the license file of
each one and names the well-known license it is closest to. A typical
library call resolves dependencies, builds the rows and renders them::

    >>> from pkglicenses import GoListResolver, build_report, write_report
    >>> rows = build_report(GoListResolver(), ["github.com/example/cmd/tool"])
    >>> write_report(rows, "text")

Lower level pieces (:func:`normalize`, :func:`find_license`,
:func:`match_templates`, :func:`group_licenses`) can be used on their own.
"""

from __future__ import annotations

try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("pkglicenses")
except Exception:  # PackageNotFoundError when running from a source tree
    __version__ = "0.0.0+unknown"

from .core.config import LicensesConfig, load_config_from_path
from .core.engine import build_report, list_licenses, resolve_packages
from .core.grouping import GroupingConflictError, group_licenses, longest_common_prefix
from .core.interfaces import DependencyResolver, MissingPackageError, ResolutionError
from .core.locate import DirectoryReadError, find_license, score_license_name
from .core.log import configure_logging, get_logger
from .core.normalize import normalize, strip_copyright
from .core.records import License, MatchResult, PackageInfo, Template, format_license_label
from .core.scoring import MatchCache, match_templates, match_words
from .core.templates import CorpusLoadError, load_templates, parse_template
from .sinks.report import write_report
from .sources.golist import GoListResolver
from .sources.manifest import ManifestResolver

__all__ = [
    "__version__",
    "LicensesConfig",
    "load_config_from_path",
    "build_report",
    "list_licenses",
    "resolve_packages",
    "GroupingConflictError",
    "group_licenses",
    "longest_common_prefix",
    "DependencyResolver",
    "MissingPackageError",
    "ResolutionError",
    "DirectoryReadError",
    "find_license",
    "score_license_name",
    "configure_logging",
    "get_logger",
    "normalize",
    "strip_copyright",
    "License",
    "MatchResult",
    "PackageInfo",
    "Template",
    "format_license_label",
    "MatchCache",
    "match_templates",
    "match_words",
    "CorpusLoadError",
    "load_templates",
    "parse_template",
    "write_report",
    "GoListResolver",
    "ManifestResolver",
]
