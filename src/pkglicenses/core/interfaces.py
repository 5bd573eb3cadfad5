# interfaces.py
# SPDX-License-Identifier: MIT
"""Contracts for the dependency resolvers feeding the license engine."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .records import PackageInfo

__all__ = ["ResolutionError", "MissingPackageError", "DependencyResolver"]


class ResolutionError(RuntimeError):
    """Dependency enumeration failed; the run cannot produce a report."""


class MissingPackageError(ResolutionError):
    """A requested package does not exist or has nothing to build.

    Unlike its parent, this is a per-package condition: the engine reports
    the package as an error row and carries on.
    """

    def __init__(self, package: str, message: str):
        super().__init__(message)
        self.package = package


@runtime_checkable
class DependencyResolver(Protocol):
    """Source of the packages to report on.

    Implementations return, for one root package, the sorted transitive
    dependencies followed by the root itself, and the set of import paths
    that belong to the language's base distribution.
    """

    def list_packages(self, root: str) -> Sequence[PackageInfo]:
        """Return the dependency closure of ``root``, root last.

        Raises:
            MissingPackageError: If ``root`` itself cannot be found.
            ResolutionError: If enumeration fails for any other reason.
        """
        ...

    def standard_packages(self) -> set[str]:
        """Return the import paths to exclude from reporting."""
        ...
