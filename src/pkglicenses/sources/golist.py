# golist.py
# SPDX-License-Identifier: MIT
"""Dependency resolver backed by the ``go list`` command.

Three invocations are used:

* ``go list -f '{{range .Deps}}{{.}}|{{end}}' PKG`` for the transitive
  dependencies of a root package,
* ``go list std`` for the standard library packages,
* ``go list -e -json PKG...`` for the directory layout of every package.
"""

from __future__ import annotations

import json
import os
import subprocess
from collections.abc import Mapping, Sequence
from typing import Any

from ..core.interfaces import MissingPackageError, ResolutionError
from ..core.log import get_logger
from ..core.records import PackageInfo

log = get_logger(__name__)

__all__ = ["GoListResolver", "DEPS_TEMPLATE", "MISSING_MARKERS", "decode_json_stream"]

DEPS_TEMPLATE = "{{range .Deps}}{{.}}|{{end}}"

# Substrings of ``go list`` output meaning the package itself is absent.
MISSING_MARKERS = (
    "cannot find package",
    "no buildable Go source files",
    "no Go files in",
)


def decode_json_stream(text: str) -> list[Any]:
    """Decode a stream of concatenated JSON values.

    ``go list -json`` prints one object per package back to back, without
    separators or an enclosing array.

    Raises:
        ValueError: If the stream holds anything but JSON values.
    """
    decoder = json.JSONDecoder()
    values: list[Any] = []
    pos = 0
    end = len(text)
    while True:
        while pos < end and text[pos].isspace():
            pos += 1
        if pos >= end:
            return values
        value, pos = decoder.raw_decode(text, pos)
        values.append(value)


class GoListResolver:
    """Resolve Go packages by shelling out to the Go toolchain.

    Args:
        gopath (str | None): Replaces ``GOPATH`` in the environment of every
            invocation when set.
        go_binary (str): Executable to run.
    """

    def __init__(self, *, gopath: str | None = None, go_binary: str = "go") -> None:
        self.gopath = gopath
        self.go_binary = go_binary
        self._standard: set[str] | None = None

    def _env(self) -> Mapping[str, str] | None:
        if not self.gopath:
            return None
        env = {key: value for key, value in os.environ.items() if key != "GOPATH"}
        env["GOPATH"] = self.gopath
        return env

    def _run(self, args: Sequence[str]) -> tuple[int, str]:
        """Run the Go tool and return its exit status and combined output."""
        cmd = [self.go_binary, *args]
        log.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                env=self._env(),
                check=False,
            )
        except OSError as exc:
            raise ResolutionError(f"could not run {self.go_binary}: {exc}") from exc
        return proc.returncode, proc.stdout or ""

    def list_dependencies(self, root: str) -> list[str]:
        """Return the sorted transitive dependencies of ``root``.

        Raises:
            MissingPackageError: If the Go tool cannot find ``root``.
            ResolutionError: If the Go tool fails for any other reason.
        """
        code, out = self._run(["list", "-f", DEPS_TEMPLATE, root])
        if code != 0:
            if any(marker in out for marker in MISSING_MARKERS):
                raise MissingPackageError(root, out.strip())
            raise ResolutionError(
                f"could not list {root} dependencies: 'go list -f {DEPS_TEMPLATE} {root}' failed with:\n{out}"
            )
        deps = {part.strip() for part in out.split("|")}
        deps.discard("")
        return sorted(deps)

    def standard_packages(self) -> set[str]:
        """Return the standard library import paths, computed once."""
        if self._standard is None:
            code, out = self._run(["list", "std"])
            if code != 0:
                raise ResolutionError(f"could not list standard packages: go list std failed with:\n{out}")
            self._standard = {line.strip() for line in out.splitlines() if line.strip()}
            log.debug("Go toolchain reports %d standard packages", len(self._standard))
        return set(self._standard)

    def package_info(self, import_paths: Sequence[str]) -> list[PackageInfo]:
        """Return the layout of each package, in the order requested.

        Raises:
            ResolutionError: If the Go tool fails or its answers do not line
                up with ``import_paths``.
        """
        if not import_paths:
            return []
        args = ["list", "-e", "-json", *import_paths]
        code, out = self._run(args)
        if code != 0:
            raise ResolutionError(f"go {' '.join(args)} failed with:\n{out}")
        try:
            values = decode_json_stream(out)
        except ValueError as exc:
            raise ResolutionError(f"could not decode go list output: {exc}") from exc
        if len(values) < len(import_paths):
            missing = import_paths[len(values)]
            raise ResolutionError(f"could not retrieve package information for {missing}")
        infos: list[PackageInfo] = []
        for requested, value in zip(import_paths, values):
            if not isinstance(value, Mapping):
                raise ResolutionError(f"could not retrieve package information for {requested}")
            info = _package_from_json(value)
            if info.import_path != requested:
                raise ResolutionError(
                    f"package information mismatch: asked for {requested}, got {info.import_path}"
                )
            infos.append(info)
        return infos

    def list_packages(self, root: str) -> list[PackageInfo]:
        deps = self.list_dependencies(root)
        log.debug("%s has %d dependencies", root, len(deps))
        return self.package_info([*deps, root])


def _package_from_json(value: Mapping[str, Any]) -> PackageInfo:
    root = value.get("Root") or ""
    error = value.get("Error") or {}
    message = error.get("Err", "") if isinstance(error, Mapping) else str(error)
    return PackageInfo(
        import_path=value.get("ImportPath") or "",
        name=value.get("Name") or "",
        source_root=os.path.join(root, "src") if root else "",
        dir=value.get("Dir") or "",
        error=message.strip(),
    )
