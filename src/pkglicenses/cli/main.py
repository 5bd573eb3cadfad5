# main.py
# SPDX-License-Identifier: MIT

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional, Sequence

from ..core.config import REPORT_FORMATS, RESOLVER_KINDS, LicensesConfig, load_config_from_path
from ..core.engine import build_report
from ..core.interfaces import DependencyResolver
from ..sinks.report import write_report
from ..sources.golist import GoListResolver
from ..sources.manifest import ManifestResolver

DESCRIPTION = """\
List the dependencies of the given packages, excluding standard library
packages, and print their licenses. Licenses are detected by looking for
files named like LICENSE, COPYING, COPYRIGHT and other variants in the
package directory, and its parent directories until one is found. File
contents are matched against a set of well-known licenses and the best match
is displayed along with its score.

With -a, all individual packages are displayed instead of grouping them by
license files.
"""


def _build_parser() -> argparse.ArgumentParser:
    """Build the pkglicenses argument parser.

    Every option except ``--config`` defaults to None so that only flags
    given on the command line override values from the config file.
    """
    parser = argparse.ArgumentParser(
        prog="pkglicenses",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("packages", nargs="*", metavar="IMPORTPATH", help="Root packages to report on.")
    parser.add_argument("-c", "--config", help="Path to config file (TOML or JSON).")
    parser.add_argument(
        "-a",
        "--all",
        dest="all_packages",
        action="store_true",
        default=None,
        help="Display all individual packages instead of grouping them by license file.",
    )
    parser.add_argument(
        "--words",
        action="store_true",
        default=None,
        help="Show words added to (+) or missing from (-) the best matching license.",
    )
    parser.add_argument("--format", choices=REPORT_FORMATS, help="Report format (default: text).")
    parser.add_argument("-o", "--output", help="Write the report to this file instead of stdout.")
    parser.add_argument(
        "--confidence",
        type=float,
        help="Score at or above which a match is displayed as certain (default: 0.9).",
    )
    parser.add_argument("--resolver", choices=RESOLVER_KINDS, help="Where dependencies come from (default: go).")
    parser.add_argument("--manifest", help="Package manifest (JSON or JSONL) for the manifest resolver.")
    parser.add_argument("--gopath", help="GOPATH passed to the Go toolchain.")
    parser.add_argument("--go", dest="go_binary", help="Go executable (default: go).")
    parser.add_argument("--dry-run", action="store_true", help="Validate and print config, then exit.")
    parser.add_argument(
        "--log-level",
        help="Logging level (e.g., DEBUG, INFO, WARNING).",
    )
    return parser


def _apply_overrides(cfg: LicensesConfig, args: argparse.Namespace) -> None:
    """Apply command line flags on top of file or default settings."""
    if args.manifest is not None:
        cfg.resolver.manifest_path = args.manifest
        if args.resolver is None:
            cfg.resolver.kind = "manifest"
    if args.resolver is not None:
        cfg.resolver.kind = args.resolver
    if args.gopath is not None:
        cfg.resolver.gopath = args.gopath
    if args.go_binary is not None:
        cfg.resolver.go_binary = args.go_binary
    if args.all_packages:
        cfg.report.group = False
    if args.words:
        cfg.report.show_words = True
    if args.format is not None:
        cfg.report.format = args.format
    if args.output is not None:
        cfg.report.output = args.output
    if args.confidence is not None:
        cfg.report.confidence = args.confidence
    if args.log_level is not None:
        cfg.logging.level = args.log_level


def _make_resolver(cfg: LicensesConfig) -> DependencyResolver:
    if cfg.resolver.kind == "manifest":
        return ManifestResolver.from_path(cfg.resolver.manifest_path)
    return GoListResolver(gopath=cfg.resolver.gopath, go_binary=cfg.resolver.go_binary)


def _dispatch(args: argparse.Namespace) -> int:
    cfg = load_config_from_path(args.config) if args.config else LicensesConfig()
    _apply_overrides(cfg, args)
    cfg.validate()
    cfg.logging.apply()

    if args.dry_run:
        print(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))
        return 0

    resolver = _make_resolver(cfg)
    roots = list(args.packages)
    if not roots:
        if not isinstance(resolver, ManifestResolver):
            raise ValueError("expect at least one package argument, got 0")
        # Every manifest package, each one after its dependencies.
        roots = resolver.import_paths

    rows = build_report(resolver, roots, group=cfg.report.group)
    write_report(
        rows,
        cfg.report.format,
        cfg.report.output,
        confidence=cfg.report.confidence,
        include_words=cfg.report.show_words,
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the pkglicenses command-line interface.

    Args:
        argv (Sequence[str] | None): Optional list of argument strings to
            parse instead of ``sys.argv[1:]``. Primarily useful for tests.

    Returns:
        int: Process exit code, 0 on success and 1 on any failure.
    """
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        return _dispatch(args)
    except Exception as exc:  # noqa: BLE001
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
