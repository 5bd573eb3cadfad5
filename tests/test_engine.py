import logging
from pathlib import Path

import pytest

from pkglicenses.core.engine import build_report, list_licenses, resolve_packages
from pkglicenses.core.interfaces import DependencyResolver, MissingPackageError, ResolutionError
from pkglicenses.core.locate import DirectoryReadError
from pkglicenses.core.records import PackageInfo
from pkglicenses.core.scoring import MatchCache


class FakeResolver:
    def __init__(self, graph, standard=(), missing=()):
        self.graph = graph
        self.standard = set(standard)
        self.missing = set(missing)

    def list_packages(self, root):
        if root in self.missing:
            raise MissingPackageError(root, f"cannot find package \"{root}\"\n")
        return self.graph[root]

    def standard_packages(self):
        return set(self.standard)


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def workspace(tmp_path: Path, mit_text):
    src = tmp_path / "src"
    _write(src / "example.com" / "lib" / "LICENSE", mit_text)
    (src / "example.com" / "lib" / "x").mkdir()
    (src / "example.com" / "lib" / "y").mkdir()
    _write(src / "example.com" / "app" / "main.go", "package main\n")
    packages = [
        PackageInfo("example.com/lib/x", "x", str(src)),
        PackageInfo("example.com/lib/y", "y", str(src)),
        PackageInfo("fmt", "fmt", "/usr/lib/go/src"),
        PackageInfo("example.com/app", "main", str(src)),
    ]
    return src, packages


def test_fake_resolver_satisfies_protocol():
    assert isinstance(FakeResolver({}), DependencyResolver)


def test_list_licenses_rows_in_resolver_order(workspace, corpus):
    src, packages = workspace

    rows = list_licenses(packages, corpus, standard={"fmt"})

    assert [r.package for r in rows] == ["example.com/lib/x", "example.com/lib/y", "example.com/app"]
    license_path = str(src / "example.com" / "lib" / "LICENSE")
    assert rows[0].path == rows[1].path == license_path
    assert rows[0].title == "MIT License"
    assert rows[0].score == 1.0
    assert rows[2].path == ""
    assert rows[2].template is None
    assert rows[2].score == 0
    assert rows[2].error == ""


def test_shared_license_file_is_scored_once(workspace, corpus):
    _, packages = workspace
    cache = MatchCache(corpus)

    rows = list_licenses(packages, corpus, standard={"fmt"}, cache=cache)

    assert len(cache) == 1
    assert cache.hits == 1
    assert rows[0].match is rows[1].match


def test_error_rows_skip_the_filesystem(corpus, caplog):
    packages = [PackageInfo("example.com/gone", error="cannot find package")]

    with caplog.at_level(logging.WARNING, logger="pkglicenses"):
        rows = list_licenses(packages, corpus)

    assert rows[0].error == "cannot find package"
    assert rows[0].path == ""
    assert "example.com/gone" in caplog.text


def test_build_report_groups_by_default(workspace, corpus):
    src, packages = workspace
    resolver = FakeResolver({"example.com/app": packages}, standard={"fmt"})

    rows = build_report(resolver, ["example.com/app"], templates=corpus)

    assert [r.package for r in rows] == ["example.com/lib", "example.com/app"]
    assert rows[0].title == "MIT License"


def test_build_report_without_grouping(workspace, corpus):
    _, packages = workspace
    resolver = FakeResolver({"example.com/app": packages}, standard={"fmt"})

    rows = build_report(resolver, ["example.com/app"], templates=corpus, group=False)

    assert len(rows) == 3


def test_missing_root_becomes_error_row(corpus):
    resolver = FakeResolver({}, missing={"example.com/nope"})

    rows = build_report(resolver, ["example.com/nope"], templates=corpus)

    assert len(rows) == 1
    assert rows[0].package == "example.com/nope"
    assert rows[0].error == 'cannot find package "example.com/nope"'
    assert rows[0].template is None


def test_fatal_resolution_errors_propagate(corpus):
    class Broken(FakeResolver):
        def list_packages(self, root):
            raise ResolutionError("go list failed")

    with pytest.raises(ResolutionError):
        build_report(Broken({}), ["x"], templates=corpus)


def test_resolve_packages_deduplicates_across_roots():
    shared = PackageInfo("lib")
    resolver = FakeResolver({"a": [shared, PackageInfo("a")], "b": [shared, PackageInfo("b")]})

    packages = resolve_packages(resolver, ["a", "b"])

    assert [p.import_path for p in packages] == ["lib", "a", "b"]


def test_unreadable_directory_aborts(tmp_path: Path, corpus):
    packages = [PackageInfo("a/b", source_root=str(tmp_path / "src"))]

    with pytest.raises(DirectoryReadError):
        list_licenses(packages, corpus)
