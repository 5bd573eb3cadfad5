import json
from pathlib import Path

import pytest

from pkglicenses.core.interfaces import MissingPackageError, ResolutionError
from pkglicenses.sources.manifest import ManifestResolver, load_manifest


def _write_manifest(tmp_path: Path, doc, name="manifest.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


def test_closure_is_sorted_dependencies_then_root(tmp_path: Path):
    path = _write_manifest(
        tmp_path,
        {
            "packages": [
                {"import_path": "app", "dir": "app", "deps": ["z/lib", "a/lib", "fmt"]},
                {"import_path": "z/lib", "dir": "vendor/z/lib", "deps": ["m/util"]},
                {"import_path": "a/lib", "source_root": "vendor"},
                {"import_path": "m/util", "dir": "/abs/m/util", "deps": ["app"]},
                {"import_path": "unused"},
            ],
            "standard": ["fmt"],
        },
    )

    resolver = ManifestResolver.from_path(path)
    packages = resolver.list_packages("app")

    assert [p.import_path for p in packages] == ["a/lib", "fmt", "m/util", "z/lib", "app"]
    assert resolver.standard_packages() == {"fmt"}
    by_path = {p.import_path: p for p in packages}
    assert by_path["app"].dir == str(tmp_path / "app")
    assert by_path["a/lib"].source_root == str(tmp_path / "vendor")
    assert by_path["a/lib"].package_dir == str(tmp_path / "vendor" / "a" / "lib")
    assert by_path["m/util"].dir == "/abs/m/util"


def test_dependency_missing_from_manifest_is_an_error_entry(tmp_path: Path):
    path = _write_manifest(tmp_path, [{"import_path": "app", "deps": ["ghost"]}])

    packages = ManifestResolver.from_path(path).list_packages("app")

    assert packages[0].import_path == "ghost"
    assert "cannot find package" in packages[0].error
    assert packages[1].error == ""


def test_unknown_root_is_missing(tmp_path: Path):
    path = _write_manifest(tmp_path, [{"import_path": "app"}])

    with pytest.raises(MissingPackageError) as excinfo:
        ManifestResolver.from_path(path).list_packages("nope")

    assert excinfo.value.package == "nope"


def test_jsonl_manifest(tmp_path: Path):
    path = tmp_path / "packages.jsonl"
    path.write_text(
        '{"import_path": "app", "deps": ["lib"]}\n\n{"import_path": "lib", "error": "broken"}\n',
        encoding="utf-8",
    )

    resolver = ManifestResolver.from_path(path)

    assert resolver.import_paths == ["app", "lib"]
    assert resolver.standard_packages() == set()
    packages = resolver.list_packages("app")
    assert [(p.import_path, p.error) for p in packages] == [("lib", "broken"), ("app", "")]


def test_first_entry_wins_on_duplicates(tmp_path: Path):
    path = _write_manifest(tmp_path, [{"import_path": "a", "name": "first"}, {"import_path": "a", "name": "second"}])

    (info,) = ManifestResolver.from_path(path).list_packages("a")

    assert info.name == "first"


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"packages": {"import_path": "a"}}',
        '[{"name": "no import path"}]',
        '[{"import_path": "a", "deps": "b"}]',
        "[1, 2]",
    ],
)
def test_malformed_manifests_are_resolution_errors(tmp_path: Path, content):
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ResolutionError):
        load_manifest(path)


def test_unreadable_manifest(tmp_path: Path):
    with pytest.raises(ResolutionError, match="could not read manifest"):
        load_manifest(tmp_path / "missing.json")
