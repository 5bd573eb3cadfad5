# config.py
# SPDX-License-Identifier: MIT
"""Configuration models and helpers for pkglicenses runs.

This module defines declarative dataclasses for the dependency resolver,
the report, and logging, along with helpers for serializing and loading
configurations from JSON and TOML.
"""
from __future__ import annotations

import json
try:  # pragma: no cover - optional dependency
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]
import types
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from .log import PACKAGE_LOGGER_NAME, configure_logging

__all__ = [
    "RESOLVER_KINDS",
    "REPORT_FORMATS",
    "ResolverConfig",
    "ReportConfig",
    "LoggingConfig",
    "LicensesConfig",
    "load_config_from_path",
]

RESOLVER_KINDS = ("go", "manifest")
REPORT_FORMATS = ("text", "jsonl", "csv", "parquet")


@dataclass(slots=True)
class ResolverConfig:
    """Where the dependency list comes from.

    Attributes:
        kind (str): ``"go"`` to shell out to the Go toolchain, or
            ``"manifest"`` to read a JSON/JSONL package manifest.
        gopath (str | None): GOPATH override passed to the Go toolchain.
        go_binary (str): Go executable name or path.
        manifest_path (str | None): Manifest file for the ``manifest`` kind.
    """
    kind: str = "go"
    gopath: Optional[str] = None
    go_binary: str = "go"
    manifest_path: Optional[str] = None


@dataclass(slots=True)
class ReportConfig:
    """How the report is rendered.

    Attributes:
        confidence (float): Score at or above which a match is shown as
            certain.
        group (bool): Collapse packages sharing a license file; ``-a`` on
            the command line turns this off.
        show_words (bool): Include the extra/missing word lists.
        format (str): One of ``text``, ``jsonl``, ``csv`` or ``parquet``.
        output (str | None): Output file; stdout when unset.
    """
    confidence: float = 0.9
    group: bool = True
    show_words: bool = False
    format: str = "text"
    output: Optional[str] = None


@dataclass(slots=True)
class LoggingConfig:
    """Controls the package logger; set propagate=True/logger_name to
    integrate with host apps.
    """
    level: Union[int, str] = "WARNING"
    propagate: bool = False
    fmt: Optional[str] = "%(levelname)s %(name)s: %(message)s"
    logger_name: str = PACKAGE_LOGGER_NAME

    def apply(self) -> None:
        """Apply this logging configuration to the package logger."""
        configure_logging(
            level=self.level,
            propagate=self.propagate,
            fmt=self.fmt,
            logger_name=self.logger_name or PACKAGE_LOGGER_NAME,
        )


T = TypeVar("T")


@dataclass(slots=True)
class LicensesConfig:
    """Declarative settings for one report run.

    Only plain values live here; resolvers and sinks are built from it by
    the command line layer.
    """
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """Validate and normalize the configuration in place.

        Raises:
            ValueError: If the resolver kind, report format or confidence is
                out of range, or the manifest resolver has no manifest.
        """
        kind = (self.resolver.kind or "go").strip().lower()
        if kind not in RESOLVER_KINDS:
            raise ValueError(f"resolver.kind must be one of {list(RESOLVER_KINDS)}; got {self.resolver.kind!r}.")
        self.resolver.kind = kind
        if kind == "manifest" and not self.resolver.manifest_path:
            raise ValueError("resolver.manifest_path is required when resolver.kind is 'manifest'.")

        fmt = (self.report.format or "text").strip().lower()
        if fmt not in REPORT_FORMATS:
            raise ValueError(f"report.format must be one of {list(REPORT_FORMATS)}; got {self.report.format!r}.")
        self.report.format = fmt
        if fmt == "parquet" and not self.report.output:
            raise ValueError("report.output is required for the parquet format.")

        try:
            confidence = float(self.report.confidence)
        except (TypeError, ValueError):
            raise ValueError("report.confidence must be a float between 0.0 and 1.0.")
        if confidence < 0.0 or confidence > 1.0:
            raise ValueError("report.confidence must be between 0.0 and 1.0.")
        self.report.confidence = confidence

    # -------------------------
    # Serialization helpers
    # -------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation, skipping unset values."""
        return _dataclass_to_dict(self)

    def to_json(self, path: Path | str, *, indent: int = 2) -> str:
        """Serialize the configuration to JSON and write it to disk.

        Args:
            path (Path | str): Target file path.
            indent (int): Indentation level passed to ``json.dumps``.

        Returns:
            str: String path to the written file.
        """
        target = Path(path)
        target.write_text(json.dumps(self.to_dict(), indent=indent, sort_keys=True), encoding="utf-8")
        return str(target)

    @classmethod
    def from_dict(cls: Type[T], data: Mapping[str, Any]) -> T:
        return _dataclass_from_dict(cls, data)

    @classmethod
    def from_json(cls: Type[T], path: Path | str) -> T:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, Mapping):
            raise TypeError(f"Top-level JSON document must be an object; got {type(payload).__name__}.")
        return cls.from_dict(payload)

    @classmethod
    def from_toml(cls: Type[T], path: Path | str) -> T:
        """Load a configuration from a TOML file.

        The layout mirrors this dataclass: ``[resolver]``, ``[report]`` and
        ``[logging]`` tables.
        """
        data = tomllib.loads(Path(path).read_bytes().decode("utf-8"))
        return cls.from_dict(data)


def load_config_from_path(path: str | Path) -> LicensesConfig:
    """Load a LicensesConfig from a JSON or TOML file.

    Args:
        path (Path | str): Path to a ``.toml`` or ``.json`` config file.

    Returns:
        LicensesConfig: Parsed configuration instance.

    Raises:
        ValueError: If the file extension is not ``.toml`` or ``.json``.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".toml":
        return LicensesConfig.from_toml(p)
    if suffix == ".json":
        return LicensesConfig.from_json(p)
    raise ValueError(f"Unsupported config extension {p.suffix!r}; expected .toml or .json.")


def _dataclass_to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize dataclasses to JSON-friendly dicts, skipping None fields."""
    result: Dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value is None:
            continue
        if is_dataclass(value):
            result[f.name] = _dataclass_to_dict(value)
        else:
            result[f.name] = value
    return result


def _dataclass_from_dict(cls: Type[T], data: Mapping[str, Any] | None) -> T:
    """Instantiate a dataclass of type `cls` from a mapping.

    Unknown keys are rejected so that typos in config files surface early.

    Raises:
        ValueError: If ``data`` holds keys that are not fields of ``cls``.
    """
    if data is None:
        return cls()  # type: ignore[call-arg]
    if not isinstance(data, Mapping):
        raise TypeError(f"Expected a mapping for {cls.__name__}; got {type(data).__name__}.")
    known = {f.name for f in fields(cls)}
    unknown = sorted(k for k in data if k not in known)
    if unknown:
        raise ValueError(
            f"Unsupported options for {cls.__name__}: {', '.join(unknown)}. "
            f"Allowed keys: {', '.join(sorted(known))}"
        )
    type_hints = get_type_hints(cls)
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        kwargs[f.name] = _coerce_value(type_hints.get(f.name, f.type), data[f.name])
    return cls(**kwargs)  # type: ignore[arg-type]


def _coerce_value(expected_type: Any, value: Any) -> Any:
    """Coerce `value` into the shape implied by `expected_type`."""
    base_type, _ = _strip_optional(expected_type)
    if value is None:
        return None
    if isinstance(base_type, type) and is_dataclass(base_type):
        return _dataclass_from_dict(base_type, value)
    if base_type is bool:
        return _parse_bool(value)
    if base_type in {str, int, float}:
        return base_type(value)
    return value


_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


def _parse_bool(value: Any) -> bool:
    """Accept real booleans and the usual string spellings; reject anything else."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"Expected a boolean; got {value!r}.")
    if isinstance(value, (bool, int)):
        return bool(value)
    raise ValueError(f"Expected a boolean; got {type(value).__name__}.")


def _strip_optional(typ: Any) -> Tuple[Any, bool]:
    """Strip Optional from a type annotation.

    Returns:
        tuple[Any, bool]: ``(base_type, is_optional)``.
    """
    origin = get_origin(typ)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(typ) if arg is not type(None)]
        if len(args) == 1:
            base, _ = _strip_optional(args[0])
            return base, True
    return typ, False
