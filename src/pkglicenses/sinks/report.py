# report.py
# SPDX-License-Identifier: MIT
"""Writers rendering license report rows as text, JSONL, CSV or Parquet."""
from __future__ import annotations

import csv
import json
import os
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, TextIO

from ..core.log import get_logger
from ..core.records import License, format_license_label

log = get_logger(__name__)

__all__ = [
    "REPORT_FIELDS",
    "WORD_FIELDS",
    "format_table",
    "TextReportSink",
    "JSONLReportSink",
    "CSVReportSink",
    "ParquetReportSink",
    "make_report_sink",
    "write_report",
]

REPORT_FIELDS = ("package", "license", "nickname", "score", "path", "error")
WORD_FIELDS = ("extra_words", "missing_words")

_COLUMN_PADDING = 2


def format_table(table: Sequence[Sequence[str]]) -> list[str]:
    """Left-align cells into columns separated by at least two spaces.

    Lines may have different cell counts. The last cell of each line is
    never padded, so lines carry no trailing whitespace.
    """
    ncols = max((len(cells) for cells in table), default=0)
    widths: dict[int, int] = {}
    for cells in table:
        for i, cell in enumerate(cells[: ncols - 1]):
            widths[i] = max(widths.get(i, 0), len(cell))
    lines = []
    for cells in table:
        if not cells:
            lines.append("")
            continue
        head = "".join(cell.ljust(widths[i] + _COLUMN_PADDING) for i, cell in enumerate(cells[:-1]))
        lines.append(head + cells[-1])
    return lines


class _BaseReportSink:
    """Shared handle management: a temp file moved into place on close, or a stream."""

    newline: str | None = None

    def __init__(
        self,
        out_path: str | os.PathLike[str] | None = None,
        *,
        stream: TextIO | None = None,
        confidence: float = 0.9,
        include_words: bool = False,
    ):
        """Configure a report sink.

        Args:
            out_path (str | os.PathLike[str] | None): Destination file path;
                the report goes to ``stream`` when omitted.
            stream (TextIO | None): Output stream, sys.stdout by default.
            confidence (float): Threshold for certain license labels.
            include_words (bool): Whether to emit the vocabulary delta.
        """
        self._path = Path(out_path) if out_path is not None else None
        self._stream = stream
        self._fp: TextIO | None = None
        self._tmp_path: Path | None = None
        self.confidence = confidence
        self.include_words = include_words

    def open(self) -> None:
        """Create a temp file next to the destination, or bind the stream."""
        if self._path is None:
            self._fp = self._stream or sys.stdout
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._tmp_path = self._path.parent / f"{self._path.name}.tmp"
        self._fp = open(self._tmp_path, "w", encoding="utf-8", newline=self.newline)

    def write(self, row: License) -> None:
        raise NotImplementedError

    def _flush(self) -> None:
        """Emit anything buffered; called once before the handle closes."""

    def close(self) -> None:
        """Close any open handle and move the temp file into place."""
        if not self._fp:
            return
        try:
            self._flush()
        finally:
            fp, self._fp = self._fp, None
            if self._tmp_path is None:
                fp.flush()
            else:
                fp.close()
        if self._tmp_path:
            os.replace(self._tmp_path, self._path)
            log.info("Wrote report to %s", self._path)
            self._tmp_path = None

    def discard(self) -> None:
        """Drop a partially written report without touching the destination."""
        fp, self._fp = self._fp, None
        if fp is not None and self._tmp_path is not None:
            fp.close()
        if self._tmp_path is not None:
            self._tmp_path.unlink(missing_ok=True)
            self._tmp_path = None

    def __enter__(self) -> _BaseReportSink:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.discard()
        else:
            self.close()

    def write_all(self, rows: Iterable[License]) -> None:
        for row in rows:
            self.write(row)

    def _record(self, row: License) -> dict[str, Any]:
        return row.to_dict(include_words=self.include_words)


class TextReportSink(_BaseReportSink):
    """Aligned ``package  label`` table, buffered until close."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._rows: list[License] = []

    def write(self, row: License) -> None:
        self._rows.append(row)

    def _flush(self) -> None:
        assert self._fp is not None
        table = []
        for row in self._rows:
            cells = [row.package, format_license_label(row, self.confidence)]
            if row.error:
                cells.append(f"error: {row.error}")
            table.append(cells)
        for row, line in zip(self._rows, format_table(table)):
            self._fp.write(line + "\n")
            if self.include_words:
                if row.match.extra_words:
                    self._fp.write("    + " + " ".join(row.match.extra_words) + "\n")
                if row.match.missing_words:
                    self._fp.write("    - " + " ".join(row.match.missing_words) + "\n")
        self._rows = []


class JSONLReportSink(_BaseReportSink):
    """One compact JSON object per row."""

    def write(self, row: License) -> None:
        assert self._fp is not None
        self._fp.write(json.dumps(self._record(row), ensure_ascii=False, separators=(",", ":")) + "\n")


class CSVReportSink(_BaseReportSink):
    """CSV with a header line; word lists are space separated."""

    newline = ""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._writer: csv.DictWriter | None = None

    def open(self) -> None:
        super().open()
        fieldnames = list(REPORT_FIELDS)
        if self.include_words:
            fieldnames.extend(WORD_FIELDS)
        self._writer = csv.DictWriter(self._fp, fieldnames=fieldnames, lineterminator="\n")
        self._writer.writeheader()

    def write(self, row: License) -> None:
        assert self._writer is not None
        record = self._record(row)
        for name in WORD_FIELDS:
            if name in record:
                record[name] = " ".join(record[name])
        self._writer.writerow(record)


class ParquetReportSink(_BaseReportSink):
    """Single Parquet file; needs the optional ``parquet`` extra."""

    def __init__(self, out_path: str | os.PathLike[str] | None = None, **kwargs: Any) -> None:
        if out_path is None:
            raise ValueError("Parquet reports need an output path.")
        super().__init__(out_path, **kwargs)
        self._records: list[dict[str, Any]] = []

    def open(self) -> None:
        # pyarrow writes the file itself; only the temp path is reserved here.
        assert self._path is not None
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._tmp_path = self._path.parent / f"{self._path.name}.tmp"
        self._records = []

    def write(self, row: License) -> None:
        record = dict.fromkeys(REPORT_FIELDS)
        record.update(self._record(row))
        self._records.append(record)

    def close(self) -> None:
        if self._tmp_path is None:
            return
        try:
            import pyarrow as pa
            import pyarrow.parquet as pq
        except Exception as exc:
            self._tmp_path = None
            raise RuntimeError(
                "PyArrow is required for Parquet reports; install pkglicenses[parquet]."
            ) from exc

        columns = [
            ("package", pa.string()),
            ("license", pa.string()),
            ("nickname", pa.string()),
            ("score", pa.float64()),
            ("path", pa.string()),
            ("error", pa.string()),
        ]
        if self.include_words:
            columns.extend((name, pa.list_(pa.string())) for name in WORD_FIELDS)
        table = pa.Table.from_pylist(self._records, schema=pa.schema(columns))
        pq.write_table(table, self._tmp_path)
        os.replace(self._tmp_path, self._path)
        log.info("Wrote %d report rows to %s", table.num_rows, self._path)
        self._tmp_path = None
        self._records = []

    def discard(self) -> None:
        if self._tmp_path is not None:
            self._tmp_path.unlink(missing_ok=True)
            self._tmp_path = None
        self._records = []


_SINKS: dict[str, type[_BaseReportSink]] = {
    "text": TextReportSink,
    "jsonl": JSONLReportSink,
    "csv": CSVReportSink,
    "parquet": ParquetReportSink,
}


def make_report_sink(
    fmt: str,
    out_path: str | os.PathLike[str] | None = None,
    *,
    stream: TextIO | None = None,
    confidence: float = 0.9,
    include_words: bool = False,
) -> _BaseReportSink:
    """Return an unopened sink for ``fmt``.

    Raises:
        ValueError: If ``fmt`` is not a known report format.
    """
    try:
        sink_cls = _SINKS[fmt]
    except KeyError:
        raise ValueError(f"Unknown report format {fmt!r}; expected one of {sorted(_SINKS)}.") from None
    return sink_cls(out_path, stream=stream, confidence=confidence, include_words=include_words)


def write_report(
    rows: Iterable[License],
    fmt: str = "text",
    out_path: str | os.PathLike[str] | None = None,
    *,
    stream: TextIO | None = None,
    confidence: float = 0.9,
    include_words: bool = False,
) -> None:
    """Render ``rows`` in ``fmt`` to ``out_path`` or ``stream``."""
    sink = make_report_sink(
        fmt,
        out_path,
        stream=stream,
        confidence=confidence,
        include_words=include_words,
    )
    with sink:
        sink.write_all(rows)
