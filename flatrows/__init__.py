"""
flatrows: stream CSV/TSV, JSON/JSONL, XML and YAML files as uniform rows.

Public API surface:

- ``get_parser(format_name)`` -- select the parser for a format name
  (case-insensitive). Unknown names raise ``UnsupportedFormatError``.

- ``parse(stream, format_name, config=None, cancel=None)`` -- lazily parse
  a readable binary stream into ``ParsedRow`` objects. The stream is left
  open.

- ``parse_file(path, format_name, ...)`` -- same, for a local file. The
  file is opened here and closed when the iterator ends.

- ``preview_file(path, format_name, ...)`` -- parse the head of a local
  file into a ``PreviewResult`` (rows, columns, warnings).

Every row is either a data row (``columns`` filled, ``parse_error`` None)
or an error row (``parse_error`` set). Malformed records do not stop the
parse; malformed documents produce one error row and end it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import closing
from pathlib import Path
from typing import BinaryIO

from flatrows.cancellation import CancellationToken
from flatrows.config import (
    ImportFormatConfig,
    load_format_config,
    parse_format_config,
)
from flatrows.dispatch import SUPPORTED_FORMATS, get_parser
from flatrows.exceptions import (
    FlatRowsError,
    FormatConfigError,
    ParseCancelledError,
    UnsupportedFormatError,
)
from flatrows.parsers.base import BaseParser, ColumnValue, ParsedRow
from flatrows.preview import DEFAULT_MAX_ROWS, PreviewResult, preview_rows

__all__ = [
    "BaseParser",
    "DEFAULT_MAX_ROWS",
    "CancellationToken",
    "ColumnValue",
    "FlatRowsError",
    "FormatConfigError",
    "ImportFormatConfig",
    "ParseCancelledError",
    "ParsedRow",
    "PreviewResult",
    "SUPPORTED_FORMATS",
    "UnsupportedFormatError",
    "get_parser",
    "load_format_config",
    "parse",
    "parse_file",
    "parse_format_config",
    "preview_file",
    "preview_rows",
]

logger = logging.getLogger(__name__)


def parse(
    stream: BinaryIO,
    format_name: str,
    config: ImportFormatConfig | None = None,
    cancel: CancellationToken | None = None,
) -> Iterator[ParsedRow]:
    """Parse *stream* as *format_name*.

    The parser is selected before the stream is touched, so an unknown
    format fails here rather than on first iteration.

    Args:
        stream: Readable binary stream. The caller keeps ownership.
        format_name: One of ``SUPPORTED_FORMATS`` (any case).
        config: Format options. Defaults to ``ImportFormatConfig()``.
        cancel: Optional token to stop the parse between rows.

    Returns:
        A lazy, single-pass iterator of rows.

    Raises:
        UnsupportedFormatError: If *format_name* is unknown.
    """
    parser = get_parser(format_name)
    return parser.parse(stream, config or ImportFormatConfig(), cancel)


def parse_file(
    path: str | Path,
    format_name: str,
    config: ImportFormatConfig | None = None,
    cancel: CancellationToken | None = None,
) -> Iterator[ParsedRow]:
    """Parse the local file at *path*.

    Raises:
        UnsupportedFormatError: If *format_name* is unknown (before the
            file is opened).
        FileNotFoundError: If *path* does not exist.
    """
    parser = get_parser(format_name)
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return _iter_file(parser, path, config or ImportFormatConfig(), cancel)


def _iter_file(
    parser: BaseParser,
    path: Path,
    config: ImportFormatConfig,
    cancel: CancellationToken | None,
) -> Iterator[ParsedRow]:
    logger.info("parse_file() -- %s as %s", path, parser.format_name)
    with open(path, "rb") as f:
        yield from parser.parse(f, config, cancel)


def preview_file(
    path: str | Path,
    format_name: str,
    config: ImportFormatConfig | None = None,
    max_rows: int = DEFAULT_MAX_ROWS,
) -> PreviewResult:
    """Parse the head of the local file at *path* into a PreviewResult.

    Examples::

        result = flatrows.preview_file("inputs/orders.csv", "CSV", max_rows=20)
        for warning in result.warnings:
            print(warning)
        df = result.to_frame()
    """
    with closing(parse_file(path, format_name, config)) as rows:
        return preview_rows(rows, max_rows=max_rows)
