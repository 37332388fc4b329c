"""
JSON / JSONL parser for flatrows.

Two independent code paths, selected by ``config.is_json_lines``:

- **Document mode**: the whole stream is one JSON document. An optional
  ``data_root_path`` (``$.data.items``) walks object properties down to the
  records. An array yields one row per element, an object yields one row.
  Anything else -- or a document that does not parse -- yields a single
  error row and the iterator ends.
- **Line mode (JSONL)**: every non-blank line is an independent document.
  A bad line yields an error row for that line and parsing continues.

Number handling:
  Numbers are decoded from their literal text, then converted with a fixed
  precision fallback: ``int`` when the literal is integral and fits in a
  signed 64-bit integer, else ``float`` when finite, else ``Decimal``.

Nested arrays/objects are not flattened. They are stored as compact JSON
text so callers can decode them later if they need to.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterator
from decimal import Decimal
from typing import Any, BinaryIO

from flatrows.cancellation import CancellationToken
from flatrows.config import ImportFormatConfig
from flatrows.parsers.base import (
    BaseParser,
    ColumnValue,
    ParsedRow,
    check_cancelled,
    open_text,
    read_all_text,
    split_root_path,
)

logger = logging.getLogger(__name__)

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON number literal: {name}")


def _loads(text: str) -> Any:
    # Floats stay Decimal until conversion so their literal text survives
    return json.loads(text, parse_float=Decimal, parse_constant=_reject_constant)


def _convert_number(value: int | Decimal) -> ColumnValue:
    if isinstance(value, int) and _INT64_MIN <= value <= _INT64_MAX:
        return value
    try:
        as_float = float(value)
    except OverflowError:
        return Decimal(value)
    if math.isfinite(as_float):
        return as_float
    return value if isinstance(value, Decimal) else Decimal(value)


def _dump_raw(value: Any) -> str:
    """Serialize a decoded JSON value back to compact JSON text."""
    if isinstance(value, dict):
        items = ",".join(
            f"{json.dumps(k, ensure_ascii=False)}:{_dump_raw(v)}" for k, v in value.items()
        )
        return "{" + items + "}"
    if isinstance(value, list):
        return "[" + ",".join(_dump_raw(v) for v in value) + "]"
    if isinstance(value, Decimal):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def convert_value(value: Any) -> ColumnValue:
    """Convert one decoded JSON value to a column value."""
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, (int, Decimal)):
        return _convert_number(value)
    return _dump_raw(value)


def to_columns(element: Any) -> dict[str, ColumnValue]:
    """Turn one record element into a column map.

    Objects map property -> value. Any other element is wrapped under the
    single key ``"value"``.
    """
    if not isinstance(element, dict):
        return {"value": convert_value(element)}
    return {key: convert_value(value) for key, value in element.items()}


def navigate(document: Any, path: str | None) -> Any:
    """Walk a ``$.a.b`` data root path through object properties.

    Raises:
        ValueError: If a segment is missing or the current node is not an
            object.
    """
    current = document
    for segment in split_root_path(path):
        if not isinstance(current, dict):
            raise ValueError(
                f"Cannot navigate into {_kind(current)} at segment '{segment}'"
            )
        if segment not in current:
            raise ValueError(f"Path segment '{segment}' not found")
        current = current[segment]
    return current


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, Decimal)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def extract_records(text: str, data_root_path: str | None) -> list[Any]:
    """Parse a whole document and return its record elements.

    Raises:
        ValueError: If the text is not JSON (``json.JSONDecodeError`` is a
            ValueError), the path cannot be walked, or the resolved node is
            neither an array nor an object.
    """
    node = navigate(_loads(text), data_root_path)
    if isinstance(node, list):
        return node
    if isinstance(node, dict):
        return [node]
    raise ValueError(f"Expected JSON array or object, got {_kind(node)}")


class JsonParser(BaseParser):
    """Parser for JSON documents and newline-delimited JSON."""

    format_name = "JSON"

    def parse(
        self,
        stream: BinaryIO,
        config: ImportFormatConfig,
        cancel: CancellationToken | None = None,
    ) -> Iterator[ParsedRow]:
        if config.is_json_lines:
            return self._parse_lines(stream, config, cancel)
        return self._parse_document(stream, config, cancel)

    def _parse_document(
        self,
        stream: BinaryIO,
        config: ImportFormatConfig,
        cancel: CancellationToken | None,
    ) -> Iterator[ParsedRow]:
        check_cancelled(cancel)
        text = read_all_text(stream, config)
        try:
            records = extract_records(text, config.data_root_path)
        except (ValueError, RecursionError) as e:
            logger.warning("JSON document could not be parsed: %s", e)
            yield ParsedRow.error(0, f"JSON parse error: {e}")
            return

        logger.info(
            "Parsing JSON document (data_root_path=%r): %d records",
            config.data_root_path, len(records),
        )
        for line_number, element in enumerate(records, start=1):
            check_cancelled(cancel)
            yield ParsedRow(line_number=line_number, columns=to_columns(element))

    def _parse_lines(
        self,
        stream: BinaryIO,
        config: ImportFormatConfig,
        cancel: CancellationToken | None,
    ) -> Iterator[ParsedRow]:
        check_cancelled(cancel)
        logger.info("Parsing JSON lines")
        rows = errors = 0
        with open_text(stream, config) as text:
            for line_number, line in enumerate(text, start=1):
                check_cancelled(cancel)
                if not line.strip():
                    continue
                try:
                    element = _loads(line)
                except (ValueError, RecursionError) as e:
                    errors += 1
                    logger.debug("JSON line %d could not be parsed: %s", line_number, e)
                    yield ParsedRow.error(line_number, f"Line {line_number}: {e}")
                    continue
                rows += 1
                yield ParsedRow(line_number=line_number, columns=to_columns(element))

        logger.info("Finished JSON lines: %d rows, %d error rows", rows, errors)
