"""
YAML parser for flatrows.

Reads the whole stream, loads it once with ``yaml.safe_load`` and flattens
the result:

- An optional ``data_root_path`` walks mapping keys (same ``$.a.b``
  convention as the JSON parser).
- A list yields one row per element; a mapping yields one row.
- Each mapping is flattened one level. Scalars pass through; nested
  mappings and lists are stored as JSON text, the same "nested as string"
  convention the JSON and XML parsers follow.
- Scalar list elements are wrapped under the key ``value``.

safe_load resolves the YAML core schema, so ``30`` arrives as ``int`` and
``true`` as ``bool``. Timestamps are kept as ISO-8601 strings so every
column value stays within the shared value kinds.

Error handling: a document that fails to load, a path that cannot be
walked, or a root that is neither list nor mapping yields one error row.
An empty document yields no rows.
"""

from __future__ import annotations

import datetime
import json
import logging
from collections.abc import Iterator
from typing import Any, BinaryIO

import yaml

from flatrows.cancellation import CancellationToken
from flatrows.config import ImportFormatConfig
from flatrows.parsers.base import (
    BaseParser,
    ColumnValue,
    ParsedRow,
    check_cancelled,
    read_all_text,
    split_root_path,
)

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, set):
        return sorted(value, key=str)
    return str(value)


def _to_json_ready(value: Any) -> Any:
    # JSON object keys must be strings; YAML allows ints, bools, even None
    if isinstance(value, dict):
        return {_key(k): _to_json_ready(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_json_ready(v) for v in value]
    return value


def _key(key: Any) -> str:
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def convert_value(value: Any) -> ColumnValue:
    """Convert one loaded YAML value to a column value."""
    if isinstance(value, (dict, list)):
        return json.dumps(
            _to_json_ready(value), ensure_ascii=False, default=_json_default
        )
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def flatten(node: Any) -> dict[str, ColumnValue]:
    """Flatten one record node into a column map (one level deep)."""
    if isinstance(node, dict):
        return {_key(k): convert_value(v) for k, v in node.items()}
    return {"value": convert_value(node)}


def normalise_to_records(document: Any, data_root_path: str | None) -> list[Any]:
    """Walk the data root path and return the record nodes.

    Raises:
        ValueError: If a key is missing, a non-mapping is navigated into, or
            the target is neither a list nor a mapping.
    """
    target = document
    for segment in split_root_path(data_root_path):
        if not isinstance(target, dict):
            raise ValueError(
                f"Cannot navigate into {type(target).__name__} at segment '{segment}'"
            )
        if segment in target:
            target = target[segment]
            continue
        # Keys such as 2024 or true load as int/bool; match them as text
        matches = [value for key, value in target.items() if _key(key) == segment]
        if not matches:
            raise ValueError(f"Key '{segment}' not found in YAML mapping")
        target = matches[0]

    if isinstance(target, list):
        return target
    if isinstance(target, dict):
        return [target]
    raise ValueError(f"Expected a list or mapping, got {type(target).__name__}")


class YamlParser(BaseParser):
    """Parser for YAML documents."""

    format_name = "YAML"

    def parse(
        self,
        stream: BinaryIO,
        config: ImportFormatConfig,
        cancel: CancellationToken | None = None,
    ) -> Iterator[ParsedRow]:
        check_cancelled(cancel)
        text = read_all_text(stream, config)

        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            logger.warning("YAML document could not be parsed: %s", e)
            yield ParsedRow.error(0, f"YAML parse error: {e}")
            return

        if document is None:
            logger.warning("YAML parser: document is empty or null")
            return

        try:
            records = normalise_to_records(document, config.data_root_path)
        except ValueError as e:
            logger.warning("YAML document has an unexpected structure: %s", e)
            yield ParsedRow.error(0, f"YAML structure error: {e}")
            return

        logger.info(
            "Parsing YAML document (data_root_path=%r): %d records",
            config.data_root_path, len(records),
        )
        for line_number, node in enumerate(records, start=1):
            check_cancelled(cancel)
            yield ParsedRow(line_number=line_number, columns=flatten(node))
