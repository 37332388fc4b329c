"""
Format dispatch for flatrows.

Maps a case-insensitive format name to a parser instance. The format name
comes from upstream configuration (profile/connection metadata), never from
sniffing the content.

Design: Strategy Pattern
- get_parser() returns a fresh BaseParser for the name.
- Several names share one parser: TSV is CSV with a tab delimiter set in
  the config, JSONL is JSON with ``is_json_lines`` set in the config.
- An unknown name raises UnsupportedFormatError right away, before any
  stream is opened.
"""

from __future__ import annotations

import logging

from flatrows.exceptions import UnsupportedFormatError
from flatrows.parsers.base import BaseParser

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: tuple[str, ...] = ("CSV", "TSV", "JSON", "JSONL", "XML", "YAML", "YML")

# Maps upper-cased format name to parser class
_PARSER_MAP: dict[str, type[BaseParser]] = {}


def _get_parser_map() -> dict[str, type[BaseParser]]:
    """Lazily build the parser map so importing dispatch stays cheap."""
    if not _PARSER_MAP:
        from flatrows.parsers.csv_parser import CsvParser
        from flatrows.parsers.json_parser import JsonParser
        from flatrows.parsers.xml_parser import XmlParser
        from flatrows.parsers.yaml_parser import YamlParser

        _PARSER_MAP["CSV"] = CsvParser
        _PARSER_MAP["TSV"] = CsvParser
        _PARSER_MAP["JSON"] = JsonParser
        _PARSER_MAP["JSONL"] = JsonParser
        _PARSER_MAP["XML"] = XmlParser
        _PARSER_MAP["YAML"] = YamlParser
        _PARSER_MAP["YML"] = YamlParser
    return _PARSER_MAP


def get_parser(format_name: str) -> BaseParser:
    """Return a parser for *format_name* (case-insensitive).

    Raises:
        UnsupportedFormatError: If the format is not one of SUPPORTED_FORMATS.
    """
    key = format_name.strip().upper() if isinstance(format_name, str) else ""
    parser_cls = _get_parser_map().get(key)
    if parser_cls is None:
        raise UnsupportedFormatError(
            f"Import format '{format_name}' is not supported. "
            f"Supported: {', '.join(SUPPORTED_FORMATS)}"
        )
    logger.debug("Selected %s for format '%s'", parser_cls.__name__, format_name)
    return parser_cls()
