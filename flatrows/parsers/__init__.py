"""
Parsers sub-package for flatrows.

Contains format-specific parsers that convert a raw byte stream into a lazy
sequence of ParsedRow (line number + column map, or a parse error).

Design: Strategy Pattern
- base.py defines the BaseParser ABC, the ParsedRow model and the shared
  stream helpers.
- csv_parser.py implements CsvParser (CSV and TSV).
- json_parser.py implements JsonParser (JSON documents and JSON lines).
- xml_parser.py implements XmlParser (path-selected elements).
- yaml_parser.py implements YamlParser (list or mapping documents).

The parsers know nothing about each other. The dispatcher (dispatch.py)
selects one from a format name at runtime.
"""
