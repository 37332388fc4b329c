"""
Unit tests for format dispatch (flatrows.dispatch).
"""

from __future__ import annotations

import pytest

from flatrows.dispatch import SUPPORTED_FORMATS, get_parser
from flatrows.exceptions import FlatRowsError, UnsupportedFormatError
from flatrows.parsers.csv_parser import CsvParser
from flatrows.parsers.json_parser import JsonParser
from flatrows.parsers.xml_parser import XmlParser
from flatrows.parsers.yaml_parser import YamlParser


class TestGetParser:
    """Tests for get_parser()."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("CSV", CsvParser),
            ("TSV", CsvParser),
            ("JSON", JsonParser),
            ("JSONL", JsonParser),
            ("XML", XmlParser),
            ("YAML", YamlParser),
            ("YML", YamlParser),
        ],
    )
    def test_supported_names(self, name, expected):
        assert isinstance(get_parser(name), expected)

    def test_case_insensitive(self):
        assert isinstance(get_parser("csv"), CsvParser)
        assert isinstance(get_parser("Yml"), YamlParser)
        assert isinstance(get_parser(" jsonl "), JsonParser)

    def test_fresh_instance_each_call(self):
        assert get_parser("CSV") is not get_parser("CSV")

    def test_every_supported_format_resolves(self):
        for name in SUPPORTED_FORMATS:
            get_parser(name)

    def test_unknown_format(self):
        with pytest.raises(UnsupportedFormatError, match="'INI' is not supported"):
            get_parser("INI")

    def test_unknown_format_lists_supported(self):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            get_parser("parquet")
        assert "CSV, TSV, JSON, JSONL, XML, YAML, YML" in str(exc_info.value)

    def test_empty_name(self):
        with pytest.raises(UnsupportedFormatError):
            get_parser("")

    def test_error_hierarchy(self):
        with pytest.raises(FlatRowsError):
            get_parser("INI")
        with pytest.raises(ValueError):
            get_parser("INI")
