"""
Unit tests for cooperative cancellation (flatrows.cancellation) across all
parsers.
"""

from __future__ import annotations

import io

import pytest

from flatrows.cancellation import CancellationToken
from flatrows.config import ImportFormatConfig
from flatrows.exceptions import ParseCancelledError
from flatrows.parsers.csv_parser import CsvParser
from flatrows.parsers.json_parser import JsonParser
from flatrows.parsers.xml_parser import XmlParser
from flatrows.parsers.yaml_parser import YamlParser

CASES = [
    (CsvParser(), "a\n1\n2\n3\n", {}),
    (JsonParser(), '[{"a": 1}, {"a": 2}, {"a": 3}]', {}),
    (JsonParser(), '{"a": 1}\n{"a": 2}\n{"a": 3}\n', {"is_json_lines": True}),
    (XmlParser(), "<r><a>1</a><a>2</a><a>3</a></r>", {}),
    (YamlParser(), "- a: 1\n- a: 2\n- a: 3\n", {}),
]


class TestCancellationToken:
    """Tests for the token itself."""

    def test_initial_state(self):
        token = CancellationToken()
        assert token.cancelled is False
        token.raise_if_cancelled()

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancelled is True
        with pytest.raises(ParseCancelledError, match="cancelled"):
            token.raise_if_cancelled()

    def test_repr(self):
        assert repr(CancellationToken()) == "CancellationToken(cancelled=False)"


class TestParserCancellation:
    """Every parser stops with ParseCancelledError once the token is set."""

    @pytest.mark.parametrize("parser, text, config", CASES)
    def test_cancel_mid_stream(self, parser, text, config):
        token = CancellationToken()
        rows = parser.parse(io.BytesIO(text.encode()), ImportFormatConfig(**config), token)

        first = next(rows)
        assert not first.is_error
        token.cancel()
        with pytest.raises(ParseCancelledError):
            next(rows)
        # a generator that raised is finished
        assert list(rows) == []

    @pytest.mark.parametrize("parser, text, config", CASES)
    def test_cancelled_before_start(self, parser, text, config):
        token = CancellationToken()
        token.cancel()
        rows = parser.parse(io.BytesIO(text.encode()), ImportFormatConfig(**config), token)
        with pytest.raises(ParseCancelledError):
            next(rows)

    @pytest.mark.parametrize("parser, text, config", CASES)
    def test_no_token_parses_everything(self, parser, text, config):
        rows = list(parser.parse(io.BytesIO(text.encode()), ImportFormatConfig(**config)))
        assert len(rows) == 3
