"""
Shared test fixtures for flatrows tests.

All parser tests feed small inline documents through an in-memory byte
stream. The ``run_parser`` fixture wraps the boilerplate: encode the text,
build an ImportFormatConfig from keyword arguments, and collect every row.
"""

from __future__ import annotations

import io
from collections.abc import Callable

import pytest

from flatrows.config import ImportFormatConfig
from flatrows.parsers.base import BaseParser, ParsedRow


def to_stream(text: str, encoding: str = "utf-8") -> io.BytesIO:
    return io.BytesIO(text.encode(encoding))


@pytest.fixture()
def run_parser() -> Callable[..., list[ParsedRow]]:
    """Return ``run(parser, text, **config_fields) -> list[ParsedRow]``."""

    def _run(parser: BaseParser, text: str, **config_fields) -> list[ParsedRow]:
        config = ImportFormatConfig(**config_fields)
        return list(parser.parse(to_stream(text), config))

    return _run
