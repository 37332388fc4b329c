"""
CSV / TSV parser for flatrows.

A streaming, hand-rolled RFC-4180 field splitter. TSV is the same algorithm
with ``delimiter="\\t"`` in the config; the parser itself does not care
which format name selected it.

Reading is line-oriented: the stream is consumed one logical line at a time
and each line is split with a small two-state machine (inside / outside
quotes). Consequences worth knowing:

- Nothing but the current line is held in memory, so files of any size
  can be parsed.
- A quoted value cannot contain a line break. Such a line ends while still
  inside quotes; the partial field is kept as read and the continuation
  line is parsed as a record of its own. No record is dropped.

Line numbers are physical: skipped lines and the header line are counted,
so with a header the first data row is line 2.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import BinaryIO

from flatrows.cancellation import CancellationToken
from flatrows.config import ImportFormatConfig
from flatrows.parsers.base import (
    BaseParser,
    ColumnValue,
    ParsedRow,
    check_cancelled,
    open_text,
)

logger = logging.getLogger(__name__)


def split_line(line: str, delimiter: str, quote: str, trim: bool) -> list[str]:
    """Split one line into fields.

    Outside quotes, a quote character at the start of a field opens a quoted
    section and the delimiter ends the field. Inside quotes, a doubled quote
    is a literal quote, a single quote closes the section, and everything
    else (delimiters included) is kept verbatim.

    Args:
        line: The line without its terminator.
        delimiter: Single-character field separator.
        quote: Single-character quote.
        trim: Strip surrounding whitespace from every field.

    Returns:
        The list of fields (at least one). A line that ends inside a quoted
        section keeps the partial field.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        c = line[i]
        if in_quotes:
            if c == quote:
                if i + 1 < n and line[i + 1] == quote:
                    current.append(quote)
                    i += 2
                    continue
                in_quotes = False
            else:
                current.append(c)
        elif c == quote and not current:
            in_quotes = True
        elif c == delimiter:
            field = "".join(current)
            fields.append(field.strip() if trim else field)
            current = []
        else:
            current.append(c)
        i += 1

    if in_quotes:
        logger.debug("Unterminated quoted field in column %d kept as read", len(fields) + 1)

    field = "".join(current)
    fields.append(field.strip() if trim else field)
    return fields


def _strip_terminator(line: str) -> str:
    return line[:-1] if line.endswith("\n") else line


class CsvParser(BaseParser):
    """Streaming parser for delimiter-separated text."""

    format_name = "CSV"

    def parse(
        self,
        stream: BinaryIO,
        config: ImportFormatConfig,
        cancel: CancellationToken | None = None,
    ) -> Iterator[ParsedRow]:
        delimiter = config.delimiter_char
        quote = config.quote
        trim = config.trim_whitespace
        null_value = config.null_value
        check_cancelled(cancel)

        logger.info(
            "Parsing %s (delimiter=%r, has_header=%s, skip_rows=%d)",
            self.format_name, delimiter, config.has_header, config.skip_rows,
        )

        with open_text(stream, config) as text:
            line_number = 0

            # Skipped lines are discarded unconditionally but still counted
            for _ in range(config.skip_rows):
                if not text.readline():
                    break
                line_number += 1

            headers: list[str] | None = None
            rows = 0

            for raw_line in text:
                check_cancelled(cancel)
                line_number += 1

                line = _strip_terminator(raw_line)
                if trim:
                    line = line.strip()
                if not line:
                    continue

                fields = split_line(line, delimiter, quote, trim)

                if headers is None:
                    if config.has_header:
                        headers = fields
                        continue
                    headers = [f"Col{i}" for i in range(1, len(fields) + 1)]

                columns: dict[str, ColumnValue] = {}
                for i, name in enumerate(headers):
                    value = fields[i] if i < len(fields) else ""
                    columns[name] = None if null_value is not None and value == null_value else value

                rows += 1
                yield ParsedRow(line_number=line_number, columns=columns)

        logger.info(
            "Finished %s: %d rows, %d lines read",
            self.format_name, rows, line_number,
        )
