"""
Base parser protocol / ABC for flatrows.

All format-specific parsers must implement this interface. The contract is:
1. parse() takes a readable *binary* stream and an ImportFormatConfig, and
   returns a lazy iterator of ParsedRow.
2. The iterator is single-pass and forward-only. To parse again, call
   parse() on a fresh stream.
3. The stream is never closed by the parser. Text wrappers are detached
   from it when the iterator finishes or is closed early.
4. Malformed records become error rows (parsing continues); a malformed
   document becomes exactly one error row (parsing stops).
5. If a CancellationToken is passed and gets cancelled, the iterator raises
   ParseCancelledError at the next step instead of producing a row.

Why an ABC:
- Enforces a consistent interface across the four formats.
- Makes it easy to add a new format without touching existing parsers.
- Lets the dispatcher and the preview code stay format-agnostic.
"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import BinaryIO, Union

from flatrows.cancellation import CancellationToken
from flatrows.config import ImportFormatConfig, resolve_encoding

# Closed set of value kinds a column can hold. Composite source values
# (JSON arrays/objects, nested XML, nested YAML) are stored as ``str``.
ColumnValue = Union[None, bool, int, float, Decimal, str]


@dataclass
class ParsedRow:
    """One logical record extracted from a source document.

    Attributes:
        line_number: 1-based position of the record in the input (physical
            line for CSV/JSONL, element index for JSON/XML/YAML). Document
            level error rows carry ``0``.
        columns: Ordered column name -> value map. Empty on error rows.
        parse_error: Set when this row stands for a record (or document)
            that could not be parsed.
        is_skipped: Consumer-side flag for filtered rows. Parsers never set it.
    """
    line_number: int
    columns: dict[str, ColumnValue] = field(default_factory=dict)
    parse_error: str | None = None
    is_skipped: bool = False

    @property
    def is_error(self) -> bool:
        return self.parse_error is not None

    @classmethod
    def error(cls, line_number: int, message: str) -> ParsedRow:
        return cls(line_number=line_number, parse_error=message)


class BaseParser(ABC):
    """Abstract base class for import format parsers.

    Subclasses must implement parse(). Instances hold no per-parse state,
    so one instance may serve several parses (each on its own stream).
    """

    #: Canonical format name used in log messages.
    format_name: str = ""

    @abstractmethod
    def parse(
        self,
        stream: BinaryIO,
        config: ImportFormatConfig,
        cancel: CancellationToken | None = None,
    ) -> Iterator[ParsedRow]:
        """Parse *stream* into rows.

        Args:
            stream: Readable binary stream. Left open.
            config: Format options for this parse.
            cancel: Optional token checked before each row.

        Yields:
            ParsedRow, in input order.

        Raises:
            ParseCancelledError: If *cancel* was triggered.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ---------------------------------------------------------------------------
# Shared stream helpers
# ---------------------------------------------------------------------------

@contextmanager
def open_text(stream: BinaryIO, config: ImportFormatConfig) -> Iterator[io.TextIOWrapper]:
    """Wrap *stream* for text reading without taking ownership of it.

    Uses universal newlines, so ``\\n``, ``\\r\\n`` and ``\\r`` all end a
    line. Undecodable bytes become U+FFFD instead of failing the parse.
    The wrapper is detached on exit, which leaves *stream* open.
    """
    text = io.TextIOWrapper(
        stream, encoding=resolve_encoding(config.encoding), errors="replace"
    )
    try:
        yield text
    finally:
        text.detach()


def read_all_text(stream: BinaryIO, config: ImportFormatConfig) -> str:
    """Decode the whole remaining stream. Used by whole-document parsers."""
    with open_text(stream, config) as text:
        return text.read()


def check_cancelled(cancel: CancellationToken | None) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled()


def split_root_path(path: str | None) -> list[str]:
    """Split a ``$.a.b`` style data root path into its segments.

    A leading ``$.`` or ``$`` is stripped and empty segments are ignored,
    so ``None``, ``""`` and ``"$"`` all mean "the document root".
    """
    if path is None or not path.strip():
        return []
    path = path.strip()
    if path.startswith("$."):
        path = path[2:]
    elif path.startswith("$"):
        path = path[1:]
    return [segment for segment in path.split(".") if segment]
