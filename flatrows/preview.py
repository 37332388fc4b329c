"""
Row preview for flatrows.

Consumes the head of a row iterator and summarises it for display: the
first ``max_rows`` data rows, the union of their column names, and one
warning per error row seen along the way.

This module is the read-side counterpart to the parsers. It works on any
``Iterable[ParsedRow]`` and has no dependency on a specific format, so the
same preview serves CSV, JSON, XML and YAML sources.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import pandas as pd

from flatrows.parsers.base import ColumnValue, ParsedRow

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS = 100


@dataclass
class PreviewResult:
    """Summary of the head of a parse.

    Attributes:
        rows: Column maps of the returned data rows, in input order.
        columns: Union of column names seen on data rows, first-seen order.
            Names differing only in case are listed once.
        total_rows_parsed: Rows pulled from the iterator, error and skipped
            rows included.
        warnings: ``"Row N: <error>"`` for every error row pulled.
    """
    rows: list[dict[str, ColumnValue]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    total_rows_parsed: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def rows_returned(self) -> int:
        return len(self.rows)

    def to_frame(self) -> pd.DataFrame:
        """Return the previewed rows as a DataFrame (columns in preview order).

        Columns missing on a row are ``NaN``/``None``; values are not coerced.
        """
        return pd.DataFrame(self.rows, columns=self.columns, dtype=object)


def preview_rows(
    rows: Iterable[ParsedRow],
    max_rows: int = DEFAULT_MAX_ROWS,
) -> PreviewResult:
    """Collect a preview from *rows*.

    Iteration stops once ``max_rows`` data rows are held and more than
    ``max_rows`` rows have been pulled, so a huge file is never read to
    the end just to show its head. Rows flagged ``is_skipped`` are counted
    but not returned.

    Args:
        rows: Any row iterator, typically ``parser.parse(...)``.
        max_rows: Maximum number of data rows to return. Must be positive.

    Returns:
        A PreviewResult.

    Raises:
        ValueError: If *max_rows* is not positive.
        ParseCancelledError: Propagated from the iterator.
    """
    if max_rows <= 0:
        raise ValueError("max_rows must be greater than 0")

    result = PreviewResult()
    seen: set[str] = set()

    for row in rows:
        result.total_rows_parsed += 1
        if row.parse_error:
            result.warnings.append(f"Row {row.line_number}: {row.parse_error}")
        if row.is_skipped:
            continue

        for name in row.columns:
            if name.casefold() not in seen:
                seen.add(name.casefold())
                result.columns.append(name)

        if len(result.rows) < max_rows and not row.is_error:
            result.rows.append(row.columns)

        if len(result.rows) >= max_rows and result.total_rows_parsed > max_rows:
            break

    logger.info(
        "Preview: %d rows returned of %d parsed, %d warnings",
        result.rows_returned, result.total_rows_parsed, len(result.warnings),
    )
    return result
