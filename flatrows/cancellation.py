"""
Cooperative cancellation for row iterators.

A ``CancellationToken`` is handed to ``BaseParser.parse()``. Parsers check it
at the top of every iteration step and raise ``ParseCancelledError`` once it
is set, so a caller can stop a long parse from another thread (or from its
own consumption loop) and still tell "stopped on request" apart from
"malformed data".
"""

from __future__ import annotations

import threading

from flatrows.exceptions import ParseCancelledError


class CancellationToken:
    """Thread-safe, one-way cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ``ParseCancelledError`` if ``cancel()`` has been called."""
        if self._event.is_set():
            raise ParseCancelledError("Parsing was cancelled")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
