"""
Custom exception hierarchy for flatrows.

Why a custom hierarchy:
- Callers can tell a configuration mistake (UnsupportedFormatError,
  FormatConfigError) apart from a cooperative stop (ParseCancelledError)
  without relying on generic ValueError/RuntimeError.
- Malformed *data* is never raised to the caller: parsers turn it into
  error rows.
"""


class FlatRowsError(Exception):
    """Base exception for all flatrows errors."""


class UnsupportedFormatError(FlatRowsError, ValueError):
    """Raised by the dispatcher when a format name is not recognized.

    Raised at selection time, before any stream is touched.
    """


class FormatConfigError(FlatRowsError):
    """Raised when a stored format configuration cannot be loaded.

    This can happen if:
    - The text is neither valid JSON nor valid YAML.
    - The top-level value is not a mapping.
    - A field has the wrong type (e.g. ``skipRows: -1``).
    """


class ParseCancelledError(FlatRowsError):
    """Raised from a row iterator when its cancellation token was triggered.

    Distinct from parse errors: the data was fine, the caller asked to stop.
    """
