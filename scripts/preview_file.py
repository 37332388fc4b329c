"""
Preview script: parse the head of a local file and log what flatrows sees.

Usage:
    uv run python scripts/preview_file.py inputs/orders.csv --format CSV
    uv run python scripts/preview_file.py inputs/feed.jsonl --format JSONL \
        --config inputs/feed.yaml --max-rows 20

The config file (optional) is a JSON or YAML mapping of ImportFormatConfig
fields, e.g. ``{"delimiter": "\\t", "hasHeader": false}``. Formats that imply
a setting (TSV, JSONL) fill it in when the config file does not.
"""

from __future__ import annotations

import argparse
import logging
import sys

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("preview_file")


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _build_config(args: argparse.Namespace):
    """Load the config file (if any) and apply format-implied defaults."""
    from flatrows import ImportFormatConfig, load_format_config

    config = load_format_config(args.config) if args.config else ImportFormatConfig()
    fmt = args.format.upper()
    if fmt == "TSV" and config.delimiter == ",":
        config = config.model_copy(update={"delimiter": "\t"})
    if fmt == "JSONL" and not config.is_json_lines:
        config = config.model_copy(update={"is_json_lines": True})
    return config


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    import flatrows

    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("path", help="Local file to preview")
    parser.add_argument("--format", required=True, help=", ".join(flatrows.SUPPORTED_FORMATS))
    parser.add_argument("--config", help="JSON/YAML file with format options")
    parser.add_argument("--max-rows", type=int, default=flatrows.DEFAULT_MAX_ROWS)
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = _build_config(args)
        result = flatrows.preview_file(
            args.path, args.format, config=config, max_rows=args.max_rows
        )
    except (flatrows.FlatRowsError, FileNotFoundError) as e:
        log.error("%s", e)
        return 1

    log.info("=" * 70)
    log.info("File     : %s", args.path)
    log.info("Format   : %s", args.format.upper())
    log.info("Columns  : %s", ", ".join(result.columns))
    log.info("Parsed   : %d rows (%d returned)", result.total_rows_parsed, result.rows_returned)
    log.info("=" * 70)

    if result.rows:
        print(result.to_frame().to_string(index=False))
    for warning in result.warnings:
        log.warning("%s", warning)

    return 0


if __name__ == "__main__":
    sys.exit(main())
