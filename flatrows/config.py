"""
Format configuration model and loaders for flatrows.

This module defines the Pydantic model that describes *how* a source file
should be read (delimiter, header presence, data root path, ...), plus
helpers to build it from stored profile metadata.

Key model:
- ImportFormatConfig: Immutable per-parse options. Accepts snake_case field
  names and the camelCase keys used by upstream profile storage
  (``hasHeader``, ``dataRootPath``, ...).

Key functions:
- parse_format_config(raw) -> ImportFormatConfig: From JSON or YAML text.
- load_format_config(path) -> ImportFormatConfig: From a .json/.yaml file.
- resolve_encoding(name) -> str: Map a configured encoding name to a codec.

Why Pydantic + YAML:
- Pydantic gives us strict validation and clear error messages for
  hand-edited profile configs.
- Stored configs are JSON; hand-written ones are often YAML. We try JSON
  first and fall back to YAML.
"""

from __future__ import annotations

import codecs
import json
import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from flatrows.exceptions import FormatConfigError

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8-sig"

# Names accepted without a codec lookup. UTF-8 strips a leading BOM.
_ENCODING_ALIASES = {
    "UTF-8": DEFAULT_ENCODING,
    "UTF8": DEFAULT_ENCODING,
    "UTF-16": "utf-16",
    "UTF16": "utf-16",
    "UNICODE": "utf-16",
    "ASCII": "ascii",
    "ISO-8859-1": "latin-1",
    "LATIN1": "latin-1",
}


class ImportFormatConfig(BaseModel):
    """Options for a single parse operation.

    Every field has a default, so ``ImportFormatConfig()`` is a valid
    comma-separated, headered, UTF-8 configuration.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    # -- CSV / TSV --
    delimiter: str = Field(",", description="Field separator; first character is used")
    quote_char: str = Field('"', description="Quote character; first character is used")
    encoding: str | None = Field("UTF-8", description="Text encoding of the byte stream")
    has_header: bool = Field(True, description="First data line holds column names")
    skip_rows: int = Field(0, ge=0, description="Lines discarded before parsing")
    trim_whitespace: bool = Field(True, description="Trim every line and field")
    null_value: str | None = Field(
        None, description="Field literal that is converted to a null value"
    )

    # -- JSON / JSONL --
    is_json_lines: bool = Field(False, description="One JSON document per line")
    data_root_path: str | None = Field(
        None, description="Dot path to the record array, e.g. '$.data.items'"
    )

    # -- XML --
    record_element: str | None = Field(
        None, description="Path selecting record elements, e.g. '//Order'"
    )
    xml_namespace: str | None = Field(
        None, description="Namespace URI bound to the 'ns' prefix in record_element"
    )

    @property
    def delimiter_char(self) -> str:
        return self.delimiter[0] if self.delimiter else ","

    @property
    def quote(self) -> str:
        return self.quote_char[0] if self.quote_char else '"'


def resolve_encoding(name: str | None) -> str:
    """Map a configured encoding name to a Python codec name.

    ``None`` and unknown names fall back to UTF-8 (BOM-tolerant).
    """
    if name is None or not name.strip():
        return DEFAULT_ENCODING
    alias = _ENCODING_ALIASES.get(name.strip().upper())
    if alias is not None:
        return alias
    try:
        return codecs.lookup(name.strip()).name
    except LookupError:
        logger.warning("Unknown encoding %r, falling back to UTF-8", name)
        return DEFAULT_ENCODING


def parse_format_config(raw: str | None) -> ImportFormatConfig:
    """Build an ImportFormatConfig from stored JSON or YAML text.

    Blank or missing text yields the defaults.

    Raises:
        FormatConfigError: If the text cannot be parsed, is not a mapping,
            or contains invalid values.
    """
    if raw is None or not raw.strip():
        return ImportFormatConfig()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise FormatConfigError(
                f"Format config is not valid JSON/YAML: {e}"
            ) from e
    if data is None:
        return ImportFormatConfig()
    if not isinstance(data, dict):
        raise FormatConfigError(
            f"Format config must be a mapping, got {type(data).__name__}"
        )
    try:
        return ImportFormatConfig.model_validate(data)
    except ValidationError as e:
        raise FormatConfigError(f"Invalid format config: {e}") from e


def load_format_config(path: str | Path) -> ImportFormatConfig:
    """Load an ImportFormatConfig from a .json/.yaml file.

    Raises:
        FileNotFoundError: If the file does not exist.
        FormatConfigError: If the content is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Format config file not found: {path}")
    config = parse_format_config(path.read_text(encoding="utf-8"))
    logger.info("Loaded format config from %s", path)
    return config
