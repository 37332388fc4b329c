"""
XML parser for flatrows.

Reads the whole stream as one document with ``xml.etree.ElementTree`` and
turns every selected element into a row. There is no streaming XML reader:
documents are expected to fit in memory.

Record selection:
- No ``record_element``: every element child of the document element.
- Otherwise the path is evaluated against the document, ElementTree path
  dialect (``//Order``, ``/Root/Items/Item``, ``Item[@type='a']``). When
  ``xml_namespace`` is set the URI is bound to the fixed prefix ``ns``, so
  paths are written as ``//ns:Order``. XPath syntax outside that dialect
  (unions, axes, functions other than ``last()``, unbound prefixes) is
  rejected rather than matching nothing.

Per selected element:
- Attributes become ``@<localname>`` columns.
- Element children become ``<localname>`` columns. A child whose first
  child node is an element is stored as its outer XML text; any other
  child (leaf or mixed content) is stored as its text content.
- An element with neither attributes nor element children becomes a single
  ``value`` column holding its text.

A document that does not parse, or a path that does not evaluate, yields
one error row. A path that matches nothing yields no rows and no error.
"""

from __future__ import annotations

import copy
import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from typing import BinaryIO

from flatrows.cancellation import CancellationToken
from flatrows.config import ImportFormatConfig
from flatrows.parsers.base import (
    BaseParser,
    ColumnValue,
    ParsedRow,
    check_cancelled,
    read_all_text,
)

logger = logging.getLogger(__name__)

NAMESPACE_PREFIX = "ns"

_QUOTED = re.compile(r"'[^']*'|\"[^\"]*\"")
_CLARK = re.compile(r"\{[^}]*\}")
_FUNCTION = re.compile(r"([A-Za-z_][\w.-]*)\s*\(")
_PREFIX = re.compile(r"(?<![\w.-])([A-Za-z_][\w.-]*):(?!:)")


def local_name(tag: str) -> str:
    """Strip the ``{uri}`` part ElementTree puts in front of qualified names."""
    return tag.rsplit("}", 1)[1] if tag.startswith("{") else tag


def outer_xml(element: ET.Element) -> str:
    """Serialize *element* without the text that follows its end tag."""
    detached = copy.copy(element)
    detached.tail = None
    return ET.tostring(detached, encoding="unicode")


def inner_text(element: ET.Element) -> str:
    return "".join(element.itertext())


def check_path(path: str, namespace: str | None) -> None:
    """Reject XPath syntax that ElementPath would silently match as nothing.

    ElementPath treats an unknown construct (a union, an axis, a function
    call, a relative ``prefix:name``) as a literal tag, so the path matches
    no elements instead of failing. Quoted literals and ``{uri}`` names are
    ignored while checking.

    Raises:
        SyntaxError: If the path uses unsupported syntax or an unbound prefix.
    """
    bare = _QUOTED.sub("", _CLARK.sub("", path))
    if "|" in bare:
        raise SyntaxError("unions ('|') are not supported")
    if "::" in bare:
        raise SyntaxError("axes ('::') are not supported")
    for name in _FUNCTION.findall(bare):
        if name != "last":
            raise SyntaxError(f"function '{name}()' is not supported")
    for prefix in _PREFIX.findall(bare):
        if prefix != NAMESPACE_PREFIX or not namespace:
            raise SyntaxError(f"prefix '{prefix}' not found in prefix map")


def select_records(
    root: ET.Element,
    record_element: str | None,
    namespace: str | None,
) -> list[ET.Element]:
    """Evaluate the record path against the document rooted at *root*.

    ElementTree paths are relative to an element, so the document element
    is wrapped in a synthetic parent that plays the document node: ``/Root``
    becomes ``./Root`` and ``//Item`` becomes ``.//Item``.

    Raises:
        SyntaxError: If the path is invalid or uses an unbound prefix.
    """
    if record_element is None or not record_element.strip():
        return list(root)

    path = record_element.strip()
    check_path(path, namespace)
    if path.startswith("/"):
        path = "." + path

    document = ET.Element("document")
    document.append(root)
    namespaces = {NAMESPACE_PREFIX: namespace} if namespace else None
    return document.findall(path, namespaces)


def starts_with_element(element: ET.Element) -> bool:
    """True when the first significant child node of *element* is an element.

    Whitespace-only text before the first child does not count. Mixed
    content such as ``<n>x<b>y</b></n>`` is False.
    """
    if not len(element):
        return False
    return element.text is None or not element.text.strip()


def to_columns(element: ET.Element) -> dict[str, ColumnValue]:
    """Flatten one record element into a column map."""
    columns: dict[str, ColumnValue] = {}
    for name, value in element.attrib.items():
        columns[f"@{local_name(name)}"] = value
    for child in element:
        columns[local_name(child.tag)] = (
            outer_xml(child) if starts_with_element(child) else inner_text(child)
        )
    if not columns:
        columns["value"] = inner_text(element)
    return columns


class XmlParser(BaseParser):
    """Parser for XML documents."""

    format_name = "XML"

    def parse(
        self,
        stream: BinaryIO,
        config: ImportFormatConfig,
        cancel: CancellationToken | None = None,
    ) -> Iterator[ParsedRow]:
        check_cancelled(cancel)
        text = read_all_text(stream, config)

        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            logger.warning("XML document could not be parsed: %s", e)
            yield ParsedRow.error(0, f"XML parse error: {e}")
            return

        path = config.record_element or f"/{root.tag}/*"
        # ElementPath reports some malformed paths as TypeError/ValueError
        try:
            nodes = select_records(root, config.record_element, config.xml_namespace)
        except (SyntaxError, KeyError, TypeError, ValueError) as e:
            logger.warning("Record path %r could not be evaluated: %s", path, e)
            yield ParsedRow.error(0, f"XPath error '{path}': {e}")
            return

        if not nodes:
            logger.warning("XML parser: no elements matched path %r", path)
            return

        logger.info("Parsing XML document: %d records matched %r", len(nodes), path)
        for line_number, node in enumerate(nodes, start=1):
            check_cancelled(cancel)
            yield ParsedRow(line_number=line_number, columns=to_columns(node))
