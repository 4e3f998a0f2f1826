"""XML and XHTML text extraction."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from lxml import etree  # type: ignore[import-untyped]

from docindex.errors import ExtractionError


def _parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, recover=False)


def iter_char_data(root: etree._Element) -> Iterator[str]:
    """Yield element text and tails in document order."""
    for node in root.iter():
        if isinstance(node.tag, str) and node.text:
            yield node.text
        if node is not root and node.tail:
            yield node.tail


def load_xml_text(path: Path) -> str:
    """Concatenate the character data of an XML document, space separated."""
    try:
        tree = etree.parse(str(path), _parser())
    except OSError as exc:
        raise ExtractionError(f"could not read file {path}: {exc}") from exc
    except etree.XMLSyntaxError as exc:
        raise ExtractionError(f"error parsing XML file {path}: {exc}") from exc
    return " ".join(iter_char_data(tree.getroot()))
