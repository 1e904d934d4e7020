"""Public API functions for byaml-xml.

Each call builds its own decoder, projector or reifier, so no state is shared
between calls.  The functional ``project``/``reify`` forms operate on a single
element and caller-owned pools; ``to_xml``/``from_xml`` work on whole
documents.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from byaml_xml.config import ByteOrder, CodecConfig
from byaml_xml.decoder import ByamlDecoder, decode
from byaml_xml.document import ByamlDocument
from byaml_xml.errors import MalformedInputError
from byaml_xml.nodes import Node
from byaml_xml.pools import BlobPool, StringPool
from byaml_xml.projector import XmlProjector, to_xml
from byaml_xml.reifier import XmlReifier, from_xml
from byaml_xml.resolve import Pools, documents_equivalent, nodes_equivalent, resolve

__all__ = [
    "Pools",
    "decode",
    "documents_equivalent",
    "from_xml",
    "load",
    "load_file",
    "nodes_equivalent",
    "parse_xml",
    "project",
    "reify",
    "resolve",
    "to_xml",
    "to_xml_string",
]


def load(data: bytes, config: CodecConfig | None = None) -> ByamlDocument:
    """Decode a complete BYAML file (header, pools and root).

    The byte order is taken from the magic bytes, not from ``config``.
    """
    return ByamlDecoder.for_file(data, config).decode_document()


def load_file(path: str | Path, config: CodecConfig | None = None) -> ByamlDocument:
    """Read and decode a BYAML file from disk."""
    return load(Path(path).read_bytes(), config)


def project(
    node: Node,
    names: StringPool,
    strings: StringPool,
    blobs: BlobPool,
    element: ET.Element,
    config: CodecConfig | None = None,
    byte_order: ByteOrder | None = None,
) -> None:
    """Write ``node`` into ``element`` using already-decoded pools."""
    XmlProjector(names, strings, blobs, config, byte_order).project(node, element)


def reify(
    element: ET.Element,
    names: StringPool,
    strings: StringPool,
    blobs: BlobPool,
    config: CodecConfig | None = None,
    byte_order: ByteOrder | None = None,
) -> Node:
    """Build a node from ``element``, interning into the given pools."""
    return XmlReifier(names, strings, blobs, config, byte_order).reify(element)


def to_xml_string(document: ByamlDocument, config: CodecConfig | None = None) -> str:
    """Serialize a document as XML text with an XML declaration.

    Carriage returns are written as ``&#13;`` so that XML line-end
    normalization cannot turn a pooled ``\\r\\n`` into ``\\n`` on reading.
    """
    config = config or CodecConfig()
    root = to_xml(document, config)
    if config.indent is not None:
        ET.indent(root, space=config.indent)
    text = ET.tostring(root, encoding="unicode", xml_declaration=True)
    # attribute values already escape \r; any raw \r left is element text
    return text.replace("\r", "&#13;")


def parse_xml(text: str | bytes, config: CodecConfig | None = None) -> ByamlDocument:
    """Parse XML text and rebuild a document from it.

    Comments are kept by the parser so that they can be skipped the same way
    the reifier skips them inside elements.

    Raises:
        MalformedInputError: If the text is not well-formed XML, or does not
            describe a valid tree.
    """
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    try:
        root = ET.fromstring(text, parser=parser)
    except ET.ParseError as exc:
        msg = f"invalid XML: {exc}"
        raise MalformedInputError(msg) from exc
    return from_xml(root, config)
