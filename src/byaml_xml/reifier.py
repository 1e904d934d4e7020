"""XmlReifier: rebuilds a Node tree from an ElementTree element.

Pools are built while walking: every object member name, string and path
blob is interned on first sight, so identical values anywhere in the
document share one pool entry.

Dispatch for an element:

1. No element children and ``type="string"``: StringRef of the text.
2. Element children, or no text: container, selected by ``type``
   (``array``, ``path``, ``null``, anything else is an Object).
3. Otherwise a scalar leaf, inferred from the text: trailing ``f`` is a
   Float32, a 32-bit integer is an Int32, ``true``/``false`` is a Bool.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET

from byaml_xml.config import ByteOrder, CodecConfig
from byaml_xml.document import ByamlDocument
from byaml_xml.errors import MalformedInputError
from byaml_xml.nodes import (
    Array,
    Bool,
    Float32,
    Int32,
    Node,
    Null,
    Object,
    PathData,
    StringRef,
)
from byaml_xml.points import FLOAT_FIELDS, PathPoint, pack_points, parse_float
from byaml_xml.pools import BlobPool, StringPool
from byaml_xml.projector import TYPE_ATTRIBUTE, YAMLCONV_NS

__all__ = ["XmlReifier", "from_xml"]

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*")
_INT32_RANGE = range(-(2**31), 2**31)
_XMLNS_URI = "http://www.w3.org/2000/xmlns/"


def _parse_int32(text: str) -> int | None:
    if not _INT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    return value if value in _INT32_RANGE else None


def _is_bookkeeping(name: str) -> bool:
    """Namespace declarations and yamlconv attributes are not tree members."""
    return (
        name == "xmlns"
        or name.startswith("xmlns:")
        or name.startswith(f"{{{_XMLNS_URI}}}")
        or name.startswith(f"{{{YAMLCONV_NS}}}")
    )


def _element_children(element: ET.Element) -> list[ET.Element]:
    # comments and processing instructions carry a callable tag
    return [child for child in element if isinstance(child.tag, str)]


def _text_content(element: ET.Element) -> str:
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element if not isinstance(child.tag, str))
    return "".join(parts)


class XmlReifier:
    """Converts XML elements to nodes, growing its pools as it goes.

    Args:
        names:   Name table to intern object member names into.
        strings: String table to intern ``type="string"`` text into.
        blobs:   Path table to intern packed path blobs into.
        config:  Codec settings.
        byte_order: Byte order used to pack path points; defaults to
            ``config.byte_order``.
    """

    def __init__(
        self,
        names: StringPool | None = None,
        strings: StringPool | None = None,
        blobs: BlobPool | None = None,
        config: CodecConfig | None = None,
        byte_order: ByteOrder | None = None,
    ) -> None:
        self.names = names if names is not None else StringPool()
        self.strings = strings if strings is not None else StringPool()
        self.blobs = blobs if blobs is not None else BlobPool()
        self.config = config or CodecConfig()
        self.byte_order = byte_order or self.config.byte_order

    def reify(self, element: ET.Element) -> Node:
        """Build the node represented by ``element``.

        Raises:
            MalformedInputError: For an un-typed leaf that is not a float,
                32-bit integer or boolean, or for a malformed path point.
        """
        children = _element_children(element)
        node_kind = element.get(TYPE_ATTRIBUTE)
        text = _text_content(element)

        if not children and node_kind == "string":
            return StringRef(self.strings.intern(text))

        if children or not text.strip():
            if node_kind == "array":
                return Array(tuple(self.reify(child) for child in children))
            if node_kind == "path":
                return self._reify_path(children)
            if node_kind == "null":
                return Null()
            return self._reify_object(element, children)

        return self.reify_scalar(text)

    def reify_scalar(self, text: str) -> Bool | Int32 | Float32:
        """Infer a scalar node from leaf or attribute text."""
        stripped = text.strip()
        if stripped[-1:] in ("f", "F"):
            return Float32(parse_float(stripped))

        value = _parse_int32(text)
        if value is not None:
            return Int32(value)

        lowered = stripped.lower()
        if lowered in ("true", "false"):
            return Bool(lowered == "true")

        msg = f"cannot infer a scalar type for {text!r}"
        raise MalformedInputError(msg)

    def _reify_object(self, element: ET.Element, children: list[ET.Element]) -> Object:
        members: list[tuple[int, Node]] = []
        for child in children:
            name = self.names.intern(child.tag)
            members.append((name, self.reify(child)))
        for key, value in element.attrib.items():
            if _is_bookkeeping(key):
                continue
            name = self.names.intern(key)
            members.append((name, self.reify_scalar(value)))
        return Object(tuple(members))

    def _reify_path(self, children: list[ET.Element]) -> PathData:
        points = [
            self._reify_point(child) for child in children if child.tag.lower() == "point"
        ]
        blob = pack_points(points, self.byte_order)
        return PathData(self.blobs.intern(blob))

    def _reify_point(self, element: ET.Element) -> PathPoint:
        try:
            floats = [parse_float(element.attrib[name]) for name in FLOAT_FIELDS]
            raw_val = element.attrib["val"]
        except KeyError as exc:
            msg = f"path point is missing attribute {exc.args[0]!r}"
            raise MalformedInputError(msg) from None
        val = _parse_int32(raw_val)
        if val is None:
            msg = f"path point val is not a 32-bit integer: {raw_val!r}"
            raise MalformedInputError(msg)
        return PathPoint(*floats, val)


def from_xml(root: ET.Element, config: CodecConfig | None = None) -> ByamlDocument:
    """Rebuild a document, with new pools, from a projected root element.

    The byte order, version and header layout come from the root's
    ``yamlconv`` attributes when present, otherwise from ``config``.
    """
    config = config or CodecConfig()
    raw_order = root.get(f"{{{YAMLCONV_NS}}}endianness", str(config.byte_order))
    try:
        byte_order = ByteOrder(raw_order)
    except ValueError:
        msg = f"unknown endianness {raw_order!r}"
        raise MalformedInputError(msg) from None

    raw_version = root.get(f"{{{YAMLCONV_NS}}}version", "1")
    version = _parse_int32(raw_version)
    if version is None:
        msg = f"version is not an integer: {raw_version!r}"
        raise MalformedInputError(msg)
    has_path_table = root.get(f"{{{YAMLCONV_NS}}}pathTable", "true").lower() == "true"

    reifier = XmlReifier(config=config, byte_order=byte_order)
    document = ByamlDocument(
        root=reifier.reify(root),
        names=reifier.names,
        strings=reifier.strings,
        blobs=reifier.blobs,
        byte_order=byte_order,
        version=version,
        has_path_table=has_path_table,
    )
    logger.debug(
        "reified document: %d names, %d strings, %d paths",
        len(document.names),
        len(document.strings),
        len(document.blobs),
    )
    return document
