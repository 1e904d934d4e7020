"""XmlProjector: writes a Node tree into an ElementTree element.

Projection rules:

- StringRef: ``type="string"``, text is the pooled string.
- PathData:  ``type="path"``, one ``point`` child per 28-byte record.
- Bool / Int32 / Float32: text ``true``/``false``, decimal, decimal + ``f``.
- Null:      ``type="null"``, no text.
- Array:     ``type="array"``, one item element per child.
- Object:    attribute-eligible children become attributes unless their
  name is ``type`` in any case; everything else becomes a child element.
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
    is_attribute_eligible,
)
from byaml_xml.points import FLOAT_FIELDS, format_float, unpack_points
from byaml_xml.pools import BlobPool, StringPool

__all__ = ["TYPE_ATTRIBUTE", "YAMLCONV_NS", "XmlProjector", "to_xml"]

logger = logging.getLogger(__name__)

TYPE_ATTRIBUTE = "type"
YAMLCONV_NS = "yamlconv"

ET.register_namespace("yamlconv", YAMLCONV_NS)

# XML names without a namespace prefix; a colon would need a declared prefix
_NAME_START = (
    "A-Z_a-z\u00c0-\u00d6\u00d8-\u00f6\u00f8-\u02ff\u0370-\u037d\u037f-\u1fff"
    "\u200c-\u200d\u2070-\u218f\u2c00-\u2fef\u3001-\ud7ff\uf900-\ufdcf"
    "\ufdf0-\ufffd\U00010000-\U000effff"
)
_NAME_CHAR = _NAME_START + "\\-.0-9\u00b7\u0300-\u036f\u203f-\u2040"
_NCNAME = re.compile(f"[{_NAME_START}][{_NAME_CHAR}]*")
_INVALID_XML_CHAR = re.compile(
    "[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def _check_name(name: str) -> str:
    if not _NCNAME.fullmatch(name):
        msg = f"member name {name!r} is not a valid XML name"
        raise MalformedInputError(msg)
    return name


def _check_text(text: str) -> str:
    match = _INVALID_XML_CHAR.search(text)
    if match:
        msg = f"string {text!r} contains {match.group()!r}, which XML cannot represent"
        raise MalformedInputError(msg)
    return text


def _scalar_text(node: Bool | Int32 | Float32) -> str:
    if isinstance(node, Bool):
        return "true" if node.value else "false"
    if isinstance(node, Int32):
        return str(node.value)
    return format_float(node.value)


class XmlProjector:
    """Projects nodes onto XML elements using already-decoded pools.

    The projector only reads its pools.  Projecting the same node onto two
    fresh elements yields identical XML.

    Args:
        names:   Name table resolving ``Object`` member names.
        strings: String table resolving ``StringRef`` indices.
        blobs:   Path table resolving ``PathData`` indices.
        config:  Codec settings (item tag, default byte order).
        byte_order: Byte order of the path blobs; defaults to
            ``config.byte_order``.
    """

    def __init__(
        self,
        names: StringPool,
        strings: StringPool,
        blobs: BlobPool,
        config: CodecConfig | None = None,
        byte_order: ByteOrder | None = None,
    ) -> None:
        self.names = names
        self.strings = strings
        self.blobs = blobs
        self.config = config or CodecConfig()
        self.byte_order = byte_order or self.config.byte_order

    def project(self, node: Node, element: ET.Element) -> None:
        """Write ``node`` into ``element`` (attributes, text and children).

        Raises:
            OutOfRangeReferenceError: If a pool index is not in its pool.
            MalformedInputError: If a path blob is not a whole number of points,
                or a member name or string cannot be written as XML.
        """
        if isinstance(node, StringRef):
            element.set(TYPE_ATTRIBUTE, "string")
            element.text = _check_text(self.strings[node.index])
        elif isinstance(node, PathData):
            element.set(TYPE_ATTRIBUTE, "path")
            self._project_path(node, element)
        elif isinstance(node, (Bool, Int32, Float32)):
            element.text = _scalar_text(node)
        elif isinstance(node, Null):
            element.set(TYPE_ATTRIBUTE, "null")
        elif isinstance(node, Array):
            element.set(TYPE_ATTRIBUTE, "array")
            for child in node.children:
                self.project(child, ET.SubElement(element, self.config.array_item_tag))
        elif isinstance(node, Object):
            self._project_object(node, element)
        else:
            raise TypeError(f"Unsupported node type: {type(node)!r}")

    def _project_path(self, node: PathData, element: ET.Element) -> None:
        for point in unpack_points(self.blobs[node.index], self.byte_order):
            attrib = {name: format_float(getattr(point, name)) for name in FLOAT_FIELDS}
            attrib["val"] = str(point.val)
            ET.SubElement(element, "point", attrib)

    def _project_object(self, node: Object, element: ET.Element) -> None:
        for name_index, child in node.children:
            name = _check_name(self.names[name_index])
            # "type" is the discriminator attribute, so such members stay elements;
            # an "xmlns" attribute would be read back as a namespace declaration
            if (
                is_attribute_eligible(child)
                and name.lower() != TYPE_ATTRIBUTE
                and name != "xmlns"
            ):
                element.set(name, _scalar_text(child))  # type: ignore[arg-type]
            else:
                self.project(child, ET.SubElement(element, name))


def to_xml(document: ByamlDocument, config: CodecConfig | None = None) -> ET.Element:
    """Project a whole document onto a new root element.

    The root element carries the source byte order, version and header
    layout in the ``yamlconv`` namespace; the reifier ignores those
    attributes when rebuilding the tree.
    """
    config = config or CodecConfig()
    root = ET.Element(
        config.root_tag,
        {
            f"{{{YAMLCONV_NS}}}endianness": str(document.byte_order),
            f"{{{YAMLCONV_NS}}}version": str(document.version),
            f"{{{YAMLCONV_NS}}}pathTable": "true" if document.has_path_table else "false",
        },
    )
    projector = XmlProjector(
        document.names,
        document.strings,
        document.blobs,
        config,
        byte_order=document.byte_order,
    )
    projector.project(document.root, root)
    logger.debug(
        "projected document: %d names, %d strings, %d paths",
        len(document.names),
        len(document.strings),
        len(document.blobs),
    )
    return root
