"""ByamlDecoder: materializes BYAML bytes into Node trees and pools.

Layout summary (all offsets absolute, all words in the file's byte order):

- Container header: one type byte followed by a 24-bit child count.
- Array:  ``count`` type bytes, padded to 4 bytes, then one 4-byte slot per
  child.
- Object: one 8-byte entry per child, a 24-bit name index and a type byte
  followed by a 4-byte slot.
- Slot:   scalars live inline (pool indices for strings and paths); nested
  containers store the absolute offset of their header.

Each child slot position is computed from the container's own offset, so a
nested decode never shifts where the next sibling is read from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from byaml_xml.config import ByteOrder, CodecConfig
from byaml_xml.document import MAGIC, ByamlDocument, ByamlHeader
from byaml_xml.errors import MalformedInputError
from byaml_xml.nodes import (
    Array,
    Bool,
    Float32,
    Int32,
    Node,
    NodeType,
    Null,
    Object,
    PathData,
    StringRef,
)
from byaml_xml.pools import BlobPool, StringPool
from byaml_xml.reader import BinaryView, decode_legacy_string

__all__ = ["ByamlDecoder", "decode", "detect_byte_order"]

logger = logging.getLogger(__name__)

_HEADER_SIZE = 0x10
_CONTAINER_TYPES = (NodeType.ARRAY, NodeType.OBJECT)


def _align4(value: int) -> int:
    return (value + 3) & ~3


def detect_byte_order(data: bytes) -> ByteOrder:
    """Return the byte order announced by the file's magic bytes.

    Raises:
        MalformedInputError: If the buffer does not start with ``BY`` or ``YB``.
    """
    magic = bytes(data[:2])
    for byte_order, expected in MAGIC.items():
        if magic == expected:
            return byte_order
    msg = f"bad BYAML magic {magic!r}"
    raise MalformedInputError(msg)


@dataclass
class ByamlDecoder:
    """Decodes nodes, pools and headers out of a BYAML buffer.

    The buffer is never mutated and no read position is shared between
    calls; every method takes the absolute offset it decodes from.

    Args:
        data: The complete BYAML buffer.
        config: Codec settings.  ``config.byte_order`` is used unless
            ``byte_order`` is given explicitly.
        byte_order: Override for the buffer's endianness.

    Example::

        decoder = ByamlDecoder.for_file(data)
        document = decoder.decode_document()
    """

    data: bytes
    config: CodecConfig = field(default_factory=CodecConfig)
    byte_order: ByteOrder | None = None

    def __post_init__(self) -> None:
        if self.byte_order is None:
            self.byte_order = self.config.byte_order
        self._view = BinaryView(self.data, self.byte_order)

    @classmethod
    def for_file(cls, data: bytes, config: CodecConfig | None = None) -> ByamlDecoder:
        """Create a decoder whose byte order comes from the file magic."""
        return cls(data, config or CodecConfig(), byte_order=detect_byte_order(data))

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def decode_header(self) -> ByamlHeader:
        """Decode the file header.

        The word at 0x0C is a path table offset when it points at a path
        table node (or is zero and a container root follows at 0x10);
        otherwise it is the root offset of a header without a path table.
        """
        view = self._view
        byte_order = detect_byte_order(self.data)
        if byte_order is not self.byte_order:
            msg = f"magic announces {byte_order} byte order, decoder reads {self.byte_order}"
            raise MalformedInputError(msg)

        version = view.u16(0x02)
        name_table = view.u32(0x04)
        string_table = view.u32(0x08)
        third = view.u32(0x0C)

        if third and view.u8(third) == NodeType.PATH_TABLE:
            header = ByamlHeader(
                byte_order, version, name_table, string_table, third, view.u32(0x10)
            )
        elif third == 0 and len(view) >= _HEADER_SIZE + 4 and self._is_container_at(
            view.u32(0x10)
        ):
            header = ByamlHeader(
                byte_order, version, name_table, string_table, 0, view.u32(0x10)
            )
        else:
            header = ByamlHeader(
                byte_order,
                version,
                name_table,
                string_table,
                0,
                third,
                has_path_table=False,
            )
        logger.debug("decoded header: %s", header)
        return header

    def decode_document(self) -> ByamlDocument:
        """Decode the header, the three pools and the root node."""
        header = self.decode_header()
        names = StringPool()
        strings = StringPool()
        blobs = BlobPool()
        root: Node = Null()
        if header.name_table_offset:
            names = self.decode_string_pool(header.name_table_offset)
        if header.string_table_offset:
            strings = self.decode_string_pool(header.string_table_offset)
        if header.path_table_offset:
            blobs = self.decode_blob_pool(header.path_table_offset)
        if header.root_offset:
            root = self.decode_node(header.root_offset)
        return ByamlDocument(
            root=root,
            names=names,
            strings=strings,
            blobs=blobs,
            byte_order=header.byte_order,
            version=header.version,
            has_path_table=header.has_path_table,
        )

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def decode_node(self, offset: int) -> Node:
        """Decode the container whose header starts at ``offset``.

        Raises:
            MalformedInputError: On unknown type tags or reference cycles.
            OutOfRangeReferenceError: When a read falls outside the buffer.
        """
        tag = self._view.u8(offset)
        if tag not in _CONTAINER_TYPES:
            msg = f"expected an array or object node at {offset:#x}, found tag {tag:#04x}"
            raise MalformedInputError(msg)
        return self._decode_container(NodeType(tag), offset, frozenset())

    def _is_container_at(self, offset: int) -> bool:
        return 0 < offset < len(self._view) and self._view.u8(offset) in _CONTAINER_TYPES

    def _decode_container(
        self, node_type: NodeType, offset: int, ancestors: frozenset[int]
    ) -> Node:
        if offset in ancestors:
            msg = f"container at {offset:#x} references itself"
            raise MalformedInputError(msg)
        tag = self._view.u8(offset)
        if tag != node_type:
            msg = f"slot says {node_type.name} but node at {offset:#x} has tag {tag:#04x}"
            raise MalformedInputError(msg)

        ancestors = ancestors | {offset}
        count = self._view.u24(offset + 1)
        if node_type is NodeType.ARRAY:
            return self._decode_array(offset, count, ancestors)
        return self._decode_object(offset, count, ancestors)

    def _decode_array(self, offset: int, count: int, ancestors: frozenset[int]) -> Array:
        tags = self._view.read(offset + 4, count)
        start = offset + 4 + _align4(count)
        return Array(
            tuple(
                self._decode_value(tags[i], start + 4 * i, ancestors)
                for i in range(count)
            )
        )

    def _decode_object(self, offset: int, count: int, ancestors: frozenset[int]) -> Object:
        children: list[tuple[int, Node]] = []
        for i in range(count):
            entry = offset + 4 + 8 * i
            name = self._view.u24(entry)
            tag = self._view.u8(entry + 3)
            children.append((name, self._decode_value(tag, entry + 4, ancestors)))
        return Object(tuple(children))

    def _decode_value(self, tag: int, slot: int, ancestors: frozenset[int]) -> Node:
        """Decode one child from its 4-byte slot according to ``tag``."""
        try:
            node_type = NodeType(tag)
        except ValueError:
            msg = f"unknown node type {tag:#04x} in slot at {slot:#x}"
            raise MalformedInputError(msg) from None

        view = self._view
        if node_type is NodeType.STRING:
            return StringRef(view.u32(slot))
        if node_type is NodeType.PATH:
            return PathData(view.u32(slot))
        if node_type is NodeType.BOOL:
            return Bool(view.u32(slot) != 0)
        if node_type is NodeType.INT:
            return Int32(view.s32(slot))
        if node_type is NodeType.FLOAT:
            return Float32(view.f32(slot))
        if node_type is NodeType.NULL:
            return Null()
        if node_type in _CONTAINER_TYPES:
            return self._decode_container(node_type, view.u32(slot), ancestors)

        msg = f"{node_type.name} node cannot appear in a value slot (at {slot:#x})"
        raise MalformedInputError(msg)

    # ------------------------------------------------------------------
    # Pools
    # ------------------------------------------------------------------

    def decode_string_pool(self, offset: int) -> StringPool:
        """Decode a string table node; entry offsets are relative to ``offset``."""
        count = self._expect_table(offset, NodeType.STRING_TABLE)
        relative = self._view.u32_array(offset + 4, count)
        codepage = self.config.legacy_codepage
        pool = StringPool.from_values(
            decode_legacy_string(self._view.cstring(offset + rel), codepage)
            for rel in relative
        )
        logger.debug("decoded string table at %#x: %d entries", offset, len(pool))
        return pool

    def decode_blob_pool(self, offset: int) -> BlobPool:
        """Decode a path table node.

        The table stores ``count + 1`` relative offsets; the last one marks
        the end of the final blob.
        """
        count = self._expect_table(offset, NodeType.PATH_TABLE)
        relative = self._view.u32_array(offset + 4, count + 1)
        pool = BlobPool.from_values(
            self._view.read(offset + relative[i], relative[i + 1] - relative[i])
            for i in range(count)
        )
        logger.debug("decoded path table at %#x: %d entries", offset, len(pool))
        return pool

    def _expect_table(self, offset: int, node_type: NodeType) -> int:
        tag = self._view.u8(offset)
        if tag != node_type:
            msg = f"expected {node_type.name} at {offset:#x}, found tag {tag:#04x}"
            raise MalformedInputError(msg)
        return self._view.u24(offset + 1)


def decode(data: bytes, root_offset: int, config: CodecConfig | None = None) -> Node:
    """Decode the container at ``root_offset`` of a raw BYAML buffer.

    Uses ``config.byte_order``; no header is read.
    """
    return ByamlDecoder(data, config or CodecConfig()).decode_node(root_offset)
