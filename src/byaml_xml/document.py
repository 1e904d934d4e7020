"""ByamlHeader and ByamlDocument: a decoded file and the pools its tree indexes."""

from __future__ import annotations

from dataclasses import dataclass, field

from byaml_xml.config import ByteOrder
from byaml_xml.nodes import Node, Null
from byaml_xml.pools import BlobPool, StringPool

__all__ = ["MAGIC", "ByamlDocument", "ByamlHeader"]

MAGIC: dict[ByteOrder, bytes] = {
    ByteOrder.BIG: b"BY",
    ByteOrder.LITTLE: b"YB",
}


@dataclass(frozen=True, slots=True)
class ByamlHeader:
    """Fixed-size header at the start of a BYAML file.

    Attributes:
        byte_order: Endianness selected by the magic bytes.
        version: Format version word.
        name_table_offset: Absolute offset of the name table, 0 when absent.
        string_table_offset: Absolute offset of the string table, 0 when absent.
        path_table_offset: Absolute offset of the path table, 0 when absent.
        root_offset: Absolute offset of the root container, 0 when absent.
        has_path_table: Whether the header reserves a path table word at
            0x0C.  Older files go straight from the string table to the root.
    """

    byte_order: ByteOrder
    version: int
    name_table_offset: int
    string_table_offset: int
    path_table_offset: int
    root_offset: int
    has_path_table: bool = True


@dataclass(slots=True)
class ByamlDocument:
    """A root node together with the three pools it references.

    Attributes:
        root:     Root node; Null for a file without a root container.
        names:    Object member names, indexed by ``Object`` entries.
        strings:  String values, indexed by ``StringRef``.
        blobs:    Path blobs, indexed by ``PathData``.
        byte_order: Endianness of the source file, and of the path blobs.
        version:  Format version word of the source file.
        has_path_table: Whether the source header carried a path table word.
    """

    root: Node = field(default_factory=Null)
    names: StringPool = field(default_factory=StringPool)
    strings: StringPool = field(default_factory=StringPool)
    blobs: BlobPool = field(default_factory=BlobPool)
    byte_order: ByteOrder = ByteOrder.BIG
    version: int = 1
    has_path_table: bool = True
