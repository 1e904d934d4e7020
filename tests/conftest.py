"""Shared fixtures: a small BYAML layout assembler and a sample course file.

The assembler writes nodes bottom-up (children before their parents) so every
offset a parent stores is already known.  It only exists to produce test
inputs; the package itself never writes BYAML bytes.
"""

from __future__ import annotations

import struct
from collections.abc import Callable

import pytest

from byaml_xml import ByteOrder, NodeType

# (type tag, 4 raw slot bytes)
Slot = tuple[int, bytes]


class ByamlAssembler:
    """Appends BYAML nodes to a buffer and returns their offsets."""

    def __init__(self, byte_order: ByteOrder = ByteOrder.BIG, header_size: int = 0x14) -> None:
        self.byte_order = byte_order
        self._prefix = byte_order.struct_prefix
        self._buffer = bytearray(header_size)

    # -- primitives ----------------------------------------------------

    def _u24(self, value: int) -> bytes:
        return value.to_bytes(3, "big" if self.byte_order is ByteOrder.BIG else "little")

    def _u32(self, value: int) -> bytes:
        return struct.pack(f"{self._prefix}I", value)

    def _node_header(self, tag: int, count: int) -> bytes:
        return bytes([tag]) + self._u24(count)

    def _align(self) -> int:
        while len(self._buffer) % 4:
            self._buffer.append(0)
        return len(self._buffer)

    def tell(self) -> int:
        """Offset the next node will be written at."""
        return self._align()

    def pad(self, size: int) -> None:
        """Append ``size`` filler bytes."""
        self._buffer.extend(b"\xee" * size)

    # -- slots ---------------------------------------------------------

    def string(self, index: int) -> Slot:
        return NodeType.STRING, self._u32(index)

    def path(self, index: int) -> Slot:
        return NodeType.PATH, self._u32(index)

    def boolean(self, value: bool) -> Slot:
        return NodeType.BOOL, self._u32(1 if value else 0)

    def int32(self, value: int) -> Slot:
        return NodeType.INT, struct.pack(f"{self._prefix}i", value)

    def float32(self, value: float) -> Slot:
        return NodeType.FLOAT, struct.pack(f"{self._prefix}f", value)

    def null(self) -> Slot:
        return NodeType.NULL, b"\x00\x00\x00\x00"

    def array_ref(self, offset: int) -> Slot:
        return NodeType.ARRAY, self._u32(offset)

    def object_ref(self, offset: int) -> Slot:
        return NodeType.OBJECT, self._u32(offset)

    def raw_slot(self, tag: int, payload: bytes = b"\x00\x00\x00\x00") -> Slot:
        return tag, payload

    # -- nodes ---------------------------------------------------------

    def array(self, items: list[Slot]) -> int:
        offset = self._align()
        self._buffer += self._node_header(NodeType.ARRAY, len(items))
        self._buffer += bytes(tag for tag, _ in items)
        self._align()
        for _, payload in items:
            self._buffer += payload
        return offset

    def object(self, entries: list[tuple[int, Slot]]) -> int:
        offset = self._align()
        self._buffer += self._node_header(NodeType.OBJECT, len(entries))
        for name, (tag, payload) in entries:
            self._buffer += self._u24(name) + bytes([tag]) + payload
        return offset

    def string_table(self, strings: list[str | bytes]) -> int:
        offset = self._align()
        encoded = [s.encode("utf-8") if isinstance(s, str) else s for s in strings]
        relative = []
        cursor = 4 + 4 * len(encoded)
        for raw in encoded:
            relative.append(cursor)
            cursor += len(raw) + 1
        self._buffer += self._node_header(NodeType.STRING_TABLE, len(encoded))
        for rel in relative:
            self._buffer += self._u32(rel)
        for raw in encoded:
            self._buffer += raw + b"\x00"
        return offset

    def path_table(self, blobs: list[bytes]) -> int:
        offset = self._align()
        relative = []
        cursor = 4 + 4 * (len(blobs) + 1)
        for blob in blobs:
            relative.append(cursor)
            cursor += len(blob)
        relative.append(cursor)
        self._buffer += self._node_header(NodeType.PATH_TABLE, len(blobs))
        for rel in relative:
            self._buffer += self._u32(rel)
        for blob in blobs:
            self._buffer += blob
        return offset

    def header(
        self,
        name_table: int,
        string_table: int,
        path_table: int | None,
        root: int,
        version: int = 1,
    ) -> None:
        """Write the file header; ``path_table=None`` omits the path table word."""
        magic = b"BY" if self.byte_order is ByteOrder.BIG else b"YB"
        words = [name_table, string_table]
        if path_table is not None:
            words.append(path_table)
        words.append(root)
        header = magic + struct.pack(f"{self._prefix}H", version)
        header += b"".join(self._u32(word) for word in words)
        self._buffer[: len(header)] = header

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


def pack_point(
    x: float, y: float, z: float, nx: float, ny: float, nz: float, val: int,
    byte_order: ByteOrder = ByteOrder.BIG,
) -> bytes:
    return struct.pack(f"{byte_order.struct_prefix}6fi", x, y, z, nx, ny, nz, val)


SAMPLE_NAMES = ["Enabled", "Id", "Name", "Objs", "Path", "Scale", "Unit", "type"]
SAMPLE_STRINGS = ["Dokan", "Kuribo"]


def build_sample(byte_order: ByteOrder = ByteOrder.BIG) -> bytes:
    """A small course file exercising every node kind.

    Root object::

        Objs:  [ {Enabled: true, Id: 1, Name: "Kuribo", Scale: 1.5f},
                 {Enabled: false, Id: -7, Name: "Dokan", Unit: null} ]
        Path:  path with two points
        Unit:  null
        type:  3
        Scale: 0.25f
    """
    asm = ByamlAssembler(byte_order)
    names = asm.string_table(SAMPLE_NAMES)
    strings = asm.string_table(SAMPLE_STRINGS)
    blob = pack_point(1.0, 2.0, 3.0, 0.0, 1.0, 0.0, 7, byte_order) + pack_point(
        -4.5, 0.25, 100.0, 0.0, 0.0, -1.0, -2, byte_order
    )
    paths = asm.path_table([blob])
    first = asm.object(
        [
            (0, asm.boolean(True)),
            (1, asm.int32(1)),
            (2, asm.string(1)),
            (5, asm.float32(1.5)),
        ]
    )
    second = asm.object(
        [
            (0, asm.boolean(False)),
            (1, asm.int32(-7)),
            (2, asm.string(0)),
            (6, asm.null()),
        ]
    )
    objs = asm.array([asm.object_ref(first), asm.object_ref(second)])
    root = asm.object(
        [
            (3, asm.array_ref(objs)),
            (4, asm.path(0)),
            (6, asm.null()),
            (7, asm.int32(3)),
            (5, asm.float32(0.25)),
        ]
    )
    asm.header(names, strings, paths, root)
    return asm.getvalue()


@pytest.fixture
def make_assembler() -> Callable[..., ByamlAssembler]:
    """Factory for fresh ByamlAssembler instances."""
    return ByamlAssembler


@pytest.fixture
def sample_bytes() -> bytes:
    """Big-endian sample course file (see ``build_sample``)."""
    return build_sample(ByteOrder.BIG)


@pytest.fixture
def sample_bytes_le() -> bytes:
    """Little-endian variant of the sample course file."""
    return build_sample(ByteOrder.LITTLE)


@pytest.fixture
def sample_names() -> list[str]:
    """Name table of the sample course file, in stored order."""
    return list(SAMPLE_NAMES)


@pytest.fixture
def sample_strings() -> list[str]:
    """String table of the sample course file, in stored order."""
    return list(SAMPLE_STRINGS)


@pytest.fixture
def single_member_file() -> Callable[..., bytes]:
    """Factory for a big-endian file whose root object has one member, ``Value``.

    Call it with a function that takes the assembler and returns the member's
    slot, plus an optional string table.
    """

    def _build(
        slot_for: Callable[[ByamlAssembler], Slot],
        strings: list[str | bytes] | None = None,
    ) -> bytes:
        asm = ByamlAssembler()
        names = asm.string_table(["Value"])
        string_table = asm.string_table(strings) if strings is not None else 0
        root = asm.object([(0, slot_for(asm))])
        asm.header(names, string_table, 0, root)
        return asm.getvalue()

    return _build
