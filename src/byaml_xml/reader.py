"""BinaryView: bounds-checked primitive reads at absolute offsets.

The decoder never moves a shared stream cursor.  Every read names its own
absolute offset into an immutable buffer, so decoding a nested container
cannot disturb the position of its siblings.
"""

from __future__ import annotations

import struct

from byaml_xml.config import ByteOrder
from byaml_xml.errors import OutOfRangeReferenceError

__all__ = ["BinaryView", "decode_legacy_string"]


def decode_legacy_string(raw: bytes, codepage: str) -> str:
    """Decode pooled string bytes the way legacy BYAML tooling does.

    The bytes are read through a single-byte code page, converted back to
    bytes with the same code page and only then decoded as UTF-8.
    ``surrogateescape`` keeps bytes the code page leaves unmapped intact
    across the first two steps; malformed UTF-8 becomes U+FFFD.
    """
    text = raw.decode(codepage, errors="surrogateescape")
    return text.encode(codepage, errors="surrogateescape").decode(
        "utf-8", errors="replace"
    )


class BinaryView:
    """Read-only view over a byte buffer with a fixed byte order.

    Args:
        data: The complete buffer.  Offsets are absolute positions in it.
        byte_order: Endianness of every multi-byte value.
    """

    def __init__(self, data: bytes | bytearray | memoryview, byte_order: ByteOrder) -> None:
        self._data = bytes(data)
        self.byte_order = byte_order
        prefix = byte_order.struct_prefix
        self._u16 = struct.Struct(f"{prefix}H")
        self._u32 = struct.Struct(f"{prefix}I")
        self._s32 = struct.Struct(f"{prefix}i")
        self._f32 = struct.Struct(f"{prefix}f")

    def __len__(self) -> int:
        return len(self._data)

    def _check(self, offset: int, size: int) -> None:
        if offset < 0 or offset + size > len(self._data):
            msg = (
                f"read of {size} byte(s) at offset {offset:#x} is outside "
                f"the {len(self._data)}-byte buffer"
            )
            raise OutOfRangeReferenceError(msg)

    def u8(self, offset: int) -> int:
        self._check(offset, 1)
        return self._data[offset]

    def u16(self, offset: int) -> int:
        self._check(offset, 2)
        return self._u16.unpack_from(self._data, offset)[0]

    def u24(self, offset: int) -> int:
        """Read an unsigned 24-bit integer (container counts, object names)."""
        raw = self.read(offset, 3)
        return int.from_bytes(raw, "big" if self.byte_order is ByteOrder.BIG else "little")

    def u32(self, offset: int) -> int:
        self._check(offset, 4)
        return self._u32.unpack_from(self._data, offset)[0]

    def s32(self, offset: int) -> int:
        self._check(offset, 4)
        return self._s32.unpack_from(self._data, offset)[0]

    def f32(self, offset: int) -> float:
        self._check(offset, 4)
        return self._f32.unpack_from(self._data, offset)[0]

    def u32_array(self, offset: int, count: int) -> list[int]:
        self._check(offset, 4 * count)
        return [self._u32.unpack_from(self._data, offset + 4 * i)[0] for i in range(count)]

    def read(self, offset: int, size: int) -> bytes:
        """Return ``size`` raw bytes starting at ``offset``."""
        if size < 0:
            msg = f"negative read size {size} at offset {offset:#x}"
            raise OutOfRangeReferenceError(msg)
        self._check(offset, size)
        return self._data[offset : offset + size]

    def cstring(self, offset: int) -> bytes:
        """Return the NUL-terminated byte string at ``offset`` (without the NUL)."""
        self._check(offset, 1)
        end = self._data.find(b"\x00", offset)
        if end < 0:
            msg = f"unterminated string at offset {offset:#x}"
            raise OutOfRangeReferenceError(msg)
        return self._data[offset:end]
