"""Path point records: the 28-byte payload format behind PathData nodes.

A path blob is a packed run of records, each six float32 values (position
and normal) followed by one int32.  numpy structured dtypes do the packing
so the byte order of the containing file carries through unchanged.
"""

from __future__ import annotations

import re
from typing import NamedTuple

import numpy as np

from byaml_xml.config import ByteOrder
from byaml_xml.errors import MalformedInputError

__all__ = [
    "FLOAT_FIELDS",
    "POINT_FIELDS",
    "POINT_SIZE",
    "PathPoint",
    "format_float",
    "pack_points",
    "parse_float",
    "point_dtype",
    "unpack_points",
]

FLOAT_FIELDS = ("x", "y", "z", "nx", "ny", "nz")
POINT_FIELDS = (*FLOAT_FIELDS, "val")
POINT_SIZE = 28

# decimal with optional exponent, or the nan/inf spellings format_float emits
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|nan|inf(?:inity)?)",
    re.IGNORECASE,
)


class PathPoint(NamedTuple):
    x: float
    y: float
    z: float
    nx: float
    ny: float
    nz: float
    val: int


def point_dtype(byte_order: ByteOrder) -> np.dtype:
    """Structured dtype of one path point in the given byte order."""
    prefix = byte_order.struct_prefix
    return np.dtype(
        [(name, f"{prefix}f4") for name in FLOAT_FIELDS] + [("val", f"{prefix}i4")]
    )


def unpack_points(blob: bytes, byte_order: ByteOrder) -> list[PathPoint]:
    """Split a path blob into PathPoint records.

    Raises:
        MalformedInputError: If the blob length is not a multiple of 28.
    """
    if len(blob) % POINT_SIZE:
        msg = f"path blob of {len(blob)} bytes is not a whole number of {POINT_SIZE}-byte points"
        raise MalformedInputError(msg)
    records = np.frombuffer(blob, dtype=point_dtype(byte_order))
    return [
        PathPoint(*(float(record[name]) for name in FLOAT_FIELDS), int(record["val"]))
        for record in records
    ]


def pack_points(points: list[PathPoint], byte_order: ByteOrder) -> bytes:
    """Pack PathPoint records into a path blob."""
    records = np.array([tuple(point) for point in points], dtype=point_dtype(byte_order))
    return records.tobytes()


def format_float(value: float) -> str:
    """Shortest decimal text that reads back as the same float32, plus ``f``.

    Integral values drop the fractional part (``2f``), matching the
    invariant-culture output of existing BYAML XML dumps.
    """
    return np.format_float_positional(np.float32(value), unique=True, trim="-") + "f"


def parse_float(text: str) -> float:
    """Parse float text with an optional trailing ``f``/``F`` marker.

    Raises:
        MalformedInputError: If the remaining text is not a decimal number, or
            the number is too large for a float32.
    """
    stripped = text.strip()
    if stripped[-1:] in ("f", "F"):
        stripped = stripped[:-1]
    if not _FLOAT_PATTERN.fullmatch(stripped):
        msg = f"not a float: {text!r}"
        raise MalformedInputError(msg)
    value = float(stripped)
    with np.errstate(over="ignore"):
        single = np.float32(value)
    if np.isinf(single) and not stripped.lstrip("+-").lower().startswith("inf"):
        msg = f"float {text!r} is out of range for a float32"
        raise MalformedInputError(msg)
    return float(single)
