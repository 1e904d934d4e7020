"""Node variants and NodeType IntEnum for the BYAML tree representation.

Every value shape in a BYAML buffer maps to exactly one frozen dataclass
below.  Pooled values (strings, path blobs, object names) are stored as
indices; resolving them requires the pools the tree was built against.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar

import numpy as np

__all__ = [
    "MAX_CHILDREN",
    "Array",
    "Bool",
    "Float32",
    "Int32",
    "Node",
    "NodeType",
    "Null",
    "Object",
    "PathData",
    "StringRef",
    "is_attribute_eligible",
]

# Child counts share a 32-bit header word with the type byte.
MAX_CHILDREN = 0xFFFFFF

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class NodeType(IntEnum):
    """Type tag bytes of the BYAML format.

    - STRING       (0xA0): index into the string table
    - PATH         (0xA1): index into the path table
    - ARRAY        (0xC0): unnamed, positional container
    - OBJECT       (0xC1): named container
    - STRING_TABLE (0xC2): pool of NUL-terminated strings
    - PATH_TABLE   (0xC3): pool of binary path blobs
    - BOOL         (0xD0), INT (0xD1), FLOAT (0xD2): inline scalars
    - NULL         (0xFF): empty marker
    """

    STRING = 0xA0
    PATH = 0xA1
    ARRAY = 0xC0
    OBJECT = 0xC1
    STRING_TABLE = 0xC2
    PATH_TABLE = 0xC3
    BOOL = 0xD0
    INT = 0xD1
    FLOAT = 0xD2
    NULL = 0xFF


@dataclass(frozen=True, slots=True)
class StringRef:
    """Reference to ``strings[index]``."""

    node_type: ClassVar[NodeType] = NodeType.STRING
    index: int


@dataclass(frozen=True, slots=True)
class PathData:
    """Reference to ``blobs[index]``, a packed run of 28-byte path points."""

    node_type: ClassVar[NodeType] = NodeType.PATH
    index: int


@dataclass(frozen=True, slots=True)
class Bool:
    node_type: ClassVar[NodeType] = NodeType.BOOL
    value: bool


@dataclass(frozen=True, slots=True)
class Int32:
    """Signed 32-bit integer leaf."""

    node_type: ClassVar[NodeType] = NodeType.INT
    value: int

    def __post_init__(self) -> None:
        if not _INT32_MIN <= self.value <= _INT32_MAX:
            msg = f"Int32 value out of range: {self.value}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Float32:
    """Single-precision float leaf.

    The value is rounded to float32 on construction, so two Float32 nodes
    built from ``0.1`` and ``np.float32(0.1)`` compare equal.
    """

    node_type: ClassVar[NodeType] = NodeType.FLOAT
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(np.float32(self.value)))


@dataclass(frozen=True, slots=True)
class Null:
    node_type: ClassVar[NodeType] = NodeType.NULL


@dataclass(frozen=True, slots=True)
class Array:
    """Positional container; children keep their stored order."""

    node_type: ClassVar[NodeType] = NodeType.ARRAY
    children: tuple[Node, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))
        if len(self.children) > MAX_CHILDREN:
            msg = f"Array has {len(self.children)} children, limit is {MAX_CHILDREN}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Object:
    """Named container of ``(name_index, child)`` pairs in insertion order.

    Names are indices into the name table.  The order of the pairs is
    observable: it is the order the projector emits and the order an encoder
    writes.
    """

    node_type: ClassVar[NodeType] = NodeType.OBJECT
    children: tuple[tuple[int, Node], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "children", tuple((name, child) for name, child in self.children)
        )
        if len(self.children) > MAX_CHILDREN:
            msg = f"Object has {len(self.children)} children, limit is {MAX_CHILDREN}"
            raise ValueError(msg)


Node = StringRef | PathData | Bool | Int32 | Float32 | Null | Array | Object


def is_attribute_eligible(node: Node) -> bool:
    """Return True for the variants that may render as an XML attribute."""
    return isinstance(node, (Bool, Int32, Float32))
