"""Resolution of nodes to plain Python values, and structural equivalence.

Two trees built against different pools (for example a decoded file and the
tree reified from its XML) hold different indices for the same strings.
Comparing them therefore means resolving every index through its own pools
first; ``nodes_equivalent`` does that while keeping variant kinds distinct
(``Bool(True)`` is not ``Int32(1)``) and comparing floats by bit pattern.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any

from byaml_xml.config import ByteOrder
from byaml_xml.document import ByamlDocument
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
from byaml_xml.points import unpack_points
from byaml_xml.pools import BlobPool, StringPool

__all__ = ["Pools", "documents_equivalent", "nodes_equivalent", "resolve"]


@dataclass(frozen=True, slots=True)
class Pools:
    """The three tables a node tree indexes, plus the blob byte order."""

    names: StringPool
    strings: StringPool
    blobs: BlobPool
    byte_order: ByteOrder = ByteOrder.BIG

    @classmethod
    def of(cls, document: ByamlDocument) -> Pools:
        return cls(document.names, document.strings, document.blobs, document.byte_order)


def resolve(node: Node, pools: Pools) -> Any:
    """Convert a node tree to plain Python values.

    Objects become dicts (insertion order kept), arrays lists, paths lists of
    PathPoint, Null None; scalars and strings map to their Python types.
    """
    if isinstance(node, StringRef):
        return pools.strings[node.index]
    if isinstance(node, PathData):
        return unpack_points(pools.blobs[node.index], pools.byte_order)
    if isinstance(node, (Bool, Int32, Float32)):
        return node.value
    if isinstance(node, Null):
        return None
    if isinstance(node, Array):
        return [resolve(child, pools) for child in node.children]
    if isinstance(node, Object):
        return {pools.names[name]: resolve(child, pools) for name, child in node.children}
    raise TypeError(f"Unsupported node type: {type(node)!r}")


def _float_bits(value: float) -> bytes:
    return struct.pack(">f", value)


def nodes_equivalent(left: Node, left_pools: Pools, right: Node, right_pools: Pools) -> bool:
    """Return True if two trees hold the same values.

    Pool indices are resolved through each side's own pools, so trees built
    against differently ordered pools can still be equivalent.  Object members
    are matched by name; their order does not matter.
    """
    if type(left) is not type(right):
        return False

    if isinstance(left, StringRef):
        return left_pools.strings[left.index] == right_pools.strings[right.index]  # type: ignore[union-attr]
    if isinstance(left, PathData):
        left_points = unpack_points(left_pools.blobs[left.index], left_pools.byte_order)
        right_points = unpack_points(
            right_pools.blobs[right.index], right_pools.byte_order  # type: ignore[union-attr]
        )
        return len(left_points) == len(right_points) and all(
            _float_bits(a) == _float_bits(b) if isinstance(a, float) else a == b
            for lp, rp in zip(left_points, right_points, strict=True)
            for a, b in zip(lp, rp, strict=True)
        )
    if isinstance(left, Float32):
        return _float_bits(left.value) == _float_bits(right.value)  # type: ignore[union-attr]
    if isinstance(left, (Bool, Int32)):
        return left.value == right.value  # type: ignore[union-attr]
    if isinstance(left, Null):
        return True
    if isinstance(left, Array):
        right_children = right.children  # type: ignore[union-attr]
        return len(left.children) == len(right_children) and all(
            nodes_equivalent(a, left_pools, b, right_pools)
            for a, b in zip(left.children, right_children, strict=True)
        )
    if isinstance(left, Object):
        left_members = {left_pools.names[name]: child for name, child in left.children}
        right_members = {
            right_pools.names[name]: child
            for name, child in right.children  # type: ignore[union-attr]
        }
        return left_members.keys() == right_members.keys() and all(
            nodes_equivalent(child, left_pools, right_members[name], right_pools)
            for name, child in left_members.items()
        )
    raise TypeError(f"Unsupported node type: {type(left)!r}")


def documents_equivalent(left: ByamlDocument, right: ByamlDocument) -> bool:
    """Return True if the two documents' root trees are equivalent."""
    return nodes_equivalent(left.root, Pools.of(left), right.root, Pools.of(right))
