"""InternPool: deduplicated, append-only tables of strings and path blobs.

Pools replace the linear "already present?" scan with a dict from value to
index.  Each pool instance owns its own list and map; nothing is shared
between instances.

Example::

    names = StringPool()
    names.intern("Objs")   # 0
    names.intern("Rails")  # 1
    names.intern("Objs")   # 0, no new entry
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator
from typing import Generic, Self, TypeVar

from byaml_xml.errors import OutOfRangeReferenceError

__all__ = ["BlobPool", "InternPool", "StringPool"]

T = TypeVar("T", bound=Hashable)


class InternPool(Generic[T]):
    """Ordered table of unique values referenced by integer index.

    Subclasses set ``kind``, the table name used in error messages.
    """

    kind = "pool"

    def __init__(self) -> None:
        self._values: list[T] = []
        self._index: dict[T, int] = {}

    @classmethod
    def from_values(cls, values: Iterable[T]) -> Self:
        """Build a pool that keeps every value at its given position.

        Decoded tables must not be compacted: nodes already hold indices into
        them.  If a value repeats, later lookups resolve to its first index.
        """
        pool = cls()
        for value in values:
            pool._index.setdefault(value, len(pool._values))
            pool._values.append(value)
        return pool

    def intern(self, value: T) -> int:
        """Return the index of ``value``, appending it on first sight."""
        index = self._index.get(value)
        if index is None:
            index = len(self._values)
            self._index[value] = index
            self._values.append(value)
        return index

    def index_of(self, value: T) -> int:
        """Return the index of an existing value without interning it."""
        try:
            return self._index[value]
        except KeyError:
            msg = f"{value!r} is not in the {self.kind}"
            raise OutOfRangeReferenceError(msg) from None

    def __getitem__(self, index: int) -> T:
        if not 0 <= index < len(self._values):
            msg = f"{self.kind} index {index} out of range (size {len(self._values)})"
            raise OutOfRangeReferenceError(msg)
        return self._values[index]

    def __contains__(self, value: object) -> bool:
        return value in self._index

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[T]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"


class StringPool(InternPool[str]):
    kind = "string table"


class BlobPool(InternPool[bytes]):
    kind = "path table"
