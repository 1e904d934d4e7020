"""CodecConfig and ByteOrder for codec configuration.

CodecConfig is a frozen (immutable) dataclass holding the settings shared by
the decoder, projector and reifier.  ByteOrder selects the endianness used for
multi-byte integers and floats when no file header says otherwise.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from enum import StrEnum, auto


class ByteOrder(StrEnum):
    """Endianness of every multi-byte value in a BYAML buffer.

    - BIG:    "BY" magic, Wii U era files.
    - LITTLE: "YB" magic.
    """

    BIG = auto()
    LITTLE = auto()

    @property
    def struct_prefix(self) -> str:
        """The ``struct`` byte-order character for this endianness."""
        return ">" if self is ByteOrder.BIG else "<"


@dataclass(frozen=True, slots=True)
class CodecConfig:
    """Immutable configuration for decoding and XML conversion.

    Attributes:
        byte_order: Endianness used when no header is available (raw node
            decoding, XML documents without a ``yamlconv:endianness`` hint).
        legacy_codepage: Single-byte code page that pooled strings are passed
            through before UTF-8 decoding.  Default ``"cp1252"``.
        root_tag: Tag of the document element produced by ``to_xml``.
        array_item_tag: Tag of the elements emitted for array items.
        indent: Indentation used when serializing XML text, or None for a
            single-line document.
    """

    byte_order: ByteOrder = ByteOrder.BIG
    legacy_codepage: str = "cp1252"
    root_tag: str = "yaml"
    array_item_tag: str = "value"
    indent: str | None = "  "

    def __post_init__(self) -> None:
        try:
            codecs.lookup(self.legacy_codepage)
        except LookupError as exc:
            msg = f"unknown legacy_codepage {self.legacy_codepage!r}"
            raise ValueError(msg) from exc
        if not self.root_tag:
            msg = "root_tag must be a non-empty string"
            raise ValueError(msg)
        if not self.array_item_tag:
            msg = "array_item_tag must be a non-empty string"
            raise ValueError(msg)
        if self.indent is not None and self.indent.strip():
            msg = f"indent must contain only whitespace, got {self.indent!r}"
            raise ValueError(msg)
