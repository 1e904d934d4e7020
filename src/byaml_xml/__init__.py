"""byaml-xml - lossless conversion between BYAML binary trees and XML."""

from __future__ import annotations

from byaml_xml.api import (
    Pools,
    decode,
    documents_equivalent,
    from_xml,
    load,
    load_file,
    nodes_equivalent,
    parse_xml,
    project,
    reify,
    resolve,
    to_xml,
    to_xml_string,
)
from byaml_xml.config import ByteOrder, CodecConfig
from byaml_xml.document import ByamlDocument, ByamlHeader
from byaml_xml.errors import ByamlError, MalformedInputError, OutOfRangeReferenceError
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

__version__: str = "0.1.0"
__all__: list[str] = [
    "Array",
    "BlobPool",
    "Bool",
    "ByamlDocument",
    "ByamlError",
    "ByamlHeader",
    "ByteOrder",
    "CodecConfig",
    "Float32",
    "Int32",
    "MalformedInputError",
    "Node",
    "NodeType",
    "Null",
    "Object",
    "OutOfRangeReferenceError",
    "PathData",
    "Pools",
    "StringPool",
    "StringRef",
    "decode",
    "documents_equivalent",
    "from_xml",
    "load",
    "load_file",
    "nodes_equivalent",
    "parse_xml",
    "project",
    "reify",
    "resolve",
    "to_xml",
    "to_xml_string",
]
