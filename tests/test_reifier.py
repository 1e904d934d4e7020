"""Tests for XmlReifier: dispatch, scalar inference, interning and paths."""

from __future__ import annotations

import struct
import xml.etree.ElementTree as ET

import pytest

from byaml_xml import (
    Array,
    Bool,
    ByteOrder,
    CodecConfig,
    Float32,
    Int32,
    MalformedInputError,
    Null,
    Object,
    PathData,
    StringRef,
)
from byaml_xml.reifier import XmlReifier, from_xml


def _parse(text: str) -> ET.Element:
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    return ET.fromstring(text, parser=parser)


@pytest.fixture
def reifier() -> XmlReifier:
    return XmlReifier()


class TestScalarInference:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1.5f", Float32(1.5)),
            ("1.5F", Float32(1.5)),
            ("1f", Float32(1.0)),
            ("-0.25f", Float32(-0.25)),
            ("42", Int32(42)),
            ("-7", Int32(-7)),
            ("+3", Int32(3)),
            (" 12 ", Int32(12)),
            ("2147483647", Int32(2**31 - 1)),
            ("-2147483648", Int32(-(2**31))),
            ("true", Bool(True)),
            ("False", Bool(False)),
            ("TRUE", Bool(True)),
        ],
    )
    def test_leaf(self, reifier: XmlReifier, text: str, expected: object) -> None:
        assert reifier.reify(_parse(f"<a>{text}</a>")) == expected

    def test_float_marker_wins_over_integer(self, reifier: XmlReifier) -> None:
        node = reifier.reify(_parse("<a>10f</a>"))
        assert isinstance(node, Float32)

    @pytest.mark.parametrize("text", ["hello", "2147483648", "1_000", "1.5", "yes"])
    def test_untyped_text_is_rejected(self, reifier: XmlReifier, text: str) -> None:
        with pytest.raises(MalformedInputError, match="cannot infer"):
            reifier.reify(_parse(f"<a>{text}</a>"))

    def test_bad_float_text(self, reifier: XmlReifier) -> None:
        with pytest.raises(MalformedInputError):
            reifier.reify(_parse("<a>truef</a>"))

    @pytest.mark.parametrize("text", ["1_000f", "1e40f", "0x1f"])
    def test_float_text_outside_the_invariant_grammar(
        self, reifier: XmlReifier, text: str
    ) -> None:
        with pytest.raises(MalformedInputError):
            reifier.reify(_parse(f"<a>{text}</a>"))

    def test_overflowing_point_coordinate(self, reifier: XmlReifier) -> None:
        with pytest.raises(MalformedInputError, match="out of range"):
            reifier.reify(
                _parse(
                    '<p type="path">'
                    '<point x="1e39f" y="0f" z="0f" nx="0f" ny="0f" nz="0f" val="0"/>'
                    "</p>"
                )
            )


class TestStrings:
    def test_typed_string(self, reifier: XmlReifier) -> None:
        node = reifier.reify(_parse('<a type="string">Kuribo</a>'))
        assert node == StringRef(0)
        assert list(reifier.strings) == ["Kuribo"]

    def test_numeric_looking_string_stays_a_string(self, reifier: XmlReifier) -> None:
        assert reifier.reify(_parse('<a type="string">42</a>')) == StringRef(0)
        assert reifier.strings[0] == "42"

    def test_empty_string(self, reifier: XmlReifier) -> None:
        assert reifier.reify(_parse('<a type="string"/>')) == StringRef(0)
        assert reifier.strings[0] == ""

    def test_whitespace_is_preserved(self, reifier: XmlReifier) -> None:
        reifier.reify(_parse('<a type="string">  two  spaces </a>'))
        assert reifier.strings[0] == "  two  spaces "

    def test_identical_strings_share_one_entry(self, reifier: XmlReifier) -> None:
        node = reifier.reify(
            _parse(
                '<r type="array">'
                '<value type="string">Dokan</value>'
                '<value type="string">Kuribo</value>'
                '<value><Name type="string">Dokan</Name></value>'
                "</r>"
            )
        )
        assert node == Array(
            (StringRef(0), StringRef(1), Object(((0, StringRef(0)),)))
        )
        assert list(reifier.strings) == ["Dokan", "Kuribo"]


class TestContainers:
    def test_array_in_document_order(self, reifier: XmlReifier) -> None:
        node = reifier.reify(
            _parse('<a type="array"><value>1</value><value>true</value><value type="null"/></a>')
        )
        assert node == Array((Int32(1), Bool(True), Null()))

    def test_empty_array(self, reifier: XmlReifier) -> None:
        assert reifier.reify(_parse('<a type="array"/>')) == Array()

    def test_null(self, reifier: XmlReifier) -> None:
        assert reifier.reify(_parse('<a type="null"/>')) == Null()

    def test_empty_element_is_an_empty_object(self, reifier: XmlReifier) -> None:
        assert reifier.reify(_parse("<a/>")) == Object()
        assert reifier.reify(_parse("<a>   </a>")) == Object()

    def test_object_elements_then_attributes(self, reifier: XmlReifier) -> None:
        node = reifier.reify(
            _parse('<obj Id="3" Scale="0.5f"><Name type="string">Kuribo</Name></obj>')
        )
        assert node == Object(
            ((0, StringRef(0)), (1, Int32(3)), (2, Float32(0.5)))
        )
        assert list(reifier.names) == ["Name", "Id", "Scale"]

    def test_names_interned_on_first_sight(self, reifier: XmlReifier) -> None:
        reifier.reify(
            _parse(
                '<r type="array">'
                '<value b="1" a="2"/>'
                '<value a="3" c="4"/>'
                "</r>"
            )
        )
        assert list(reifier.names) == ["b", "a", "c"]

    def test_type_member_element(self, reifier: XmlReifier) -> None:
        node = reifier.reify(_parse("<obj><type>3</type></obj>"))
        assert node == Object(((0, Int32(3)),))
        assert reifier.names[0] == "type"

    def test_unparsable_attribute(self, reifier: XmlReifier) -> None:
        with pytest.raises(MalformedInputError):
            reifier.reify(_parse('<obj Name="Kuribo"/>'))

    def test_empty_attribute(self, reifier: XmlReifier) -> None:
        with pytest.raises(MalformedInputError):
            reifier.reify(_parse('<obj Id=""/>'))


class TestBookkeeping:
    def test_comments_are_skipped(self, reifier: XmlReifier) -> None:
        node = reifier.reify(
            _parse('<a type="array"><!-- first --><value>1</value><!-- x --></a>')
        )
        assert node == Array((Int32(1),))

    def test_comment_before_leaf_text(self, reifier: XmlReifier) -> None:
        assert reifier.reify(_parse("<a><!-- id -->5</a>")) == Int32(5)

    def test_namespace_attributes_are_ignored(self, reifier: XmlReifier) -> None:
        node = reifier.reify(
            _parse(
                '<yaml xmlns:yamlconv="yamlconv" yamlconv:endianness="big" '
                'yamlconv:anything="x" Id="1"/>'
            )
        )
        assert node == Object(((0, Int32(1)),))
        assert list(reifier.names) == ["Id"]

    def test_literal_xmlns_keys_are_ignored(self, reifier: XmlReifier) -> None:
        element = ET.Element("obj", {"xmlns:foo": "urn:foo", "Id": "2"})
        assert reifier.reify(element) == Object(((0, Int32(2)),))


class TestPath:
    POINTS = (
        '<point x="1f" y="2f" z="3f" nx="0f" ny="1f" nz="0f" val="7"/>'
        '<point x="-4.5f" y="0.25f" z="100f" nx="0f" ny="0f" nz="-1f" val="-2"/>'
    )

    def test_two_points_pack_to_56_bytes(self, reifier: XmlReifier) -> None:
        node = reifier.reify(_parse(f'<p type="path">{self.POINTS}</p>'))
        assert node == PathData(0)
        blob = reifier.blobs[0]
        assert len(blob) == 56
        assert blob == struct.pack(">6fi", 1, 2, 3, 0, 1, 0, 7) + struct.pack(
            ">6fi", -4.5, 0.25, 100, 0, 0, -1, -2
        )

    def test_little_endian_packing(self) -> None:
        reifier = XmlReifier(byte_order=ByteOrder.LITTLE)
        reifier.reify(_parse(f'<p type="path">{self.POINTS}</p>'))
        assert reifier.blobs[0][:28] == struct.pack("<6fi", 1, 2, 3, 0, 1, 0, 7)

    def test_identical_paths_share_one_blob(self, reifier: XmlReifier) -> None:
        node = reifier.reify(
            _parse(
                '<r type="array">'
                f'<value type="path">{self.POINTS}</value>'
                f'<value type="path">{self.POINTS}</value>'
                "</r>"
            )
        )
        assert node == Array((PathData(0), PathData(0)))
        assert len(reifier.blobs) == 1

    def test_point_tag_is_case_insensitive_and_others_ignored(
        self, reifier: XmlReifier
    ) -> None:
        reifier.reify(
            _parse(
                '<p type="path">'
                '<POINT x="1f" y="1f" z="1f" nx="0f" ny="0f" nz="0f" val="0"/>'
                "<note>ignored</note>"
                "</p>"
            )
        )
        assert len(reifier.blobs[0]) == 28

    def test_empty_path(self, reifier: XmlReifier) -> None:
        assert reifier.reify(_parse('<p type="path"/>')) == PathData(0)
        assert reifier.blobs[0] == b""

    def test_missing_attribute(self, reifier: XmlReifier) -> None:
        with pytest.raises(MalformedInputError, match="'nz'"):
            reifier.reify(
                _parse('<p type="path"><point x="1f" y="1f" z="1f" nx="0f" ny="0f" val="0"/></p>')
            )

    def test_bad_val(self, reifier: XmlReifier) -> None:
        with pytest.raises(MalformedInputError, match="val"):
            reifier.reify(
                _parse(
                    '<p type="path">'
                    '<point x="1f" y="1f" z="1f" nx="0f" ny="0f" nz="0f" val="1.5"/>'
                    "</p>"
                )
            )


class TestFromXml:
    def test_document_settings_from_root(self) -> None:
        document = from_xml(
            _parse(
                '<yaml xmlns:yamlconv="yamlconv" yamlconv:endianness="little" '
                'yamlconv:version="2" yamlconv:pathTable="false" Id="1"/>'
            )
        )
        assert document.byte_order is ByteOrder.LITTLE
        assert document.version == 2
        assert document.has_path_table is False
        assert document.root == Object(((0, Int32(1)),))
        assert list(document.names) == ["Id"]

    def test_defaults_from_config(self) -> None:
        document = from_xml(_parse("<yaml/>"), CodecConfig(byte_order=ByteOrder.LITTLE))
        assert document.byte_order is ByteOrder.LITTLE
        assert document.version == 1
        assert document.has_path_table is True

    def test_unknown_endianness(self) -> None:
        with pytest.raises(MalformedInputError, match="endianness"):
            from_xml(_parse('<yaml xmlns:y="yamlconv" y:endianness="middle"/>'))

    def test_each_call_builds_new_pools(self) -> None:
        root = _parse('<yaml><Name type="string">a</Name></yaml>')
        first = from_xml(root)
        second = from_xml(root)
        assert first.strings is not second.strings
        assert list(first.strings) == list(second.strings) == ["a"]
