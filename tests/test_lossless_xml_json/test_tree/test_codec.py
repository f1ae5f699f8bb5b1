"""Tests for the JSON encode/decode boundary."""

import json

import pytest

from lossless_xml_json.shared import DocumentShapeError, JSONParseError, WriterConfig
from lossless_xml_json.tree.builder import XMLTreeBuilder
from lossless_xml_json.tree.codec import (
    decode_document,
    dumps_document,
    encode_document,
    loads_document,
)


def encode_xml(xml, **kwargs):
    """Build a document from XML and encode it."""
    return encode_document(XMLTreeBuilder().build(xml), **kwargs)


class TestEncodeDocument:
    """Test encoding documents to JSON-compatible mappings."""

    def test_attributes_and_order_hint(self):
        """Test attribute keys and the attribute order hint."""
        data = encode_xml('<a x="1" y="2" z="3"/>')

        assert data == {
            "a": {"@x": "1", "@y": "2", "@z": "3", "$attrOrder": ["x", "y", "z"]},
            "$orderMap": {"": ["a"]},
        }

    def test_lone_row_becomes_array(self):
        """Test that always-array names are arrays even when single."""
        data = encode_xml("<t><row><td>1</td></row></t>")

        assert data["t"] == {"row": [{"td": {"$": "1"}}]}

    def test_always_array_by_local_name(self):
        """Test that namespaced always-array names are matched by local name."""
        data = encode_xml('<t xmlns:h="urn:h"><h:col/></t>')

        assert data["t"]["urn:h:col"] == [{}]

    def test_custom_always_array(self):
        """Test encoding with a custom always-array set."""
        data = encode_xml("<t><row/><item/></t>", always_array=frozenset({"item"}))

        assert data["t"] == {"row": {}, "item": [{}]}

    def test_repeated_siblings(self):
        """Test that two siblings form an array and a third appends."""
        two = encode_xml("<r><item>1</item><item>2</item></r>")
        three = encode_xml("<r><item>1</item><item>2</item><item>3</item></r>")

        assert two["r"]["item"] == [{"$": "1"}, {"$": "2"}]
        assert three["r"]["item"] == [{"$": "1"}, {"$": "2"}, {"$": "3"}]

    def test_namespace_declarations(self):
        """Test that declarations use the default-prefix key."""
        data = encode_xml('<a xmlns="urn:d" xmlns:p="urn:p"><p:b/></a>')

        assert data["urn:d:a"]["@xmlns"] == {"$default": "urn:d", "p": "urn:p"}
        assert data["urn:d:a"]["urn:p:b"] == {}

    def test_content_keys(self):
        """Test text and CDATA keys."""
        data = encode_xml("<r><t>text</t><c><![CDATA[<raw>]]></c></r>")

        assert data["r"] == {"t": {"$": "text"}, "c": {"$cdata": "<raw>"}}

    def test_document_metadata(self):
        """Test that document metadata precedes elements and the order map is last."""
        data = encode_xml(
            '<?xml version="1.0"?><!DOCTYPE r><!--c--><?style href="a"?><r/>'
        )

        assert list(data) == ["$pi", "$doctype", "$comment", "r", "$orderMap"]
        assert data["$pi"] == [
            {"target": "xml", "data": 'version="1.0"'},
            {"target": "style", "data": 'href="a"'},
        ]
        assert data["$doctype"] == "<!DOCTYPE r>"
        assert data["$comment"] == ["c"]


class TestDecodeDocument:
    """Test decoding JSON values to documents."""

    def test_element_fields(self):
        """Test that reserved keys map onto element fields."""
        document = decode_document({
            "a": {
                "@xmlns": {"$default": "urn:d", "p": "urn:p"},
                "@y": "2",
                "@x": "1",
                "$attrOrder": ["@x", "y"],
                "$": "text",
                "$cdata": "data",
                "$raw": "<b/>",
                "child": [{}, {"$": "2"}],
            }
        })

        root = document.root
        assert root.namespaces == {"": "urn:d", "p": "urn:p"}
        assert root.attributes == {"y": "2", "x": "1"}
        assert root.attr_order == ["x", "y"]
        assert (root.text, root.cdata, root.raw) == ("text", "data", "<b/>")
        assert [child.text for child in root.get_children("child")] == [None, "2"]

    def test_document_metadata(self):
        """Test decoding of document-level metadata."""
        document = decode_document({
            "$pi": [{"target": "xml", "data": 'version="1.0"'}, {"target": "go"}],
            "$doctype": "<!DOCTYPE r>",
            "$comment": "single",
            "$orderMap": {"": ["r"], "r": ["b", "a"]},
            "r": {},
        })

        assert document.declaration.data == 'version="1.0"'
        assert document.processing_instructions[1].data == ""
        assert document.doctype == "<!DOCTYPE r>"
        assert document.comments == ["single"]
        assert document.order_map.get("r") == ["b", "a"]

    def test_scalars_become_text(self):
        """Test that null and scalar values are accepted as element content."""
        document = decode_document({"r": {"n": None, "i": 5, "f": 1.5, "b": True, "s": "x"}})

        root = document.root
        assert root.get_children("n")[0].has_content is False
        assert root.get_children("i")[0].text == "5"
        assert root.get_children("f")[0].text == "1.5"
        assert root.get_children("b")[0].text == "true"
        assert root.get_children("s")[0].text == "x"

    def test_unknown_metadata_ignored(self):
        """Test that unknown reserved keys are ignored."""
        document = decode_document({"$version": 2, "r": {"$note": "x"}})

        assert document.root_name == "r"
        assert document.root.has_content is False

    @pytest.mark.parametrize("data, path", [
        ({"r": {"a": [[{}]]}}, "r/a[0]"),
        ({"@x": "1"}, "@x"),
        ({"r": {"@x": {"nested": "value"}}}, "r/@x"),
        ({"r": {"@xmlns": ["urn:x"]}}, "r/@xmlns"),
        ({"r": {"$attrOrder": "x"}}, "r/$attrOrder"),
        ({"$orderMap": {"r": "a"}}, "$orderMap/r"),
        ({"$pi": [{"data": "x"}]}, "$pi[0]"),
        ({"$pi": [{"target": ""}]}, "$pi[0]"),
    ])
    def test_shape_errors(self, data, path):
        """Test that malformed shapes raise DocumentShapeError with a path."""
        with pytest.raises(DocumentShapeError) as exc_info:
            decode_document(data)

        assert exc_info.value.path == path

    def test_non_object_document(self):
        """Test that the document must be a JSON object."""
        with pytest.raises(DocumentShapeError, match="got array"):
            decode_document([{"r": {}}])


class TestJSONText:
    """Test JSON text serialization and parsing."""

    def test_dumps_pretty(self):
        """Test indented JSON output."""
        document = XMLTreeBuilder().build("<a>é</a>")

        text = dumps_document(document)

        assert text.startswith('{\n  "a": {\n    "$": "é"')
        assert json.loads(text)["a"] == {"$": "é"}

    def test_dumps_minified(self):
        """Test compact JSON output."""
        document = XMLTreeBuilder().build('<a x="1"/>')

        text = dumps_document(document, WriterConfig(minify=True))

        assert text == '{"a":{"@x":"1","$attrOrder":["x"]},"$orderMap":{"":["a"]}}'

    def test_loads_bytes_with_bom(self):
        """Test that UTF-8 input with a byte order mark is accepted."""
        document = loads_document(b'\xef\xbb\xbf{"a": {"$": "x"}}')

        assert document.root.text == "x"

    def test_loads_str_with_bom(self):
        """Test that text input with a leading BOM character is accepted."""
        document = loads_document('\ufeff{"a": {}}')

        assert document.root_name == "a"

    def test_loads_invalid_json(self):
        """Test that malformed JSON reports its position."""
        with pytest.raises(JSONParseError) as exc_info:
            loads_document('{\n  "a": {,}\n}')

        assert exc_info.value.line == 2
        assert exc_info.value.column is not None

    def test_loads_invalid_utf8(self):
        """Test that undecodable bytes raise JSONParseError."""
        with pytest.raises(JSONParseError, match="UTF-8"):
            loads_document(b'{"a": "\xff"}')
