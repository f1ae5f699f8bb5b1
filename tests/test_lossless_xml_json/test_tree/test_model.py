"""Tests for the intermediate document model."""

import pytest

from lossless_xml_json.tree.model import (
    Document,
    Element,
    OrderMap,
    ProcessingInstruction,
    join_path,
    local_name,
)


class TestNameHelpers:
    """Test name and path helpers."""

    @pytest.mark.parametrize("name, expected", [
        ("row", "row"),
        ("urn:x:row", "row"),
        ("http://example.com/ns:table", "table"),
        ("xml:lang", "lang"),
    ])
    def test_local_name(self, name, expected):
        """Test that the local name follows the last colon."""
        assert local_name(name) == expected

    def test_join_path(self):
        """Test order map path construction."""
        assert join_path([]) == ""
        assert join_path(["msi"]) == "msi"
        assert join_path(["msi", "summary"]) == "msi/summary"


class TestElement:
    """Test Element behavior."""

    def test_empty_element_has_no_content(self):
        """Test that attributes alone do not count as content."""
        element = Element(attributes={"x": "1"})

        assert element.has_content is False

    @pytest.mark.parametrize("kwargs", [
        {"text": "t"},
        {"text": ""},
        {"cdata": ""},
        {"raw": "<b/>"},
    ])
    def test_content_kinds(self, kwargs):
        """Test that text, CDATA and raw content each count as content."""
        assert Element(**kwargs).has_content is True

    def test_add_child_groups_by_name(self):
        """Test that repeated names share one group in insertion order."""
        parent = Element()
        first = parent.add_child("item", Element(text="1"))
        parent.add_child("other", Element())
        second = parent.add_child("item", Element(text="2"))

        assert parent.child_names == ["item", "other"]
        assert parent.get_children("item") == [first, second]
        assert parent.get_children("missing") == []
        assert parent.has_content is True

    def test_add_child_validation(self):
        """Test add_child argument validation."""
        parent = Element()

        with pytest.raises(ValueError, match="cannot be empty"):
            parent.add_child("", Element())

        with pytest.raises(TypeError, match="Element instance"):
            parent.add_child("a", {"$": "text"})

    def test_count_elements(self):
        """Test recursive element counting."""
        root = Element()
        child = root.add_child("a", Element())
        child.add_child("b", Element())
        child.add_child("b", Element())

        assert root.count_elements() == 4
        assert [name for name, _ in root.iter_children()] == ["a"]


class TestProcessingInstruction:
    """Test ProcessingInstruction behavior."""

    def test_to_xml(self):
        """Test markup rendering with and without data."""
        assert ProcessingInstruction("style", 'href="a.css"').to_xml() == '<?style href="a.css"?>'
        assert ProcessingInstruction("break").to_xml() == "<?break?>"

    def test_empty_target(self):
        """Test that an empty target is rejected."""
        with pytest.raises(ValueError):
            ProcessingInstruction("")


class TestOrderMap:
    """Test OrderMap recording."""

    def test_first_seen_order(self):
        """Test that names are kept in first-seen order without duplicates."""
        order_map = OrderMap()
        for name in ["b", "a", "b", "c", "a"]:
            order_map.record(["root"], name)

        assert order_map.get("root") == ["b", "a", "c"]

    def test_paths(self):
        """Test that entries are keyed by the joined ancestor path."""
        order_map = OrderMap()
        order_map.record([], "root")
        order_map.record(["root", "child"], "leaf")

        assert order_map.to_dict() == {"": ["root"], "root/child": ["leaf"]}
        assert "root/child" in order_map
        assert "root" not in order_map
        assert len(order_map) == 2
        assert order_map.get("root") is None

    def test_equality_and_copy(self):
        """Test that construction copies the given entries."""
        entries = {"r": ["a"]}
        order_map = OrderMap(entries)
        entries["r"].append("b")

        assert order_map == OrderMap({"r": ["a"]})
        assert order_map != OrderMap()


class TestDocument:
    """Test Document accessors."""

    def test_empty_document(self):
        """Test accessors of an empty document."""
        document = Document()

        assert document.root is None
        assert document.root_name is None
        assert document.declaration is None
        assert document.element_count == 0

    def test_root_and_declaration(self):
        """Test root lookup and declaration lookup."""
        root = Element(text="t")
        document = Document(
            elements={"r": [root]},
            processing_instructions=[
                ProcessingInstruction("style", "x"),
                ProcessingInstruction("xml", 'version="1.0"'),
            ],
        )

        assert document.root_name == "r"
        assert document.root is root
        assert document.declaration.data == 'version="1.0"'
        assert document.element_count == 1
