"""Tests for output formatting helpers."""

import logging

import pytest

from lossless_xml_json.writer.formatting import (
    declared_encoding,
    indent_xml,
    normalize_line_endings,
)


class TestNormalizeLineEndings:
    """Test line-ending normalization."""

    @pytest.mark.parametrize("text, expected", [
        ("a\nb", "a\r\nb"),
        ("a\r\nb", "a\r\nb"),
        ("a\rb", "a\r\nb"),
        ("a\n\rb\r\n", "a\r\n\r\nb\r\n"),
        ("no newline", "no newline"),
    ])
    def test_normalize(self, text, expected):
        """Test that every line ending becomes CRLF."""
        assert normalize_line_endings(text) == expected


class TestDeclaredEncoding:
    """Test encoding extraction from declaration data."""

    def test_declared(self):
        """Test that the encoding pseudo-attribute is found."""
        assert declared_encoding('version="1.0" encoding="ISO-8859-1"') == "ISO-8859-1"
        assert declared_encoding("version='1.0' encoding='utf-16'") == "utf-16"

    def test_default(self):
        """Test fallback when no encoding is declared."""
        assert declared_encoding('version="1.0"') == "utf-8"
        assert declared_encoding(None) == "utf-8"
        assert declared_encoding(None, default="ascii") == "ascii"


class TestIndentXML:
    """Test the indentation pass."""

    def test_indent_nested(self):
        """Test indentation of nested elements."""
        result = indent_xml("<r><a><b/></a><c>t</c></r>", indent="  ")

        assert result == "<r>\n  <a>\n    <b/>\n  </a>\n  <c>t</c>\n</r>"

    def test_preserves_cdata(self):
        """Test that CDATA sections survive re-parsing."""
        result = indent_xml("<r><a><![CDATA[x < y]]></a></r>")

        assert "<![CDATA[x < y]]>" in result

    def test_unparseable_body_returned_unchanged(self, caplog):
        """Test fallback to the unformatted body."""
        body = "<r><unclosed></r>"

        with caplog.at_level(logging.WARNING, logger="lossless_xml_json.writer.formatting"):
            result = indent_xml(body, correlation_id="fmt")

        assert result == body
        assert any(record.levelno == logging.WARNING for record in caplog.records)

    def test_empty_body(self, caplog):
        """Test that a document without content is returned without a warning."""
        with caplog.at_level(logging.WARNING, logger="lossless_xml_json.writer.formatting"):
            result = indent_xml("")

        assert result == ""
        assert not caplog.records
