"""Tree writer: serializes the intermediate document model back to XML.

The writer restores what the tree builder recorded. Attributes are written in
their original order, namespace declarations reappear on the element that
made them and ``uri:local`` names are turned back into ``prefix:local`` using
the namespace context inherited by each subtree. Document-level processing
instructions, DOCTYPE and comments are written ahead of the root element.

Tables get a dedicated path so that the structural order of their columns,
rows and cells is never affected by the sorting applied to other children.
"""

import time
from typing import AbstractSet, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from lossless_xml_json.shared import WriterConfig, get_logger
from lossless_xml_json.tree.model import (
    DEFAULT_PREFIX,
    Document,
    Element,
    join_path,
    local_name,
)

from .formatting import indent_xml, normalize_line_endings
from .namespaces import NamespaceContext

TABLE = "table"
COLUMN = "col"
ROW = "row"
CELL = "td"

_TEXT_ENTITIES = {"\r": "&#13;"}
_ATTRIBUTE_ENTITIES = {'"': "&quot;", "\n": "&#10;", "\r": "&#13;", "\t": "&#9;"}


def escape_text(text: str) -> str:
    """Escape character data for element content."""
    return escape(text, _TEXT_ENTITIES)


def escape_attribute(value: str) -> str:
    """Escape an attribute value for use inside double quotes."""
    return escape(value, _ATTRIBUTE_ENTITIES)


def wrap_cdata(payload: str) -> str:
    """Wrap a payload in a CDATA section, splitting any embedded ``]]>``."""
    return "<![CDATA[" + payload.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def resolve_attribute_order(element: Element) -> List[str]:
    """Order attribute names for output.

    Names from the recorded attribute order come first, in that order and
    limited to attributes actually present; any other attributes follow in
    ascending lexical order.
    """
    ordered: List[str] = []
    for name in element.attr_order or []:
        if name in element.attributes and name not in ordered:
            ordered.append(name)
    seen = set(ordered)
    ordered.extend(sorted(name for name in element.attributes if name not in seen))
    return ordered


def order_child_names(names: Sequence[str], recorded: Optional[Sequence[str]]) -> List[str]:
    """Sort child names lexically, moving recorded names first in recorded order."""
    result = sorted(names)
    if recorded:
        rank = {name: index for index, name in enumerate(recorded)}
        result.sort(key=lambda name: (0, rank[name]) if name in rank else (1, 0))
    return result


class XMLTreeWriter:
    """Writes a Document as XML text."""

    def __init__(
        self,
        config: Optional[WriterConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree writer.

        Args:
            config: Writer configuration (defaults to WriterConfig())
            correlation_id: Optional correlation ID for conversion tracking
        """
        self.config = config or WriterConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tree_writer")
        self._document = Document()

    def write(self, document: Document) -> str:
        """Serialize a document, format it and normalize its line endings.

        Returns:
            Complete XML text with CRLF line endings
        """
        start_time = time.time()
        declaration, body = self.serialize(document)
        if self.config.minify:
            text = declaration + body
        else:
            text = declaration + "\n" + indent_xml(
                body, self.config.indent, self.correlation_id
            )
        text = normalize_line_endings(text)

        self.logger.debug(
            "Document serialized",
            extra={
                "output_chars": len(text),
                "minify": self.config.minify,
                "processing_time_ms": (time.time() - start_time) * 1000,
            }
        )
        return text

    def serialize(self, document: Document) -> Tuple[str, str]:
        """Serialize without formatting.

        Returns:
            The XML declaration and the rest of the document, separately
        """
        self._document = document
        declaration = document.declaration
        declaration_data = declaration.data if declaration else self.config.default_declaration

        out: List[str] = []
        for instruction in document.processing_instructions:
            if instruction.target != "xml":
                out.append(instruction.to_xml())
        if document.doctype:
            out.append(document.doctype)
        for comment in document.comments:
            out.append(f"<!--{comment}-->")

        context = NamespaceContext()
        for name, element in document.iter_elements():
            self._write_element(out, name, element, context, [name])

        return f"<?xml {declaration_data}?>", "".join(out)

    def _write_element(
        self,
        out: List[str],
        name: str,
        element: Element,
        context: NamespaceContext,
        path: List[str]
    ) -> None:
        context = context.extend(element.namespaces)
        tag = self._open_tag(out, name, element, context)
        if not element.has_content:
            out.append("/>")
            return

        out.append(">")
        self._write_content(out, element)
        if local_name(name) == TABLE:
            self._write_table_children(out, name, element, context, path)
        else:
            self._write_children(out, name, element, context, path)
        out.append(f"</{tag}>")

    def _open_tag(
        self,
        out: List[str],
        name: str,
        element: Element,
        context: NamespaceContext
    ) -> str:
        """Write ``<tag`` with namespace declarations and attributes; return the tag."""
        tag = context.resolve(name)
        out.append(f"<{tag}")
        for prefix, uri in element.namespaces.items():
            if prefix == DEFAULT_PREFIX:
                out.append(f' xmlns="{escape_attribute(uri)}"')
            else:
                out.append(f' xmlns:{prefix}="{escape_attribute(uri)}"')
        for attribute in resolve_attribute_order(element):
            value = escape_attribute(element.attributes[attribute])
            out.append(f' {context.resolve(attribute, is_attribute=True)}="{value}"')
        return tag

    def _write_content(self, out: List[str], element: Element) -> None:
        if element.text is not None:
            out.append(escape_text(element.text))
        if element.cdata is not None:
            out.append(wrap_cdata(element.cdata))
        if element.raw is not None:
            out.append(element.raw)

    def _write_children(
        self,
        out: List[str],
        name: str,
        element: Element,
        context: NamespaceContext,
        path: List[str],
        exclude: AbstractSet[str] = frozenset()
    ) -> None:
        names = [child for child in element.child_names if child not in exclude]
        for child_name in order_child_names(names, self._recorded_order(name, path)):
            for child in element.get_children(child_name):
                self._write_element(out, child_name, child, context, path + [child_name])

    def _recorded_order(self, name: str, path: List[str]) -> Optional[List[str]]:
        """Find the recorded child order that applies to an element, if any."""
        order_map = self._document.order_map
        if self.config.preserve_child_order:
            recorded = order_map.get(join_path(path))
            if recorded is not None:
                return recorded
        ordered_path = self.config.ordered_children.get(name)
        if ordered_path is not None:
            return order_map.get(ordered_path)
        return None

    def _write_table_children(
        self,
        out: List[str],
        name: str,
        table: Element,
        context: NamespaceContext,
        path: List[str]
    ) -> None:
        """Write columns, then rows with their cells, then any other children."""
        structural = set()
        for child_name in table.child_names:
            if local_name(child_name) == COLUMN:
                structural.add(child_name)
                for column in table.get_children(child_name):
                    self._write_element(out, child_name, column, context, path + [child_name])
        for child_name in table.child_names:
            if local_name(child_name) == ROW:
                structural.add(child_name)
                for row in table.get_children(child_name):
                    self._write_row(out, child_name, row, context, path + [child_name])
        self._write_children(out, name, table, context, path, exclude=structural)

    def _write_row(
        self,
        out: List[str],
        name: str,
        row: Element,
        context: NamespaceContext,
        path: List[str]
    ) -> None:
        context = context.extend(row.namespaces)
        tag = self._open_tag(out, name, row, context)
        if not row.has_content:
            out.append("/>")
            return

        out.append(">")
        self._write_content(out, row)
        cells = set()
        for child_name in row.child_names:
            if local_name(child_name) == CELL:
                cells.add(child_name)
                for cell in row.get_children(child_name):
                    self._write_element(out, child_name, cell, context, path + [child_name])
        self._write_children(out, name, row, context, path, exclude=cells)
        out.append(f"</{tag}>")
