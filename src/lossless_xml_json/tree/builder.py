"""Core tree building implementation for lossless XML conversion.

This module converts the token stream of a namespace-aware expat parser into
the intermediate document model while recording the bookkeeping an ordinary
XML-to-dict mapping discards: the first-seen order of child element names per
ancestor path, the original attribute order of every element, namespace
declarations at the point they were made, and document-level comments,
processing instructions and DOCTYPE.

Parsing is fail-fast. A malformed token sequence raises ``XMLParseError``
before any part of the document is returned.
"""

import time
from typing import Dict, List, Optional, Union
from xml.parsers import expat

from lossless_xml_json.shared import ReaderConfig, XMLParseError, get_logger

from .model import (
    DEFAULT_PREFIX,
    XML_NAMESPACE,
    Document,
    Element,
    OrderMap,
    ProcessingInstruction,
)

# expat reports namespaced names as "uri<sep>local"; URIs never contain spaces
_NAMESPACE_SEPARATOR = " "

_DOCTYPE_MARKER = b"<!DOCTYPE"


class XMLTreeBuilder:
    """Builds an intermediate Document from XML input.

    A builder instance holds per-document state and can be reused; every call
    to ``build`` starts from a clean state.
    """

    def __init__(
        self,
        config: Optional[ReaderConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Reader configuration (defaults to ReaderConfig())
            correlation_id: Optional correlation ID for conversion tracking
        """
        self.config = config or ReaderConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tree_builder")
        self._reset_state()

    def _reset_state(self) -> None:
        """Reset builder state for a new document."""
        self._container = Element()
        self._current = self._container
        self._element_stack: List[Element] = []
        self._name_stack: List[str] = []
        self._pending_namespaces: Dict[str, str] = {}
        self._text_buffer: List[str] = []
        self._cdata_buffer: Optional[List[str]] = None
        self._raw: bytes = b""
        self._raw_is_text = False
        self._encoding = "utf-8"
        self._dropped_nodes = 0

        self._comments: List[str] = []
        self._instructions: List[ProcessingInstruction] = []
        self._doctype: Optional[str] = None
        self._doctype_start: Optional[int] = None
        self._order_map = OrderMap()

    def build(self, data: Union[str, bytes]) -> Document:
        """Build a Document from XML text or bytes.

        Args:
            data: Complete XML document. Bytes are decoded according to the
                document's own encoding declaration.

        Returns:
            Document holding the element tree and document-level metadata

        Raises:
            XMLParseError: If the input is not well-formed XML
        """
        start_time = time.time()
        self._reset_state()

        self._raw_is_text = isinstance(data, str)
        if self._raw_is_text:
            self._raw = data.encode("utf-8")
        else:
            self._raw = bytes(data)

        parser = self._create_parser()
        try:
            parser.Parse(data, True)
        except expat.ExpatError as e:
            message = expat.errors.messages.get(e.code, str(e))
            self.logger.debug(
                "XML parse failed",
                extra={"line": e.lineno, "column": e.offset + 1}
            )
            raise XMLParseError(message, e.lineno, e.offset + 1) from e

        document = self._finalize()
        self.logger.debug(
            "Tree building complete",
            extra={
                "element_count": document.element_count,
                "order_map_paths": len(document.order_map),
                "dropped_nodes": self._dropped_nodes,
                "processing_time_ms": (time.time() - start_time) * 1000,
            }
        )
        return document

    def _create_parser(self) -> "expat.XMLParserType":
        """Create an expat parser wired to this builder."""
        parser = expat.ParserCreate(namespace_separator=_NAMESPACE_SEPARATOR)
        parser.ordered_attributes = True
        parser.specified_attributes = True
        parser.buffer_text = True

        parser.XmlDeclHandler = self._handle_xml_declaration
        parser.StartDoctypeDeclHandler = self._handle_doctype
        parser.EndDoctypeDeclHandler = self._handle_doctype_end
        parser.SkippedEntityHandler = self._handle_skipped_entity
        parser.StartNamespaceDeclHandler = self._handle_namespace_declaration
        parser.StartElementHandler = self._handle_start_element
        parser.EndElementHandler = self._handle_end_element
        parser.CharacterDataHandler = self._handle_character_data
        parser.StartCdataSectionHandler = self._handle_cdata_start
        parser.EndCdataSectionHandler = self._handle_cdata_end
        parser.CommentHandler = self._handle_comment
        parser.ProcessingInstructionHandler = self._handle_processing_instruction
        self._parser = parser
        return parser

    @property
    def _at_document_level(self) -> bool:
        return not self._element_stack

    def _qualified_name(self, expat_name: str) -> str:
        """Convert an expat name to the stored ``uri:local`` form."""
        uri, separator, local = expat_name.rpartition(_NAMESPACE_SEPARATOR)
        if not separator:
            return expat_name
        if uri == XML_NAMESPACE:
            return f"xml:{local}"
        return f"{uri}:{local}"

    def _handle_xml_declaration(
        self, version: Optional[str], encoding: Optional[str], standalone: int
    ) -> None:
        parts = [f'version="{version or "1.0"}"']
        if encoding:
            parts.append(f'encoding="{encoding}"')
            self._encoding = encoding
        if standalone != -1:
            parts.append(f'standalone="{"yes" if standalone else "no"}"')
        self._instructions.append(ProcessingInstruction("xml", " ".join(parts)))

    def _handle_doctype(
        self,
        name: str,
        system_id: Optional[str],
        public_id: Optional[str],
        has_internal_subset: int
    ) -> None:
        if not self._at_document_level:
            self._dropped_nodes += 1
            return
        # Replaced by the raw declaration text once its end is known
        self._doctype = _format_doctype(name, system_id, public_id)
        index = self._parser.CurrentByteIndex
        start = self._raw.rfind(_DOCTYPE_MARKER, 0, index + len(_DOCTYPE_MARKER))
        self._doctype_start = start if start >= 0 else None

    def _handle_doctype_end(self) -> None:
        """Slice the complete DOCTYPE declaration out of the raw input."""
        start = self._doctype_start
        self._doctype_start = None
        if start is None:
            return
        # The end event is reported at the closing '>' of the declaration
        end = self._raw.find(b">", self._parser.CurrentByteIndex) + 1
        if end <= start:
            return
        encoding = "utf-8" if self._raw_is_text else self._encoding
        self._doctype = self._raw[start:end].decode(encoding, errors="replace")

    def _handle_skipped_entity(self, name: str, is_parameter_entity: int) -> None:
        if is_parameter_entity:
            self.logger.debug(
                "Unread parameter entity in DOCTYPE", extra={"entity": name}
            )
            return
        raise XMLParseError(
            f"undefined entity &{name};",
            self._parser.CurrentLineNumber,
            self._parser.CurrentColumnNumber + 1,
        )

    def _handle_namespace_declaration(self, prefix: Optional[str], uri: Optional[str]) -> None:
        self._pending_namespaces[prefix or DEFAULT_PREFIX] = uri or ""

    def _handle_start_element(self, expat_name: str, attributes: List[str]) -> None:
        self._flush_text()

        element = Element()
        if self._pending_namespaces:
            element.namespaces = self._pending_namespaces
            self._pending_namespaces = {}

        # ordered_attributes delivers a flat [name, value, name, value, ...] list
        for i in range(0, len(attributes), 2):
            element.attributes[self._qualified_name(attributes[i])] = attributes[i + 1]
        if element.attributes:
            element.attr_order = list(element.attributes)

        name = self._qualified_name(expat_name)
        self._current.add_child(name, element)
        self._order_map.record(self._name_stack, name)

        self._element_stack.append(self._current)
        self._name_stack.append(name)
        self._current = element

    def _handle_end_element(self, expat_name: str) -> None:
        self._flush_text()
        self._current = self._element_stack.pop()
        self._name_stack.pop()

    def _handle_character_data(self, data: str) -> None:
        if self._cdata_buffer is not None:
            self._cdata_buffer.append(data)
        else:
            self._text_buffer.append(data)

    def _handle_cdata_start(self) -> None:
        self._flush_text()
        self._cdata_buffer = []

    def _handle_cdata_end(self) -> None:
        payload = "".join(self._cdata_buffer or [])
        self._cdata_buffer = None
        if self.config.capture_cdata:
            self._current.cdata = payload
        else:
            self._text_buffer.append(payload)
            self._flush_text()

    def _handle_comment(self, data: str) -> None:
        self._flush_text()
        if self._at_document_level:
            self._comments.append(data)
        else:
            self._dropped_nodes += 1

    def _handle_processing_instruction(self, target: str, data: str) -> None:
        self._flush_text()
        if self._at_document_level:
            self._instructions.append(ProcessingInstruction(target, data))
        else:
            self._dropped_nodes += 1

    def _flush_text(self) -> None:
        """Close the current text run; only a non-blank run replaces the text."""
        if not self._text_buffer:
            return
        text = "".join(self._text_buffer)
        self._text_buffer = []
        if not text.strip():
            return
        if self._current is self._container:
            return
        if self._current.text is not None:
            self._dropped_nodes += 1
        self._current.text = text.strip() if self.config.strip_text else text

    def _finalize(self) -> Document:
        """Assemble the Document from the collected state."""
        self._flush_text()
        if self._dropped_nodes:
            self.logger.debug(
                "Nested comments, processing instructions or text runs dropped",
                extra={"dropped_nodes": self._dropped_nodes}
            )
        return Document(
            elements=self._container.children,
            comments=self._comments,
            processing_instructions=self._instructions,
            doctype=self._doctype,
            order_map=self._order_map,
        )


def _format_doctype(name: str, system_id: Optional[str], public_id: Optional[str]) -> str:
    """Render a DOCTYPE declaration from its parsed parts."""
    if public_id:
        return f'<!DOCTYPE {name} PUBLIC "{public_id}" "{system_id or ""}">'
    if system_id:
        return f'<!DOCTYPE {name} SYSTEM "{system_id}">'
    return f"<!DOCTYPE {name}>"
