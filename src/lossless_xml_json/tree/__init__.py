"""Intermediate tree for lossless XML/JSON conversion.

Key Components:
    XMLTreeBuilder: Builds a Document from an XML token stream
    Document: Root-level elements plus comments, processing instructions,
        DOCTYPE and the order map
    Element: One XML element with attributes, namespaces, content and children
    OrderMap: First-seen child name order per ancestor path
"""

from .builder import XMLTreeBuilder
from .codec import decode_document, dumps_document, encode_document, loads_document
from .model import Document, Element, OrderMap, ProcessingInstruction

__all__ = [
    "XMLTreeBuilder",
    "decode_document",
    "dumps_document",
    "encode_document",
    "loads_document",
    "Document",
    "Element",
    "OrderMap",
    "ProcessingInstruction",
]
