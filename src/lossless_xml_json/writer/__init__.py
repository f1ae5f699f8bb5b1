"""Tree writer for lossless XML/JSON conversion.

Key Components:
    XMLTreeWriter: Serializes a Document back to XML
    NamespaceContext: Copy-on-write prefix-to-URI mapping inherited by subtrees
"""

from .formatting import declared_encoding, indent_xml, normalize_line_endings
from .namespaces import NamespaceContext
from .serializer import XMLTreeWriter, resolve_attribute_order

__all__ = [
    "declared_encoding",
    "indent_xml",
    "normalize_line_endings",
    "NamespaceContext",
    "XMLTreeWriter",
    "resolve_attribute_order",
]
