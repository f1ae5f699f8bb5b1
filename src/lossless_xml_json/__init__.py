"""Lossless XML/JSON Converter.

Order-preserving bidirectional conversion between XML documents and a JSON
representation that keeps element and attribute order, namespace
declarations, comments, processing instructions, DOCTYPE, CDATA and the
grouping of repeated elements.

Progressive API Disclosure:
- Level 1: Simple functions - xml_to_json(), json_to_xml()
- Level 2: convert() with ConversionConfig and ConversionResult
- Level 3: convert_file() for files on disk
"""

__version__ = "0.1.0"
__author__ = "Lossless XML JSON Team"

from .api import convert, convert_file, json_to_xml, xml_to_json
from .shared.config import ConversionConfig, ReaderConfig, WriterConfig
from .shared.errors import (
    ConversionError,
    DocumentShapeError,
    JSONParseError,
    UnsupportedFormatError,
    XMLParseError,
)
from .shared.result import ConversionResult, Direction
from .tree import Document, Element, XMLTreeBuilder
from .writer import XMLTreeWriter

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple conversion functions
    "xml_to_json",
    "json_to_xml",

    # Level 2/3: Configured conversion
    "convert",
    "convert_file",
    "ConversionConfig",
    "ReaderConfig",
    "WriterConfig",
    "ConversionResult",
    "Direction",

    # Intermediate tree and its builder/writer
    "Document",
    "Element",
    "XMLTreeBuilder",
    "XMLTreeWriter",

    # Errors
    "ConversionError",
    "DocumentShapeError",
    "JSONParseError",
    "UnsupportedFormatError",
    "XMLParseError",
]
