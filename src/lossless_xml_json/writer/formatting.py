"""Output formatting: indentation pass and line-ending normalization.

Indentation is delegated to lxml, which re-parses the serialized document and
writes it back indented. The prolog (XML declaration) is kept outside that
pass so the declaration text written by the tree writer survives unchanged.
"""

import re
from typing import Optional

from lxml import etree

from lossless_xml_json.shared import get_logger

CANONICAL_LINE_ENDING = "\r\n"

_LINE_ENDINGS = re.compile(r"\r\n|\r|\n")
_ENCODING_PSEUDO_ATTRIBUTE = re.compile(r"""encoding\s*=\s*["']([A-Za-z][A-Za-z0-9._-]*)["']""")


def normalize_line_endings(text: str) -> str:
    """Replace every line ending (CRLF, CR or LF) with CRLF."""
    return _LINE_ENDINGS.sub(CANONICAL_LINE_ENDING, text)


def declared_encoding(declaration_data: Optional[str], default: str = "utf-8") -> str:
    """Extract the encoding pseudo-attribute from XML declaration data."""
    if declaration_data:
        match = _ENCODING_PSEUDO_ATTRIBUTE.search(declaration_data)
        if match:
            return match.group(1)
    return default


def indent_xml(
    body: str,
    indent: str = "\t",
    correlation_id: Optional[str] = None
) -> str:
    """Indent a serialized XML document body.

    Args:
        body: Document without XML declaration; may start with processing
            instructions, DOCTYPE and comments
        indent: Indentation unit for one nesting level
        correlation_id: Optional correlation ID for conversion tracking

    Returns:
        Indented document, or ``body`` unchanged when it cannot be re-parsed
        (raw passthrough content that is not well-formed, or names left in
        unresolved ``uri:local`` form)
    """
    if not body.strip():
        return body

    logger = get_logger(__name__, correlation_id, "xml_formatter")
    parser = etree.XMLParser(
        remove_blank_text=True,
        strip_cdata=False,
        resolve_entities=False,
        load_dtd=False,
        no_network=True,
        huge_tree=True,
    )
    try:
        root = etree.fromstring(body, parser)
    except etree.XMLSyntaxError as e:
        logger.warning(
            "Serialized document could not be re-parsed; writing it unindented",
            extra={"error": str(e)}
        )
        return body

    tree = root.getroottree()
    etree.indent(tree, space=indent)
    return etree.tostring(tree, encoding="unicode", pretty_print=True).rstrip("\n")
