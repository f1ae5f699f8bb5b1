"""JSON encode/decode boundary for the intermediate document model.

Wire format summary (one JSON object per document):

- ``@name`` / ``@uri:name``: attribute value
- ``@xmlns``: namespace declarations, prefix (``$default`` for the default
  namespace) to URI
- ``$attrOrder``: attribute names in original order
- ``$`` / ``$cdata`` / ``$raw``: text, CDATA payload, unescaped passthrough
- any other key: child element object, or array of them
- document level only: ``$orderMap``, ``$pi``, ``$doctype``, ``$comment``

Elements whose local name is in the always-array set are written as arrays
even when they occur once, so that later siblings merge uniformly.
"""

import json
from typing import AbstractSet, Any, Dict, List, Optional, Union

from lossless_xml_json.shared import (
    DocumentShapeError,
    JSONParseError,
    WriterConfig,
    get_logger,
)
from lossless_xml_json.shared.config import DEFAULT_ALWAYS_ARRAY

from .model import (
    ATTR_ORDER_KEY,
    ATTRIBUTE_PREFIX,
    CDATA_KEY,
    COMMENT_KEY,
    DEFAULT_PREFIX,
    DEFAULT_PREFIX_KEY,
    DOCTYPE_KEY,
    METADATA_PREFIX,
    ORDER_MAP_KEY,
    PI_KEY,
    RAW_KEY,
    TEXT_KEY,
    XMLNS_KEY,
    Document,
    Element,
    OrderMap,
    ProcessingInstruction,
    local_name,
)

logger = get_logger(__name__, component="json_codec")


def encode_document(
    document: Document,
    always_array: AbstractSet[str] = DEFAULT_ALWAYS_ARRAY
) -> Dict[str, Any]:
    """Convert a Document to its JSON-compatible mapping."""
    result: Dict[str, Any] = {}
    if document.processing_instructions:
        result[PI_KEY] = [
            {"target": pi.target, "data": pi.data}
            for pi in document.processing_instructions
        ]
    if document.doctype:
        result[DOCTYPE_KEY] = document.doctype
    if document.comments:
        result[COMMENT_KEY] = list(document.comments)

    for name, items in document.elements.items():
        if items:
            result[name] = _encode_group(name, items, always_array)

    result[ORDER_MAP_KEY] = document.order_map.to_dict()
    return result


def _encode_group(
    name: str, items: List[Element], always_array: AbstractSet[str]
) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    if len(items) == 1 and local_name(name) not in always_array:
        return _encode_element(items[0], always_array)
    return [_encode_element(item, always_array) for item in items]


def _encode_element(element: Element, always_array: AbstractSet[str]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    if element.namespaces:
        result[XMLNS_KEY] = {
            (DEFAULT_PREFIX_KEY if prefix == DEFAULT_PREFIX else prefix): uri
            for prefix, uri in element.namespaces.items()
        }
    for name, value in element.attributes.items():
        result[ATTRIBUTE_PREFIX + name] = value
    if element.attr_order:
        result[ATTR_ORDER_KEY] = list(element.attr_order)

    if element.text is not None:
        result[TEXT_KEY] = element.text
    if element.cdata is not None:
        result[CDATA_KEY] = element.cdata
    if element.raw is not None:
        result[RAW_KEY] = element.raw

    for name, items in element.children.items():
        if items:
            result[name] = _encode_group(name, items, always_array)
    return result


def decode_document(data: Any) -> Document:
    """Convert a decoded JSON value to a Document.

    Raises:
        DocumentShapeError: If the value does not have the shape of a document
    """
    if not isinstance(data, dict):
        raise DocumentShapeError(
            f"Document must be a JSON object, got {_type_name(data)}"
        )

    document = Document()
    for key, value in data.items():
        if key == ORDER_MAP_KEY:
            document.order_map = _decode_order_map(value)
        elif key == PI_KEY:
            document.processing_instructions = _decode_instructions(value)
        elif key == DOCTYPE_KEY:
            document.doctype = _expect_text(value, key)
        elif key == COMMENT_KEY:
            document.comments = _decode_comments(value)
        elif key.startswith(METADATA_PREFIX):
            logger.debug("Ignoring unknown document metadata key", extra={"key": key})
        elif key.startswith(ATTRIBUTE_PREFIX):
            raise DocumentShapeError("Attributes are not allowed at document level", key)
        else:
            document.elements[key] = _decode_group(value, key)
    return document


def _decode_group(value: Any, path: str) -> List[Element]:
    if isinstance(value, list):
        return [
            _decode_element(item, f"{path}[{index}]")
            for index, item in enumerate(value)
        ]
    return [_decode_element(value, path)]


def _decode_element(value: Any, path: str) -> Element:
    if value is None:
        return Element()
    if isinstance(value, list):
        raise DocumentShapeError("Nested arrays are not allowed", path)
    if not isinstance(value, dict):
        return Element(text=_expect_text(value, path))

    element = Element()
    for key, item in value.items():
        item_path = f"{path}/{key}"
        if key == XMLNS_KEY:
            element.namespaces = _decode_namespaces(item, item_path)
        elif key.startswith(ATTRIBUTE_PREFIX):
            element.attributes[key[len(ATTRIBUTE_PREFIX):]] = _expect_text(item, item_path)
        elif key == ATTR_ORDER_KEY:
            element.attr_order = _decode_attr_order(item, item_path)
        elif key == TEXT_KEY:
            element.text = _expect_text(item, item_path)
        elif key == CDATA_KEY:
            element.cdata = _expect_text(item, item_path)
        elif key == RAW_KEY:
            element.raw = _expect_text(item, item_path)
        elif key.startswith(METADATA_PREFIX):
            # Document metadata is only meaningful at the top level
            continue
        else:
            element.children[key] = _decode_group(item, item_path)
    return element


def _decode_namespaces(value: Any, path: str) -> Dict[str, str]:
    if not isinstance(value, dict):
        raise DocumentShapeError("Namespace declarations must be an object", path)
    return {
        (DEFAULT_PREFIX if prefix == DEFAULT_PREFIX_KEY else prefix):
            _expect_text(uri, f"{path}/{prefix}")
        for prefix, uri in value.items()
    }


def _decode_attr_order(value: Any, path: str) -> List[str]:
    if not isinstance(value, list):
        raise DocumentShapeError("Attribute order must be an array", path)
    names = []
    for item in value:
        if not isinstance(item, str):
            raise DocumentShapeError("Attribute order entries must be strings", path)
        names.append(item[len(ATTRIBUTE_PREFIX):] if item.startswith(ATTRIBUTE_PREFIX) else item)
    return names


def _decode_order_map(value: Any) -> OrderMap:
    if not isinstance(value, dict):
        raise DocumentShapeError("Order map must be an object", ORDER_MAP_KEY)
    entries: Dict[str, List[str]] = {}
    for path, names in value.items():
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise DocumentShapeError(
                "Order map entries must be arrays of strings", f"{ORDER_MAP_KEY}/{path}"
            )
        entries[path] = names
    return OrderMap(entries)


def _decode_instructions(value: Any) -> List[ProcessingInstruction]:
    if not isinstance(value, list):
        raise DocumentShapeError("Processing instructions must be an array", PI_KEY)
    instructions = []
    for index, item in enumerate(value):
        path = f"{PI_KEY}[{index}]"
        if not isinstance(item, dict) or not isinstance(item.get("target"), str):
            raise DocumentShapeError(
                "Processing instruction must be an object with a target", path
            )
        data = item.get("data", "")
        try:
            instructions.append(ProcessingInstruction(item["target"], _expect_text(data, path)))
        except ValueError as e:
            raise DocumentShapeError(str(e), path) from e
    return instructions


def _decode_comments(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise DocumentShapeError("Comments must be an array of strings", COMMENT_KEY)
    return [_expect_text(item, f"{COMMENT_KEY}[{i}]") for i, item in enumerate(value)]


def _expect_text(value: Any, path: str) -> str:
    """Accept a string, or a number/boolean written without quotes."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    raise DocumentShapeError(f"Expected a string, got {_type_name(value)}", path)


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


def dumps_document(
    document: Document,
    config: Optional[WriterConfig] = None,
    always_array: AbstractSet[str] = DEFAULT_ALWAYS_ARRAY
) -> str:
    """Serialize a Document to JSON text (line endings not yet normalized)."""
    config = config or WriterConfig()
    mapping = encode_document(document, always_array)
    if config.minify:
        return json.dumps(mapping, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(mapping, ensure_ascii=False, indent=config.json_indent)


def loads_document(data: Union[str, bytes]) -> Document:
    """Parse JSON text into a Document.

    Raises:
        JSONParseError: If the text is not valid JSON
        DocumentShapeError: If the JSON does not describe a document
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise JSONParseError(f"JSON input is not valid UTF-8: {e}") from e
    elif data.startswith("\ufeff"):
        data = data[1:]

    try:
        value = json.loads(data)
    except json.JSONDecodeError as e:
        raise JSONParseError(e.msg, e.lineno, e.colno) from e
    return decode_document(value)
