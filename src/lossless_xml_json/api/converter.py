"""Core conversion API for lossless XML/JSON conversion.

This module provides the conversion entry points, from one-call string
helpers to file conversion with direction inference. Every conversion is a
single fully buffered pass: the input is parsed completely, the output is
produced completely in memory and only then returned or written.

Examples:
    XML to JSON:
    >>> text = xml_to_json('<a x="1" y="2"/>')
    >>> '"$attrOrder"' in text
    True

    JSON back to XML:
    >>> json_to_xml(text, ConversionConfig.minified())
    '<?xml version="1.0" encoding="UTF-8"?><a x="1" y="2"/>'
"""

import os
import tempfile
import time
import uuid
from pathlib import Path
from typing import Optional, Union

import psutil

from lossless_xml_json.shared import (
    ConversionConfig,
    ConversionError,
    ConversionMetrics,
    ConversionResult,
    Direction,
    get_logger,
)
from lossless_xml_json.tree import XMLTreeBuilder
from lossless_xml_json.tree.codec import dumps_document, loads_document
from lossless_xml_json.writer import XMLTreeWriter, declared_encoding, normalize_line_endings

InputType = Union[str, bytes]

MS_PER_SECOND = 1000


def convert(
    input_data: InputType,
    direction: Direction,
    config: Optional[ConversionConfig] = None,
    correlation_id: Optional[str] = None
) -> ConversionResult:
    """Convert a complete document in the given direction.

    Args:
        input_data: XML or JSON document as text or bytes
        direction: Conversion direction
        config: Conversion configuration (defaults to ConversionConfig())
        correlation_id: Optional correlation ID for conversion tracking

    Returns:
        ConversionResult with the encoded, line-ending normalized output

    Raises:
        XMLParseError: If XML input is malformed
        JSONParseError: If JSON input is malformed
        DocumentShapeError: If JSON input does not describe a document
    """
    config = config or ConversionConfig()
    correlation_id = correlation_id or uuid.uuid4().hex[:12]
    logger = get_logger(__name__, correlation_id, "convert")
    start_time = time.time()
    input_bytes = len(input_data.encode("utf-8")) if isinstance(input_data, str) else len(input_data)

    logger.info(
        "Starting conversion",
        extra={
            "direction": direction.value,
            "input_bytes": input_bytes,
            "config_name": config.name,
        }
    )

    if direction is Direction.XML_TO_JSON:
        document = XMLTreeBuilder(config.reader, correlation_id).build(input_data)
        text = dumps_document(document, config.writer, config.reader.always_array)
        encoding = "utf-8"
        output = normalize_line_endings(text).encode(encoding)
    else:
        document = loads_document(input_data)
        text = XMLTreeWriter(config.writer, correlation_id).write(document)
        declaration = document.declaration
        encoding = declared_encoding(declaration.data if declaration else None)
        try:
            output = text.encode(encoding, errors="xmlcharrefreplace")
        except LookupError as e:
            raise ConversionError(f"Unknown output encoding: {encoding}") from e

    metrics = ConversionMetrics(
        processing_time_ms=(time.time() - start_time) * MS_PER_SECOND,
        input_bytes=input_bytes,
        output_bytes=len(output),
        element_count=document.element_count,
        memory_used_bytes=_get_memory_usage(),
    )
    logger.info(
        "Conversion complete",
        extra={
            "direction": direction.value,
            "output_bytes": metrics.output_bytes,
            "element_count": metrics.element_count,
            "processing_time_ms": metrics.processing_time_ms,
        }
    )
    return ConversionResult(
        output=output,
        direction=direction,
        encoding=encoding,
        metrics=metrics,
        correlation_id=correlation_id,
    )


def xml_to_json(input_data: InputType, config: Optional[ConversionConfig] = None) -> str:
    """Convert an XML document to its lossless JSON representation."""
    return convert(input_data, Direction.XML_TO_JSON, config).text


def json_to_xml(input_data: InputType, config: Optional[ConversionConfig] = None) -> str:
    """Convert a lossless JSON representation back to an XML document."""
    return convert(input_data, Direction.JSON_TO_XML, config).text


def convert_file(
    input_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    direction: Optional[Direction] = None,
    config: Optional[ConversionConfig] = None,
    correlation_id: Optional[str] = None
) -> ConversionResult:
    """Convert a file, writing the output next to it unless a path is given.

    Args:
        input_path: Path to the XML or JSON input file
        output_path: Output path; defaults to the input name with ``.json``
            (XML input) or ``.xml`` (JSON input) appended
        direction: Conversion direction; inferred from the input extension
            when omitted
        config: Conversion configuration
        correlation_id: Optional correlation ID for conversion tracking

    Returns:
        ConversionResult with ``output_path`` set

    Raises:
        UnsupportedFormatError: If the direction cannot be inferred
        OSError: If the input cannot be read or the output cannot be written
    """
    input_path = Path(input_path)
    direction = direction or Direction.from_path(input_path)
    if output_path is None:
        output_path = input_path.with_name(input_path.name + direction.output_suffix)
    output_path = Path(output_path)

    result = convert(input_path.read_bytes(), direction, config, correlation_id)
    _write_atomically(output_path, result.output)
    result.output_path = output_path

    get_logger(__name__, result.correlation_id, "convert_file").info(
        "Output written",
        extra={"input_path": str(input_path), "output_path": str(output_path)}
    )
    return result


def _write_atomically(path: Path, data: bytes) -> None:
    """Write ``data`` so that ``path`` never holds a partial file."""
    directory = path.parent if str(path.parent) else Path(".")
    fd, temp_name = tempfile.mkstemp(dir=directory, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as temp_file:
            temp_file.write(data)
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


def _get_memory_usage() -> int:
    """Get resident memory of the current process in bytes."""
    return psutil.Process(os.getpid()).memory_info().rss
