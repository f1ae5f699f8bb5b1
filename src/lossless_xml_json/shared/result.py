"""Result objects for lossless XML/JSON conversion.

This module defines the result returned by every conversion, carrying the
encoded output together with the direction and performance information.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .errors import UnsupportedFormatError


class Direction(Enum):
    """Conversion direction."""

    XML_TO_JSON = "xml-to-json"
    JSON_TO_XML = "json-to-xml"

    @property
    def output_suffix(self) -> str:
        """File extension appended to the input name for the output file."""
        return ".json" if self is Direction.XML_TO_JSON else ".xml"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "Direction":
        """Infer the conversion direction from a file extension.

        Raises:
            UnsupportedFormatError: If the extension is neither .xml nor .json
        """
        suffix = Path(path).suffix.lower()
        if suffix == ".xml":
            return cls.XML_TO_JSON
        if suffix == ".json":
            return cls.JSON_TO_XML
        raise UnsupportedFormatError(
            f"Cannot infer conversion direction from file name: {path}"
        )


@dataclass
class ConversionMetrics:
    """Performance metrics for one conversion."""

    processing_time_ms: float = 0.0
    input_bytes: int = 0
    output_bytes: int = 0
    element_count: int = 0
    memory_used_bytes: int = 0

    @property
    def bytes_per_second(self) -> float:
        """Calculate input bytes processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.input_bytes * 1000.0) / self.processing_time_ms


@dataclass
class ConversionResult:
    """Complete output of a conversion.

    ``output`` holds the final encoded bytes, already line-ending normalized.
    """

    output: bytes
    direction: Direction
    encoding: str = "utf-8"
    metrics: ConversionMetrics = field(default_factory=ConversionMetrics)
    correlation_id: Optional[str] = None
    output_path: Optional[Path] = None

    @property
    def text(self) -> str:
        """Decoded output text."""
        return self.output.decode(self.encoding)
