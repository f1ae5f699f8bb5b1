"""Shared utilities for lossless XML/JSON conversion.

This module provides configuration objects, result types, exceptions and
logging helpers used across the tree, writer and API layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    ConversionConfig,
    ReaderConfig,
    WriterConfig,
)
from .errors import (
    ConversionError,
    DocumentShapeError,
    JSONParseError,
    UnsupportedFormatError,
    XMLParseError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    ConversionMetrics,
    ConversionResult,
    Direction,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConversionConfig",
    "ReaderConfig",
    "WriterConfig",
    "ConversionError",
    "DocumentShapeError",
    "JSONParseError",
    "UnsupportedFormatError",
    "XMLParseError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "ConversionMetrics",
    "ConversionResult",
    "Direction",
]
