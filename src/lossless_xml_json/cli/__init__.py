"""Command-line interface module for the lossless XML/JSON converter.

This module provides the command-line front end for single-file, batch and
stdin-to-stdout conversion.
"""

from .main import main

__all__ = ["main"]
