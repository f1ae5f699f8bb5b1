"""Main CLI entry point for the lossless-xml-json command-line tool.

Three invocation forms are supported:

- ``-i SRC [-o DST] [-x]``: convert one file; output goes to standard output
  unless ``-o`` is given, direction is XML to JSON unless ``-x`` is given
- ``PATH [PATH ...]``: convert each file next to itself, inferring direction
  and output name from its extension (``a.xml`` -> ``a.xml.json``)
- no arguments: convert standard input to standard output
"""

import argparse
import sys
from pathlib import Path
from typing import BinaryIO, List, Optional

from lossless_xml_json import __version__
from lossless_xml_json.api import convert, convert_file
from lossless_xml_json.shared import (
    ConfigError,
    ConversionConfig,
    ConversionError,
    Direction,
    configure_logging,
    get_logger,
)

PROGRAM_NAME = "lossless-xml-json"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description=(
            "Lossless, order-preserving conversion between XML and JSON"
        )
    )

    parser.add_argument("--version", action="version", version=__version__)

    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Files to convert; direction and output name follow the extension"
    )
    parser.add_argument(
        "--input-file", "-i",
        type=Path,
        metavar="SRC",
        help="Input file path"
    )
    parser.add_argument(
        "--output-file", "-o",
        type=Path,
        metavar="DST",
        help="Output file path (default: stdout)"
    )
    parser.add_argument(
        "--to-xml", "-x",
        action="store_true",
        help="Convert JSON to XML (default direction is XML to JSON)"
    )
    parser.add_argument(
        "--minify", "-m",
        action="store_true",
        help="Disable indentation of the output"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug output"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path (JSON)"
    )

    return parser


def load_config(args: argparse.Namespace) -> ConversionConfig:
    """Build the conversion configuration from a config file and flags."""
    config = ConversionConfig()
    if args.config:
        config = ConversionConfig.from_file(args.config)

    overrides = {}
    if args.minify:
        overrides["writer__minify"] = True
    if args.debug:
        overrides["debug"] = True
    return config.override(**overrides) if overrides else config


def cmd_single(args: argparse.Namespace, config: ConversionConfig,
               stdout: BinaryIO) -> int:
    """Convert one input (file or stdin) to one output (file or stdout)."""
    direction = Direction.JSON_TO_XML if args.to_xml else Direction.XML_TO_JSON

    if args.input_file and args.output_file:
        convert_file(args.input_file, args.output_file, direction, config)
        return 0

    if args.input_file:
        data = args.input_file.read_bytes()
    else:
        data = sys.stdin.buffer.read()

    result = convert(data, direction, config)
    if args.output_file:
        args.output_file.write_bytes(result.output)
    else:
        stdout.write(result.output)
        stdout.flush()
    return 0


def cmd_batch(args: argparse.Namespace, config: ConversionConfig) -> int:
    """Convert every positional path, stopping at the first failure."""
    logger = get_logger(__name__, None, "cli_batch")
    for path in args.paths:
        direction = Direction.JSON_TO_XML if args.to_xml else Direction.from_path(path)
        result = convert_file(path, None, direction, config)
        logger.info(
            "Converted file",
            extra={"input_path": str(path), "output_path": str(result.output_path)}
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.paths and (args.input_file or args.output_file):
        parser.error("positional paths cannot be combined with -i/-o")

    try:
        config = load_config(args)
    except (ConfigError, OSError) as e:
        configure_logging(debug=args.debug)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    debug = config.debug or args.debug
    configure_logging(debug=debug)
    logger = get_logger(__name__, None, "cli")

    try:
        if args.paths:
            return cmd_batch(args, config)
        return cmd_single(args, config, sys.stdout.buffer)

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT
    except ConversionError as e:
        logger.error("Conversion failed", extra={"error": str(e)}, exc_info=debug)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error("I/O failure", extra={"error": str(e)}, exc_info=debug)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
