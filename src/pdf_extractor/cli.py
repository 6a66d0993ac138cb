#!/usr/bin/env python3
"""
Command-line interface for the PDF Extractor.

Usage:
  pdf-extractor text <pdf-path>          Extract text from a PDF
  pdf-extractor images <pdf-path>        Extract images from a PDF
  pdf-extractor all <pdf-path>           Extract text + images from a PDF
  pdf-extractor serve                    Start the MCP server on stdio
"""

import argparse
import asyncio
import json
import logging
import sys
import traceback
from typing import List, Optional

from .config import ExtractorConfig, load_config_from_env
from .errors import InvalidArgumentError, error_text
from .extractor import PDFExtractor
from .formatting import format_images_report, format_text_report

logger = logging.getLogger(__name__)

COMMANDS = ("text", "images", "all", "serve")

HELP_TEXT = """
╔═══════════════════════════════════════════════════════════════╗
║                 🔍 PDF Extractor for AI Agents                ║
║          Extract text & images from PDFs for AI Agents        ║
╚═══════════════════════════════════════════════════════════════╝

Usage:
  pdf-extractor <command> <pdf-path> [options]

Commands:
  text     Extract text from all pages of a PDF
  images   Extract/render images from a PDF
  all      Extract text + images together
  serve    Start the MCP server for AI agent integration

Options:
  -o, --output-dir  Directory for extracted images (default: PDF's directory)
  -f, --format      Image format: png | jpeg (default: png)
  -d, --dpi         DPI for rendering (default: 150)
  -b, --base64      Return images as base64 strings
  -j, --json        Output results as JSON

Environment:
  DEBUG=1           Print full tracebacks on errors

Examples:
  pdf-extractor text document.pdf
  pdf-extractor images report.pdf -o ./images -f jpeg -d 300
  pdf-extractor all presentation.pdf --json
  pdf-extractor serve
"""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message):
        raise InvalidArgumentError(message)


def build_parser() -> argparse.ArgumentParser:
    """Parser for the flags; command and PDF path are taken from the leftovers."""
    parser = _ArgumentParser(prog="pdf-extractor", add_help=False, allow_abbrev=False)
    parser.add_argument("-o", "--output-dir", dest="output_dir")
    parser.add_argument("-f", "--format", dest="image_format", choices=["png", "jpeg"], default="png")
    parser.add_argument("-d", "--dpi", type=int)
    parser.add_argument("-b", "--base64", action="store_true")
    parser.add_argument("-j", "--json", action="store_true")
    parser.add_argument("-h", "--help", action="store_true")
    return parser


def parse_args(argv: List[str]) -> argparse.Namespace:
    """
    Parse CLI arguments.

    The first non-flag token is the command and the second is the PDF path.
    Unknown flags and any further tokens are ignored.
    """
    args, rest = build_parser().parse_known_args(argv)
    positionals = [token for token in rest if not token.startswith("-")]
    args.command = positionals[0] if positionals else None
    args.pdf_path = positionals[1] if len(positionals) > 1 else None

    ignored = [token for token in rest if token.startswith("-")] + positionals[2:]
    if ignored:
        logger.debug(f"Ignoring arguments: {ignored}")
    return args


def setup_logging(debug: bool = False, level: int = logging.WARNING) -> None:
    """Configure logging to stderr; stdout is reserved for results."""
    logging.basicConfig(
        level=logging.DEBUG if debug else level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _print_result(result, as_json: bool, command: str) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif command == "text":
        print(format_text_report(result))
    elif command == "images":
        print(format_images_report(result.file, result.total_pages, result.images))
    else:
        print(format_text_report(result))
        print(format_images_report(result.file, result.total_pages, result.images))


async def _extract(extractor: PDFExtractor, args: argparse.Namespace):
    if args.command == "text":
        return await extractor.extract_text(args.pdf_path)

    options = {
        "output_dir": args.output_dir,
        "image_format": args.image_format,
        "inline": args.base64,
        "dpi": args.dpi,
    }
    if args.command == "images":
        return await extractor.extract_images(args.pdf_path, **options)
    return await extractor.extract_all(args.pdf_path, **options)


def _serve(config: ExtractorConfig) -> int:
    from .server import run_server

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        print("\nServer stopped by user", file=sys.stderr)
    return 0


def run_cli(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    argv = sys.argv[1:] if argv is None else argv

    if not argv or "--help" in argv or "-h" in argv:
        print(HELP_TEXT)
        return 0

    config: Optional[ExtractorConfig] = None
    try:
        config = load_config_from_env()
        args = parse_args(argv)
        setup_logging(config.debug, logging.INFO if args.command == "serve" else logging.WARNING)

        if args.command is None:
            print("Error: Please provide a command.", file=sys.stderr)
            print(HELP_TEXT, file=sys.stderr)
            return 1

        if args.command not in COMMANDS:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            print(HELP_TEXT, file=sys.stderr)
            return 1

        if args.command == "serve":
            return _serve(config)

        if not args.pdf_path:
            print("Error: Please provide a PDF file path.", file=sys.stderr)
            return 1

        result = asyncio.run(_extract(PDFExtractor(config), args))
        _print_result(result, args.json, args.command)
        return 0

    except Exception as e:  # pylint: disable=broad-exception-caught
        print(f"\n❌ {error_text(e)}", file=sys.stderr)
        if config is not None and config.debug:
            traceback.print_exc(file=sys.stderr)
        return 1


def main() -> None:
    """Console script entry point."""
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
