"""Command line: convert a document to Markdown."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from markitup.common import ConversionError
from markitup.config import get_settings, update_settings_with_cli_args
from markitup.core import convert_from_path


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="markitup",
        description="A markup conversion tool with AI enhancement capabilities",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 1.0.0")
    parser.add_argument("input", help="Input file path")
    parser.add_argument("-o", "--output", metavar="PATH", help="Output file path")
    parser.add_argument("-i", "--image-path", metavar="PATH", help="Path for image processing")
    ai = parser.add_mutually_exclusive_group()
    ai.add_argument(
        "-a", "--ai-enable", action="store_true", help="Enable AI enhancement features"
    )
    ai.add_argument("--no-ai", action="store_true", help="Disable AI enhancement features")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the converter on the command line; return the exit status."""
    args = _parser().parse_args(argv)

    if args.ai_enable:
        ai_enable: bool | None = True
    elif args.no_ai:
        ai_enable = False
    else:
        ai_enable = None

    update_settings_with_cli_args(
        image_path=args.image_path,
        output_path=args.output,
        ai_enable=ai_enable,
    )
    settings = get_settings()

    try:
        markup = convert_from_path(args.input)
    except ConversionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if settings.output_path is None:
        print(markup)
        return 0

    try:
        settings.output_path.write_text(markup, encoding="utf-8")
    except OSError as exc:
        print(f"Error writing to file: {exc}", file=sys.stderr)
        return 1
    print(f"Output written to: {settings.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())