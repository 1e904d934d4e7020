"""Command line driver: ``byaml-xml``.

Converts BYAML files to XML and checks that a file survives the
BYAML -> XML -> node tree round trip.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from byaml_xml.api import documents_equivalent, load_file, parse_xml, to_xml_string
from byaml_xml.config import CodecConfig
from byaml_xml.errors import ByamlError

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="byaml-xml",
        description="Convert BYAML binary files to XML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Dump a course file as XML
  byaml-xml to-xml course_muunt.byaml -o course_muunt.xml

  # Verify the XML form rebuilds the same tree
  byaml-xml check course_muunt.byaml
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--codepage",
        default="cp1252",
        help="Legacy code page pooled strings pass through (default: cp1252)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    to_xml = commands.add_parser("to-xml", help="Convert a BYAML file to XML")
    to_xml.add_argument("input", type=Path, help="Input BYAML file")
    to_xml.add_argument("-o", "--output", type=Path, help="Output XML file (default: stdout)")
    to_xml.add_argument("--compact", action="store_true", help="Do not indent the XML output")

    check = commands.add_parser("check", help="Round-trip a BYAML file through XML")
    check.add_argument("input", type=Path, help="Input BYAML file")

    return parser


def _to_xml(args: argparse.Namespace, config: CodecConfig) -> int:
    document = load_file(args.input, config)
    text = to_xml_string(document, config)
    if args.output is None:
        sys.stdout.write(text + "\n")
    else:
        args.output.write_text(text + "\n", encoding="utf-8")
        logger.info("wrote %s", args.output)
    return 0


def _check(args: argparse.Namespace, config: CodecConfig) -> int:
    document = load_file(args.input, config)
    rebuilt = parse_xml(to_xml_string(document, config), config)
    print(f"{args.input}: {len(document.names)} names, {len(document.strings)} strings, "
          f"{len(document.blobs)} paths")
    if not documents_equivalent(document, rebuilt):
        print(f"{args.input}: XML round trip changed the tree", file=sys.stderr)
        return 1
    print(f"{args.input}: round trip OK")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = CodecConfig(legacy_codepage=args.codepage)
        if args.command == "to-xml":
            if args.compact:
                config = CodecConfig(legacy_codepage=args.codepage, indent=None)
            return _to_xml(args, config)
        return _check(args, config)
    except (ByamlError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
