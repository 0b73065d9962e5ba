from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

import rtfcodec
from rtfcodec.codec.serialization import serialize_document
from rtfcodec.exceptions import FileFormatNotSupportedError, RtfCodecError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rtfcodec",
        description=(
            "Read an RTF (or plain text) file and emit its text to stdout "
            "(or JSON with --json)."
        ),
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Path to the file to read.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the structured document as JSON instead of plain text.",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Also write the document as canonical RTF to this path.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when an RTF file has no \\rtf header.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug output of the codec to stderr.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args, unknown = parser.parse_known_args(argv)
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else 1
        return code

    if unknown:
        unknown_str = " ".join(unknown)
        print(
            f"rtfcodec: warning: unsupported arguments: {unknown_str}",
            file=sys.stderr,
        )
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    try:
        document = rtfcodec.read_file(args.path, strict=args.strict)
        if args.output is not None:
            rtfcodec.write_file(args.output, document)
        if args.json:
            json.dump(serialize_document(document), sys.stdout)
        else:
            sys.stdout.write(document.get_full_text())
        sys.stdout.write("\n")
        return 0
    except (OSError, RtfCodecError, FileFormatNotSupportedError) as exc:
        print(f"rtfcodec: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
