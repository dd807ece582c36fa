"""Module entrypoint.

Allows: python -m imagescout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import textwrap
from collections.abc import Sequence

from . import __version__
from .analyzer import analyze
from .binaries import analyze_binaries
from .config import load_settings
from .docker import Docker
from .errors import ImageScoutError, PackageDetectionError

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_FATAL = 20
EXIT_PACKAGE_DETECTION = 21


def _build_parser() -> argparse.ArgumentParser:
    epilog = textwrap.dedent(
        """\
        Exit codes:
          0   Success
          2   Usage or configuration error
          20  Fatal error (docker, image or OS release)
          21  Installed OS packages could not be detected
        """
    )

    parser = argparse.ArgumentParser(
        prog="imagescout",
        description="Inspect a container image for OS packages and shadow runtimes.",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _ = parser.add_argument(
        "--version",
        action="version",
        version=f"imagescout {__version__}",
        help="Print version and exit.",
    )
    sub = parser.add_subparsers(dest="command")

    analyze_p = sub.add_parser(
        "analyze",
        help="Detect installed packages and shadow runtime binaries in an image.",
    )
    _ = analyze_p.add_argument("image", help="Image reference, e.g. node:6.15.1")
    _ = analyze_p.add_argument(
        "--binaries-only",
        action="store_true",
        help="Only probe runtimes; skip package, OS release and image ID detection.",
    )
    _ = analyze_p.add_argument(
        "--installed",
        action="append",
        default=[],
        metavar="PKG",
        help="Package name known to be installed (with --binaries-only). Repeatable.",
    )
    _ = analyze_p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr.",
    )
    return parser


def _dump(payload: dict[str, object]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=True)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.command != "analyze":
        parser.print_help(sys.stderr)
        return EXIT_USAGE

    try:
        settings = load_settings()
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return EXIT_USAGE

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    docker = Docker.from_settings(settings)
    image = str(args.image)
    try:
        if args.binaries_only:
            binaries = asyncio.run(
                analyze_binaries(image, set(args.installed), docker=docker)
            )
            payload = binaries.model_dump(by_alias=True, mode="json")
        else:
            payload = asyncio.run(analyze(image, docker=docker)).to_json_dict()
    except PackageDetectionError as e:
        print(str(e), file=sys.stderr)
        return EXIT_PACKAGE_DETECTION
    except ImageScoutError as e:
        print(f"{e.token}: {e}", file=sys.stderr)
        return EXIT_FATAL

    print(_dump(payload))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
