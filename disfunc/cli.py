"""disfunc prints out annotated Go functions.

It builds a package, disassembles the binary with `go tool objdump` and
interleaves each instruction with the source line it came from.
"""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from disfunc import __version__
from disfunc.filters import filter_by_file, filter_by_symbol
from disfunc.listing import FormatError, parse_listing
from disfunc.render import print_annotated
from disfunc.toolchain import ToolchainError, build_binary, disassemble
from disfunc.xrefs import resolve_jumps

logger = logging.getLogger(__name__)

EPILOG = """\
It is recommended to use one of -f or -file.

example:
  disfunc -f 'nin\\.CanonicalizePath$' -pkg ./cmd/nin
"""


class UsageError(Exception):
    """Raised when CLI arguments are invalid.
    """


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="disfunc",
        description="disfunc prints out an annotated function.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-pkg", "--pkg", default=".", help="package to build, preferably an executable")
    parser.add_argument("-bin", "--bin", default=None, help="binary to generate (default: name of the current directory)")
    parser.add_argument("-f", "--func", default="", help="function to print out, as a regular expression")
    parser.add_argument("-file", "--file", default="", help="filter on one file")
    parser.add_argument(
        "--listing",
        type=Path,
        default=None,
        help="read an existing `go tool objdump` listing instead of building; '-' reads stdin",
    )
    parser.add_argument("--no-color", action="store_true", help="disable colors")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--quiet", action="store_true", help="only log errors")
    parser.add_argument("-V", "--version", action="version", version=f"disfunc {__version__}")
    return parser


def configure_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def use_color(no_color: bool) -> bool:
    if no_color or os.getenv("NO_COLOR"):
        return False
    if os.getenv("TERM") == "dumb":
        return False
    return bool(sys.stdout.isatty())


def make_console(color: bool) -> Console:
    return Console(
        file=sys.stdout,
        force_terminal=color,
        no_color=not color,
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


def read_listing(path: Path) -> str:
    """Read a listing from a file, or stdin for '-'.

    Raises:
        OSError: If the file cannot be read.

    """
    if str(path) == "-":
        data = sys.stdin.buffer.read()
    else:
        data = path.read_bytes()
    return data.decode("utf-8", errors="replace")


def load_listing(args: argparse.Namespace) -> str:
    if args.listing is not None:
        logger.debug("reading listing from %s", args.listing)
        return read_listing(args.listing)

    binary = Path(args.bin or Path.cwd().name)
    logger.info("building %s into %s", args.pkg, binary)
    build_binary(args.pkg, binary)
    return disassemble(binary, args.func or None)


def run(args: argparse.Namespace) -> int:
    """Run the pipeline: load, parse, resolve, filter, render.

    Raises:
        UsageError: If the function filter is not a valid regular expression.
        FormatError: If the listing is malformed.
        ToolchainError: If building or disassembling fails.
        OSError: If the listing file cannot be read.

    """
    text = load_listing(args)
    listing = parse_listing(text)
    resolved = resolve_jumps(listing.symbols, listing.addresses)
    logger.debug("resolved %d jumps", resolved)

    symbols = filter_by_file(listing.symbols, args.file)
    if args.listing is not None:
        # The toolchain applies -f itself when disassembling.
        try:
            symbols = filter_by_symbol(symbols, args.func)
        except re.error as exc:
            raise UsageError(f"invalid -f pattern {args.func!r}: {exc}") from exc
    if not symbols and (args.file or args.func):
        logger.warning("no symbols matched")

    print_annotated(make_console(use_color(args.no_color)), symbols)
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.
    """
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    try:
        return run(args)
    except UsageError as exc:
        print(f"disfunc: {exc}", file=sys.stderr)
        return 2
    except FormatError as exc:
        print(f"disfunc: {exc}", file=sys.stderr)
        return 1
    except ToolchainError as exc:
        print(f"disfunc: {exc}", file=sys.stderr)
        return 3
    except OSError as exc:
        print(f"disfunc: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        print(f"disfunc: {exc}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    raise SystemExit(main())
