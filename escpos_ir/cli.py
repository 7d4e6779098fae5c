"""Command-line interface for the ESC/POS IR toolkit.

WHY: Day-to-day use is "send this receipt file to the kitchen printer"
or "what bytes does this file turn into?". The CLI wires file/stdin
handling, configuration, the converter, the image preview, and the TCP
transport together behind a handful of subcommands.

HOW: argparse with subcommands:
  print HOST:PORT --file FILE|-   convert IR and stream it to a printer
  convert --file FILE|- [-o OUT]  convert IR to raw bytes on stdout/file
  image IMAGE_FILE                write an IR shade-block preview to stdout
  codes                           list the control-code table
  version                         print the package version
Open files are registered on a contextlib.ExitStack so they are closed
however the command ends. Async work runs via asyncio.run().

RULES:
- Status and error messages go to stderr; stdout carries only data
- "-" means stdin for --file and stdout for --output
- Sources are read with newline="\\n" so a CR inside a literal is not
  a record break
- HOST:PORT falls back to ESCPOS_PRINTER from the environment / .env
- Exit code 1 on any handled error, 130 on Ctrl-C
- --verbose enables DEBUG logging and per-token conversion tracing
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import io
import logging
import sys
from typing import BinaryIO, List, Optional, TextIO

from escpos_ir import __version__
from escpos_ir.config import PrinterSettings, load_settings
from escpos_ir.core.commands import iter_control_codes
from escpos_ir.core.converter import Converter
from escpos_ir.core.errors import EscposIRError
from escpos_ir.imaging.preview import write_preview
from escpos_ir.transport.printer import print_ir

logger = logging.getLogger(__name__)

_HOST_TIP = (
    "expected HOST:PORT (tip: look for printer-??? using `arp -a`; "
    "PORT is normally 9100)"
)


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout can be piped."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _open_source(path: str, stack: contextlib.ExitStack) -> TextIO:
    """Open the IR source; "-" is stdin.

    newline="\\n" disables universal newlines, so only LF ends a record
    and a CR inside a literal reaches the converter untouched.
    """
    if path == "-":
        source = io.TextIOWrapper(sys.stdin.buffer, encoding="utf-8", newline="\n")
        # Leave the process stdin open once the command is done.
        stack.callback(source.detach)
        return source
    return stack.enter_context(open(path, "r", encoding="utf-8", newline="\n"))


def _open_sink(path: str, stack: contextlib.ExitStack) -> BinaryIO:
    """Open the byte sink; "-" is stdout."""
    if path == "-":
        return sys.stdout.buffer
    return stack.enter_context(open(path, "wb"))


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_print(args: argparse.Namespace, settings: PrinterSettings) -> None:
    address = args.address or settings.printer
    if not address:
        _fail(_HOST_TIP)

    with contextlib.ExitStack() as stack:
        source = _open_source(args.file, stack)
        sent = asyncio.run(print_ir(
            source,
            address,
            timeout_s=settings.connect_timeout_s,
            default_port=settings.port,
            encoding=settings.encoding,
            verbose=args.verbose,
        ))
    _status("Sent {} byte(s) to {}".format(sent, address))


def _cmd_convert(args: argparse.Namespace, settings: PrinterSettings) -> None:
    converter = Converter(verbose=args.verbose, encoding=settings.encoding)
    with contextlib.ExitStack() as stack:
        source = _open_source(args.file, stack)
        sink = _open_sink(args.output, stack)
        written = converter.convert(source, sink)
        sink.flush()
    if args.output != "-":
        _status("Wrote {} byte(s) to {}".format(written, args.output))


def _cmd_image(args: argparse.Namespace, settings: PrinterSettings) -> None:
    width = args.width if args.width is not None else settings.image_width
    write_preview(
        args.image_file,
        sys.stdout,
        max_width=width,
        scale_y=args.y_scale,
        invert=args.invert,
    )


def _cmd_codes(args: argparse.Namespace, settings: PrinterSettings) -> None:
    for code in iter_control_codes():
        print("{:<4} 0x{:02X}".format(code.name, code.value))


def _cmd_version(args: argparse.Namespace, settings: PrinterSettings) -> None:
    print(__version__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Separated from main() so tests can inspect the parser without
    running a command.
    """
    parser = argparse.ArgumentParser(
        prog="escpos-ir",
        description="Epson ESC/POS printer interface: convert human-readable "
                    "ESC/POS IR into printer bytes and send it to a printer.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every converted token and other debug output to stderr.",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    p_print = sub.add_parser(
        "print",
        help="Print an ESC/POS formatted file to a printer.",
        description="Convert an ESC/POS IR file and send it to a network printer.",
    )
    p_print.add_argument(
        "address",
        nargs="?",
        default=None,
        metavar="HOST:PORT",
        help="Printer address (default: $ESCPOS_PRINTER).",
    )
    p_print.add_argument(
        "-f", "--file",
        required=True,
        help="ESC/POS file path, or - for stdin.",
    )
    p_print.set_defaults(handler=_cmd_print)

    p_convert = sub.add_parser(
        "convert",
        help="Convert an ESC/POS formatted file to raw printer bytes.",
    )
    p_convert.add_argument(
        "-f", "--file",
        required=True,
        help="ESC/POS file path, or - for stdin.",
    )
    p_convert.add_argument(
        "-o", "--output",
        default="-",
        help="Output file for raw bytes, or - for stdout (default: %(default)s).",
    )
    p_convert.set_defaults(handler=_cmd_convert)

    p_image = sub.add_parser(
        "image",
        help="Convert an image to ESC/POS formatted output.",
    )
    p_image.add_argument("image_file", metavar="IMAGE_FILE", help="PNG, JPEG or other image file.")
    p_image.add_argument("--invert", action="store_true", help="Invert the image.")
    p_image.add_argument(
        "--y-scale",
        type=float,
        default=1.0,
        help="Additional scale for Y axis; multiplied with the X axis scale (default: %(default)s).",
    )
    p_image.add_argument(
        "--width",
        type=int,
        default=None,
        help="Maximum width in characters (default: $ESCPOS_IMAGE_WIDTH or 56, Font B).",
    )
    p_image.set_defaults(handler=_cmd_image)

    p_codes = sub.add_parser("codes", help="List the control-code mnemonics and their bytes.")
    p_codes.set_defaults(handler=_cmd_codes)

    p_version = sub.add_parser("version", help="Print the version.")
    p_version.set_defaults(handler=_cmd_version)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    argv=None means use sys.argv; an explicit list is for testing.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        settings = load_settings()
        args.handler(args, settings)
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (EscposIRError, ValueError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        _fail(str(e))


if __name__ == "__main__":
    main()
