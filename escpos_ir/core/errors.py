"""Exception hierarchy for the ESC/POS IR toolkit.

WHY: Callers (CLI, tests, scripts driving a printer) need to tell apart
"this IR is wrong" from "the disk or socket failed" from "the printer is
unreachable", and to report the offending line for the first kind.

HOW: Everything derives from EscposIRError. Conversion errors carry the
1-based line number and the offending token. I/O wrappers also derive
from OSError so existing ``except OSError`` handlers keep working; the
original exception is always chained with ``raise ... from``.

RULES:
- Malformed IR aborts conversion; bytes already written are not rolled back
- Builder soft errors never raise; they become IR comments instead
- I/O errors are wrapped, never swallowed
"""

from __future__ import annotations

from typing import Optional


class EscposIRError(Exception):
    """Base class for every error raised by this package."""


class ConversionError(EscposIRError):
    """Raised when an IR line cannot be turned into bytes.

    WHY: The converter cannot guess bytes for malformed input, so it
    stops and tells the caller exactly where the problem is.

    RULES:
    - line_number is 1-based and counts every record, including comments
    - token is the raw candidate token as split from the line
    """

    def __init__(self, message: str, line_number: int, token: str) -> None:
        self.line_number = line_number
        self.token = token
        super().__init__("line {}: {}".format(line_number, message))


class UnrecognizedTokenError(ConversionError):
    """Token is not a mnemonic, a delimited quote, or an integer literal."""


class UnterminatedQuoteError(UnrecognizedTokenError):
    """A quoted literal was still open when its line ended."""


class NumericRangeError(ConversionError):
    """Integer literal does not fit in a single byte."""


class SourceReadError(EscposIRError, OSError):
    """Reading the IR source failed for a reason other than end of input."""


class SinkWriteError(EscposIRError, OSError):
    """Writing converted bytes to the sink failed."""


class PrinterConnectionError(EscposIRError):
    """The printer address could not be resolved or connected to.

    RULES:
    - address is the "HOST:PORT" string the caller asked for
    """

    def __init__(self, address: str, message: str, cause: Optional[BaseException] = None) -> None:
        self.address = address
        self.cause = cause
        super().__init__("unable to reach printer at {}: {}".format(address, message))


class ImagePreviewError(EscposIRError):
    """An image could not be opened or decoded for preview rendering."""
