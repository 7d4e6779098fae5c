"""Streaming IR → ESC/POS byte converter.

WHY: The IR is written for humans: mnemonics, decimal or hex numbers,
and quoted text that may contain spaces. The printer wants exactly one
byte per token value, in order, with nothing else. This module is the
only place where IR text is given meaning.

HOW: The source is read one LF-terminated record at a time. Blank
records, stray single characters (other than a lone digit), and '//
comments are skipped. Every other record is split on single spaces and
each candidate token is resolved by a fixed-priority rule list against
an explicit two-state quote machine (OUTSIDE / INSIDE). Resolved bytes
are written to the sink immediately; nothing is buffered or rolled back.

RULES:
- Rule priority (first match wins):
  1. lone '"'                      → toggle quote state
  2. INSIDE and empty token        → one space (two spaces in the source)
  3. empty token                   → skipped
  4. INSIDE, no closing '"'        → literal text plus the separating space
  5. control-code mnemonic         → its byte
  6. '"text"'                      → literal text
  7. '"text'                       → enter INSIDE, literal text plus space
  8. 'text"'                       → leave INSIDE, literal text
  9. decimal or 0x-hex integer     → one byte (0-255)
- A mnemonic always wins over a number (rule 5 before rule 9)
- Quote state starts OUTSIDE on every record; a quote still open at the
  end of a record raises UnterminatedQuoteError
- Verbose tracing is a constructor argument, never module state
"""

from __future__ import annotations

import enum
import io
import logging
import re
from typing import BinaryIO, Optional, TextIO, Tuple

from escpos_ir.config import COMMENT_MARKER, DEFAULT_ENCODING
from escpos_ir.core.commands import lookup
from escpos_ir.core.errors import (
    NumericRangeError,
    SinkWriteError,
    SourceReadError,
    UnrecognizedTokenError,
    UnterminatedQuoteError,
)
from escpos_ir.core.text import check_single_byte, transliterate

logger = logging.getLogger(__name__)

_QUOTE = '"'
_SPACE = b" "

_DECIMAL_RE = re.compile(r"[0-9]+")
_HEX_RE = re.compile(r"0[xX][0-9a-fA-F]+")
_DIGITS = frozenset("0123456789")


class QuoteState(enum.Enum):
    """Whether the converter is inside a quoted literal on the current line."""

    OUTSIDE = "outside"
    INSIDE = "inside"


def parse_number(token: str, line_number: int = 0) -> int:
    """Parse a decimal or 0x-prefixed hexadecimal byte literal.

    Raises UnrecognizedTokenError when ``token`` is not an integer
    literal and NumericRangeError when it does not fit in a byte.
    """
    if _HEX_RE.fullmatch(token):
        value = int(token[2:], 16)
    elif _DECIMAL_RE.fullmatch(token):
        value = int(token, 10)
    else:
        raise UnrecognizedTokenError(
            "unrecognized token {!r}: not a control code, quoted string, "
            "or integer literal".format(token),
            line_number,
            token,
        )
    if value > 0xFF:
        raise NumericRangeError(
            "number {} does not fit in a byte (0-255)".format(token),
            line_number,
            token,
        )
    return value


class Converter:
    """Converts ESC/POS IR text into raw printer bytes.

    WHY: Separating the per-token rules from the record loop lets each
    rule be exercised directly in tests via resolve_token(), while
    convert() handles streaming, record classification, and I/O errors.

    HOW: resolve_token() is a pure function of (token, state) that
    returns the bytes to write and the next state. convert_line() drives
    it over one record. convert() drives convert_line() over a source.

    RULES:
    - encoding must be a single-byte code page (checked at construction)
    - verbose=True traces every resolved token at DEBUG level
    - convert() returns the number of bytes written to the sink
    """

    def __init__(self, verbose: bool = False, encoding: str = DEFAULT_ENCODING) -> None:
        self.verbose = verbose
        self.encoding = check_single_byte(encoding)

    # ------------------------------------------------------------------
    # Token resolution
    # ------------------------------------------------------------------

    def _text(self, text: str) -> bytes:
        return transliterate(text, self.encoding)

    def _trace(self, msg: str, *args: object) -> None:
        if self.verbose:
            logger.debug(msg, *args)

    def resolve_token(
        self,
        token: str,
        state: QuoteState,
        line_number: int = 0,
    ) -> Tuple[bytes, QuoteState]:
        """Resolve one candidate token in the given quote state.

        Returns the bytes to emit and the quote state for the next token.
        """
        inside = state is QuoteState.INSIDE

        # Rule 1: a quote standing alone. Opening this way means the
        # literal starts with the space that separated it from the quote.
        if token == _QUOTE:
            if inside:
                self._trace("End Quote")
                return b"", QuoteState.OUTSIDE
            self._trace("Start Quote")
            return _SPACE, QuoteState.INSIDE

        if not token:
            # Rule 2: consecutive spaces inside a literal.
            if inside:
                return _SPACE, state
            # Rule 3
            return b"", state

        # Rule 4
        if inside and not token.endswith(_QUOTE):
            self._trace("Mid-Quote: %s", token)
            return self._text(token) + _SPACE, state

        # Rule 5
        code = lookup(token)
        if code is not None:
            self._trace("Code: %s, %x", token, code)
            return bytes([code]), state

        starts = token.startswith(_QUOTE)
        ends = token.endswith(_QUOTE)

        # Rule 6
        if starts and ends:
            text = token[1:-1]
            self._trace("String: %s", text)
            return self._text(text), state

        # Rule 7
        if starts:
            text = token[1:]
            self._trace("Start Quote: %s", text)
            return self._text(text) + _SPACE, QuoteState.INSIDE

        # Rule 8
        if ends:
            text = token[:-1]
            self._trace("End Quote: %s", text)
            return self._text(text), QuoteState.OUTSIDE

        # Rule 9
        value = parse_number(token, line_number)
        if self.verbose:
            if token[:2].lower() == "0x":
                self._trace("Number %s", format(value, "08b"))
            else:
                self._trace("Number %d", value)
        return bytes([value]), state

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    @staticmethod
    def is_skipped(record: str) -> bool:
        """True for blank records, comments, and stray single characters.

        A lone digit is a complete byte literal and is not skipped.
        """
        if len(record) <= 1:
            return record not in _DIGITS
        return record.startswith(COMMENT_MARKER)

    def _write(self, sink: BinaryIO, data: bytes) -> int:
        if not data:
            return 0
        try:
            sink.write(data)
        except OSError as e:
            raise SinkWriteError("failed to write converted bytes: {}".format(e)) from e
        return len(data)

    def convert_line(self, line: str, sink: BinaryIO, line_number: int = 1) -> int:
        """Convert a single IR record and write its bytes to ``sink``."""
        record = line.strip()
        if self.is_skipped(record):
            return 0

        written = 0
        state = QuoteState.OUTSIDE
        token = ""
        for token in record.split(" "):
            data, state = self.resolve_token(token, state, line_number)
            written += self._write(sink, data)

        if state is QuoteState.INSIDE:
            raise UnterminatedQuoteError(
                "quoted string is not closed before the end of the line",
                line_number,
                token,
            )
        return written

    def encode_line(self, line: str, line_number: int = 1) -> bytes:
        """Return the bytes for a single IR record."""
        buf = io.BytesIO()
        self.convert_line(line, buf, line_number)
        return buf.getvalue()

    def convert(self, source: TextIO, sink: BinaryIO) -> int:
        """Stream every record of ``source`` into ``sink``.

        Reaching the end of the source ends the conversion. The final
        record is converted even when it has no trailing LF.
        """
        written = 0
        line_number = 0
        while True:
            try:
                line = source.readline()
            except (OSError, UnicodeDecodeError) as e:
                raise SourceReadError(
                    "failed to read IR source after line {}: {}".format(line_number, e),
                ) from e
            if not line:
                break
            line_number += 1
            written += self.convert_line(line, sink, line_number)

        logger.debug("Converted %d line(s) into %d byte(s)", line_number, written)
        return written


def convert(
    source: TextIO,
    sink: BinaryIO,
    *,
    verbose: bool = False,
    encoding: Optional[str] = None,
) -> int:
    """Convert IR text from ``source`` into ESC/POS bytes on ``sink``.

    Convenience wrapper around Converter for one-shot use.
    """
    converter = Converter(verbose=verbose, encoding=encoding or DEFAULT_ENCODING)
    return converter.convert(source, sink)


def convert_text(text: str, *, verbose: bool = False, encoding: Optional[str] = None) -> bytes:
    """Convert an in-memory IR document and return the bytes."""
    out = io.BytesIO()
    convert(io.StringIO(text), out, verbose=verbose, encoding=encoding)
    return out.getvalue()
