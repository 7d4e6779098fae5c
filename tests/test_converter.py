"""Unit tests for the IR converter.

WHY: The converter is the only code that decides which bytes reach the
printer. A dropped space in a quoted string, a mnemonic parsed as a
number, or a silently truncated document all produce wrong receipts.

HOW: Tests are organized by concern:
  - TestResolveToken: each priority rule in isolation, per quote state
  - TestRecords: blank/comment/short record skipping
  - TestQuoteSpans: strings containing spaces across tokens
  - TestNumbers: decimal/hex literals, range and malformed errors
  - TestStreaming: end of input, last line without LF, I/O failures
  - TestVerbose: per-token tracing through logging

RULES:
- Expected bytes are literal byte strings
- Each convert() call uses a fresh converter and sink (conftest fixture)
"""

import io
import logging

import pytest

from escpos_ir.core.converter import Converter, QuoteState, convert, convert_text, parse_number
from escpos_ir.core.errors import (
    ConversionError,
    NumericRangeError,
    SinkWriteError,
    SourceReadError,
    UnrecognizedTokenError,
    UnterminatedQuoteError,
)

OUT = QuoteState.OUTSIDE
IN = QuoteState.INSIDE


class TestResolveToken:
    """resolve_token() applies the rules in fixed priority order."""

    @pytest.fixture
    def conv(self):
        return Converter()

    def test_lone_quote_opens_with_space(self, conv):
        assert conv.resolve_token('"', OUT) == (b" ", IN)

    def test_lone_quote_closes(self, conv):
        assert conv.resolve_token('"', IN) == (b"", OUT)

    def test_empty_inside_is_space(self, conv):
        assert conv.resolve_token("", IN) == (b" ", IN)

    def test_empty_outside_is_skipped(self, conv):
        assert conv.resolve_token("", OUT) == (b"", OUT)

    def test_mid_quote_text_gets_separator(self, conv):
        assert conv.resolve_token("big", IN) == (b"big ", IN)

    def test_mnemonic_inside_quote_is_text(self, conv):
        assert conv.resolve_token("LF", IN) == (b"LF ", IN)

    def test_mnemonic(self, conv):
        assert conv.resolve_token("ESC", OUT) == (b"\x1b", OUT)

    def test_full_quote(self, conv):
        assert conv.resolve_token('"@"', OUT) == (b"@", OUT)

    def test_empty_quote(self, conv):
        assert conv.resolve_token('""', OUT) == (b"", OUT)

    def test_opening_fragment(self, conv):
        assert conv.resolve_token('"Hello', OUT) == (b"Hello ", IN)

    def test_closing_fragment(self, conv):
        assert conv.resolve_token('World"', IN) == (b"World", OUT)

    def test_number(self, conv):
        assert conv.resolve_token("65", OUT) == (b"A", OUT)

    def test_hex_number(self, conv):
        assert conv.resolve_token("0x1B", OUT) == (b"\x1b", OUT)

    def test_unknown_word(self, conv):
        with pytest.raises(UnrecognizedTokenError):
            conv.resolve_token("BOGUS", OUT)


class TestRecords:
    def test_comment_skipped(self, convert):
        assert convert("'// ESC 64\n") == b""

    def test_blank_skipped(self, convert):
        assert convert("\n   \n\t\n") == b""

    def test_single_character_record_skipped(self, convert):
        assert convert("x\n\"\n") == b""

    def test_single_digit_record_is_a_byte(self, convert):
        assert convert("5\n") == b"\x05"

    def test_surrounding_whitespace_trimmed(self, convert):
        assert convert("   ESC 64   \n") == b"\x1b@"

    def test_sample_receipt(self, convert, sample_receipt, sample_receipt_bytes):
        assert convert(sample_receipt) == sample_receipt_bytes

    def test_returns_byte_count(self, sample_receipt, sample_receipt_bytes):
        sink = io.BytesIO()
        n = Converter().convert(io.StringIO(sample_receipt), sink)
        assert n == len(sample_receipt_bytes)


class TestQuoteSpans:
    """Quoted literals keep every space exactly once."""

    def test_hello_world(self, convert):
        assert convert('"Hello World" LF\n') == b"Hello World\n"

    def test_three_words(self, convert):
        assert convert('"one two three"\n') == b"one two three"

    def test_double_space(self, convert):
        assert convert('"a  b"\n') == b"a  b"

    def test_leading_space(self, convert):
        assert convert('" a" LF\n') == b" a\n"

    def test_trailing_space(self, convert):
        assert convert('"a " LF\n') == b"a \n"

    def test_only_spaces(self, convert):
        assert convert('"   " LF\n') == b"   \n"

    def test_mnemonic_word_inside_quote(self, convert):
        assert convert('"press ESC now"\n') == b"press ESC now"

    def test_quote_state_resets_per_line(self, convert):
        assert convert('"a b"\nESC\n') == b"a b\x1b"

    def test_unterminated_quote_raises(self, convert):
        with pytest.raises(UnterminatedQuoteError) as exc:
            convert('ESC "abc\n')
        assert exc.value.line_number == 1

    def test_unterminated_quote_without_trailing_newline(self, convert):
        with pytest.raises(UnterminatedQuoteError):
            convert('LF\n"abc')

    def test_cross_line_quote_is_rejected(self, convert):
        with pytest.raises(UnterminatedQuoteError) as exc:
            convert('"first\nsecond"\n')
        assert exc.value.line_number == 1

    def test_unterminated_is_unrecognized_token(self):
        assert issubclass(UnterminatedQuoteError, UnrecognizedTokenError)

    def test_shade_blocks_use_code_page(self, convert):
        assert convert('"░▒▓█" LF\n') == b"\xb0\xb1\xb2\xdb\n"

    def test_unencodable_becomes_question_mark(self, convert):
        assert convert('"a€b"\n') == b"a?b"


class TestNumbers:
    @pytest.mark.parametrize("token,value", [
        ("0", 0),
        ("255", 255),
        ("007", 7),
        ("0x00", 0),
        ("0xff", 255),
        ("0XFF", 255),
        ("0x77", 0x77),
    ])
    def test_valid(self, token, value):
        assert parse_number(token) == value

    @pytest.mark.parametrize("token", ["256", "0x100", "99999"])
    def test_out_of_range(self, token):
        with pytest.raises(NumericRangeError):
            parse_number(token)

    @pytest.mark.parametrize("token", ["-1", "+5", "1.5", "0x", "0xZZ", "12a", "1_0", "12\n", "0xff\n"])
    def test_malformed(self, token):
        with pytest.raises(UnrecognizedTokenError):
            parse_number(token)

    def test_newline_inside_record_is_not_a_number(self):
        with pytest.raises(UnrecognizedTokenError):
            Converter().encode_line("12\n 5")

    def test_mnemonic_beats_number(self, convert):
        assert convert("SP 32\n") == b"  "

    def test_range_error_reports_line(self, convert):
        with pytest.raises(NumericRangeError) as exc:
            convert("ESC 64\n\nGS 300\n")
        assert exc.value.line_number == 3
        assert exc.value.token == "300"
        assert isinstance(exc.value, ConversionError)

    def test_no_rollback_on_error(self):
        sink = io.BytesIO()
        with pytest.raises(NumericRangeError):
            Converter().convert(io.StringIO("ESC 64\nGS 999\n"), sink)
        assert sink.getvalue() == b"\x1b@\x1d"


class TestStreaming:
    def test_last_line_without_newline(self, convert):
        assert convert("ESC 64") == b"\x1b@"

    def test_empty_document(self, convert):
        assert convert("") == b""

    def test_convert_text_helper(self):
        assert convert_text('ESC "@"\n') == b"\x1b@"

    def test_module_convert(self):
        sink = io.BytesIO()
        assert convert(io.StringIO("LF\n"), sink) == 1
        assert sink.getvalue() == b"\n"

    def test_idempotent(self, convert, sample_receipt):
        assert convert(sample_receipt) == convert(sample_receipt)

    def test_read_failure(self):
        class BrokenSource:
            def readline(self):
                raise OSError("device unplugged")

        with pytest.raises(SourceReadError) as exc:
            Converter().convert(BrokenSource(), io.BytesIO())
        assert isinstance(exc.value, OSError)
        assert isinstance(exc.value.__cause__, OSError)

    def test_write_failure(self):
        class BrokenSink:
            def write(self, data):
                raise BrokenPipeError("printer hung up")

        with pytest.raises(SinkWriteError) as exc:
            Converter().convert(io.StringIO("ESC\n"), BrokenSink())
        assert isinstance(exc.value.__cause__, BrokenPipeError)

    def test_multibyte_encoding_rejected(self):
        with pytest.raises(ValueError):
            Converter(encoding="utf-8")

    def test_alternate_code_page(self, convert):
        assert convert('"é"\n', encoding="latin-1") == b"\xe9"


class TestVerbose:
    """Verbosity is per converter; it never leaks between instances."""

    def test_verbose_logs_tokens(self, caplog):
        caplog.set_level(logging.DEBUG, logger="escpos_ir.core.converter")
        Converter(verbose=True).encode_line('ESC "@" 0x01')
        messages = [r.getMessage() for r in caplog.records]
        assert "Code: ESC, 1b" in messages
        assert "String: @" in messages
        assert "Number 00000001" in messages

    def test_quiet_by_default(self, caplog):
        caplog.set_level(logging.DEBUG, logger="escpos_ir.core.converter")
        Converter().encode_line('ESC "@" 64')
        assert not any(r.getMessage().startswith("Code:") for r in caplog.records)
