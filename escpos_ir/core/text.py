"""Transliteration of IR string literals into printer bytes.

WHY: Text inside a quoted IR literal is printed as-is, one byte per
character, in whatever character table the printer has selected. The
converter must never expand a character into several bytes, or the
printer would print garbage and parameter bytes after it would shift.

HOW: Encodes with a single-byte Python codec (cp437 by default, the
printer's power-on table) and replaces anything the code page cannot
represent with "?".

RULES:
- Output length always equals input length
- Unencodable characters become b"?"
- Multi-byte codecs (utf-8, shift_jis, ...) are rejected up front
"""

from __future__ import annotations

import codecs

from escpos_ir.config import DEFAULT_ENCODING


def check_single_byte(encoding: str) -> str:
    """Return the canonical codec name, or raise ValueError if not single-byte."""
    try:
        info = codecs.lookup(encoding)
        # Every character of a single-byte table round-trips to exactly one byte.
        sample = "Aé░あ"
        encoded = sample.encode(info.name, errors="replace")
    except LookupError as e:
        # Unknown names, and bytes-to-bytes codecs such as rot13 or hex.
        raise ValueError("unknown text encoding: {}".format(encoding)) from e
    if len(encoded) != len(sample):
        raise ValueError("encoding {} is not a single-byte code page".format(encoding))
    return info.name


def transliterate(text: str, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Map each character of ``text`` to exactly one byte."""
    return text.encode(encoding, errors="replace")
