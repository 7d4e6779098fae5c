"""ESC/POS IR Toolkit: human-readable printer programs, raw bytes out.

WHY: ESC/POS thermal printers speak a terse binary protocol that nobody
wants to author or review byte-by-byte. This package defines a small
text intermediate representation (IR) for that protocol: mnemonics such
as ESC and GS, numeric literals, and quoted strings, one instruction per
line with '// comments for humans.

HOW: Two halves share one control-code table. The builder turns named
printer operations (cut, justification, print text, ...) into IR lines.
The converter streams IR text back into the exact byte sequence the
printer expects. Around that codec sit an image preview renderer, an
async TCP transport to the printer, and a command-line interface.

RULES:
- The control-code table is the single source of truth for mnemonic bytes
- The IR is the stable contract between builder and converter
- Malformed IR is fatal; malformed builder configuration is a comment
"""

__version__ = "0.1.0"
