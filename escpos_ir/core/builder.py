"""IR instruction builder for ESC/POS printer operations.

WHY: Hand-writing ESC/POS parameter bytes is error-prone ("was partial
cut 1 or 66?"). The builder exposes named printer operations and writes
the matching IR, with a '// comment above each instruction so the
resulting file documents itself for a human reviewer.

HOW: Every method writes straight to the text sink given at
construction: one comment line, then one instruction line indented by
four spaces. Nothing is buffered. Text is emitted as quoted literals
with tabs and newlines pulled out into HT and LF mnemonics, because raw
control bytes must never appear inside a quoted literal.

RULES:
- Comment lines start with "'//" and are ignored by the converter
- Unknown justification or font codes produce a comment, never an error
- Text containing a double quote produces an ERROR comment and no
  instruction, since the IR has no escape for it
- character_size clamps width/height to [0, 7]
- print_feed / print_feed_lines clamp n to [0, 255]
- Byte-typed arguments outside [0, 255] raise ValueError
- Exceptions from the sink propagate unchanged
"""

from __future__ import annotations

from typing import TextIO

from escpos_ir.config import COMMENT_MARKER

_INDENT = "    "
_QUOTE = '"'

# Font selection names for ESC M n. Both the raw value and its ASCII
# digit form ("0" == 48) select the same font.
_FONT_NAMES = {
    0: "Font A",
    48: "Font A",
    1: "Font B",
    49: "Font B",
    2: "Font C",
    50: "Font C",
    3: "Font D",
    51: "Font D",
    4: "Font D",
    52: "Font D",
    97: "Special Font A",
    98: "Special Font B",
}

_JUSTIFICATIONS = {
    "left": ("Left justification", 0),
    "center": ("Centered justification", 1),
    "centered": ("Centered justification", 1),
    "right": ("Right justification", 2),
}


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _check_byte(name: str, value: int) -> int:
    if not 0 <= value <= 255:
        raise ValueError("{} must be in [0, 255], got {}".format(name, value))
    return value


class Builder:
    """Writes ESC/POS IR for named printer operations.

    Example::

        builder = Builder(sys.stdout)
        builder.initialize_printer()
        builder.justification("center")
        builder.print("Hello\\tWorld\\n")
        builder.cut(3, full=False)
    """

    def __init__(self, out: TextIO) -> None:
        self.out = out

    # ------------------------------------------------------------------
    # Low-level writers
    # ------------------------------------------------------------------

    def comment(self, text: str) -> None:
        """Write a '// annotation line."""
        self.out.write("{} {}\n".format(COMMENT_MARKER, text))

    def _instruction(self, *tokens: object) -> None:
        self.out.write(_INDENT + " ".join(str(t) for t in tokens) + "\n")

    # ------------------------------------------------------------------
    # Printer operations
    # ------------------------------------------------------------------

    def initialize_printer(self) -> None:
        """Clear the print buffer and reset printer modes to power-on state.

        Macro definitions, NV graphics, NV user memory and the
        maintenance counter are not affected.
        """
        self.comment("Initialize printer")
        self._instruction("ESC", '"@"')

    def character_font(self, n: int) -> None:
        """Select the character font (TM-T88V: 0 = Font A 12x24, 1 = Font B 9x17)."""
        _check_byte("font", n)
        name = _FONT_NAMES.get(n)
        if name is None:
            self.comment("WARNING: Select Unknown Font")
        else:
            self.comment("Select {}".format(name))
        self._instruction("ESC", '"M"', n)

    def justification(self, mode: str) -> None:
        """Set text justification: "left", "center"/"centered" or "right".

        Only takes effect at the beginning of a print line.
        """
        entry = _JUSTIFICATIONS.get(mode.lower())
        if entry is None:
            self.comment("ERROR: unknown justification: {}".format(mode))
            return
        label, value = entry
        self.comment(label)
        self._instruction("ESC", '"a"', value)

    def home(self, print_first: bool) -> None:
        """Return to the beginning of the print line.

        With print_first the buffered data is printed before moving,
        otherwise it is discarded.
        """
        if print_first:
            self.comment("Home, print first")
            self._instruction("GS", '"T"', 1)
        else:
            self.comment("Home, reset print buffer")
            self._instruction("GS", '"T"', 0)

    def cut(self, n: int, full: bool) -> None:
        """Cut the paper, optionally feeding n motion units first.

        n == 0 uses GS V function A (cut at the current position);
        n > 0 uses function B (feed to cutting position + n, then cut).
        """
        # ref: https://reference.epson-biz.com/modules/ref_escpos/index.php?content_id=87
        _check_byte("cut feed", n)
        kind = "full cut" if full else "partial cut"
        if n == 0:
            self.comment("Cut Paper ({})".format(kind))
            self._instruction("GS", '"V"', 0 if full else 1)
        else:
            self.comment("Feed and Cut Paper ({})".format(kind))
            self._instruction("GS", '"V"', 65 if full else 66, n)

    def strong(self, enabled: bool) -> None:
        """Turn emphasized (bold) mode on or off."""
        if enabled:
            self.comment("Emphasized mode on")
            self._instruction("ESC", '"E"', 1)
        else:
            self.comment("Emphasized mode off")
            self._instruction("ESC", '"E"', 0)

    def character_size(self, width: int, height: int) -> None:
        """Select character magnification; width and height are clamped to [0, 7]."""
        width = _clamp(width, 0, 7)
        height = _clamp(height, 0, 7)
        self.comment("Character magnification Wx{} Hx{}".format(width + 1, height + 1))
        # Width lives in bits 4-6 and height in bits 0-2, so the hex
        # digits are simply the two sizes.
        self._instruction("GS", '"!"', "0x{}{}".format(width, height))

    def default_line_spacing(self) -> None:
        self.comment("Default Line Spacing")
        self._instruction("ESC", 2)

    def line_spacing(self, n: int) -> None:
        """Set line spacing to n motion units."""
        _check_byte("line spacing", n)
        self.comment("Set Line Spacing")
        self._instruction("ESC", 3, n)

    def print(self, text: str) -> None:
        """Print text, turning tabs into HT and newlines into LF.

        Every emitted line ends with an LF mnemonic, so the converted
        output always finishes with a line feed.
        """
        if _QUOTE in text:
            self.comment("ERROR: double quote cannot be printed: {}".format(text.replace("\n", " ")))
            return
        for segment in text.split("\n"):
            parts = []
            for i, piece in enumerate(segment.split("\t")):
                if i > 0:
                    parts.append("HT")
                if piece:
                    parts.append('"{}"'.format(piece))
            parts.append("LF")
            self._instruction(*parts)

    def print_feed(self, n: int) -> None:
        """Print the buffer and feed n motion units; n is clamped to [0, 255]."""
        n = _clamp(n, 0, 255)
        self.comment("Print and feed")
        self._instruction("ESC", '"J"', n)

    def print_feed_lines(self, n: int) -> None:
        """Print the buffer and feed n lines; n is clamped to [0, 255]."""
        n = _clamp(n, 0, 255)
        self.comment("Print and feed lines")
        self._instruction("ESC", '"d"', n)
