"""ESC/POS control-code table.

WHY: Both the builder and the converter refer to protocol bytes by
mnemonic (ESC, GS, LF, ...). Keeping the mapping in one immutable table
guarantees that both halves of the codec agree on every byte.

HOW: A plain dict literal wrapped in types.MappingProxyType, built once
at import time. lookup() returns None for unknown names so that callers
can tell SP (0x20) apart from "no such control code".

RULES:
- Values are bit-exact with the Epson ESC/POS reference
- The table is read-only; there is no insertion or removal at runtime
- Lookup is case-sensitive ("esc" is not a mnemonic)
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

# ref: https://reference.epson-biz.com/modules/ref_escpos/index.php?content_id=72
CONTROL_CODES: Mapping[str, int] = MappingProxyType({
    "EOT": 0x04,  # End of Transmission
    "ENQ": 0x05,  # Enquiry
    "HT": 0x09,   # Horizontal Tab
    "DLE": 0x10,  # Data Link Escape
    "LF": 0x0A,   # Print and Line Feed
    "FF": 0x0C,   # Print and return to Standard mode from Page mode
    "CR": 0x0D,   # Carriage Return
    "DC4": 0x14,  # Device Control 4
    "CAN": 0x18,  # Cancel print data
    "ESC": 0x1B,  # Escape
    "FS": 0x1C,   # File Separator
    "GS": 0x1D,   # Group Separator
    "SP": 0x20,   # Space
})

# Byte that terminates an IR record when scanning text.
LF = CONTROL_CODES["LF"]


@dataclass(frozen=True)
class ControlCode:
    """One entry of the control-code table."""

    name: str
    value: int


def lookup(name: str) -> Optional[int]:
    """Return the byte for mnemonic ``name``, or None when it is unknown."""
    return CONTROL_CODES.get(name)


def is_control_code(name: str) -> bool:
    return name in CONTROL_CODES


def iter_control_codes() -> Iterator[ControlCode]:
    """Yield every control code ordered by byte value."""
    for name, value in sorted(CONTROL_CODES.items(), key=lambda item: item[1]):
        yield ControlCode(name=name, value=value)
