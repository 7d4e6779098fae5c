"""Shared test fixtures for the escpos_ir test suite.

WHY: Builder, converter, CLI and transport tests all need to turn IR
text into bytes, capture builder output, and run without picking up a
developer's printer settings from the environment.

HOW: Pytest fixtures provide a StringIO-backed Builder, a convert helper
returning bytes, a small hand-written receipt document with its
expected bytes, and an autouse fixture that clears ESCPOS_* variables.

RULES:
- Expected bytes are written out literally, never produced by the code
  under test.
- No test talks to a real printer; transport tests use a local server.
"""

import io
from typing import Callable

import pytest

from escpos_ir.config import _ENV_FIELDS
from escpos_ir.core.builder import Builder
from escpos_ir.core.converter import Converter


# ---------------------------------------------------------------------------
# Hand-written receipt and its bytes
# ---------------------------------------------------------------------------

SAMPLE_RECEIPT_IR = (
    "'// Initialize printer\n"
    '    ESC "@"\n'
    "'// Centered justification\n"
    '    ESC "a" 1\n'
    "\n"
    '    "Corner Cafe" LF\n'
    '    "Latte" HT "3.50" LF\n'
    "'// Feed and Cut Paper (partial cut)\n"
    '    GS "V" 66 3\n'
)

SAMPLE_RECEIPT_BYTES = (
    b"\x1b@"
    b"\x1ba\x01"
    b"Corner Cafe\n"
    b"Latte\t3.50\n"
    b"\x1dVB\x03"
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove ESCPOS_* settings so tests see the built-in defaults."""
    for name in _ENV_FIELDS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ir_out():
    """A StringIO that collects builder output."""
    return io.StringIO()


@pytest.fixture
def builder(ir_out):
    """A Builder writing into the ir_out StringIO."""
    return Builder(ir_out)


@pytest.fixture
def convert() -> Callable[[str], bytes]:
    """Convert an IR document with a fresh converter and sink."""
    def _convert(text: str, **kwargs) -> bytes:
        sink = io.BytesIO()
        Converter(**kwargs).convert(io.StringIO(text), sink)
        return sink.getvalue()
    return _convert


@pytest.fixture
def sample_receipt():
    return SAMPLE_RECEIPT_IR


@pytest.fixture
def sample_receipt_bytes():
    return SAMPLE_RECEIPT_BYTES
