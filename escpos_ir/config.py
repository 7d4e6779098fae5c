"""Configuration constants, printer defaults, and .env loading.

WHY: The printer address, connect timeout, code page, and preview width
change per installation (shop counter, kitchen, test bench). Keeping
them in one place, overridable from the environment, means nobody has
to touch code to point the tool at a different printer.

HOW: python-dotenv loads the .env file on import. Raw values are read
with os.getenv and validated into a pydantic PrinterSettings model by
load_settings(), which the CLI calls once per invocation. Module-level
constants hold the protocol defaults that never come from the
environment.

RULES:
- ESCPOS_PRINTER is optional; when unset the CLI requires HOST:PORT
- ESCPOS_PORT defaults to 9100 (raw TCP printing, "JetDirect")
- ESCPOS_ENCODING must be a single-byte code page known to Python
- Invalid values raise ValueError with the offending variable named
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

# Load .env from the project root (where the tool is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Protocol defaults
# ---------------------------------------------------------------------------

DEFAULT_PORT = 9100
"""Raw TCP printing port used by nearly every networked ESC/POS printer."""

DEFAULT_CONNECT_TIMEOUT_S = 5.0

DEFAULT_ENCODING = "cp437"
"""Character code table PC437, selected by printers at power-on."""

DEFAULT_IMAGE_WIDTH = 56
"""Characters per line in Font B on an 80 mm TM-T88 class printer."""

COMMENT_MARKER = "'//"
"""Prefix of IR comment lines; the converter skips them."""


class PrinterSettings(BaseModel):
    """Validated runtime settings for the CLI and transport.

    WHY: Environment variables are strings; the transport needs an int
    port, a positive float timeout, and a code page that really encodes
    one byte per character. Pydantic turns bad values into one readable
    error instead of a crash deep inside a socket call.

    RULES:
    - printer is "HOST" or "HOST:PORT", or None when not configured
    - connect_timeout_s > 0
    - image_width >= 1
    - encoding must be a single-byte text codec
    """

    printer: Optional[str] = Field(default=None, description="Default HOST:PORT for print")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    connect_timeout_s: float = Field(default=DEFAULT_CONNECT_TIMEOUT_S, gt=0)
    encoding: str = Field(default=DEFAULT_ENCODING)
    image_width: int = Field(default=DEFAULT_IMAGE_WIDTH, ge=1)

    @field_validator("printer")
    @classmethod
    def _blank_printer_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value.strip() if value else value

    @field_validator("encoding")
    @classmethod
    def _single_byte_codec(cls, value: str) -> str:
        # Imported here: escpos_ir.core.text reads DEFAULT_ENCODING from this module.
        from escpos_ir.core.text import check_single_byte

        check_single_byte(value)
        return value


_ENV_FIELDS = {
    "ESCPOS_PRINTER": "printer",
    "ESCPOS_PORT": "port",
    "ESCPOS_CONNECT_TIMEOUT": "connect_timeout_s",
    "ESCPOS_ENCODING": "encoding",
    "ESCPOS_IMAGE_WIDTH": "image_width",
}


def load_settings() -> PrinterSettings:
    """Build PrinterSettings from the environment.

    WHY: The CLI needs one validated settings object per run, and tests
    need to vary the environment with monkeypatch without reloading the
    module.

    HOW: Collects the ESCPOS_* variables that are set and hands them to
    the pydantic model; unset variables fall back to the model defaults.

    RULES:
    - Raises ValueError naming the variable(s) on invalid input
    """
    raw = {}
    for env_name, field_name in _ENV_FIELDS.items():
        value = os.getenv(env_name)
        if value is not None:
            raw[field_name] = value

    try:
        return PrinterSettings(**raw)
    except ValidationError as e:
        reverse = {field: env for env, field in _ENV_FIELDS.items()}
        problems = []
        for err in e.errors():
            field = err["loc"][0] if err["loc"] else ""
            problems.append("{}: {}".format(reverse.get(field, field), err["msg"]))
        raise ValueError("Invalid printer configuration. " + "; ".join(problems)) from e
