"""Async TCP connection to a network ESC/POS printer.

WHY: The print command needs to open a socket to the printer, push the
converted byte stream, and close cleanly, with a bounded wait when the
printer is switched off or the address is wrong.

HOW: PrinterConnection is an async context manager around
asyncio.open_connection. Entering it resolves and connects (bounded by
the configured timeout); exiting drains and closes the writer.
print_ir() converts the IR into an in-memory buffer first so that a
malformed document never sends half a job to the printer, then sends
the whole buffer in one write.

RULES:
- Addresses are "HOST:PORT"; a bare "HOST" uses the default port 9100
- Connect failures and timeouts raise PrinterConnectionError
- Always use the async context manager (async with PrinterConnection(...))
- The transport never interprets the bytes it sends
"""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Optional, TextIO, Tuple

from escpos_ir.config import DEFAULT_CONNECT_TIMEOUT_S, DEFAULT_ENCODING, DEFAULT_PORT
from escpos_ir.core.converter import Converter
from escpos_ir.core.errors import PrinterConnectionError

logger = logging.getLogger(__name__)


def parse_address(address: str, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """Split "HOST:PORT" into (host, port).

    Bracketed IPv6 literals ("[::1]:9100") are supported. Raises
    ValueError for an empty host or a port that is not an integer in
    1-65535.
    """
    address = address.strip()
    host = address
    port_text: Optional[str] = None

    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError("invalid printer address: {}".format(address))
        host = address[1:end]
        rest = address[end + 1:]
        if rest.startswith(":"):
            port_text = rest[1:]
        elif rest:
            raise ValueError("invalid printer address: {}".format(address))
    elif address.count(":") == 1:
        host, port_text = address.split(":")

    if not host:
        raise ValueError("invalid printer address (missing host): {}".format(address))

    if port_text is None:
        return host, default_port
    if not port_text.isdigit() or not 1 <= int(port_text) <= 65535:
        raise ValueError("invalid printer port: {}".format(port_text))
    return host, int(port_text)


class PrinterConnection:
    """Raw TCP byte stream to a printer.

    Usage::

        async with PrinterConnection("printer-0a1b2c:9100") as conn:
            await conn.send(data)
    """

    def __init__(
        self,
        address: str,
        timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S,
        default_port: int = DEFAULT_PORT,
    ) -> None:
        self.address = address
        self.host, self.port = parse_address(address, default_port)
        self.timeout_s = timeout_s
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

    async def __aenter__(self) -> "PrinterConnection":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def connect(self) -> None:
        logger.info("Connecting to printer %s:%d", self.host, self.port)
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise PrinterConnectionError(
                self.address, "timed out after {:g}s".format(self.timeout_s), e,
            ) from e
        except OSError as e:
            raise PrinterConnectionError(self.address, str(e), e) from e

    async def send(self, data: bytes) -> int:
        """Write ``data`` to the printer and wait until it is flushed."""
        if self._writer is None:
            raise RuntimeError("Printer connection is not open")
        self._writer.write(data)
        await self._writer.drain()
        logger.info("Sent %d byte(s) to %s:%d", len(data), self.host, self.port)
        return len(data)

    async def close(self) -> None:
        writer = self._writer
        self._writer = None
        self._reader = None
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            # The job has already been flushed; a reset on close is harmless.
            logger.warning("Error while closing printer connection: %s", e)


async def print_ir(
    source: TextIO,
    address: str,
    *,
    timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S,
    default_port: int = DEFAULT_PORT,
    encoding: str = DEFAULT_ENCODING,
    verbose: bool = False,
) -> int:
    """Convert the IR from ``source`` and send it to the printer at ``address``.

    Returns the number of bytes sent. Conversion errors are raised
    before any connection is opened.
    """
    buf = io.BytesIO()
    Converter(verbose=verbose, encoding=encoding).convert(source, buf)
    data = buf.getvalue()

    async with PrinterConnection(address, timeout_s=timeout_s, default_port=default_port) as conn:
        return await conn.send(data)
