"""Network transport to ESC/POS printers.

WHY: Most receipt printers on a LAN accept raw ESC/POS bytes on TCP
port 9100. The transport is deliberately protocol-agnostic: it only
moves bytes the converter already produced.

RULES:
- Import PrinterConnection from here; transport internals may change
"""

from escpos_ir.transport.printer import PrinterConnection, parse_address, print_ir

__all__ = ["PrinterConnection", "parse_address", "print_ir"]
