"""Image helpers that produce IR text.

WHY: A quick way to put a logo or a QR-ish picture on a receipt without
raster graphics commands: render the image as shade-block characters
that every PC437 printer already has in its font.

RULES:
- Output is plain IR text; the converter handles it like any other input
"""

from escpos_ir.imaging.preview import SHADES, render_preview, write_preview

__all__ = ["SHADES", "render_preview", "write_preview"]
