"""Render images as IR lines of shade-block characters.

WHY: Printing an image with GS v 0 needs dithering and raster encoding.
For previews and simple logos it is enough to map each pixel to one of
the PC437 shade characters (space, light, medium, dark, full block) and
print them as ordinary text, one IR line per pixel row.

HOW: The image is converted to grayscale and nearest-neighbour resized
so that it is at most ``max_width`` characters wide. Vertical scale is
the horizontal scale times ``scale_y`` (characters are taller than they
are wide, so values below 1 stretch the image). Each gray value Y is
bucketed as Y // 51 into five levels.

RULES:
- Scale factor is original_width // max_width, at least 1
- Level 5 (Y == 255) is folded into level 4
- Without invert, dark pixels print dense blocks (level = 4 - level)
- Each row becomes '    "<shades>" LF'
- No dithering or halftoning
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, TextIO, Union

from PIL import Image, UnidentifiedImageError

from escpos_ir.config import DEFAULT_IMAGE_WIDTH
from escpos_ir.core.builder import Builder
from escpos_ir.core.errors import ImagePreviewError

logger = logging.getLogger(__name__)

SHADES = " ░▒▓█"
"""Shade characters from lightest to darkest: space, ░, ▒, ▓, █."""


def _shade(gray: int, invert: bool) -> str:
    level = min(gray // 51, 4)
    if not invert:
        level = 4 - level
    return SHADES[level]


def render_preview(
    image: Image.Image,
    *,
    max_width: int = DEFAULT_IMAGE_WIDTH,
    scale_y: float = 1.0,
    invert: bool = False,
) -> List[str]:
    """Return one IR line per character row of the resized image."""
    if max_width < 1:
        raise ValueError("max_width must be at least 1, got {}".format(max_width))
    if scale_y <= 0:
        scale_y = 1.0

    width, height = image.size
    scale = max(width // max_width, 1)
    scale_v = max(int(scale * scale_y), 1)
    size = (max(width // scale, 1), max(height // scale_v, 1))
    logger.debug("Preview %dx%d -> %dx%d (scale %d, y-scale %d)", width, height, size[0], size[1], scale, scale_v)

    small = image.convert("L").resize(size, Image.Resampling.NEAREST)
    pixels = small.load()

    lines = []
    for y in range(size[1]):
        row = "".join(_shade(pixels[x, y], invert) for x in range(size[0]))
        lines.append('    "{}" LF'.format(row))
    return lines


def write_preview(
    path: Union[str, Path],
    out: TextIO,
    *,
    max_width: int = DEFAULT_IMAGE_WIDTH,
    scale_y: float = 1.0,
    invert: bool = False,
) -> int:
    """Open the image at ``path`` and write its IR preview to ``out``.

    Returns the number of rows written. Raises ImagePreviewError when
    the file cannot be opened or decoded.
    """
    path = Path(path)
    try:
        with Image.open(path) as image:
            image.load()
            lines = render_preview(image, max_width=max_width, scale_y=scale_y, invert=invert)
    except (OSError, UnidentifiedImageError) as e:
        raise ImagePreviewError("cannot read image {}: {}".format(path, e)) from e

    width = len(lines[0]) - len('    "" LF') if lines else 0
    Builder(out).comment("Image {} ({} x {} characters)".format(path.name, width, len(lines)))
    for line in lines:
        out.write(line + "\n")
    return len(lines)
