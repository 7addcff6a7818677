"""
Vector markup for finished drawings, and the hand-off to a rasterizer.

The core never rasterizes. It produces SVG (one <polyline> per polyline) and,
for raster output, a RasterJob that an injected Rasterizer turns into image
bytes at the requested pixel size.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import svgwrite

from .core import Point
from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)


def polylines_to_svg(
    lines: Sequence[Sequence[Point]],
    width: float,
    height: float,
    stroke: str = "#000000",
    stroke_width: float = 1.0,
    precision: int = 2,
    background: Optional[str] = None,
) -> str:
    """
    Serializes polylines into a standalone SVG document.

    Args:
        lines: Polylines in canvas coordinates.
        width: Canvas width (also the viewBox width).
        height: Canvas height.
        stroke: Stroke colour.
        stroke_width: Stroke width in canvas units.
        precision: Decimal places kept per coordinate.
        background: Optional fill colour for an opaque background rect.
                    None leaves the background transparent.

    Returns:
        str: The SVG markup.
    """
    if width <= 0 or height <= 0:
        raise InvalidConfiguration(f"Cannot serialize a {width}x{height} canvas.")

    dwg = svgwrite.Drawing(size=(width, height), debug=False)
    dwg.viewbox(0, 0, width, height)

    if background is not None:
        dwg.add(dwg.rect(insert=(0, 0), size=(width, height), fill=background))

    group = dwg.g(
        fill="none",
        stroke=stroke,
        stroke_width=stroke_width,
        stroke_linecap="round",
        stroke_linejoin="round",
    )

    count = 0
    for line in lines:
        if len(line) < 2:
            continue
        points = [(round(float(x), precision), round(float(y), precision)) for x, y in line]
        group.add(dwg.polyline(points))
        count += 1

    dwg.add(group)
    logger.debug(f"Serialized {count} polylines to SVG ({width}x{height}).")
    return dwg.tostring()


def raster_dimensions(print_size: Tuple[float, float], dpi: int = 300) -> Tuple[int, int]:
    """
    Pixel size for a physical print.

    Args:
        print_size: (width, height) in inches.
        dpi: Target resolution.

    Returns:
        Tuple (pixel_width, pixel_height)
    """
    print_width, print_height = print_size
    if print_width <= 0 or print_height <= 0 or dpi <= 0:
        raise InvalidConfiguration(f"Invalid print size {print_size} at {dpi} dpi.")

    return int(round(print_width * dpi)), int(round(print_height * dpi))


@dataclass(frozen=True)
class RasterJob:
    """Everything an external rasterizer needs: the markup and the target size."""
    markup: str
    pixel_width: int
    pixel_height: int


# Takes a RasterJob and returns the encoded image (PNG bytes).
Rasterizer = Callable[[RasterJob], bytes]
