import logging
from typing import Optional, Sequence

import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection

from .core import Point

logger = logging.getLogger(__name__)


def render_preview(
    lines: Sequence[Sequence[Point]],
    width: float,
    height: float,
    output_path: Optional[str] = None,
    ax: Optional["plt.Axes"] = None,
    color: str = "black",
    linewidth: float = 0.6,
    background: str = "white",
    dpi: int = 100,
):
    """
    Paints segments or polylines onto a matplotlib canvas.

    Canvas coordinates have y pointing down, so the y axis is inverted to
    match the SVG output.

    :param lines: Segments or polylines in canvas coordinates.
    :param width: Canvas width.
    :param height: Canvas height.
    :param output_path: If given, the figure is saved there and closed.
    :param ax: Draw into an existing Axes instead of a new figure.
    :param color: Stroke colour.
    :param linewidth: Stroke width in points.
    :param background: Face colour of the axes.
    :param dpi: Figure resolution (one canvas unit = one pixel at this dpi).
    :return: The matplotlib Figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(width / dpi, height / dpi), dpi=dpi)
        fig.subplots_adjust(left=0, right=1, top=1, bottom=0)
    else:
        fig = ax.figure

    collection = LineCollection([list(line) for line in lines if len(line) >= 2], colors=color, linewidths=linewidth)
    ax.add_collection(collection)

    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_aspect("equal")
    ax.set_facecolor(background)
    ax.axis("off")

    logger.info(f"Preview: drew {len(collection.get_segments())} lines on a {width:.0f}x{height:.0f} canvas.")

    if output_path is not None:
        fig.savefig(output_path, dpi=dpi, facecolor=background)
        plt.close(fig)
        logger.info(f"  > Saved preview to {output_path}")

    return fig
