"""
Print export: regenerate an artwork at a print aspect ratio, write the SVG,
and optionally hand the markup to a rasterizer for a print-resolution PNG.
"""
import os
import uuid
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .config import get_section
from .errors import ExportError, InvalidParameter, SlopesError
from .params import ParameterSet
from .pipeline import Artwork, build_artwork
from .serializer import RasterJob, Rasterizer, polylines_to_svg, raster_dimensions

logger = logging.getLogger(__name__)

# Physical print sizes in inches, (width, height).
PRINT_SIZES: Dict[str, Tuple[float, float]] = {
    "small": (12, 18),
    "medium": (18, 24),
    "large": (24, 36),
}


@dataclass(frozen=True)
class ExportResult:
    """Where the export landed. png_path is None when no rasterizer was supplied."""
    name: str
    svg_path: str
    png_path: Optional[str]
    width: float
    height: float
    pixel_size: Tuple[int, int]
    polyline_count: int


def _write(path: str, payload, mode: str) -> None:
    try:
        with open(path, mode) as handle:
            handle.write(payload)
    except OSError as exc:
        raise ExportError(f"Could not write {path}: {exc}") from exc


def export_artwork(
    seed: int,
    params: ParameterSet,
    size: str = "medium",
    output_dir: Optional[str] = None,
    rasterizer: Optional[Rasterizer] = None,
    config: Optional[Dict[str, Any]] = None,
    filename: Optional[str] = None,
    retrace: bool = False,
) -> ExportResult:
    """
    Produces the print files for one purchase-ready artwork.

    The drawing is generated at the reference height (552 by default) with
    the aspect ratio of the chosen print, grouped into polylines and clipped
    to the canvas. The raster, if any, is requested at print size x dpi.

    Args:
        seed: 0-65535.
        params: The knobs used for the preview.
        size: Key of PRINT_SIZES.
        output_dir: Destination folder (created if needed). Defaults to
                    the 'export.output_dir' config value.
        rasterizer: Callable turning a RasterJob into PNG bytes.
        config: Optional configuration dict.
        filename: Base name of the files. A uuid when omitted.
        retrace: Also run the simplification pass.

    Returns:
        ExportResult

    Raises:
        InvalidParameter: Unknown print size (or bad seed / params).
        ExportError: Serialization, rasterization or file IO failed.
    """
    if size not in PRINT_SIZES:
        raise InvalidParameter(f"Unknown print size '{size}'. Options: {sorted(PRINT_SIZES)}")

    export_cfg = get_section(config, "export")
    output_dir = output_dir or export_cfg["output_dir"]
    name = filename or uuid.uuid4().hex

    print_width, print_height = PRINT_SIZES[size]
    height = float(export_cfg["reference_height"])
    width = height * (print_width / print_height)

    logger.info(f"--- Exporting '{name}' ({size}: {print_width}x{print_height} in) ---")

    # 1. Geometry (validation errors propagate unchanged)
    artwork: Artwork = build_artwork(seed, params, width, height, margins=(0.0, 0.0), retrace=retrace, config=config)

    # 2. Markup
    try:
        markup = polylines_to_svg(
            artwork.polylines,
            width,
            height,
            stroke=export_cfg["stroke"],
            stroke_width=export_cfg["stroke_width"],
            precision=export_cfg["precision"],
            background=export_cfg["background"],
        )
    except (SlopesError, ValueError, TypeError) as exc:
        raise ExportError(f"Could not serialize artwork '{name}': {exc}") from exc

    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as exc:
        raise ExportError(f"Could not create output directory {output_dir}: {exc}") from exc

    svg_path = os.path.join(output_dir, f"{name}.svg")
    _write(svg_path, markup.encode("utf-8"), "wb")
    logger.info(f"  > Saved SVG to {svg_path}")

    # 3. Raster, printable at the configured dpi
    pixel_size = raster_dimensions((print_width, print_height), dpi=export_cfg["dpi"])
    png_path = None
    if rasterizer is not None:
        job = RasterJob(markup=markup, pixel_width=pixel_size[0], pixel_height=pixel_size[1])
        try:
            buffer = rasterizer(job)
        except Exception as exc:
            raise ExportError(f"Rasterization of '{name}' failed: {exc}") from exc

        if not isinstance(buffer, (bytes, bytearray)):
            raise ExportError(f"Rasterizer returned {type(buffer).__name__}, expected bytes.")

        png_path = os.path.join(output_dir, f"{name}.png")
        _write(png_path, bytes(buffer), "wb")
        logger.info(f"  > Saved {pixel_size[0]}x{pixel_size[1]} PNG to {png_path}")

    return ExportResult(
        name=name,
        svg_path=svg_path,
        png_path=png_path,
        width=width,
        height=height,
        pixel_size=pixel_size,
        polyline_count=len(artwork.polylines),
    )
