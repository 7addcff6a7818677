"""
The public generation boundary.

    generate(seed, params, width, height, enable_occlusion) -> segments

Validation happens here, once, before anything reaches the generator.
Everything downstream assumes well-formed input.
"""
import logging
from dataclasses import dataclass, replace
from time import perf_counter
from typing import Any, Dict, List, Optional, Tuple

from .config import get_section
from .core import CanvasDimensions, Polyline, Segment
from .errors import InvalidParameter
from .generator import LineFieldGenerator
from .noise_tools import MAX_SEED, NoiseSource
from .params import DrawingVariables, ParameterSet, transform_parameters
from .polylines import clip_lines_with_margin, group_polylines, retrace_lines

logger = logging.getLogger(__name__)


def _validate_boundary(
    seed: int,
    params: ParameterSet,
    width: float,
    height: float,
    config: Optional[Dict[str, Any]] = None,
) -> CanvasDimensions:
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise InvalidParameter(f"Seed must be an integer, got {seed!r}.")
    if not 0 <= seed <= MAX_SEED:
        raise InvalidParameter(f"Seed must be between 0 and {MAX_SEED}, got {seed}.")
    if not isinstance(params, ParameterSet):
        raise InvalidParameter(f"Expected a ParameterSet, got {type(params).__name__}.")

    return CanvasDimensions.from_size(width, height, config)


def prepare(
    seed: int,
    params: ParameterSet,
    width: float,
    height: float,
    enable_occlusion: Optional[bool] = None,
    samples_per_row: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Tuple[CanvasDimensions, DrawingVariables, NoiseSource]:
    """
    Validates the inputs and builds the generator's collaborators.

    Returns:
        Tuple (CanvasDimensions, DrawingVariables, NoiseSource)
    """
    canvas = _validate_boundary(seed, params, width, height, config)

    if enable_occlusion is not None:
        params = replace(params, enable_occlusion=bool(enable_occlusion))

    variables = transform_parameters(params, height, width=width, samples_per_row=samples_per_row, config=config)

    noise_cfg = get_section(config, "noise")
    noise_source = NoiseSource(
        seed,
        octaves=variables.octaves,
        persistence=noise_cfg["persistence"],
        lacunarity=noise_cfg["lacunarity"],
    )
    return canvas, variables, noise_source


def generate(
    seed: int,
    params: ParameterSet,
    width: float,
    height: float,
    enable_occlusion: Optional[bool] = None,
    samples_per_row: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
    show_progress: bool = False,
) -> List[Segment]:
    """
    Generates the line field for one artwork.

    Deterministic: the same arguments always give the same segments, point
    for point.

    Args:
        seed: 0-65535.
        params: The knobs.
        width: Canvas width (> 0).
        height: Canvas height (> 0).
        enable_occlusion: Overrides params.enable_occlusion when given.
        samples_per_row: Optional horizontal resolution override.
        config: Optional configuration dict.
        show_progress: Show a tqdm bar over the rows.

    Returns:
        List[Segment]

    Raises:
        InvalidParameter: Bad seed or params.
        InvalidConfiguration: Bad canvas or resolution.
    """
    canvas, variables, noise_source = prepare(seed, params, width, height, enable_occlusion, samples_per_row, config)
    generator = LineFieldGenerator(canvas.width, canvas.height, variables, noise_source, config=config, show_progress=show_progress)
    return generator.generate()


def post_process(
    lines: List[Segment],
    width: float,
    height: float,
    margins: Tuple[float, float] = (0.0, 0.0),
    retrace: bool = True,
    config: Optional[Dict[str, Any]] = None,
) -> List[Polyline]:
    """
    Runs the post-processing passes: group, clip, then (optionally) retrace.

    Args:
        lines: Output of generate().
        width: Canvas width.
        height: Canvas height.
        margins: (vertical, horizontal) clip inset.
        retrace: Skip the simplification pass when False (fast preview).
        config: Optional configuration dict ('post_processing' section).

    Returns:
        List[Polyline]
    """
    pp_cfg = get_section(config, "post_processing")

    polylines = group_polylines(lines, tolerance=pp_cfg["group_tolerance"])
    polylines = clip_lines_with_margin(polylines, width, height, margins)
    if retrace:
        polylines = retrace_lines(
            polylines,
            tolerance=pp_cfg["retrace_tolerance"],
            min_points=pp_cfg["retrace_min_points"],
        )

    logger.info(f"  > Post-processed {len(lines)} segments into {len(polylines)} polylines.")
    return polylines


@dataclass(frozen=True)
class Artwork:
    """A finished drawing: the raw segments plus the export-ready polylines."""
    seed: int
    params: ParameterSet
    canvas: CanvasDimensions
    variables: DrawingVariables
    segments: Tuple[Segment, ...]
    polylines: Tuple[Tuple, ...]

    @property
    def width(self) -> float:
        return self.canvas.width

    @property
    def height(self) -> float:
        return self.canvas.height


def build_artwork(
    seed: int,
    params: ParameterSet,
    width: float,
    height: float,
    margins: Tuple[float, float] = (0.0, 0.0),
    retrace: bool = True,
    samples_per_row: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
    show_progress: bool = False,
) -> Artwork:
    """
    Full pipeline: validate, transform, generate, post-process.

    Returns:
        Artwork
    """
    start = perf_counter()
    logger.info(f"Building artwork (seed {seed}, {width}x{height})...")

    # 1. Generation
    canvas, variables, noise_source = prepare(seed, params, width, height, None, samples_per_row, config)
    generator = LineFieldGenerator(canvas.width, canvas.height, variables, noise_source, config=config, show_progress=show_progress)
    segments = generator.generate()

    # 2. Post-processing
    polylines = post_process(segments, width, height, margins=margins, retrace=retrace, config=config)

    logger.info(f"Artwork built in {perf_counter() - start:.2f}s.")
    return Artwork(
        seed=seed,
        params=params,
        canvas=canvas,
        variables=variables,
        segments=tuple(segments),
        polylines=tuple(tuple(line) for line in polylines),
    )
