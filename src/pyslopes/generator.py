import math
import logging
from time import perf_counter
from typing import Any, Dict, List, Optional

import numpy as np
from tqdm import tqdm

from .config import get_section
from .core import Point, Segment
from .curves import clamp, mix, mix_points, normalize, sample_bezier
from .errors import InvalidConfiguration
from .noise_tools import NoiseSource
from .occlusion import get_possibly_occluding_row_indices, occlude_line_if_necessary
from .params import DrawingVariables

logger = logging.getLogger(__name__)

# Distance (in unit space) from the peaks curve at which the peaks die out.
PEAKS_FALLOFF = 0.5
PEAKS_CURVE_SAMPLES = 64


###############################################################################
#                        PURE PER-SAMPLE HELPERS
###############################################################################

def get_row_offset(
    row_index: int,
    height: float,
    vertical_margin: float,
    distance_between_rows: float,
    hole_radius: float,
    polar_ratio: float,
) -> float:
    """
    Baseline of a row: a vertical position for parallel lines, a radius for rings.
    Blending the two by polar_ratio is what morphs the field continuously
    from horizontal lines into concentric rings.
    """
    cartesian_value = height - vertical_margin * 2 - row_index * distance_between_rows
    polar_value = hole_radius + row_index * distance_between_rows

    return mix(cartesian_value, polar_value, polar_ratio)


def get_damping_amount_for_slopes(
    sample_index: int,
    samples_per_row: int,
    row_index: int,
    num_of_rows: int,
    curve_points: np.ndarray,
    curve_strength: float,
) -> float:
    """
    How much of the noise survives at this grid position, in [0, 1].

    The peaks curve lives in unit space (x = position along the row,
    y = position of the row). Points on the curve keep their full deviation;
    the deviation fades out quadratically with the distance to the curve and
    is gone at PEAKS_FALLOFF. curve_strength blends between that envelope
    (1) and no damping at all (0).
    """
    x = sample_index / samples_per_row
    y = row_index / num_of_rows

    distance = float(np.min(np.hypot(curve_points[:, 0] - x, curve_points[:, 1] - y)))
    proximity = clamp(1 - distance / PEAKS_FALLOFF, 0.0, 1.0) ** 2

    return mix(1.0, proximity, curve_strength)


def plot_as_polar_coordinate(
    point: Point,
    width: float,
    height: float,
    sample_index: int,
    samples_per_row: int,
    omega_ratio: float,
    omega_radius_subtract_amount: float,
    polar_tan_ratio: float,
    polar_tan_multiplier: float,
) -> Point:
    """
    Wraps a cartesian sample around the canvas centre.

    The sample index becomes the angle (starting at 12 o'clock) and the
    point's y becomes the radius. Omega pulls the start of every ring inward
    by up to `omega_radius_subtract_amount`, turning rings into a spiral.
    Splitting the universe speeds up the sweep so rings overlap themselves.
    """
    sample_ratio = sample_index / samples_per_row
    sweep = mix(polar_tan_multiplier, 1, polar_tan_ratio)
    angle = sample_ratio * math.pi * 2 * sweep - math.pi / 2

    radius = point[1] - omega_ratio * omega_radius_subtract_amount * (1 - sample_ratio)

    return (
        width / 2 + radius * math.cos(angle),
        height / 2 + radius * math.sin(angle),
    )


def get_sample_coordinates(
    row_index: int,
    sample_index: int,
    width: float,
    height: float,
    row_offset: float,
    variables: DrawingVariables,
    noise_source: NoiseSource,
    curve_points: np.ndarray,
) -> Point:
    """
    Canvas position of one grid sample.

    Pure and order-independent: segments are built by calling this for
    sample s-1 and s separately, so two calls with the same arguments must
    return bit-identical points.

    Args:
        row_index: Row of the sample.
        sample_index: Position along the row.
        width: Canvas width.
        height: Canvas height.
        row_offset: The row's baseline (see get_row_offset).
        variables: Drawing variables of this pass.
        noise_source: The seeded noise field.
        curve_points: Sampled peaks curve, shape (n, 2).

    Returns:
        Point: (x, y) in canvas space.
    """
    samples_per_row = variables.samples_per_row
    perlin_range_per_row = variables.perlin_range_per_row

    # 1. Find this sample's position in the noise domain
    perlin_index = normalize(sample_index, 0, samples_per_row, 0, perlin_range_per_row) + perlin_range_per_row
    perlin_value = noise_source.sample(
        perlin_index,
        (row_index / variables.num_of_rows) * perlin_range_per_row,
    )

    # 2. Mix smooth noise with spiky jitter
    if variables.perlin_ratio == 1:
        mixed_value = perlin_value
    else:
        rnd = noise_source.jitter(row_index, sample_index)
        mixed_value = perlin_value * variables.perlin_ratio + rnd * (1 - variables.perlin_ratio)

    # 3. Shape the deviation with the peaks curve
    damping = get_damping_amount_for_slopes(
        sample_index,
        samples_per_row,
        row_index,
        variables.num_of_rows,
        curve_points,
        variables.peaks_curve_strength,
    )
    value = mixed_value * damping

    # 4. Convert to cartesian, blended with the tangent "split universe" value
    row_height = variables.row_height
    cartesian_y = normalize(value, -1, 1, -row_height, row_height) + row_offset
    tangent_y = math.tan((sample_index / samples_per_row) * math.pi * 2) * row_offset

    distance_between_samples = (width - variables.horizontal_margin * 2) / samples_per_row
    cartesian_point = (
        sample_index * distance_between_samples + variables.horizontal_margin,
        mix(tangent_y, cartesian_y, variables.polar_tan_ratio),
    )

    if variables.polar_ratio == 0:
        return cartesian_point

    # 5. Project into polar space and blend
    polar_point = plot_as_polar_coordinate(
        cartesian_point,
        width,
        height,
        sample_index,
        samples_per_row,
        variables.omega_ratio,
        variables.omega_radius_subtract_amount,
        variables.polar_tan_ratio,
        variables.polar_tan_multiplier,
    )

    return mix_points(cartesian_point, polar_point, variables.polar_ratio)


###############################################################################
#                            LINE FIELD GENERATOR
###############################################################################

class LineFieldGenerator:
    """
    Turns drawing variables into an ordered list of line segments.

    For every row, each sample from 1 to samples_per_row - 1 is joined to its
    left neighbour. Sample 0 never anchors a segment. Segments whose two
    endpoints coincide are dropped, with or without occlusion. With occlusion
    enabled, every candidate segment is checked against the same-sample
    segments of a bounded window of nearer rows.

    The occluders are the nearer rows' unoccluded segments, so a row hides
    what lies behind its full silhouette. Testing against the already
    occluded output of earlier rows instead would let a partly hidden row
    stop hiding the rows behind it.

    Attributes:
        width (float): Canvas width.
        height (float): Canvas height.
        variables (DrawingVariables): Output of transform_parameters.
        noise_source (NoiseSource): Seeded noise, owned by the caller.
        max_lookback (int): Cap on the occlusion window ('occlusion' config section).
    """

    def __init__(
        self,
        width: float,
        height: float,
        variables: DrawingVariables,
        noise_source: NoiseSource,
        config: Optional[Dict[str, Any]] = None,
        show_progress: bool = False,
    ):
        if variables.num_of_rows < 1:
            raise InvalidConfiguration(f"num_of_rows must be positive, got {variables.num_of_rows}.")
        if variables.samples_per_row < 2:
            raise InvalidConfiguration(f"samples_per_row must be at least 2, got {variables.samples_per_row}.")

        self.width = width
        self.height = height
        self.variables = variables
        self.noise_source = noise_source
        self.show_progress = show_progress

        occlusion_cfg = get_section(config, "occlusion")
        self.max_lookback = int(occlusion_cfg["max_lookback_rows"])

        self.curve_points = sample_bezier(variables.peaks_curve, PEAKS_CURVE_SAMPLES)
        self.curve_points.setflags(write=False)

    def _sample(self, row_index: int, sample_index: int, row_offset: float) -> Point:
        return get_sample_coordinates(
            row_index,
            sample_index,
            self.width,
            self.height,
            row_offset,
            self.variables,
            self.noise_source,
            self.curve_points,
        )

    def generate_rows(self) -> List[List[Segment]]:
        """
        Runs the generation pass and keeps the row structure.

        Returns:
            List[List[Segment]]: One list per row (num_of_rows of them), each
            holding the emitted segments of that row in sample order.
        """
        v = self.variables
        start = perf_counter()

        logger.info(
            f"Generating line field ({v.num_of_rows} rows x {v.samples_per_row} samples, "
            f"occlusion={'on' if v.enable_occlusion else 'off'}, polar={v.polar_ratio:.2f})..."
        )

        # Unoccluded segments, indexed [row][sample_index - 1]. Nearer rows
        # occlude with their full silhouette, not with what survived of it.
        raw_rows: List[List[Segment]] = []
        rows: List[List[Segment]] = []
        hidden_count = 0
        degenerate_count = 0

        for row_index in tqdm(range(v.num_of_rows), desc="Generating rows", leave=False, disable=not self.show_progress):
            previous_row_indices = get_possibly_occluding_row_indices(
                row_index,
                v.row_height,
                v.distance_between_rows,
                max_lookback=self.max_lookback,
            )

            row_offset = get_row_offset(
                row_index,
                self.height,
                v.vertical_margin,
                v.distance_between_rows,
                v.hole_radius,
                v.polar_ratio,
            )

            raw_row: List[Segment] = []
            row: List[Segment] = []

            for sample_index in range(1, v.samples_per_row):
                # Both endpoints are recomputed rather than cached; the shared
                # endpoint of neighbouring segments comes out identical.
                sample_point = self._sample(row_index, sample_index, row_offset)
                previous_sample_point = self._sample(row_index, sample_index - 1, row_offset)

                line: Optional[Segment] = (previous_sample_point, sample_point)
                raw_row.append(line)

                if sample_point == previous_sample_point:
                    degenerate_count += 1
                    continue

                if v.enable_occlusion:
                    previous_lines = [raw_rows[index][sample_index - 1] for index in previous_row_indices]
                    line = occlude_line_if_necessary(
                        line,
                        previous_lines,
                        self.width,
                        self.height,
                        v.polar_ratio,
                    )

                if line is None:
                    hidden_count += 1
                    continue

                row.append(line)

            raw_rows.append(raw_row)
            rows.append(row)

        total = sum(len(row) for row in rows)
        logger.info(
            f"  > Generated {total} segments ({hidden_count} fully occluded, "
            f"{degenerate_count} zero-length) "
            f"in {perf_counter() - start:.3f}s."
        )
        return rows

    def generate(self) -> List[Segment]:
        """Flat list of every emitted segment, row by row."""
        return [line for row in self.generate_rows() for line in row]


def generate_lines(
    width: float,
    height: float,
    variables: DrawingVariables,
    noise_source: NoiseSource,
    config: Optional[Dict[str, Any]] = None,
    show_progress: bool = False,
) -> List[Segment]:
    """Functional shortcut for LineFieldGenerator(...).generate()."""
    return LineFieldGenerator(width, height, variables, noise_source, config, show_progress).generate()
