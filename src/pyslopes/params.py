"""
High-level parameters and their reduction to drawing variables.

The user tweaks a handful of 0-100 knobs (perspective, spikyness, ...). The
generator needs a larger set of low-level constants. There is no 1:1 mapping:
one knob may move several variables, and one variable may depend on several
knobs. The transfer curves below are the tuning surface of the artwork.

Knob -> variables (linear unless noted):

    perspective     -> distance_between_rows = height * lerp(0.035 -> 0.006)
                       (x lerp(1 -> 0.45) with polar_amount, so the rings fit the canvas)
                       num_of_rows = floor((1 - 3 * vertical_margin_ratio) / row spacing ratio)
                       row_height base = height * lerp(0.04 -> 0.12)
    amplitude       -> row_height multiplier lerp(0 -> 2)  (50 = x1)
    spikyness       -> perlin_ratio = 1 - spikyness / 100
    polar_amount    -> polar_ratio = polar_amount / 100
    ball_size       -> hole_radius = height * lerp(0 -> 0.11)
    omega           -> omega_ratio = omega / 100
                       omega_radius_subtract_amount = distance_between_rows
    split_universe  -> polar_tan_ratio = 1 - split_universe / 100
                       polar_tan_multiplier = lerp(1 -> 4)
    wavelength      -> perlin_range_per_row = lerp(16 -> 1)
    octaves         -> octaves = round(lerp(1 -> 9))  (50 = 5 octaves)
    peaks_strength  -> peaks_curve_strength = peaks_strength / 100
    peaks_curve, enable_occlusion -> passed through
"""
import math
import logging
from dataclasses import dataclass, field, asdict, fields
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .config import get_section
from .core import Point
from .curves import mix, normalize
from .errors import InvalidConfiguration, InvalidParameter
from .noise_tools import MAX_SEED

logger = logging.getLogger(__name__)

# Width / height of the artwork. Prints are 18x24 by default.
SLOPES_ASPECT_RATIO = 3 / 4

# Row spacing multiplier at full polar amount.
POLAR_SPACING_FACTOR = 0.45

SLIDER_NAMES = (
    "perspective",
    "spikyness",
    "polar_amount",
    "omega",
    "split_universe",
    "wavelength",
    "amplitude",
    "octaves",
    "ball_size",
    "peaks_strength",
)


def _check_point(name: str, point) -> Tuple[float, float]:
    try:
        x, y = point
        x, y = float(x), float(y)
    except (TypeError, ValueError) as exc:
        raise InvalidParameter(f"Curve point '{name}' must be a pair of numbers, got {point!r}.") from exc

    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidParameter(f"Curve point '{name}' must be finite, got {point!r}.")

    return (x, y)


@dataclass(frozen=True)
class PeaksCurve:
    """
    A Bezier curve in unit space describing where along the artwork the peaks
    are strongest. X is the horizontal position along a row, Y is the
    position of the row (0 = first row, 1 = last row).

    Attributes:
        start_point: (x, y) in [0, 1] x [0, 1].
        control_point_1: The single control point of the quadratic form.
        end_point: (x, y) in [0, 1] x [0, 1].
        control_point_2: Optional second control point (cubic form).
    """
    start_point: Point
    control_point_1: Point
    end_point: Point
    control_point_2: Optional[Point] = None

    def __post_init__(self):
        for name in ("start_point", "control_point_1", "end_point", "control_point_2"):
            value = getattr(self, name)
            if value is None and name == "control_point_2":
                continue
            checked = _check_point(name, value)
            # frozen dataclass: normalise lists to tuples through object.__setattr__
            object.__setattr__(self, name, checked)

            if not (0.0 <= checked[0] <= 1.0 and 0.0 <= checked[1] <= 1.0):
                logger.warning(f"Peaks curve point '{name}' {checked} lies outside the unit square.")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PeaksCurve":
        try:
            return cls(
                start_point=tuple(data["start_point"]),
                control_point_1=tuple(data["control_point_1"]),
                end_point=tuple(data["end_point"]),
                control_point_2=tuple(data["control_point_2"]) if data.get("control_point_2") is not None else None,
            )
        except (KeyError, TypeError) as exc:
            raise InvalidParameter(f"Malformed peaks curve: {data!r}") from exc


# The classic silhouette: a straight line down the middle where the peaks are strongest.
DEFAULT_PEAKS_CURVE = PeaksCurve(
    start_point=(0.5, 0.0),
    control_point_1=(0.5, 0.5),
    end_point=(0.5, 1.0),
)

PRESET_PEAKS_CURVES = (
    DEFAULT_PEAKS_CURVE,
    # A straight line along the top
    PeaksCurve(start_point=(0.0, 1.0), control_point_1=(0.5, 1.0), end_point=(1.0, 1.0)),
    # Rainbow
    PeaksCurve(start_point=(0.1, 0.2), control_point_1=(0.5, 1.0), end_point=(0.9, 0.2)),
    # Diagonal line (polar corkscrew)
    PeaksCurve(start_point=(0.0, 1.0), control_point_1=(0.55, 0.55), end_point=(1.0, 0.0)),
)


@dataclass(frozen=True)
class ParameterSet:
    """
    The user-facing knobs for one artwork. Immutable; validated on construction,
    which is the boundary between the UI / export job and the generator.

    All sliders are 0-100.
    """
    perspective: float = 40
    spikyness: float = 0
    polar_amount: float = 0
    omega: float = 0
    split_universe: float = 0
    wavelength: float = 25
    amplitude: float = 50
    octaves: float = 50
    ball_size: float = 50
    peaks_strength: float = 100
    peaks_curve: PeaksCurve = field(default=DEFAULT_PEAKS_CURVE)
    enable_occlusion: bool = True

    def __post_init__(self):
        for name in SLIDER_NAMES:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
                raise InvalidParameter(f"Slider '{name}' must be a number, got {value!r}.")
            if not math.isfinite(value):
                raise InvalidParameter(f"Slider '{name}' must be finite, got {value!r}.")
            if not 0 <= value <= 100:
                raise InvalidParameter(f"Slider '{name}' must be between 0 and 100, got {value}.")

        if not isinstance(self.peaks_curve, PeaksCurve):
            raise InvalidParameter(f"peaks_curve must be a PeaksCurve, got {type(self.peaks_curve).__name__}.")

        if not isinstance(self.enable_occlusion, bool):
            raise InvalidParameter(f"enable_occlusion must be a boolean, got {self.enable_occlusion!r}.")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParameterSet":
        """Builds a ParameterSet from plain data (JSON, CLI). Unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidParameter(f"Unknown parameters: {sorted(unknown)}")

        values = dict(data)
        if isinstance(values.get("peaks_curve"), dict):
            values["peaks_curve"] = PeaksCurve.from_dict(values["peaks_curve"])
        return cls(**values)


@dataclass(frozen=True)
class DrawingVariables:
    """
    Low-level constants consumed by the line field generator.
    Produced only by transform_parameters.
    """
    num_of_rows: int
    samples_per_row: int
    distance_between_rows: float
    row_height: float
    vertical_margin: float
    horizontal_margin: float
    perlin_ratio: float
    perlin_range_per_row: float
    polar_ratio: float
    polar_tan_ratio: float
    polar_tan_multiplier: float
    omega_ratio: float
    omega_radius_subtract_amount: float
    hole_radius: float
    peaks_curve: PeaksCurve
    peaks_curve_strength: float
    octaves: int
    enable_occlusion: bool

    @property
    def margins(self) -> Tuple[float, float]:
        return (self.vertical_margin, self.horizontal_margin)


def transform_parameters(
    params: ParameterSet,
    height: float,
    width: Optional[float] = None,
    samples_per_row: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
) -> DrawingVariables:
    """
    Reduces the high-level knobs to the generator's drawing variables.

    Pure: the same ParameterSet, size and config always give equal
    DrawingVariables, which is what lets the preview and the export match.
    Every length is proportional to the canvas size, so regenerating at a
    different resolution with the same aspect ratio scales the artwork.

    Args:
        params: The validated knobs.
        height: Target canvas height.
        width: Target canvas width. Defaults to height * SLOPES_ASPECT_RATIO.
        samples_per_row: Override for the horizontal resolution. Defaults to
                         ceil(width * canvas.samples_per_pixel).
        config: Optional configuration dict ('canvas' section).

    Returns:
        DrawingVariables

    Raises:
        InvalidConfiguration: For a non-positive canvas or fewer than 2 samples per row.
    """
    if not math.isfinite(height) or height <= 0:
        raise InvalidConfiguration(f"Canvas height must be positive, got {height}.")
    if width is None:
        width = height * SLOPES_ASPECT_RATIO
    if not math.isfinite(width) or width <= 0:
        raise InvalidConfiguration(f"Canvas width must be positive, got {width}.")

    canvas_cfg = get_section(config, "canvas")
    vertical_margin_ratio = canvas_cfg["vertical_margin_ratio"]

    # 1. Margins
    vertical_margin = height * vertical_margin_ratio
    horizontal_margin = width * canvas_cfg["horizontal_margin_ratio"]

    # 2. Perspective: rows get closer together and taller as perspective rises.
    # The row count is derived from ratios only, so it doesn't depend on size.
    row_spacing_ratio = normalize(params.perspective, 0, 100, 0.035, 0.006)
    drawable_ratio = 1 - 3 * vertical_margin_ratio
    num_of_rows = max(1, int(math.floor(drawable_ratio / row_spacing_ratio)))

    # Rings radiate from the centre, so they only get half the canvas to fill.
    polar_ratio = params.polar_amount / 100
    distance_between_rows = height * row_spacing_ratio * mix(1, POLAR_SPACING_FACTOR, polar_ratio)

    amplitude_multiplier = normalize(params.amplitude, 0, 100, 0, 2)
    row_height = height * normalize(params.perspective, 0, 100, 0.04, 0.12) * amplitude_multiplier

    # 3. Horizontal resolution
    if samples_per_row is None:
        samples_per_row = int(math.ceil(width * canvas_cfg["samples_per_pixel"]))
    if samples_per_row < 2:
        raise InvalidConfiguration(f"samples_per_row must be at least 2, got {samples_per_row}.")

    # 4. Noise character
    perlin_ratio = 1 - params.spikyness / 100
    perlin_range_per_row = normalize(params.wavelength, 0, 100, 16, 1)
    octaves = int(round(normalize(params.octaves, 0, 100, 1, 9)))

    # 5. Polar / omega / split universe
    hole_radius = height * normalize(params.ball_size, 0, 100, 0, 0.11)
    omega_ratio = params.omega / 100
    polar_tan_ratio = 1 - params.split_universe / 100
    polar_tan_multiplier = normalize(params.split_universe, 0, 100, 1, 4)

    variables = DrawingVariables(
        num_of_rows=num_of_rows,
        samples_per_row=int(samples_per_row),
        distance_between_rows=distance_between_rows,
        row_height=row_height,
        vertical_margin=vertical_margin,
        horizontal_margin=horizontal_margin,
        perlin_ratio=perlin_ratio,
        perlin_range_per_row=perlin_range_per_row,
        polar_ratio=polar_ratio,
        polar_tan_ratio=polar_tan_ratio,
        polar_tan_multiplier=polar_tan_multiplier,
        omega_ratio=omega_ratio,
        # A full omega shrinks each ring by one row spacing over its sweep,
        # which joins the end of every ring to the start of the next.
        omega_radius_subtract_amount=distance_between_rows,
        hole_radius=hole_radius,
        peaks_curve=params.peaks_curve,
        peaks_curve_strength=params.peaks_strength / 100,
        octaves=octaves,
        enable_occlusion=params.enable_occlusion,
    )

    logger.debug(f"Drawing variables for {width:.1f}x{height:.1f}: {variables}")
    return variables


def random_parameters(rng: Optional[np.random.Generator] = None) -> Tuple[int, ParameterSet]:
    """
    Rolls a random seed and knob set, favouring the combinations that look good.

    Some knobs make more sense at an extreme (polar amount at 0 or 100), some
    are so drastic they should stay at 0 most of the time (split universe),
    and occlusion is almost always off when the universe is split.

    Args:
        rng: numpy Generator. A fresh unseeded one is used if omitted.

    Returns:
        Tuple (seed, ParameterSet)
    """
    if rng is None:
        rng = np.random.default_rng()

    def slider() -> int:
        return int(rng.integers(0, 101))

    def sample(options):
        return options[int(rng.integers(0, len(options)))]

    seed = int(rng.integers(0, MAX_SEED + 1))

    if rng.random() > 0.5:
        peaks_curve = PeaksCurve(
            start_point=(float(rng.random()), float(rng.random())),
            control_point_1=(float(rng.random()), float(rng.random())),
            end_point=(float(rng.random()), float(rng.random())),
        )
    else:
        peaks_curve = sample(PRESET_PEAKS_CURVES)

    polar_amount = sample([0, 0, 0, 100, 100, slider()])
    ball_size = slider() if polar_amount > 0 and rng.random() > 0.5 else 50
    omega = 0 if polar_amount == 0 else sample([0, 100, slider()])
    split_universe = sample([0, 0, 0, 0, slider()])

    if split_universe > 0:
        enable_occlusion = bool(rng.random() < 0.1)
    else:
        enable_occlusion = bool(rng.integers(0, 2))

    params = ParameterSet(
        perspective=slider(),
        spikyness=sample([0, 0, 0, 1, slider()]),
        polar_amount=polar_amount,
        omega=omega,
        split_universe=split_universe,
        wavelength=slider(),
        amplitude=slider(),
        ball_size=ball_size,
        peaks_strength=sample([100, slider()]),
        peaks_curve=peaks_curve,
        enable_occlusion=enable_occlusion,
    )

    logger.info(f"Randomized parameters (seed {seed}): {params}")
    return seed, params
