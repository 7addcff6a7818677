"""
Bezier evaluation and the small interpolation helpers used everywhere in the
generator. Everything here is pure.
"""
import numpy as np
from typing import Union

from .core import Point
from .errors import InvalidConfiguration

Number = Union[int, float]


def mix(a: Number, b: Number, ratio: float) -> float:
    """Linear interpolation: ratio 0 returns `a`, ratio 1 returns `b`."""
    return a * (1 - ratio) + b * ratio


def mix_points(a: Point, b: Point, ratio: float) -> Point:
    """Component-wise `mix` for two points."""
    return (mix(a[0], b[0], ratio), mix(a[1], b[1], ratio))


def normalize(value: Number, in_min: Number, in_max: Number, out_min: Number, out_max: Number) -> float:
    """
    Affine remap of `value` from [in_min, in_max] to [out_min, out_max].
    The result is NOT clamped.

    Raises:
        InvalidConfiguration: If the input range is empty (in_min == in_max).
    """
    if in_min == in_max:
        raise InvalidConfiguration(f"Cannot normalize against an empty range [{in_min}, {in_max}].")

    return (value - in_min) * (out_max - out_min) / (in_max - in_min) + out_min


def clamp(value: Number, min_value: Number, max_value: Number) -> Number:
    return max(min_value, min(max_value, value))


def bezier_at(curve, t: float) -> Point:
    """
    Evaluates a peaks curve at parameter t in [0, 1].

    Curves carry a start point, one control point and an end point, which is
    the quadratic form. When the curve also has a second control point the
    cubic form is used instead.

    Args:
        curve: Any object exposing start_point, control_point_1, end_point
               and optionally control_point_2 (see params.PeaksCurve).
        t: Curve parameter.

    Returns:
        Point: The interpolated (x, y).
    """
    x0, y0 = curve.start_point
    x1, y1 = curve.control_point_1
    x3, y3 = curve.end_point
    inv = 1 - t

    control_point_2 = getattr(curve, "control_point_2", None)
    if control_point_2 is None:
        x = inv * inv * x0 + 2 * inv * t * x1 + t * t * x3
        y = inv * inv * y0 + 2 * inv * t * y1 + t * t * y3
        return (x, y)

    x2, y2 = control_point_2
    x = inv ** 3 * x0 + 3 * inv * inv * t * x1 + 3 * inv * t * t * x2 + t ** 3 * x3
    y = inv ** 3 * y0 + 3 * inv * inv * t * y1 + 3 * inv * t * t * y2 + t ** 3 * y3
    return (x, y)


def sample_bezier(curve, num_of_points: int = 64) -> np.ndarray:
    """
    Samples `num_of_points` evenly spaced (in t) points along the curve.

    Returns:
        np.ndarray: Float64 array of shape (num_of_points, 2).
    """
    if num_of_points < 2:
        raise InvalidConfiguration(f"A curve needs at least 2 samples, got {num_of_points}.")

    ts = np.linspace(0.0, 1.0, num_of_points)
    return np.array([bezier_at(curve, t) for t in ts], dtype=np.float64)
