"""
Occlusion: nearer rows hide the parts of farther rows that dip behind them.

This is not a depth sort. Each candidate segment is only compared with the
segments at the same sample index in a bounded window of nearer rows, which
keeps the cost per sample constant whatever the number of rows.

Ordering convention
-------------------
Every point gets a depth where larger means nearer to the viewer:

    depth = mix(y, -distance_to_canvas_centre, polar_ratio)

With parallel rows (polar_ratio 0) row 0 sits lowest on the canvas and is the
nearest; with rings (polar_ratio 1) the innermost ring is the nearest. A point
of the candidate is hidden when its depth is strictly greater than the
occluder's depth at the same position along the row. Touching counts as
visible.

Along-row position is the x coordinate for parallel rows (occluders whose
x-span misses the candidate are ignored) and the segment parameter otherwise,
since segments sharing a sample index share their angular span.
"""
import math
import logging
from typing import List, Optional, Sequence, Tuple

from .core import Point, Segment
from .curves import mix, mix_points

logger = logging.getLogger(__name__)

# Below this length (in segment parameter space) a visible piece is dropped.
_MIN_VISIBLE = 1e-9
_DEPTH_TOLERANCE = 1e-9


def get_possibly_occluding_row_indices(
    row_index: int,
    row_height: float,
    distance_between_rows: float,
    max_lookback: int = 40,
) -> List[int]:
    """
    The earlier rows that are close enough on screen to hide part of this row.

    Peaks reach `row_height` above and below a row's baseline, so a nearer row
    can only overlap this one while the baselines are less than two row
    heights apart. The window is additionally capped at `max_lookback` rows.

    Args:
        row_index: The row being generated.
        row_height: Maximum peak deviation.
        distance_between_rows: Baseline spacing.
        max_lookback: Upper bound on the window, independent of the row count.

    Returns:
        List[int]: Row indices, nearest first.
    """
    if row_index <= 0 or row_height <= 0:
        return []

    if distance_between_rows <= 0:
        lookback = max_lookback
    else:
        lookback = int(math.ceil(2 * row_height / distance_between_rows))

    lookback = max(0, min(lookback, max_lookback, row_index))
    return [row_index - offset for offset in range(1, lookback + 1)]


def _depth(point: Point, width: float, height: float, polar_ratio: float) -> float:
    x, y = point
    if polar_ratio == 0:
        return y
    radius = math.hypot(x - width / 2, y - height / 2)
    return mix(y, -radius, polar_ratio)


def _overlap_mapping(line: Segment, occluder: Segment, polar_ratio: float) -> Optional[Tuple[float, float, float, float]]:
    """
    Maps candidate parameter t onto occluder parameter u = a + b * t.

    Returns:
        (a, b, t_start, t_end) for the range of t where both segments exist,
        or None when they don't overlap along the row.
    """
    if polar_ratio != 0:
        return (0.0, 1.0, 0.0, 1.0)

    (x0, _), (x1, _) = line
    (ox0, _), (ox1, _) = occluder
    if ox0 == ox1:
        # A vertical occluder has no horizontal extent to hide anything behind.
        return None

    a = (x0 - ox0) / (ox1 - ox0)
    b = (x1 - x0) / (ox1 - ox0)

    if b == 0:
        if 0.0 <= a <= 1.0:
            return (a, b, 0.0, 1.0)
        return None

    # Solve 0 <= a + b*t <= 1 for t, then intersect with [0, 1]
    t_a = (0.0 - a) / b
    t_b = (1.0 - a) / b
    t_start = max(0.0, min(t_a, t_b))
    t_end = min(1.0, max(t_a, t_b))
    if t_end < t_start:
        return None
    return (a, b, t_start, t_end)


def _hidden_interval(
    line: Segment,
    occluder: Segment,
    width: float,
    height: float,
    polar_ratio: float,
) -> Optional[Tuple[float, float]]:
    """The part of the candidate (in t) that lies behind one occluder."""
    mapping = _overlap_mapping(line, occluder, polar_ratio)
    if mapping is None:
        return None
    a, b, t_start, t_end = mapping

    c0 = _depth(line[0], width, height, polar_ratio)
    c1 = _depth(line[1], width, height, polar_ratio)
    o0 = _depth(occluder[0], width, height, polar_ratio)
    o1 = _depth(occluder[1], width, height, polar_ratio)

    # gap(t) = candidate depth - occluder depth, linear in t:
    # c0 + (c1 - c0) t - (o0 + (o1 - o0)(a + b t))
    g0 = c0 - o0 - (o1 - o0) * a
    g1 = (c1 - c0) - (o1 - o0) * b

    # Hidden where gap(t) > tolerance
    if g1 == 0:
        return (t_start, t_end) if g0 > _DEPTH_TOLERANCE else None

    crossing = (_DEPTH_TOLERANCE - g0) / g1
    if g1 > 0:
        start, end = max(t_start, crossing), t_end
    else:
        start, end = t_start, min(t_end, crossing)

    if end - start <= 0:
        return None
    return (start, end)


def _visible_pieces(hidden: Sequence[Tuple[float, float]]) -> List[Tuple[float, float]]:
    pieces = []
    cursor = 0.0
    for start, end in sorted(hidden):
        if start > cursor:
            pieces.append((cursor, start))
        cursor = max(cursor, end)
    if cursor < 1.0:
        pieces.append((cursor, 1.0))
    return [(s, e) for s, e in pieces if e - s > _MIN_VISIBLE]


def occlude_line_if_necessary(
    line: Segment,
    previous_lines: Sequence[Segment],
    width: float,
    height: float,
    polar_ratio: float,
) -> Optional[Segment]:
    """
    Resolves one candidate segment against the nearer segments in its window.

    Args:
        line: The candidate segment (farther row).
        previous_lines: Segments of nearer rows at the same sample index.
        width: Canvas width (locates the polar centre).
        height: Canvas height.
        polar_ratio: 0 = parallel rows, 1 = rings.

    Returns:
        The segment unchanged if nothing hides it, a truncated copy if a
        nearer segment crosses it, or None if it is fully hidden or has
        zero length. If an unusual occluder layout leaves two separate
        visible pieces, the longer one is returned.
    """
    start_point, end_point = line
    if start_point == end_point:
        return None

    if not previous_lines:
        return line

    hidden = []
    for occluder in previous_lines:
        if occluder is None:
            continue
        interval = _hidden_interval(line, occluder, width, height, polar_ratio)
        if interval is not None:
            hidden.append(interval)

    if not hidden:
        return line

    pieces = _visible_pieces(hidden)
    if not pieces:
        return None

    t_start, t_end = max(pieces, key=lambda piece: piece[1] - piece[0])
    if t_start == 0.0 and t_end == 1.0:
        return line

    truncated = (
        mix_points(start_point, end_point, t_start),
        mix_points(start_point, end_point, t_end),
    )
    if truncated[0] == truncated[1]:
        return None
    return truncated
