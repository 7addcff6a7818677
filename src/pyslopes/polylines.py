"""
Post-processing passes over the generated segments.

Applied in this order for export (the preview may stop after grouping):
    1. group_polylines  - join consecutive segments into polylines
    2. clip_lines_with_margin - cut everything outside the margin rectangle
    3. retrace_lines    - drop nearly collinear vertices

All three only change how many points and paths describe the drawing, never
what the drawing looks like (to within tolerance).
"""
import math
import logging
from typing import List, Optional, Sequence, Tuple

from shapely.geometry import LineString, box
from shapely.geometry.base import BaseGeometry

from .core import Point, Polyline

logger = logging.getLogger(__name__)


def _close(a: Point, b: Point, tolerance: float) -> bool:
    return math.hypot(a[0] - b[0], a[1] - b[1]) <= tolerance


def group_polylines(lines: Sequence[Sequence[Point]], tolerance: float = 1e-6) -> List[Polyline]:
    """
    Merges consecutive lines that share an endpoint into single polylines.

    Only neighbours in the input order are joined: line i+1 is appended to
    the current polyline when its first point coincides with the current
    last point. Point order is kept. Lines of zero length are dropped.

    Args:
        lines: Segments (or already grouped polylines) in drawing order.
        tolerance: Max distance for two endpoints to count as shared.

    Returns:
        List[Polyline]: Each polyline has at least 2 points.
    """
    polylines: List[Polyline] = []
    current: Polyline = []

    for line in lines:
        points = [(float(x), float(y)) for x, y in line]
        if len(points) < 2 or all(_close(points[0], p, 0.0) for p in points[1:]):
            continue

        if current and _close(current[-1], points[0], tolerance):
            current.extend(points[1:])
        else:
            if current:
                polylines.append(current)
            current = points

    if current:
        polylines.append(current)

    logger.debug(f"Grouped {len(lines)} lines into {len(polylines)} polylines.")
    return polylines


def _line_parts(geometry: BaseGeometry) -> List[LineString]:
    """Flattens an intersection result to its non-degenerate LineStrings."""
    if geometry.is_empty:
        return []
    if geometry.geom_type == "LineString":
        return [geometry] if geometry.length > 0 else []
    if hasattr(geometry, "geoms"):
        parts = []
        for part in geometry.geoms:
            parts.extend(_line_parts(part))
        return parts
    # Points left over where a line only touches the rectangle
    return []


def _clip_segment(
    start: Point,
    end: Point,
    clip_rect: BaseGeometry,
    start_inside: bool,
    end_inside: bool,
) -> Optional[Tuple[Point, Point]]:
    """The part of one segment inside the rectangle, oriented like the segment."""
    if start_inside and end_inside:
        return (start, end)

    # A segment against a convex rectangle leaves at most one piece
    parts = _line_parts(LineString([start, end]).intersection(clip_rect))
    if not parts:
        return None
    coords = list(parts[0].coords)
    a, b = (float(coords[0][0]), float(coords[0][1])), (float(coords[-1][0]), float(coords[-1][1]))
    if math.dist(a, start) > math.dist(b, start):
        a, b = b, a

    # Endpoints already inside are kept bit-exact so pieces stay connected
    return (start if start_inside else a, end if end_inside else b)


def clip_lines_with_margin(
    lines: Sequence[Sequence[Point]],
    width: float,
    height: float,
    margins: Tuple[float, float],
) -> List[Polyline]:
    """
    Removes everything outside the rectangle inset from the canvas by `margins`.

    A polyline entirely inside is returned as is, one entirely outside is
    dropped, and one crossing the boundary is cut at the crossings (possibly
    into several pieces). The polyline is walked segment by segment, so it is
    only ever cut where it leaves the rectangle, never where it crosses
    itself. Every piece runs in the same direction as its source and pieces
    are emitted in the order they occur along it. Points exactly on the
    boundary are inside.

    Args:
        lines: Polylines to clip.
        width: Canvas width.
        height: Canvas height.
        margins: (vertical, horizontal) margin.

    Returns:
        List[Polyline]
    """
    vertical_margin, horizontal_margin = margins
    min_x, max_x = horizontal_margin, width - horizontal_margin
    min_y, max_y = vertical_margin, height - vertical_margin
    clip_rect = box(min_x, min_y, max_x, max_y)

    def inside(point: Point) -> bool:
        return min_x <= point[0] <= max_x and min_y <= point[1] <= max_y

    clipped: List[Polyline] = []
    cut_count = 0
    dropped_count = 0

    for line in lines:
        points = [(float(x), float(y)) for x, y in line]
        if len(points) < 2:
            continue

        flags = [inside(point) for point in points]

        # 1. Fast path: fully inside (boundary included)
        if all(flags):
            clipped.append(points)
            continue

        # 2. Walk the segments, opening a piece on entry and closing it on exit
        pieces: List[Polyline] = []
        current: Polyline = []
        for i in range(len(points) - 1):
            start, end = points[i], points[i + 1]
            if start == end:
                continue

            segment = _clip_segment(start, end, clip_rect, flags[i], flags[i + 1])
            if segment is None:
                if len(current) >= 2:
                    pieces.append(current)
                current = []
                continue

            a, b = segment
            if current and current[-1] == a:
                current.append(b)
            else:
                if len(current) >= 2:
                    pieces.append(current)
                current = [a, b]

            if not flags[i + 1]:
                pieces.append(current)
                current = []

        if len(current) >= 2:
            pieces.append(current)

        if pieces:
            cut_count += 1
            clipped.extend(pieces)
        else:
            dropped_count += 1

    logger.debug(
        f"Clipped {len(lines)} polylines to [{min_x:.2f}, {max_x:.2f}] x [{min_y:.2f}, {max_y:.2f}]: "
        f"{cut_count} cut, {dropped_count} dropped."
    )
    return clipped


def retrace_lines(
    lines: Sequence[Sequence[Point]],
    tolerance: float = 0.1,
    min_points: int = 3,
) -> List[Polyline]:
    """
    Thins out nearly collinear vertices (Douglas-Peucker via shapely).

    Only polylines with more than `min_points` points are touched. The first
    and last points are always kept and no point moves by more than
    `tolerance`. A polyline that would collapse to zero length (a loop
    smaller than the tolerance) is left untouched.
    """
    retraced: List[Polyline] = []
    before = 0
    after = 0

    for line in lines:
        points = [(float(x), float(y)) for x, y in line]
        before += len(points)

        if len(points) > min_points and tolerance > 0:
            simplified = LineString(points).simplify(tolerance, preserve_topology=False)
            # A tiny closed loop collapses onto its start point; keep it as drawn
            if (
                not simplified.is_empty
                and simplified.geom_type == "LineString"
                and len(simplified.coords) >= 2
                and simplified.length > 0
            ):
                points = [(float(x), float(y)) for x, y in simplified.coords]

        after += len(points)
        retraced.append(points)

    if before:
        logger.debug(f"Retraced polylines: {before} -> {after} points (tolerance {tolerance}).")
    return retraced
