"""
Tests for pyslopes.polylines
Grouping, clipping and retracing passes
"""

import pytest

from pyslopes.polylines import clip_lines_with_margin, group_polylines, retrace_lines


class TestGroupPolylines:

    def test_two_disjoint_chains(self):
        lines = [((0, 0), (1, 1)), ((1, 1), (2, 2)), ((5, 5), (6, 6))]
        grouped = group_polylines(lines)
        assert len(grouped) == 2
        assert grouped[0] == [(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)]
        assert grouped[1] == [(5.0, 5.0), (6.0, 6.0)]

    def test_does_not_merge_unshared_endpoints(self):
        lines = [((0, 0), (1, 1)), ((1.5, 1), (2, 2))]
        assert len(group_polylines(lines)) == 2

    def test_only_consecutive_lines_merge(self):
        """A later segment starting where an earlier chain ended stays separate."""
        lines = [((0, 0), (1, 0)), ((5, 5), (6, 5)), ((1, 0), (2, 0))]
        assert len(group_polylines(lines)) == 3

    def test_tolerance(self):
        lines = [((0, 0), (1, 1)), ((1 + 1e-9, 1), (2, 2))]
        assert len(group_polylines(lines, tolerance=1e-6)) == 1
        assert len(group_polylines(lines, tolerance=0)) == 2

    def test_zero_length_dropped(self):
        lines = [((0, 0), (1, 1)), ((3, 3), (3, 3)), ((1, 1), (2, 2))]
        assert group_polylines(lines) == [[(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)]]

    def test_empty(self):
        assert group_polylines([]) == []


class TestClipLinesWithMargin:

    def test_crossing_both_sides(self):
        clipped = clip_lines_with_margin([[(-5, 5), (5, 5), (15, 5)]], 10, 10, (0, 0))
        assert len(clipped) == 1
        line = clipped[0]
        assert line[0] == pytest.approx((0.0, 5.0))
        assert line[-1] == pytest.approx((10.0, 5.0))
        assert all(0 <= x <= 10 and 0 <= y <= 10 for x, y in line)

    def test_fully_inside_unchanged(self):
        line = [(1.0, 1.0), (2.0, 3.0), (4.0, 2.0)]
        assert clip_lines_with_margin([line], 10, 10, (0, 0)) == [line]

    def test_fully_outside_dropped(self):
        assert clip_lines_with_margin([[(20, 20), (30, 30)]], 10, 10, (0, 0)) == []

    def test_boundary_counts_as_inside(self):
        line = [(0.0, 0.0), (10.0, 0.0)]
        assert clip_lines_with_margin([line], 10, 10, (0, 0)) == [line]

    def test_touching_corner_only_dropped(self):
        assert clip_lines_with_margin([[(10, 10), (12, 14)]], 10, 10, (0, 0)) == []

    def test_split_into_pieces_in_order(self):
        """A line leaving and re-entering yields two pieces, oriented like the source."""
        line = [(2, 2), (2, -5), (8, -5), (8, 2)]
        clipped = clip_lines_with_margin([line], 10, 10, (0, 0))
        assert len(clipped) == 2
        first, second = clipped
        assert first[0] == pytest.approx((2.0, 2.0))
        assert first[-1] == pytest.approx((2.0, 0.0))
        assert second[0] == pytest.approx((8.0, 0.0))
        assert second[-1] == pytest.approx((8.0, 2.0))

    def test_reverse_direction_preserved(self):
        clipped = clip_lines_with_margin([[(15, 5), (5, 5), (-5, 5)]], 10, 10, (0, 0))
        assert clipped[0][0] == pytest.approx((10.0, 5.0))
        assert clipped[0][-1] == pytest.approx((0.0, 5.0))

    def test_margins(self):
        """margins are (vertical, horizontal)."""
        clipped = clip_lines_with_margin([[(0, 50), (100, 50)]], 100, 100, (10, 20))
        assert clipped[0][0] == pytest.approx((20.0, 50.0))
        assert clipped[0][-1] == pytest.approx((80.0, 50.0))

        assert clip_lines_with_margin([[(0, 5), (100, 5)]], 100, 100, (10, 20)) == []

    def test_self_crossing_kept_whole(self):
        """A polyline is cut where it leaves the rectangle, never where it crosses itself."""
        line = [(2, 5), (8, 5), (8, 8), (5, 8), (5, 2), (5, -3)]
        clipped = clip_lines_with_margin([line], 10, 10, (0, 0))
        assert len(clipped) == 1
        assert clipped[0][:5] == [(2.0, 5.0), (8.0, 5.0), (8.0, 8.0), (5.0, 8.0), (5.0, 2.0)]
        assert clipped[0][5] == pytest.approx((5.0, 0.0))
        assert len(clipped[0]) == 6

    def test_enters_and_leaves_around_a_self_crossing(self):
        """Entry and exit cut the ends; the crossing at (2, 2) inside does not."""
        line = [(-2, 2), (8, 2), (8, 8), (2, 8), (2, -2)]
        clipped = clip_lines_with_margin([line], 10, 10, (0, 0))
        assert len(clipped) == 1
        assert clipped[0][0] == pytest.approx((0.0, 2.0))
        assert clipped[0][1:4] == [(8.0, 2.0), (8.0, 8.0), (2.0, 8.0)]
        assert clipped[0][-1] == pytest.approx((2.0, 0.0))


class TestRetraceLines:

    def test_collinear_points_removed(self):
        line = [(0, 0), (1, 0), (2, 0), (3, 0), (4, 0)]
        assert retrace_lines([line], tolerance=0.1) == [[(0.0, 0.0), (4.0, 0.0)]]

    def test_short_lines_untouched(self):
        line = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0)]
        assert retrace_lines([line], tolerance=0.1, min_points=3) == [line]

    def test_shape_preserved(self):
        line = [(0.0, 0.0), (1.0, 5.0), (2.0, 0.0), (3.0, 5.0), (4.0, 0.0)]
        assert retrace_lines([line], tolerance=0.1) == [line]

    def test_small_wiggles_removed_endpoints_kept(self):
        line = [(0.0, 0.0), (1.0, 0.01), (2.0, -0.01), (3.0, 0.02), (4.0, 1.0)]
        retraced = retrace_lines([line], tolerance=0.1)[0]
        assert retraced[0] == (0.0, 0.0)
        assert retraced[-1] == (4.0, 1.0)
        assert len(retraced) < len(line)

    def test_zero_tolerance_is_noop(self):
        line = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0), (4.0, 0.0)]
        assert retrace_lines([line], tolerance=0) == [line]

    def test_tiny_loop_left_untouched(self):
        """A loop smaller than the tolerance would collapse onto one point."""
        ring = [(0.0, 0.0), (0.05, 0.0), (0.05, 0.05), (0.0, 0.05), (0.0, 0.0)]
        assert retrace_lines([ring], tolerance=0.1) == [ring]
