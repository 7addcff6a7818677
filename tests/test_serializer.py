"""
Tests for pyslopes.serializer
SVG markup and raster hand-off
"""

import re
import xml.etree.ElementTree as ET

import pytest

from pyslopes.errors import InvalidConfiguration
from pyslopes.serializer import RasterJob, polylines_to_svg, raster_dimensions

SVG_NS = "{http://www.w3.org/2000/svg}"


def _parse(markup):
    return ET.fromstring(markup)


def _points(element):
    pairs = element.attrib["points"].split()
    return [tuple(float(v) for v in pair.split(",")) for pair in pairs]


class TestPolylinesToSvg:

    def test_size_and_viewbox(self):
        root = _parse(polylines_to_svg([], 300, 400))
        assert float(root.attrib["width"]) == 300
        assert float(root.attrib["height"]) == 400
        viewbox = [float(v) for v in re.split(r"[ ,]+", root.attrib["viewBox"].strip())]
        assert viewbox == [0, 0, 300, 400]

    def test_one_polyline_per_line(self):
        lines = [[(0, 0), (1, 1), (2, 2)], [(5, 5), (6, 6)], [(9, 9)]]
        root = _parse(polylines_to_svg(lines, 10, 10))
        polylines = list(root.iter(f"{SVG_NS}polyline"))
        assert len(polylines) == 2
        assert _points(polylines[0]) == [(0, 0), (1, 1), (2, 2)]

    def test_precision(self):
        root = _parse(polylines_to_svg([[(1.23456, 4.56789), (2.0, 3.0)]], 10, 10, precision=2))
        polyline = next(root.iter(f"{SVG_NS}polyline"))
        assert _points(polyline)[0] == (1.23, 4.57)

    def test_stroke_style(self):
        markup = polylines_to_svg([[(0, 0), (1, 1)]], 10, 10, stroke="#ff0000", stroke_width=2.5)
        group = next(_parse(markup).iter(f"{SVG_NS}g"))
        assert group.attrib["stroke"] == "#ff0000"
        assert float(group.attrib["stroke-width"]) == 2.5
        assert group.attrib["fill"] == "none"

    def test_background(self):
        assert not list(_parse(polylines_to_svg([], 10, 10)).iter(f"{SVG_NS}rect"))

        root = _parse(polylines_to_svg([], 10, 10, background="#fafafa"))
        rect = next(root.iter(f"{SVG_NS}rect"))
        assert rect.attrib["fill"] == "#fafafa"
        assert float(rect.attrib["width"]) == 10

    def test_invalid_size(self):
        with pytest.raises(InvalidConfiguration):
            polylines_to_svg([], 0, 10)


class TestRasterDimensions:

    def test_print_at_300_dpi(self):
        assert raster_dimensions((18, 24), 300) == (5400, 7200)

    def test_invalid(self):
        with pytest.raises(InvalidConfiguration):
            raster_dimensions((0, 24), 300)
        with pytest.raises(InvalidConfiguration):
            raster_dimensions((18, 24), 0)

    def test_raster_job_is_immutable(self):
        job = RasterJob("<svg/>", 10, 20)
        with pytest.raises(AttributeError):
            job.pixel_width = 5
