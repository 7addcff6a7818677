"""
Tests for pyslopes.core
"""

import pytest

from pyslopes.core import CanvasDimensions
from pyslopes.errors import InvalidConfiguration


class TestCanvasDimensions:

    def test_from_size_margins(self):
        canvas = CanvasDimensions.from_size(425.0, 550.0)
        assert canvas.margins == pytest.approx((50.0, 50.0))
        assert canvas.aspect_ratio == pytest.approx(425 / 550)

    def test_from_size_uses_config(self):
        canvas = CanvasDimensions.from_size(100, 100, {"canvas": {"vertical_margin_ratio": 0.1}})
        assert canvas.vertical_margin == pytest.approx(10.0)

    @pytest.mark.parametrize("width, height", [(0, 10), (10, -1), (float("inf"), 10), (True, 10), ("10", 10)])
    def test_invalid_size(self, width, height):
        with pytest.raises(InvalidConfiguration):
            CanvasDimensions(width, height, 0, 0)

    def test_negative_margin(self):
        with pytest.raises(InvalidConfiguration):
            CanvasDimensions(10, 10, -1, 0)
