"""
Tests for pyslopes.noise_tools
Seed validation, determinism and value ranges of the noise source
"""

import os

import numpy as np
import pytest

from pyslopes.errors import InvalidParameter
from pyslopes.noise_tools import MAX_SEED, NoiseSource, preview_noise

POINTS = [(0.3, 0.7), (1.25, 4.5), (12.1, 3.3), (7.77, 0.01), (100.5, 42.25)]


class TestSeedValidation:
    """NoiseSource rejects seeds outside the 16-bit range."""

    @pytest.mark.parametrize("seed", [0, 1, 1234, MAX_SEED])
    def test_valid_seeds(self, seed):
        assert NoiseSource(seed).seed == seed

    @pytest.mark.parametrize("seed", [-1, MAX_SEED + 1, 1.5, "3", True, None])
    def test_invalid_seeds(self, seed):
        with pytest.raises(InvalidParameter):
            NoiseSource(seed)

    def test_zero_octaves_rejected(self):
        with pytest.raises(InvalidParameter):
            NoiseSource(1, octaves=0)


class TestSampling:
    """Determinism and range of NoiseSource.sample."""

    def test_same_seed_same_values(self):
        a = NoiseSource(42, octaves=4)
        b = NoiseSource(42, octaves=4)
        assert [a.sample(x, y) for x, y in POINTS] == [b.sample(x, y) for x, y in POINTS]

    def test_different_seeds_differ(self):
        a = NoiseSource(1)
        b = NoiseSource(2)
        assert [a.sample(x, y) for x, y in POINTS] != [b.sample(x, y) for x, y in POINTS]

    def test_seeds_sharing_a_base_differ(self):
        """Seeds 256 apart share the permutation table but not the domain offset."""
        a = NoiseSource(3)
        b = NoiseSource(3 + 256)
        assert [a.sample(x, y) for x, y in POINTS] != [b.sample(x, y) for x, y in POINTS]

    def test_values_in_range(self):
        source = NoiseSource(7, octaves=9)
        for x, y in POINTS:
            assert -1.0 <= source.sample(x, y) <= 1.0

    def test_continuity(self):
        """Tiny steps give tiny changes."""
        source = NoiseSource(9)
        assert abs(source.sample(3.2, 1.1) - source.sample(3.2 + 1e-6, 1.1)) < 1e-3


class TestJitter:
    """The spiky random term."""

    def test_deterministic(self):
        source = NoiseSource(5)
        assert source.jitter(3, 17) == source.jitter(3, 17)
        assert NoiseSource(5).jitter(3, 17) == source.jitter(3, 17)

    def test_bounded(self):
        source = NoiseSource(5)
        values = [source.jitter(r, s) for r in range(10) for s in range(50)]
        assert all(-0.25 <= v <= 0.25 for v in values)

    def test_varies_by_position_and_seed(self):
        source = NoiseSource(5)
        values = {source.jitter(0, s) for s in range(20)}
        assert len(values) > 1
        assert NoiseSource(6).jitter(0, 0) != source.jitter(0, 0)


class TestGrid:

    def test_shape_and_dtype(self):
        arr = NoiseSource(11).grid(12, 8, scale=10.0)
        assert arr.shape == (8, 12)
        assert arr.dtype == np.float32

    def test_invalid_scale(self):
        with pytest.raises(InvalidParameter):
            NoiseSource(11).grid(4, 4, scale=0)

    def test_preview_saves_figure(self, tmp_path):
        path = os.path.join(tmp_path, "noise.png")
        arr, fig = preview_noise(NoiseSource(11), width=20, height=15, scale=5.0, output_path=path)
        assert arr.shape == (15, 20)
        assert os.path.exists(path)
