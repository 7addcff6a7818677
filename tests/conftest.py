"""Pytest configuration - headless matplotlib and shared fixtures."""
import logging

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest

from pyslopes.params import ParameterSet


@pytest.fixture
def default_params():
    """The default knob set (perspective 40, cartesian, occlusion on)."""
    return ParameterSet()


@pytest.fixture
def small_canvas():
    """(width, height) of a quick 3:4 canvas."""
    return (120.0, 160.0)


@pytest.fixture
def fast_config():
    """Coarser sampling so export/CLI tests stay quick."""
    return {"canvas": {"samples_per_pixel": 0.25}}


@pytest.fixture
def restore_logging():
    """setup_logger replaces the root handlers; put the originals back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")
