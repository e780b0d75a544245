"""Shared fixtures for the raster_plotter test suite."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from raster_plotter.configs.loader import MachineConfig
from raster_plotter.utils import logging_config


@pytest.fixture()
def unit_machine() -> MachineConfig:
    """1 px == 1 mm, feeds 3000 / 6000 mm/min."""
    return MachineConfig(
        bed_width=100,
        bed_height=100,
        canvas_width_px=100,
        feed_rate=3000,
        travel_rate=6000,
    )


@pytest.fixture()
def vertical_line_5x5() -> np.ndarray:
    """3x3 interior with a single 3-pixel vertical stroke in column 2."""
    img = np.zeros((5, 5), dtype=np.uint8)
    img[1:4, 2] = 1
    return img


@pytest.fixture()
def square_image() -> np.ndarray:
    """White 60x60 RGB image with a filled black 20x20 square."""
    img = np.full((60, 60, 3), 255, dtype=np.uint8)
    img[20:40, 20:40] = 0
    return img


@pytest.fixture()
def restore_logging():
    """Undo setup_logging() side effects on the root logger."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)
    logging_config.pop_context()
    logging_config._configured = False
    logging.captureWarnings(False)
