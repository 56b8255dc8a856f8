"""Tests for display rasterization."""

import numpy as np
import pytest
from chipcore import display_to_rgba, chip8_display_to_rgb, create_color_scheme


def test_display_to_rgba(fresh_state):
    display = fresh_state.display.at[3, 1].set(True)

    frame = display_to_rgba(display)

    assert frame.shape == (32, 64, 4)
    assert frame.dtype == np.uint8
    assert tuple(frame[1, 3]) == (0, 0, 0, 255)
    assert tuple(frame[3, 1]) == (255, 255, 255, 255)
    assert (frame[..., 3] == 255).all()


def test_display_to_rgba_custom_colors(fresh_state):
    display = fresh_state.display.at[0, 0].set(True)

    frame = display_to_rgba(display, on_color=(1, 2, 3, 4), off_color=(5, 6, 7, 8))

    assert tuple(frame[0, 0]) == (1, 2, 3, 4)
    assert tuple(frame[0, 1]) == (5, 6, 7, 8)


def test_rgb_upscaling(fresh_state):
    display = fresh_state.display.at[63, 31].set(True)

    frame = chip8_display_to_rgb(display, scale=2)

    assert frame.shape == (64, 128, 3)
    assert (frame[62:, 126:] == 0).all()
    assert (frame[0, 0] == 255).all()


def test_color_schemes():
    on, off = create_color_scheme("classic")
    assert on == (0, 255, 0)
    assert off == (0, 0, 0)

    with pytest.raises(ValueError):
        create_color_scheme("sepia")
