"""CHIP-8 rendering utilities for host presentation."""

import jax.numpy as jnp
import numpy as np
from typing import Tuple

DARK_RGBA = (0x00, 0x00, 0x00, 0xFF)
LIGHT_RGBA = (0xFF, 0xFF, 0xFF, 0xFF)


def display_to_rgba(
    display: jnp.ndarray,
    on_color: Tuple[int, int, int, int] = DARK_RGBA,
    off_color: Tuple[int, int, int, int] = LIGHT_RGBA,
) -> np.ndarray:
    """Rasterize the display into a row-major RGBA frame, one pixel per cell.

    Args:
        display: Boolean array of shape (64, 32) indexed [x, y]
        on_color: RGBA color for set cells (default: dark)
        off_color: RGBA color for clear cells (default: light)

    Returns:
        RGBA array of shape (32, 64, 4) with uint8 values
    """
    pixels = np.asarray(display, dtype=np.bool_).T
    return np.where(
        pixels[..., None],
        np.array(on_color, dtype=np.uint8),
        np.array(off_color, dtype=np.uint8),
    ).astype(np.uint8)


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 0, 0),
    off_color: Tuple[int, int, int] = (255, 255, 255),
) -> np.ndarray:
    """Convert CHIP-8 boolean display to RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (64, 32) representing CHIP-8 display
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: black)
        off_color: RGB color for "off" pixels (default: white)

    Returns:
        RGB array of shape (height*scale, width*scale, 3) with uint8 values
    """
    pixels = np.array(display, dtype=np.bool_)

    # Original: (64 width, 32 height) -> Display: (32 height, 64 width)
    pixels = pixels.T
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Apply upscaling using nearest neighbor interpolation
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "paper",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("paper", "classic", "amber", "white", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "paper": ((0, 0, 0), (255, 255, 255)),  # Dark on light
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]
