"""Framebuffer rendering for the pygame window and headless runs.

The machine keeps its display as a (width, height) boolean array. The window
wants scaled RGB frames and a headless run wants something printable, so both
conversions live here.
"""

from typing import Tuple

import numpy as np

Color = Tuple[int, int, int]

# (on, off) pairs offered through the ``color_scheme`` config key
COLOR_SCHEMES = {
    "classic": ((0, 255, 0), (0, 0, 0)),
    "amber": ((255, 176, 0), (0, 0, 0)),
    "white": ((255, 255, 255), (0, 0, 0)),
}


def lookup_color_scheme(name: str) -> Tuple[Color, Color]:
    """Return the (on_color, off_color) pair for a named scheme."""
    try:
        return COLOR_SCHEMES[name]
    except KeyError:
        raise ValueError(
            f"Unknown color scheme '{name}'. Available: {sorted(COLOR_SCHEMES)}"
        ) from None


def display_to_rgb(display, scale: int = 8, on_color: Color = (0, 255, 0), off_color: Color = (0, 0, 0)) -> np.ndarray:
    """Paint a (width, height) framebuffer as an image.

    Returns:
        uint8 array of shape (height * scale, width * scale, 3)
    """
    palette = np.array([off_color, on_color], dtype=np.uint8)
    image = palette[np.asarray(display, dtype=np.intp).T]
    if scale > 1:
        image = image.repeat(scale, axis=0).repeat(scale, axis=1)
    return image


def display_to_text(display, on: str = "#", off: str = ".") -> str:
    """Render the display as lines of text, one per screen row."""
    pixels = np.array(display, dtype=np.bool_).T
    return "\n".join("".join(on if pixel else off for pixel in row) for row in pixels)
