"""
Pixel operations on RGBA grids.

Every function returns a new read-only array and leaves its input alone, so a
grid handed out as a frame can never change afterwards.
"""

from typing import Tuple

import numpy as np

from .errors import DimensionError

TRANSPARENT = (0, 0, 0, 0)


def blank(width: int, height: int) -> np.ndarray:
    """Fully transparent grid of the given size."""
    return _freeze(np.zeros((height, width, 4), dtype=np.uint8))


def draw(surface: np.ndarray, patch: np.ndarray, left: int, top: int) -> np.ndarray:
    """
    Draw ``patch`` onto a copy of ``surface`` with its top-left corner at (left, top).

    Opaque patch pixels replace the surface pixels outright. Transparent patch
    pixels (alpha 0) leave the surface pixel underneath unchanged.
    """
    height, width = patch.shape[:2]
    check_box(surface.shape[1], surface.shape[0], (left, top, left + width, top + height))

    result = surface.copy()
    region = result[top:top + height, left:left + width]
    opaque = patch[:, :, 3] != 0
    region[opaque] = patch[opaque]
    return _freeze(result)


def clear_region(surface: np.ndarray, box: Tuple[int, int, int, int]) -> np.ndarray:
    """Copy of ``surface`` with ``box`` (left, top, right, bottom) set to transparent."""
    check_box(surface.shape[1], surface.shape[0], box)
    left, top, right, bottom = box

    result = surface.copy()
    result[top:bottom, left:right] = TRANSPARENT
    return _freeze(result)


def check_box(width: int, height: int, box: Tuple[int, int, int, int]) -> None:
    """Raise DimensionError unless box lies inside a width x height screen."""
    left, top, right, bottom = box
    if left < 0 or top < 0 or right > width or bottom > height:
        raise DimensionError(
            f'Frame box {box} does not fit the {width}x{height} logical screen'
        )


def _freeze(grid: np.ndarray) -> np.ndarray:
    grid.setflags(write=False)
    return grid
