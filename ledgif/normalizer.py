"""Conversion of composited surfaces into the grids handed to display drivers."""

from typing import List, Tuple

import numpy as np


def normalize(surface: np.ndarray) -> np.ndarray:
    """
    Row-major (height, width, 4) uint8 RGBA grid, independent of ``surface``.

    No resizing, color conversion or device-specific reordering happens here.
    """
    if surface.ndim != 3 or surface.shape[2] != 4:
        raise ValueError(f'Expected an RGBA surface, got shape {surface.shape}')

    grid = np.array(surface, dtype=np.uint8, order='C', copy=True)
    grid.setflags(write=False)
    return grid


def to_rows(grid: np.ndarray) -> List[List[Tuple[int, int, int, int]]]:
    """Same grid as nested lists of (r, g, b, a) tuples, one list per row."""
    return [[tuple(int(c) for c in pixel) for pixel in row] for row in grid]
