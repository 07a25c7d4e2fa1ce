# rd_param_maps.py
# feed/kill as either one global value or a per-cell grid.
#
# The step routine only ever calls param_map(scalar, cells).values and lets
# numpy broadcasting do the rest, so there is no "is there a map?" branching
# inside the update.

import numpy as np


class UniformMap:
    def __init__(self, value):
        self.value = float(value)

    @property
    def values(self):
        return self.value

    def at(self, x, y):
        return self.value

    def __repr__(self):
        return f"UniformMap({self.value})"


class CellMap:
    def __init__(self, grid):
        self.grid = np.asarray(grid, dtype=np.float64)
        if self.grid.ndim != 2:
            raise ValueError(f"Per-cell map must be 2D, got shape {self.grid.shape}.")

    @property
    def values(self):
        return self.grid

    def at(self, x, y):
        return float(self.grid[y, x])

    def __repr__(self):
        return f"CellMap(shape={self.grid.shape})"


def param_map(scalar, cells=None):
    """Per-cell override when present, global scalar otherwise."""
    if cells is None:
        return UniformMap(scalar)
    return CellMap(cells)
