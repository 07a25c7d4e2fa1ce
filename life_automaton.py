# life_automaton.py
# Conway's Game of Life (B3/S23) on a toroidal grid, seeded from the logo.

import logging

import numpy as np

from rd_seed import activity_mask, load_rgba, resize_rgba, sparse_mask

logger = logging.getLogger(__name__)


def neighbours(G):
    """Live-neighbour count with wrap-around edges."""
    return sum(np.roll(G, (di, dj), (0, 1))
               for di in (-1, 0, 1) for dj in (-1, 0, 1)
               if (di, dj) != (0, 0))


def life_step(G, out=None):
    n = neighbours(G)
    nxt = out if out is not None else np.empty_like(G)
    nxt[...] = ((n == 3) | ((G == 1) & (n == 2))).astype(G.dtype)
    return nxt


class LifeGrid:
    def __init__(self, cells):
        cells = np.asarray(cells, dtype=np.uint8)
        if cells.ndim != 2 or min(cells.shape) < 2:
            raise ValueError(f"Grid must be 2D and at least 2x2, got shape {cells.shape}.")
        self.initial = (cells > 0).astype(np.uint8)
        self.initial.setflags(write=False)
        self.cells = self.initial.copy()
        self._next = np.zeros_like(self.cells)
        self.generation = 0

    @classmethod
    def from_image(cls, image, cols, rows, rng=None):
        """
        Dark, opaque pixels start alive (brightness mask with its fallbacks).
        An unreadable image gives a fixed sparse scatter of live cells.
        """
        if cols < 2 or rows < 2:
            raise ValueError(f"Grid must be at least 2x2, got {cols}x{rows}.")
        try:
            rgba = load_rgba(image)
        except (OSError, ValueError) as e:
            logger.warning("Could not read seed image %r (%s); using sparse default cells", image, e)
            return cls(sparse_mask(np.ones((rows, cols), dtype=bool), np.random.default_rng(0)))
        rgba = resize_rgba(rgba, cols, rows)
        return cls(activity_mask(rgba, mode="brightness", rng=rng))

    def step(self):
        life_step(self.cells, out=self._next)
        self.cells, self._next = self._next, self.cells
        self.generation += 1

    def step_n(self, n):
        for _ in range(n):
            self.step()

    def reset(self):
        self.cells[...] = self.initial
        self.generation = 0

    def alive_count(self):
        return int(self.cells.sum())
