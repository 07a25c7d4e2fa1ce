#!/usr/bin/env python3
# Gray–Scott Reaction–Diffusion seeded from a logo image
#
#   A' = clamp(A + (Da*lapA - A*B^2 + F*(1-A)) * dt*0.5, 0, 1)
#   B' = clamp(B + (Db*lapB + A*B^2 - (k+F)*B) * dt*0.5, 0, 1)
#
# lap uses the 3x3 kernel  0.05  0.2  0.05
#                          0.2  -1    0.2
#                          0.05  0.2  0.05
import logging
import threading
from dataclasses import replace

import matplotlib
import numpy as np
from PIL import Image

from rd_config import MAX_STEPS_PER_TICK, RDConfig
from rd_param_maps import param_map
from rd_presets import get_preset
from rd_seed import cell_params, seed_from_image

logger = logging.getLogger(__name__)

W_CENTER, W_ORTHO, W_DIAG = -1.0, 0.2, 0.05

# "about to die" thresholds for stats()
RANGE_THR = 0.02
STD_THR = 1e-3
GRAD_THR = 1e-3


def laplacian(Z, boundary="clamped"):
    if boundary == "toroidal":
        return (W_CENTER * Z
                + W_ORTHO * (np.roll(Z, 1, 0) + np.roll(Z, -1, 0)
                             + np.roll(Z, 1, 1) + np.roll(Z, -1, 1))
                + W_DIAG * (np.roll(Z, (1, 1), (0, 1)) + np.roll(Z, (1, -1), (0, 1))
                            + np.roll(Z, (-1, 1), (0, 1)) + np.roll(Z, (-1, -1), (0, 1))))
    # clamped: border cells are never updated, their laplacian stays 0
    L = np.zeros_like(Z)
    L[1:-1, 1:-1] = (W_CENTER * Z[1:-1, 1:-1]
                     + W_ORTHO * (Z[:-2, 1:-1] + Z[2:, 1:-1] + Z[1:-1, :-2] + Z[1:-1, 2:])
                     + W_DIAG * (Z[:-2, :-2] + Z[:-2, 2:] + Z[2:, :-2] + Z[2:, 2:]))
    return L


def grayscott_step(A, B, Da, Db, F, k, dt, boundary="clamped", out=None):
    """
    One explicit Euler step. Reads only A and B, writes the result into `out`
    (a pair of arrays, allocated if missing) and returns it. F and k may be
    scalars or per-cell arrays.
    """
    nA, nB = out if out is not None else (np.empty_like(A), np.empty_like(B))
    La = laplacian(A, boundary)
    Lb = laplacian(B, boundary)
    ABB = A * B * B
    h = dt * 0.5
    np.clip(A + (Da * La - ABB + F * (1 - A)) * h, 0.0, 1.0, out=nA)
    np.clip(B + (Db * Lb + ABB - (k + F) * B) * h, 0.0, 1.0, out=nB)
    if boundary == "clamped":
        for src, dst in ((A, nA), (B, nB)):
            dst[0, :] = src[0, :]
            dst[-1, :] = src[-1, :]
            dst[:, 0] = src[:, 0]
            dst[:, -1] = src[:, -1]
    return nA, nB


class GrayScottSim:
    """
    Owns the A/B fields (double buffered), the Gray–Scott parameters and the
    seed they started from. Every mutating call takes the instance lock, so a
    step always finishes before an inject/reset/preset change lands.
    """

    def __init__(self, config=None, image=None, **seed_opts):
        self.config = (config if config is not None else RDConfig()).validate()
        cfg = self.config
        self.da, self.db = cfg.da, cfg.db
        self.feed, self.kill = cfg.feed, cfg.kill
        self.dt = cfg.dt
        self.boundary = cfg.boundary
        self.perturb = cfg.perturb
        self.steps_per_tick = cfg.steps_per_tick
        self.preset_name = None
        self.rng = np.random.default_rng(cfg.rng_seed)
        self.image = image
        self.seed_opts = seed_opts
        self.steps = 0
        self.seed = None
        self._lock = threading.Lock()

        if cfg.preset is not None:
            self._set_preset(cfg.preset)
        self._alloc(cfg.cols, cfg.rows)
        self._load_seed(self._make_seed())

    # ---------- setup ----------
    def _alloc(self, cols, rows):
        self.cols, self.rows = cols, rows
        self.a = np.ones((rows, cols))
        self.b = np.zeros((rows, cols))
        self._next_a = np.zeros((rows, cols))
        self._next_b = np.zeros((rows, cols))

    def _make_seed(self):
        return seed_from_image(self.image, self.cols, self.rows, self.feed, self.kill,
                               rng=self.rng, **self.seed_opts)

    def _load_seed(self, seed):
        self.seed = seed
        self.a[...] = seed.a
        self.b[...] = seed.b
        self._derive_cells()
        self.steps = 0

    def _derive_cells(self):
        # per-cell maps keep the seed's layout but follow the current scalars
        s = self.seed
        self.feed_cells, self.kill_cells = cell_params(s.mask, s.accent, self.feed, self.kill,
                                                       s.background_seed)

    def _set_preset(self, which):
        p = get_preset(which)
        self.da, self.db, self.feed, self.kill = p["da"], p["db"], p["feed"], p["kill"]
        self.preset_name = p["name"]
        if self.seed is not None:
            self._derive_cells()
        return p

    @property
    def shape(self):
        return (self.rows, self.cols)

    def feed_map(self):
        return param_map(self.feed, self.feed_cells)

    def kill_map(self):
        return param_map(self.kill, self.kill_cells)

    # ---------- stepping ----------
    def _step(self):
        grayscott_step(self.a, self.b, self.da, self.db,
                       self.feed_map().values, self.kill_map().values,
                       self.dt, self.boundary, out=(self._next_a, self._next_b))
        self.a, self._next_a = self._next_a, self.a
        self.b, self._next_b = self._next_b, self.b
        if self.perturb:
            self._sprinkle()
        self.steps += 1

    def _sprinkle(self):
        """Bump B at a few random interior cells."""
        if self.cols < 3 or self.rows < 3:
            return
        cfg = self.config
        n = max(1, int(self.cols * self.rows * cfg.perturb_rate))
        for _ in range(n):
            if self.rng.random() < 0.5:
                continue
            x = int(self.rng.integers(1, self.cols - 1))
            y = int(self.rng.integers(1, self.rows - 1))
            self.b[y, x] = min(1.0, self.b[y, x] + self.rng.uniform(cfg.perturb_low, cfg.perturb_high))

    def step(self):
        with self._lock:
            self._step()

    def step_n(self, n):
        if n < 0:
            raise ValueError(f"step count must be >= 0, got {n}")
        with self._lock:
            for _ in range(int(n)):
                self._step()

    def tick(self):
        self.step_n(self.steps_per_tick)

    def set_steps_per_tick(self, n):
        self.steps_per_tick = int(min(MAX_STEPS_PER_TICK, max(1, n)))
        return self.steps_per_tick

    # ---------- parameters ----------
    def apply_preset(self, which):
        """Swap Da, Db, feed, kill in one go. The grid is left alone; per-cell feed/kill are rebuilt."""
        with self._lock:
            p = self._set_preset(which)
        logger.info("Preset %s: Da=%.3f Db=%.3f feed=%.4f kill=%.4f",
                    p["name"], p["da"], p["db"], p["feed"], p["kill"])
        return p

    # ---------- perturbation API ----------
    def reset(self):
        """Back to the stored seed."""
        with self._lock:
            self._load_seed(self.seed)

    def reseed(self, image=None):
        """Re-run the initializer (fresh random draws)."""
        with self._lock:
            if image is not None:
                self.image = image
            self._load_seed(self._make_seed())

    def resize(self, cols, rows):
        self.config = replace(self.config, cols=int(cols), rows=int(rows)).validate()
        with self._lock:
            self._alloc(self.config.cols, self.config.rows)
            self._load_seed(self._make_seed())
        logger.info("Resized grid to %dx%d", self.cols, self.rows)

    def inject(self, x, y):
        if not (0 <= x < self.cols and 0 <= y < self.rows):
            raise IndexError(f"Cell ({x}, {y}) outside {self.cols}x{self.rows} grid")
        with self._lock:
            self.b[y, x] = 1.0
            self.a[y, x] = 0.0

    def inject_random(self, count=10):
        """Set B=1 at `count` random cells, keeping two cells off the border when the grid allows."""
        xlo, xhi = (2, self.cols - 2) if self.cols > 4 else (0, self.cols)
        ylo, yhi = (2, self.rows - 2) if self.rows > 4 else (0, self.rows)
        with self._lock:
            xs = self.rng.integers(xlo, xhi, size=count)
            ys = self.rng.integers(ylo, yhi, size=count)
            self.b[ys, xs] = 1.0
        return list(zip(xs.tolist(), ys.tolist()))

    # ---------- output ----------
    def snapshot(self):
        with self._lock:
            return self.a.copy(), self.b.copy()

    def stats(self):
        """B range/spread and mean |grad B|; `flat` flags a pattern that is dying out."""
        with self._lock:
            B = self.b.copy()
        P = np.pad(B, 1, mode="edge")
        grad = np.abs(P[2:, 1:-1] - P[:-2, 1:-1]) + np.abs(P[1:-1, 2:] - P[1:-1, :-2])
        bmin, bmax = float(B.min()), float(B.max())
        std = float(B.std())
        gmean = float(grad.mean())
        return dict(b_min=bmin, b_max=bmax, b_mean=float(B.mean()), b_std=std, grad_mean=gmean,
                    flat=(bmax - bmin < RANGE_THR) or (std < STD_THR) or (gmean < GRAD_THR))

    def __repr__(self):
        return (f"GrayScottSim({self.cols}x{self.rows}, Da={self.da}, Db={self.db}, "
                f"feed={self.feed}, kill={self.kill}, boundary={self.boundary!r}, steps={self.steps})")


def simulate(sim, ticks=200, every=2):
    """Run `ticks` ticks, keeping a copy of B every `every` ticks."""
    frames = []
    for i in range(ticks):
        sim.tick()
        if i % every == 0:
            frames.append(sim.b.copy())
    return frames


def save_gif(frames, path="grayscott.gif", duration_ms=50, cmap=None):
    """
    Write B frames as a GIF on the fixed [0, 1] scale, so brightness is
    comparable across frames. `cmap` names a matplotlib colormap; None gives
    greyscale.
    """
    if not frames:
        raise ValueError("No frames to save")
    colour = matplotlib.colormaps[cmap] if cmap else None
    imgs = []
    for arr in frames:
        v = np.clip(arr, 0.0, 1.0)
        if colour is not None:
            px = colour(v, bytes=True)[..., :3]
        else:
            px = (v * 255).astype(np.uint8)
        imgs.append(Image.fromarray(np.ascontiguousarray(px)))
    imgs[0].save(path, save_all=True, append_images=imgs[1:], loop=0, duration=duration_ms)
