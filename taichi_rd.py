# taichi_rd.py
# Taichi Gray–Scott step, same maths as reaction_diffusion_grayscott.grayscott_step.
#
# One kernel reads only (A, B) and writes only (nA, nB); the Python side swaps
# the pairs afterwards. Cells never see each other's new values, so the
# parallel loop gives the same grid as the sequential numpy step.

import numpy as np
import taichi as ti

from reaction_diffusion_grayscott import W_CENTER, W_ORTHO, W_DIAG

_initialized = False


def init(arch=None):
    """ti.init once per process; GPU when available unless an arch is given."""
    global _initialized
    if _initialized:
        return
    if arch is not None:
        ti.init(arch=arch)
    else:
        try:
            ti.init(arch=ti.gpu)
        except Exception:
            ti.init(arch=ti.cpu)
    _initialized = True


@ti.func
def laplacian(f: ti.template(), i: int, j: int, rows: int, cols: int):
    up, down = (i + rows - 1) % rows, (i + 1) % rows
    left, right = (j + cols - 1) % cols, (j + 1) % cols
    return (W_CENTER * f[i, j]
            + W_ORTHO * (f[up, j] + f[down, j] + f[i, left] + f[i, right])
            + W_DIAG * (f[up, left] + f[up, right] + f[down, left] + f[down, right]))


@ti.kernel
def simulate(A: ti.template(), B: ti.template(), nA: ti.template(), nB: ti.template(),
             F: ti.template(), K: ti.template(),
             Da: float, Db: float, h: float, wrap: int):
    rows, cols = A.shape
    for i, j in A:
        border = (i == 0) | (j == 0) | (i == rows - 1) | (j == cols - 1)
        if border & (wrap == 0):
            nA[i, j] = A[i, j]
            nB[i, j] = B[i, j]
        else:
            a = A[i, j]
            b = B[i, j]
            abb = a * b * b
            f = F[i, j]
            k = K[i, j]
            nA[i, j] = ti.min(1.0, ti.max(0.0, a + (Da * laplacian(A, i, j, rows, cols) - abb + f * (1.0 - a)) * h))
            nB[i, j] = ti.min(1.0, ti.max(0.0, b + (Db * laplacian(B, i, j, rows, cols) + abb - (k + f) * b) * h))


class TaichiGrayScott:
    """
    Deterministic part of GrayScottSim on a Taichi device (no perturbation).
    Load state with from_sim() or load(), step, read back with to_numpy().
    """

    def __init__(self, cols, rows, da=1.0, db=0.5, dt=1.0, boundary="clamped", arch=None):
        if cols < 2 or rows < 2:
            raise ValueError(f"Grid must be at least 2x2, got {cols}x{rows}.")
        init(arch)
        self.cols, self.rows = cols, rows
        self.da, self.db, self.dt = da, db, dt
        self.boundary = boundary
        shape = (rows, cols)
        self.A = ti.field(dtype=ti.f32, shape=shape)
        self.B = ti.field(dtype=ti.f32, shape=shape)
        self.nA = ti.field(dtype=ti.f32, shape=shape)
        self.nB = ti.field(dtype=ti.f32, shape=shape)
        self.F = ti.field(dtype=ti.f32, shape=shape)
        self.K = ti.field(dtype=ti.f32, shape=shape)

    @classmethod
    def from_sim(cls, sim, **kw):
        t = cls(sim.cols, sim.rows, da=sim.da, db=sim.db, dt=sim.dt, boundary=sim.boundary, **kw)
        t.load(sim.a, sim.b, sim.feed_map().values, sim.kill_map().values)
        return t

    def load(self, a, b, feed, kill):
        shape = (self.rows, self.cols)
        self.A.from_numpy(np.asarray(a, dtype=np.float32))
        self.B.from_numpy(np.asarray(b, dtype=np.float32))
        self.F.from_numpy(np.broadcast_to(np.asarray(feed, dtype=np.float32), shape).copy())
        self.K.from_numpy(np.broadcast_to(np.asarray(kill, dtype=np.float32), shape).copy())

    def step(self, n=1):
        wrap = 1 if self.boundary == "toroidal" else 0
        for _ in range(n):
            simulate(self.A, self.B, self.nA, self.nB, self.F, self.K,
                     self.da, self.db, self.dt * 0.5, wrap)
            self.A, self.nA = self.nA, self.A
            self.B, self.nB = self.nB, self.B

    def to_numpy(self):
        return self.A.to_numpy(), self.B.to_numpy()
