import numpy as np
import pytest
from PIL import Image

from rd_config import RDConfig
from reaction_diffusion_grayscott import GrayScottSim

LOGO_W, LOGO_H = 40, 20


def make_logo():
    """Transparent 40x20 canvas: dark blue block at x 5..14, red block at x 25..34 (rows 5..14)."""
    px = np.zeros((LOGO_H, LOGO_W, 4), dtype=np.uint8)
    px[5:15, 5:15] = (20, 30, 120, 255)
    px[5:15, 25:35] = (220, 40, 30, 255)
    return px


@pytest.fixture
def logo_rgba():
    return make_logo()


@pytest.fixture
def logo_path(tmp_path):
    path = tmp_path / "logo.png"
    Image.fromarray(make_logo()).save(path)
    return path


@pytest.fixture
def quiet_config():
    """10x10, calm parameters, no stochastic forcing."""
    return RDConfig(cols=10, rows=10, da=1.0, db=0.5, feed=0.036, kill=0.064,
                    dt=1.0, perturb=False, rng_seed=0)


@pytest.fixture
def blank_sim():
    """Factory: a sim with constant A/B and scalar feed/kill."""
    def make(config, a=1.0, b=0.0):
        sim = GrayScottSim(config)
        sim.a[...] = a
        sim.b[...] = b
        sim.feed_cells = None
        sim.kill_cells = None
        return sim
    return make
