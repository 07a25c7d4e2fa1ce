#!/usr/bin/env python3
"""
rd_export.py — run the logo-seeded Gray–Scott simulation headless and save it.

Writes the final A/B grids (plus the seed) to an .npz file, and optionally a
PNG snapshot of B and a GIF of B over time.

Run:
  python rd_export.py --image begin-logo.png --cols 400 --rows 200 --ticks 300 \
      --preset worms --out run.npz --png run.png --gif run.gif
"""
import argparse
import logging
import time

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from rd_config import RDConfig, BOUNDARIES
from rd_presets import PRESET_NAMES
from rd_seed import MASK_MODES
from reaction_diffusion_grayscott import GrayScottSim, save_gif, simulate

logger = logging.getLogger(__name__)

CMAPS = ["magma", "inferno", "plasma", "viridis", "cividis", "twilight", "cubehelix", "Greys"]


def build_parser():
    ap = argparse.ArgumentParser(description="Headless Gray–Scott run seeded from an image.")
    ap.add_argument("--image", type=str, default=None, help="seed image (RGBA); missing -> uniform seed")
    ap.add_argument("--cols", type=int, default=200, help="grid width")
    ap.add_argument("--rows", type=int, default=200, help="grid height")
    ap.add_argument("--preset", type=str, default=None, choices=PRESET_NAMES, help="named regime")
    ap.add_argument("--da", type=float, default=1.0, help="diffusion A")
    ap.add_argument("--db", type=float, default=0.5, help="diffusion B")
    ap.add_argument("--feed", type=float, default=0.036, help="feed rate")
    ap.add_argument("--kill", type=float, default=0.064, help="kill rate")
    ap.add_argument("--dt", type=float, default=1.0, help="integration dt")
    ap.add_argument("--steps", type=int, default=1, help="steps per tick")
    ap.add_argument("--ticks", type=int, default=300, help="ticks to run")
    ap.add_argument("--boundary", type=str, default="clamped", choices=BOUNDARIES)
    ap.add_argument("--no-perturb", action="store_true", help="disable the random B sprinkle")
    ap.add_argument("--seed", type=int, default=123, help="rng seed")
    ap.add_argument("--mask-mode", type=str, default="alpha", choices=MASK_MODES)
    ap.add_argument("--image-cols", type=int, default=None, help="columns the image occupies (right-aligned)")
    ap.add_argument("--pad-right", type=int, default=0, help="transparent columns right of the image")
    ap.add_argument("--backend", type=str, default="numpy", choices=["numpy", "taichi"])
    ap.add_argument("--out", type=str, default="grayscott.npz", help="where to save the grids")
    ap.add_argument("--png", type=str, default=None, help="save a PNG of B")
    ap.add_argument("--cmap", type=str, default="magma", choices=CMAPS)
    ap.add_argument("--gif", type=str, default=None, help="save a GIF of B")
    ap.add_argument("--every", type=int, default=2, help="GIF frame every N ticks")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def config_from_args(args):
    return RDConfig(cols=args.cols, rows=args.rows, da=args.da, db=args.db,
                    feed=args.feed, kill=args.kill, dt=args.dt,
                    steps_per_tick=args.steps, boundary=args.boundary,
                    perturb=not args.no_perturb, rng_seed=args.seed, preset=args.preset)


def run_taichi(sim, ticks, every):
    from taichi_rd import TaichiGrayScott

    if sim.perturb:
        logger.warning("taichi backend ignores the B sprinkle")
    dev = TaichiGrayScott.from_sim(sim)
    frames = []
    for i in range(ticks):
        dev.step(sim.steps_per_tick)
        if i % every == 0:
            frames.append(dev.B.to_numpy().astype(np.float64))
    a, b = dev.to_numpy()
    sim.a[...] = a
    sim.b[...] = b
    sim.steps += ticks * sim.steps_per_tick
    return frames


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if args.ticks < 0 or args.every < 1:
        raise SystemExit("--ticks must be >= 0 and --every >= 1")

    try:
        cfg = config_from_args(args)
        sim = GrayScottSim(cfg, image=args.image, mode=args.mask_mode,
                           image_cols=args.image_cols, pad_right=args.pad_right)
    except ValueError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    print(f"{sim!r} seed={sim.seed.source}")
    t0 = time.perf_counter()
    if args.backend == "taichi":
        frames = run_taichi(sim, args.ticks, args.every)
    else:
        frames = simulate(sim, args.ticks, args.every)
    print(f"Ran {args.ticks} ticks ({sim.steps} steps) in {time.perf_counter() - t0:.2f}s")

    s = sim.stats()
    print(f"B range [{s['b_min']:.3f}, {s['b_max']:.3f}]  std={s['b_std']:.4f}  flat={s['flat']}")

    np.savez_compressed(args.out, a=sim.a, b=sim.b, seed_a=sim.seed.a, seed_b=sim.seed.b,
                        mask=sim.seed.mask, steps=sim.steps,
                        params=np.array([sim.da, sim.db, sim.feed, sim.kill, sim.dt]))
    print("Saved", args.out)
    if args.png:
        plt.imsave(args.png, sim.b, cmap=args.cmap, vmin=0.0, vmax=1.0)
        print("Saved", args.png)
    if args.gif and frames:
        save_gif(frames, args.gif, cmap=args.cmap)
        print("Saved", args.gif)
    return 0


if __name__ == "__main__":
    main()
