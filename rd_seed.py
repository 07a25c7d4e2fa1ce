# rd_seed.py
# Turn a logo image into initial A/B concentrations (and per-cell feed/kill).
#
#   image --resize--> rows x image_cols RGBA --threshold--> active mask
#   active cells      : B ~ U(seed_range),  A = 1 - 0.5*B
#   accent (red) cells: B ~ U(0.7, 1.0),    A = 1 - 0.3*B, gentler feed/kill
#   background        : B ~ U(0.02, 0.12),  A = 1 - 0.5*B, slightly more receptive
#
# If the image cannot be read we fall back to a deterministic uniform field.

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

MASK_MODES = ("alpha", "brightness")
DEFAULT_LEVEL = 0.05     # B level of the fallback seed
SPARSE_FRACTION = 0.01   # last-resort random seeding density


@dataclass(frozen=True)
class Seed:
    a: np.ndarray
    b: np.ndarray
    feed: Optional[np.ndarray]   # None -> use the global scalar
    kill: Optional[np.ndarray]
    mask: np.ndarray             # active cells
    accent: np.ndarray           # red-ish cells (subset of mask)
    source: str = "image"
    background_seed: bool = False

    def __post_init__(self):
        for arr in (self.a, self.b, self.feed, self.kill, self.mask, self.accent):
            if arr is not None:
                arr.setflags(write=False)

    @property
    def shape(self):
        return self.a.shape


def load_rgba(image) -> np.ndarray:
    """Path or PIL image -> HxWx4 uint8 array."""
    if isinstance(image, Image.Image):
        img = image
    else:
        img = Image.open(image)
    return np.asarray(img.convert("RGBA"), dtype=np.uint8)


def resize_rgba(rgba: np.ndarray, width: int, height: int) -> np.ndarray:
    img = Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8))
    img = img.resize((width, height), Image.Resampling.BILINEAR)
    return np.asarray(img, dtype=np.uint8)


def sparse_mask(allowed: np.ndarray, rng) -> np.ndarray:
    """A few random cells, inside `allowed` when it has any."""
    n = max(1, int(allowed.size * SPARSE_FRACTION))
    candidates = np.flatnonzero(allowed)
    if candidates.size == 0:
        candidates = np.arange(allowed.size)
    picks = rng.choice(candidates, size=min(n, candidates.size), replace=False)
    mask = np.zeros(allowed.size, dtype=bool)
    mask[picks] = True
    return mask.reshape(allowed.shape)


def activity_mask(rgba: np.ndarray, mode="alpha", rng=None) -> np.ndarray:
    """
    Adaptive threshold over an RGBA array.

    mode="alpha":      active where alpha >= max(8, avg_alpha/2)
    mode="brightness": active where alpha >= max(16, avg_alpha/4)
                       and brightness is below 95% of the average
    Falls back to the inverted threshold, then to sparse random cells, so the
    result always has at least one active cell.
    """
    if mode not in MASK_MODES:
        raise ValueError(f"Unknown mask mode {mode!r}; expected one of {MASK_MODES}.")
    px = np.asarray(rgba, dtype=np.float64)
    bright = px[..., :3].mean(axis=-1)
    alpha = px[..., 3]
    avg_alpha = float(alpha.mean())

    if mode == "alpha":
        alpha_cut = max(8, int(np.floor(avg_alpha * 0.5)))
        opaque = alpha >= alpha_cut
        mask = opaque
        inverted = ~opaque
    else:
        alpha_cut = max(16, int(np.floor(avg_alpha * 0.25)))
        threshold = float(bright.mean()) * 0.95
        opaque = alpha >= alpha_cut
        mask = opaque & (bright < threshold)
        inverted = opaque & (bright > threshold)

    if not mask.any():
        logger.info("No active cells at alpha_cut=%d (%s mode); trying inverted threshold", alpha_cut, mode)
        mask = inverted
    if not mask.any():
        logger.info("Inverted threshold is empty too; sprinkling random seeds")
        mask = sparse_mask(opaque, rng if rng is not None else np.random.default_rng(0))
    return mask


def accent_mask(rgba: np.ndarray) -> np.ndarray:
    px = np.asarray(rgba, dtype=np.float64)
    r, g, b = px[..., 0], px[..., 1], px[..., 2]
    return ((r > 130) & (r > g * 1.2) & (r > b * 1.2)) | ((r > 160) & (g < 100))


def cell_params(mask, accent, feed, kill, background_seed=True):
    """
    Per-cell feed/kill for a seed layout at the given scalars. Accent cells
    get gentler rates, background cells (when seeded) a slightly higher feed.
    Returns None for a grid that would equal its scalar everywhere.
    """
    feed_grid = np.full(mask.shape, float(feed))
    kill_grid = np.full(mask.shape, float(kill))
    feed_grid[accent] = max(0.005, feed * 0.8)
    kill_grid[accent] = max(0.02, kill * 0.9)
    if background_seed:
        background = ~mask
        feed_grid[background] = feed * 1.05
        kill_grid[background] = max(0.01, kill * 0.95)

    # keep the scalar path when nothing is actually spatial
    feed_cells = None if np.all(feed_grid == feed) else feed_grid
    kill_cells = None if np.all(kill_grid == kill) else kill_grid
    return feed_cells, kill_cells


def default_seed(cols: int, rows: int, level=DEFAULT_LEVEL) -> Seed:
    b = np.full((rows, cols), float(level))
    a = 1.0 - 0.5 * b
    empty = np.zeros((rows, cols), dtype=bool)
    return Seed(a=a, b=b, feed=None, kill=None, mask=empty, accent=empty.copy(), source="default")


def seed_from_image(image, cols: int, rows: int, feed: float, kill: float, rng=None,
                    mode="alpha", seed_range=(0.3, 0.7), accents=True, background_seed=True,
                    image_cols=None, pad_right=0) -> Seed:
    """
    Build a Seed for a rows x cols grid from `image` (path, PIL image or RGBA
    array). The image is resized to `image_cols` columns (default: the whole
    grid) and right-aligned, leaving `pad_right` transparent columns after it.
    Unreadable images give default_seed().
    """
    if rng is None:
        rng = np.random.default_rng(0)

    if image is None:
        logger.info("No seed image given; using uniform default seed")
        return default_seed(cols, rows)
    try:
        rgba = image if isinstance(image, np.ndarray) else load_rgba(image)
    except (OSError, ValueError) as e:
        logger.warning("Could not read seed image %r (%s); using uniform default seed", image, e)
        return default_seed(cols, rows)
    if rgba.ndim != 3 or rgba.shape[-1] != 4 or rgba.size == 0:
        logger.warning("Seed image has shape %s, expected HxWx4; using uniform default seed", rgba.shape)
        return default_seed(cols, rows)

    image_cols = cols if image_cols is None else int(min(max(1, image_cols), cols))
    pad_right = int(min(max(0, pad_right), cols - image_cols))
    x0 = cols - (image_cols + pad_right)

    small = resize_rgba(rgba, image_cols, rows)
    region = np.s_[:, x0:x0 + image_cols]

    mask = np.zeros((rows, cols), dtype=bool)
    mask[region] = activity_mask(small, mode=mode, rng=rng)
    accent = np.zeros((rows, cols), dtype=bool)
    if accents:
        accent[region] = accent_mask(small)
        accent &= mask
    plain = mask & ~accent
    background = ~mask

    # one draw per cell keeps results reproducible for a given rng seed
    u = rng.random((rows, cols))
    lo, hi = seed_range
    b = np.zeros((rows, cols))
    b[plain] = lo + u[plain] * (hi - lo)
    b[accent] = 0.7 + u[accent] * 0.3
    if background_seed:
        b[background] = 0.02 + u[background] * 0.10
    a = 1.0 - 0.5 * b
    a[accent] = 1.0 - 0.3 * b[accent]

    feed_cells, kill_cells = cell_params(mask, accent, feed, kill, background_seed)

    logger.debug("Seeded %dx%d grid: %d active, %d accent cells", cols, rows, int(mask.sum()), int(accent.sum()))
    return Seed(a=a, b=b, feed=feed_cells, kill=kill_cells, mask=mask, accent=accent,
                source="image", background_seed=bool(background_seed))
