# rd_config.py
# Configuration for the Gray–Scott field simulator.

from dataclasses import dataclass, asdict
from typing import Optional

BOUNDARIES = ("clamped", "toroidal")
MAX_STEPS_PER_TICK = 10


@dataclass
class RDConfig:
    cols: int = 200              # grid width (cells)
    rows: int = 200              # grid height (cells)
    da: float = 1.0              # diffusion of A
    db: float = 0.5              # diffusion of B
    feed: float = 0.036
    kill: float = 0.064
    dt: float = 1.0              # integration step (applied as dt * 0.5)
    steps_per_tick: int = 1      # steps per frame, like the 'steps' slider
    boundary: str = "clamped"    # "clamped" holds the border, "toroidal" wraps
    perturb: bool = True         # sprinkle B every step so patterns never stall
    perturb_rate: float = 0.0006 # sprinkle draws per cell per step
    perturb_low: float = 0.05
    perturb_high: float = 0.4
    rng_seed: Optional[int] = 123
    preset: Optional[str] = None # applied on construction if set

    def validate(self):
        if self.cols < 2 or self.rows < 2:
            raise ValueError(f"Grid must be at least 2x2, got {self.cols}x{self.rows}.")
        if self.boundary not in BOUNDARIES:
            raise ValueError(f"Unknown boundary mode {self.boundary!r}; expected one of {BOUNDARIES}.")
        for name in ("da", "db", "feed", "kill", "perturb_rate"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}.")
        if self.dt <= 0:
            raise ValueError(f"dt must be > 0, got {self.dt}.")
        if not (1 <= self.steps_per_tick <= MAX_STEPS_PER_TICK):
            raise ValueError(f"steps_per_tick must be in 1..{MAX_STEPS_PER_TICK}, got {self.steps_per_tick}.")
        if not (0.0 <= self.perturb_low <= self.perturb_high):
            raise ValueError(
                f"Perturbation range must satisfy 0 <= low <= high, got ({self.perturb_low}, {self.perturb_high})."
            )
        return self

    def as_dict(self):
        return asdict(self)
