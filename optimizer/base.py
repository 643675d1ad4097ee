from __future__ import annotations
from typing import Callable, List, Optional, Dict, Tuple
import numpy as np

Bounds = List[Tuple[float, float]]
Fitness = Callable[[np.ndarray], float]

def bounds_arrays(bounds: Bounds) -> Tuple[np.ndarray, np.ndarray]:
    lo = np.array([b[0] for b in bounds], dtype=float)
    hi = np.array([b[1] for b in bounds], dtype=float)
    return lo, hi

def clamp_to_bounds(x: np.ndarray, lo: np.ndarray, hi: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Clip x into [lo, hi] component-wise.
    Returns the clipped copy and a boolean mask of the components that were moved.
    """
    mask = (x < lo) | (x > hi)
    return np.minimum(np.maximum(x, lo), hi), mask

class Optimizer:
    """
    Solver-agnostic base: owns the bounds, the random generator and the options.
    Subclasses advance one iteration per step() and expose best()/state().
    """
    def __init__(self, bounds: Bounds, seed: Optional[int] = None, options: Optional[Dict] = None,
                 rng: Optional[np.random.Generator] = None):
        self.bounds: Bounds = bounds
        self.D: int = len(bounds)
        # an injected generator wins over the seed (tests supply their own stream)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.options: Dict = options or {}

    def step(self) -> None:
        raise NotImplementedError

    def best(self):
        raise NotImplementedError

    def state(self) -> Dict:
        return {}
