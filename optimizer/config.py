from __future__ import annotations

import json
import math
import numbers
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .base import Bounds


class ConfigError(ValueError):
    """Invalid or unreadable run configuration."""


def _is_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


@dataclass(frozen=True)
class PSOParams:
    """
    Run configuration for a PSO experiment on the Rastrigin function.

    Defaults reproduce the reference experiment: 30 particles, 100 iterations,
    10 dimensions in [-1, 1], w=0.9, c1=1.3, c2=1.1 and a penalty of 10000
    for particles that hit the bounds.
    """
    n_particles: int = 30
    iterations: int = 100
    dim: int = 10
    c1: float = 1.3
    c2: float = 1.1
    w: float = 0.9
    lower_bound: float = -1.0
    upper_bound: float = 1.0
    penalty_factor: float = 10000.0
    seed: Optional[int] = None

    @classmethod
    def from_options(cls, options: Dict[str, Any], base: Optional["PSOParams"] = None) -> "PSOParams":
        """
        Overlay a flat dict on `base` (defaults if omitted). None values are ignored.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigError(f"Unknown PSO parameters: {unknown}")
        overrides = {k: v for k, v in options.items() if v is not None}
        params = replace(base or cls(), **overrides)
        params.validate()
        return params

    def validate(self) -> None:
        for name in ("n_particles", "iterations", "dim"):
            if not _is_int(getattr(self, name)):
                raise ConfigError(f"{name} must be an integer, got {getattr(self, name)!r}")
        if self.seed is not None and not _is_int(self.seed):
            raise ConfigError(f"seed must be an integer, got {self.seed!r}")
        for name in ("c1", "c2", "w", "lower_bound", "upper_bound", "penalty_factor"):
            value = getattr(self, name)
            if not _is_real(value) or not math.isfinite(value):
                raise ConfigError(f"{name} must be a finite number, got {value!r}")

        if self.n_particles < 1:
            raise ConfigError(f"n_particles must be >= 1, got {self.n_particles}")
        if self.iterations < 0:
            raise ConfigError(f"iterations must be >= 0, got {self.iterations}")
        if self.dim < 1:
            raise ConfigError(f"dim must be >= 1, got {self.dim}")
        if self.lower_bound >= self.upper_bound:
            raise ConfigError(
                f"lower_bound must be < upper_bound, got [{self.lower_bound}, {self.upper_bound}]"
            )
        if self.penalty_factor < 0:
            raise ConfigError(f"penalty_factor must be >= 0, got {self.penalty_factor}")

    def bounds(self) -> Bounds:
        return [(float(self.lower_bound), float(self.upper_bound))] * int(self.dim)

    def options(self) -> Dict[str, Any]:
        """Options dict understood by optimizer.pso.PSO."""
        return dict(
            pop=int(self.n_particles), iterations=int(self.iterations),
            w=float(self.w), c1=float(self.c1), c2=float(self.c2),
            penalty_factor=float(self.penalty_factor),
        )


def load_params(path, base: Optional[PSOParams] = None) -> PSOParams:
    """Read a JSON object of PSOParams fields from disk."""
    path = Path(path)
    try:
        with path.open() as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return PSOParams.from_options(data, base=base)
