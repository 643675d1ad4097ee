from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Dict
import numpy as np
from benchmarks.rastrigin import rastrigin
from .base import Optimizer, Bounds, Fitness, bounds_arrays, clamp_to_bounds

@dataclass
class Particle:
    x: np.ndarray
    v: np.ndarray
    pbest_x: np.ndarray
    pbest_f: float
    f: float = np.inf          # evaluated fitness at x after the last sweep (penalty included)
    penalized: bool = False    # clamped in at least one dimension during the last sweep

@dataclass
class Swarm:
    particles: List[Particle] = field(default_factory=list)
    gbest_x: Optional[np.ndarray] = None
    gbest_f: float = np.inf

class PSO(Optimizer):
    """
    Particle Swarm Optimisation (continuous, gbest topology)
    - inertia w, cognitive c1, social c2
    - positions clamped to the bounds; a clamped component loses its velocity
      and the particle's fitness is inflated by penalty_factor for that sweep
    - particles are updated one after another: an improved global best is
      visible to the particles that follow in the same sweep
    - r1, r2 drawn once per particle per sweep, shared by all dimensions
    """
    def __init__(self, bounds: Bounds, seed: Optional[int] = None, options: Optional[Dict] = None,
                 rng: Optional[np.random.Generator] = None, fitness: Fitness = rastrigin):
        super().__init__(bounds, seed, options, rng)
        opt = self.options

        self.pop: int = int(opt.get("pop", 30))
        self.iterations: int = int(opt.get("iterations", 100))
        self.w: float = float(opt.get("w", 0.9))
        self.c1: float = float(opt.get("c1", 1.3))
        self.c2: float = float(opt.get("c2", 1.1))
        self.penalty_factor: float = float(opt.get("penalty_factor", 10000.0))

        self.fitness: Fitness = fitness
        self._lo, self._hi = bounds_arrays(self.bounds)
        self.swarm: Swarm = Swarm()
        self.init_swarm()

    @classmethod
    def from_params(cls, params, rng: Optional[np.random.Generator] = None) -> "PSO":
        """Build an engine from an optimizer.config.PSOParams."""
        return cls(bounds=params.bounds(), seed=params.seed, options=params.options(), rng=rng)

    def init_swarm(self) -> Swarm:
        particles: List[Particle] = []
        for _ in range(self.pop):
            x = self.rng.uniform(self._lo, self._hi)
            v = self.rng.uniform(self._lo, self._hi)
            fx = self.fitness(x)
            particles.append(Particle(x=x, v=v, pbest_x=x.copy(), pbest_f=fx, f=fx))

        # global best starts from particle 0, not from a scan of the swarm;
        # better particles take over during the first sweep
        self.swarm = Swarm(particles=particles)
        if particles:
            self.swarm.gbest_x = particles[0].pbest_x.copy()
            self.swarm.gbest_f = particles[0].pbest_f

        self._evals_total = len(particles)
        self._iters = 0
        self._iter_best = np.inf
        self._iter_mean = np.inf
        self._iter_std = np.inf
        self._n_penalized = 0
        return self.swarm

    def _move(self, p: Particle, gbest_x: np.ndarray) -> None:
        r1 = self.rng.random()
        r2 = self.rng.random()

        p.v = self.w * p.v + self.c1 * r1 * (p.pbest_x - p.x) + self.c2 * r2 * (gbest_x - p.x)
        p.x, clamped = clamp_to_bounds(p.x + p.v, self._lo, self._hi)
        p.v = np.where(clamped, 0.0, p.v)
        p.penalized = bool(np.any(clamped))

    def step(self) -> None:
        s = self.swarm
        f_sweep = np.empty(len(s.particles), dtype=float)

        for i, p in enumerate(s.particles):
            self._move(p, s.gbest_x)

            fx = self.fitness(p.x)
            if p.penalized:
                fx += self.penalty_factor
            p.f = fx
            f_sweep[i] = fx

            if fx < p.pbest_f:
                p.pbest_x = p.x.copy()
                p.pbest_f = fx
            if fx < s.gbest_f:
                s.gbest_x = p.x.copy()
                s.gbest_f = fx

        if f_sweep.size:
            self._iter_best = float(np.min(f_sweep))
            self._iter_mean = float(np.mean(f_sweep))
            self._iter_std = float(np.std(f_sweep))
        self._n_penalized = sum(p.penalized for p in s.particles)
        self._evals_total += len(s.particles)
        self._iters += 1

    def run(self, iterations: Optional[int] = None,
            callback: Optional[Callable[[int, float], None]] = None) -> Dict:
        """
        Perform a fixed number of sweeps (no early exit).
        callback(iteration_index, gbest_f) is called after every sweep; it only
        observes the swarm, and an exception it raises aborts the run.
        """
        n = self.iterations if iterations is None else int(iterations)
        for _ in range(n):
            self.step()
            if callback is not None:
                callback(self._iters - 1, float(self.swarm.gbest_f))
        return self.best()

    def best(self):
        return {"x": self.swarm.gbest_x.copy(), "f": float(self.swarm.gbest_f)}

    def state(self) -> Dict:
        return {
            "iter": self._iters,
            "evals_total": self._evals_total,
            "f_best": self._iter_best,
            "f_mean": self._iter_mean,
            "f_std": self._iter_std,
            "n_penalized": self._n_penalized,
            "gbest_f": float(self.swarm.gbest_f),
        }
