# experiments/run_opt.py
import argparse
import sys
from typing import Callable, Dict, List, Optional

from optimizer.config import ConfigError, PSOParams, load_params
from optimizer.pso import PSO
from utils.recorder import DEFAULT_PROGRESS_LOG, ProgressLog, ReportingIOError
from experiments.plotting import plot_convergence  # for the optional --plot figure


def print_params(params: PSOParams):
    print("Rastrigin using Particle Swarm Optimization")
    print("===========================================\n")
    print("Parameters:")
    print(f"  Number of particles: {params.n_particles}")
    print(f"  Number of iterations: {params.iterations}")
    print(f"  Inertia weight: {params.w}")
    print(f"  Cognitive weight: {params.c1}")
    print(f"  Social weight: {params.c2}")
    print(f"  Lower and Upper bounds: [{params.lower_bound}, {params.upper_bound}]")
    print()


def print_best(best: Dict):
    print(f"Best solution found at: fitness = {best['f']}")
    for i, xi in enumerate(best["x"], 1):
        print(f"x{i}: {xi}")


def optimize(opt: PSO, sink: Optional[Callable[[int, float], None]] = None,
             report_every: int = 100, iterations: Optional[int] = None) -> Dict:
    """
    Run the engine for its fixed number of sweeps, feeding every
    (iteration, gbest_f) to `sink` and printing every `report_every`-th one.
    """
    def on_iteration(it: int, gbest_f: float):
        if report_every > 0 and it % report_every == 0:
            print(f"[Iter {it}] gbest: {gbest_f}")
        if sink is not None:
            sink(it, gbest_f)

    return opt.run(iterations=iterations, callback=on_iteration)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Minimise the Rastrigin function with PSO")
    parser.add_argument("--config", type=str, default=None, help="JSON file with PSO parameters")
    parser.add_argument("--particles", type=int, default=None, help="Number of particles")
    parser.add_argument("--iters", type=int, default=None, help="Number of iterations")
    parser.add_argument("--D", type=int, default=None, help="Dimension of Rastrigin")
    parser.add_argument("--w", type=float, default=None, help="Inertia weight")
    parser.add_argument("--c1", type=float, default=None, help="Cognitive weight")
    parser.add_argument("--c2", type=float, default=None, help="Social weight")
    parser.add_argument("--lower", type=float, default=None, help="Lower bound of the search space")
    parser.add_argument("--upper", type=float, default=None, help="Upper bound of the search space")
    parser.add_argument("--penalty", type=float, default=None, help="Penalty for out-of-bounds particles")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log", type=str, default=str(DEFAULT_PROGRESS_LOG),
                        help="Progress CSV (appended to, never truncated)")
    parser.add_argument("--report_every", type=int, default=100, help="Print gbest every N iterations (0 disables)")
    parser.add_argument("--plot", action="store_true", help="Save a convergence plot of this run")
    return parser


def params_from_args(args: argparse.Namespace) -> PSOParams:
    base = load_params(args.config) if args.config else PSOParams()
    return PSOParams.from_options(dict(
        n_particles=args.particles, iterations=args.iters, dim=args.D,
        w=args.w, c1=args.c1, c2=args.c2,
        lower_bound=args.lower, upper_bound=args.upper,
        penalty_factor=args.penalty, seed=args.seed,
    ), base=base)


def run(argv: Optional[List[str]] = None) -> Dict:
    """Parse the command line, run one experiment and return its best solution."""
    args = build_parser().parse_args(argv)

    try:
        params = params_from_args(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        raise SystemExit(1)

    print_params(params)

    opt = PSO.from_params(params)
    log = ProgressLog(args.log)
    try:
        best = optimize(opt, sink=log, report_every=args.report_every)
    except ReportingIOError as e:
        print(f"Aborting run: {e}", file=sys.stderr)
        raise SystemExit(1)

    print_best(best)

    if args.plot:
        if log.rows_written == 0:
            print("No iterations recorded, skipping convergence plot")
        else:
            png = plot_convergence(log.path)
            print("Saved convergence plot:", png)

    return best


def main(argv: Optional[List[str]] = None):
    run(argv)


if __name__ == "__main__":
    main()
