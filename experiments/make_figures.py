import argparse
import sys
from typing import List, Optional

from experiments.plotting import plot_convergence, plot_convergence_overlay
from utils.recorder import DEFAULT_PROGRESS_LOG


def main(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--log", type=str, default=str(DEFAULT_PROGRESS_LOG), help="Progress CSV written by run_opt")
    ap.add_argument("--run", type=int, default=-1, help="Run index inside the log (-1 = latest)")
    ap.add_argument("--out", type=str, default=None, help="Output PNG path")
    ap.add_argument("--overlay", action="store_true", help="Overlay all runs instead of plotting one")
    args = ap.parse_args(argv)

    try:
        if args.overlay:
            out = plot_convergence_overlay(args.log, outpath=args.out)
        else:
            out = plot_convergence(args.log, outpath=args.out, run=args.run)
    except ValueError as e:
        print(f"Cannot plot: {e}", file=sys.stderr)
        raise SystemExit(1)
    print("Saved:", out)
    return out

if __name__ == "__main__":
    main()
