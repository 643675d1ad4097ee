import os
from typing import List

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt


def _ensure_dir(path: str):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

def read_progress_log(csv_path: str) -> pd.DataFrame:
    """
    Read the headerless progress log written by utils/recorder.py.

    Columns: iter, gbest_f, run. The log accumulates rows over many runs; a new
    run starts wherever the iteration index fails to increase.
    Raises ValueError for a missing or empty log and for malformed rows.
    """
    if not os.path.isfile(csv_path) or os.path.getsize(csv_path) == 0:
        raise ValueError(f"Progress log {csv_path} is missing or empty")
    df = pd.read_csv(csv_path, header=None, names=["iter", "gbest_f"])
    df["iter"] = pd.to_numeric(df["iter"], errors="coerce")
    df["gbest_f"] = pd.to_numeric(df["gbest_f"], errors="coerce")
    bad = df["iter"].isna() | df["gbest_f"].isna()
    if bad.any():
        lines = (df.index[bad] + 1).tolist()
        raise ValueError(f"Malformed rows in progress log {csv_path} at lines {lines}")
    df["iter"] = df["iter"].astype(int)
    df["run"] = (df["iter"].diff() <= 0).cumsum().astype(int)
    return df

def _select_run(df: pd.DataFrame, run: int) -> pd.DataFrame:
    runs: List[int] = sorted(df["run"].unique().tolist())
    try:
        chosen = runs[run]
    except IndexError:
        raise ValueError(f"Run {run} not in log ({len(runs)} runs recorded)") from None
    return df[df["run"] == chosen]

def plot_convergence(csv_path: str, outpath: str = None, run: int = -1):
    """
    Semilogy convergence curve of the global best for one run of the log
    (python-style index, default the most recent run).
    """
    df = read_progress_log(csv_path)
    sel = _select_run(df, run)

    fig = plt.figure()
    ax = plt.gca()
    vals = sel["gbest_f"]
    if (vals <= 0).any():
        ax.plot(sel["iter"], vals)
    else:
        ax.semilogy(sel["iter"], vals)
    ax.set_xlabel("Iteration")
    ax.set_ylabel("Global best fitness")
    ax.grid(True, which="both", linestyle=":")
    run_no = int(sel["run"].iloc[0])
    ax.set_title(f"Convergence (Rastrigin, run {run_no})")

    if outpath is None:
        base = os.path.splitext(csv_path)[0]
        outpath = f"{base}_run{run_no}_conv.png"
    _ensure_dir(outpath)
    fig.savefig(outpath, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return outpath

def plot_convergence_overlay(csv_path: str, outpath: str = None):
    """
    Overlay every run accumulated in the log on one plot.
    """
    df = read_progress_log(csv_path)

    fig = plt.figure()
    ax = plt.gca()
    positive = bool(np.all(df["gbest_f"] > 0))
    for _, sel in df.groupby("run"):
        if positive:
            ax.semilogy(sel["iter"], sel["gbest_f"], alpha=0.7)
        else:
            ax.plot(sel["iter"], sel["gbest_f"], alpha=0.7)
    ax.set_xlabel("Iteration")
    ax.set_ylabel("Global best fitness")
    ax.grid(True, which="both", linestyle=":")
    ax.set_title(f"Convergence overlay ({df['run'].nunique()} runs)")

    if outpath is None:
        outpath = os.path.splitext(csv_path)[0] + "_overlay.png"
    _ensure_dir(outpath)
    fig.savefig(outpath, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return outpath
