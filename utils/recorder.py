from __future__ import annotations

import csv
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]

# Fixed progress log in the working directory; every run appends to it.
DEFAULT_PROGRESS_LOG = Path("pso_progress.csv")


class ReportingIOError(OSError):
    """The progress log could not be opened or written. Fatal for the run."""


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def append_progress(path: PathLike, iteration: int, fitness: float) -> Path:
    """
    Append one record to the progress log:
        iteration, gbest_f

    No header row. The file is created if absent and never truncated, so
    repeated runs accumulate rows in the same log.
    """
    path = Path(path)
    try:
        _ensure_dir(path.parent)
        with path.open("a", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([int(iteration), float(fitness)])
    except OSError as e:
        raise ReportingIOError(f"Error writing progress log {path}: {e}") from e
    return path


class ProgressLog:
    """
    Progress sink for PSO.run(): call with (iteration, gbest_f) after each sweep.
    """
    def __init__(self, path: PathLike = DEFAULT_PROGRESS_LOG):
        self.path = Path(path)
        self.rows_written = 0

    def __call__(self, iteration: int, fitness: float) -> None:
        append_progress(self.path, iteration, fitness)
        self.rows_written += 1
