import numpy as np

def rastrigin(x: np.ndarray) -> float:
    """
    Rastrigin benchmark function.
    Global minimum at x = 0, f = 0. Highly multimodal, local minima near integer points.
    Defined for any finite input; bounds are the caller's concern.
    """
    x = np.asarray(x, dtype=float)
    return float(10.0 * x.size + np.sum(x * x - 10.0 * np.cos(2.0 * np.pi * x)))
