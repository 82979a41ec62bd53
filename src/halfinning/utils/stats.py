"""Statistical helpers for comparing run distributions."""

from __future__ import annotations

import numpy as np


def pooled_sd(a: np.ndarray, b: np.ndarray) -> float:
    """Pooled standard deviation of two samples.

    Formula: sqrt(((n_a - 1) s_a^2 + (n_b - 1) s_b^2) / (n_a + n_b - 2))
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    dof = len(a) + len(b) - 2
    if dof <= 0:
        return 0.0
    ss = (len(a) - 1) * a.var(ddof=1) if len(a) > 1 else 0.0
    ss += (len(b) - 1) * b.var(ddof=1) if len(b) > 1 else 0.0
    return float(np.sqrt(ss / dof))


def game_scale(per_inning: float, innings: int = 9) -> float:
    """Project a per-inning quantity to a full game by linear scaling.

    Used for both the mean difference and the pooled SD.  For the SD this is
    a deliberately rough approximation; innings treated as independent draws
    would scale by ``sqrt(innings)`` instead.
    """
    return per_inning * innings


def frobenius_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Frobenius norm of the element-wise difference of two matrices."""
    return float(np.linalg.norm(np.asarray(a) - np.asarray(b), ord="fro"))
