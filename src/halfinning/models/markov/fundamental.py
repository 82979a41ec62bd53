"""Fundamental matrix of the absorbing base/outs chain.

``N = (I - Q)^-1`` where ``Q`` is the transient block of ``P``.  ``N[i, j]``
is the expected number of visits to ``j`` before the third out when the
half-inning starts in ``i``.  Solved through an LU factorization rather than
an explicit inverse.
"""

from __future__ import annotations

import warnings

import numpy as np
import pandas as pd
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

from halfinning.errors import SingularMatrixError
from halfinning.models.markov.chain import MarkovChain
from halfinning.models.markov.runs import build_run_matrix
from halfinning.models.markov.states import labels
from halfinning.utils.logging import get_logger

log = get_logger(__name__)

# Reciprocal condition numbers below this are treated as singular
_RCOND_FLOOR = 1e-12


def fundamental_matrix(chain: MarkovChain) -> pd.DataFrame:
    """Expected visits to each transient state before absorption."""
    states, q = chain.transient_block()
    a = np.eye(len(states)) - q

    with warnings.catch_warnings():
        warnings.simplefilter("error", LinAlgWarning)
        try:
            lu, piv = lu_factor(a)
        except (LinAlgWarning, ValueError) as e:
            raise SingularMatrixError(f"I - Q is singular: {e}") from e

    pivots = np.abs(np.diag(lu))
    if pivots.min() <= _RCOND_FLOOR * max(pivots.max(), 1.0):
        raise SingularMatrixError("I - Q is singular: zero pivot in LU factorization")

    n = lu_solve((lu, piv), np.eye(len(states)))
    if not np.all(np.isfinite(n)):
        raise SingularMatrixError("I - Q is singular: non-finite fundamental matrix")

    names = labels(states)
    log.info("fundamental_matrix_computed", states=len(states))
    return pd.DataFrame(n, index=names, columns=names)


def expected_plays(chain: MarkovChain) -> pd.Series:
    """Expected batted-ball events before the third out, by starting state."""
    n = fundamental_matrix(chain)
    return n.sum(axis=1).rename("plays")


def expected_runs(chain: MarkovChain, runs: np.ndarray | None = None) -> pd.Series:
    """Analytical run expectancy, ``N @ r`` with ``r_i = sum_j Q_ij R_ij``.

    Runs on the transition into the absorbing state are zero, so only the
    transient block contributes.
    """
    if runs is None:
        runs = build_run_matrix(chain.states)
    states, q = chain.transient_block()
    keep = [chain.index[s] for s in states]
    per_play = (q * np.asarray(runs)[np.ix_(keep, keep)]).sum(axis=1)
    n = fundamental_matrix(chain)
    return pd.Series(n.to_numpy() @ per_play, index=n.index, name="runs")
