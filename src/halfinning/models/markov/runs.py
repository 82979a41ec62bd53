"""Runs scored on a base/outs transition.

Every batted-ball event starts with ``runners + outs + 1`` occupants (the
batter included).  Whoever is not a runner or an out when the play is over
has scored, so::

    runs = (runners_0 + outs_0 + 1) - (runners_1 + outs_1)
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd

from halfinning.constants import ABSORBING_STATE
from halfinning.errors import UnknownStateError
from halfinning.models.markov.states import State, as_state, labels, outs_of, runners_of


def runs_on_transition(state0: State | str, state1: State | str) -> int:
    """Runs scored moving from ``state0`` to ``state1`` on one batted ball."""
    s0 = as_state(state0)
    s1 = as_state(state1)
    if s0 == ABSORBING_STATE or s1 == ABSORBING_STATE:
        raise UnknownStateError(
            "runs are undefined for transitions involving the absorbing state"
        )
    return (sum(runners_of(s0)) + outs_of(s0) + 1) - (sum(runners_of(s1)) + outs_of(s1))


def build_run_matrix(states: Sequence[State]) -> np.ndarray:
    """Run matrix aligned index-for-index with a chain ordered by ``states``.

    Transitions into or out of the absorbing state score zero.
    """
    n = len(states)
    runs = np.zeros((n, n), dtype=int)
    for i, s0 in enumerate(states):
        if s0 == ABSORBING_STATE:
            continue
        for j, s1 in enumerate(states):
            if s1 == ABSORBING_STATE:
                continue
            runs[i, j] = runs_on_transition(s0, s1)
    return runs


def run_matrix_frame(states: Sequence[State]) -> pd.DataFrame:
    """Labeled run matrix for reporting and persistence."""
    names = labels(states)
    return pd.DataFrame(
        build_run_matrix(states), index=pd.Index(names, name="state"), columns=names
    )
