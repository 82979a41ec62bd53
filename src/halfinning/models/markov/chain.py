"""Empirical transition matrix estimation for the base/outs Markov chain.

Rows and columns are ordered by how often each state appears as a starting
state (most frequent first), with the absorbing state appended last.  The
order is carried explicitly in ``MarkovChain.states`` so consumers never
depend on positions.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from halfinning.config import settings
from halfinning.constants import ABSORBING_STATE
from halfinning.errors import MalformedChainError, UnknownStateError
from halfinning.models.markov.states import State, as_state, labels, state_label
from halfinning.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class MarkovChain:
    """Row-stochastic transition matrix with an explicit state ordering."""

    states: tuple[State, ...]
    probs: np.ndarray
    counts: tuple[int, ...] = ()
    index: dict[State, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", tuple(int(s) for s in self.states))
        probs = np.array(self.probs, dtype=float)
        probs.setflags(write=False)
        object.__setattr__(self, "probs", probs)
        object.__setattr__(self, "index", {s: i for i, s in enumerate(self.states)})
        self._validate()

    def _validate(self) -> None:
        n = len(self.states)
        if len(self.index) != n:
            raise MalformedChainError("duplicate states in chain ordering")
        if self.probs.shape != (n, n):
            raise MalformedChainError(
                f"matrix shape {self.probs.shape} does not match {n} states"
            )
        if ABSORBING_STATE not in self.index:
            raise MalformedChainError("chain has no absorbing state")
        if not np.all(np.isfinite(self.probs)) or np.any(self.probs < 0):
            raise MalformedChainError("transition probabilities must be finite and >= 0")

        row_sums = self.probs.sum(axis=1)
        bad = np.flatnonzero(np.abs(row_sums - 1.0) > settings.row_sum_tolerance)
        if bad.size:
            rows = {state_label(self.states[i]): float(row_sums[i]) for i in bad}
            raise MalformedChainError(f"rows do not sum to 1: {rows}")

        a = self.index[ABSORBING_STATE]
        expected = np.zeros(n)
        expected[a] = 1.0
        if not np.array_equal(self.probs[a], expected):
            raise MalformedChainError("absorbing row must put all mass on itself")

    def __len__(self) -> int:
        return len(self.states)

    def __contains__(self, state: State | str) -> bool:
        try:
            return as_state(state) in self.index
        except UnknownStateError:
            return False

    @property
    def labels(self) -> list[str]:
        return labels(self.states)

    @property
    def transient_states(self) -> tuple[State, ...]:
        return tuple(s for s in self.states if s != ABSORBING_STATE)

    def position(self, state: State | str) -> int:
        s = as_state(state)
        try:
            return self.index[s]
        except KeyError:
            raise UnknownStateError(
                f"unknown state {state_label(s)!r}: not observed as a starting state"
            ) from None

    def row(self, state: State | str) -> np.ndarray:
        """Next-state probabilities from ``state`` in chain order."""
        return self.probs[self.position(state)]

    def probability(self, state0: State | str, state1: State | str) -> float:
        return float(self.probs[self.position(state0), self.position(state1)])

    def transient_block(self) -> tuple[tuple[State, ...], np.ndarray]:
        """The transient-to-transient sub-matrix ``Q`` and its state order."""
        keep = [i for i, s in enumerate(self.states) if s != ABSORBING_STATE]
        return tuple(self.states[i] for i in keep), self.probs[np.ix_(keep, keep)]

    def aligned(self, states: Sequence[State]) -> np.ndarray:
        """Matrix reindexed to ``states``; rows/columns missing here are zero."""
        out = np.zeros((len(states), len(states)))
        pos = [self.index.get(int(s)) for s in states]
        for i, pi in enumerate(pos):
            if pi is None:
                continue
            for j, pj in enumerate(pos):
                if pj is not None:
                    out[i, j] = self.probs[pi, pj]
        return out

    def to_frame(self) -> pd.DataFrame:
        names = self.labels
        return pd.DataFrame(self.probs, index=pd.Index(names, name="state"), columns=names)


def transitions_frame(pairs: pd.DataFrame | Iterable[tuple[State | str, State | str]]) -> pd.DataFrame:
    """Normalize (before, after) pairs into a ``state``/``new_state`` code frame."""
    if isinstance(pairs, pd.DataFrame):
        df = pairs[["state", "new_state"]]
    else:
        df = pd.DataFrame(list(pairs), columns=["state", "new_state"])
    return pd.DataFrame(
        {
            "state": [as_state(s) for s in df["state"]],
            "new_state": [as_state(s) for s in df["new_state"]],
        },
        dtype=int,
    )


def estimate_chain(
    pairs: pd.DataFrame | Iterable[tuple[State | str, State | str]],
    drop_dead_ends: bool | None = None,
) -> MarkovChain:
    """Estimate the transition matrix by frequency counting.

    Parameters
    ----------
    pairs : DataFrame or iterable of (before, after)
        One row per batted-ball event.  Duplicates are the frequency signal.
    drop_dead_ends : bool, optional
        Transitions into a state never observed as a starting state make the
        chain undefined and raise ``MalformedChainError``.  With ``True`` they
        are removed and the affected rows re-estimated from the remaining
        transitions.  Defaults to ``settings.drop_dead_end_transitions``.

    Returns
    -------
    MarkovChain  – ordered by descending starting-state frequency, absorbing last.
    """
    df = transitions_frame(pairs)
    df = df[df["state"] != ABSORBING_STATE]
    if df.empty:
        raise MalformedChainError("no transitions to estimate from")

    drop_dead_ends = (
        settings.drop_dead_end_transitions if drop_dead_ends is None else drop_dead_ends
    )
    starts = set(df["state"].unique())
    dead_end = ~(df["new_state"].isin(starts) | (df["new_state"] == ABSORBING_STATE))
    if dead_end.any():
        missing = labels(sorted(df.loc[dead_end, "new_state"].unique()))
        if not drop_dead_ends:
            raise MalformedChainError(
                f"transitions into states never observed as a starting state: {missing}"
            )
        log.warning(
            "dropping_transitions_to_unobserved_states",
            states=missing,
            rows=int(dead_end.sum()),
        )
        # a state may lose every outgoing transition; repeat until stable
        return estimate_chain(df[~dead_end], drop_dead_ends=True)

    totals = df.groupby("state").size()
    joint = df.groupby(["state", "new_state"]).size()

    order = sorted(totals.index, key=lambda s: (-totals[s], s))
    states = [int(s) for s in order] + [ABSORBING_STATE]
    index = {s: i for i, s in enumerate(states)}

    n = len(states)
    probs = np.zeros((n, n))
    for (s0, s1), count in joint.items():
        probs[index[s0], index[s1]] = count / totals[s0]
    probs[index[ABSORBING_STATE], index[ABSORBING_STATE]] = 1.0

    chain = MarkovChain(
        states=tuple(states),
        probs=probs,
        counts=tuple(int(totals[s]) for s in order) + (0,),
    )
    log.info("chain_estimated", states=n, transitions=len(df))
    return chain
