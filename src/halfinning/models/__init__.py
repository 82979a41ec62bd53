"""Shared result types for the half-inning Markov model."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from halfinning.models.markov.states import State, labels


@dataclass(frozen=True)
class HalfInning:
    """One simulated half-inning: runs scored and every state visited."""

    runs: int
    trace: tuple[State, ...]

    @property
    def labels(self) -> list[str]:
        return labels(self.trace)


@dataclass
class RunSummary:
    """Moments of a run distribution for one starting state."""

    state: str
    n: int
    mean: float
    sd: float

    @classmethod
    def from_runs(cls, state: str, runs: np.ndarray) -> RunSummary:
        runs = np.asarray(runs, dtype=float)
        sd = float(runs.std(ddof=1)) if len(runs) > 1 else 0.0
        return cls(state=state, n=len(runs), mean=float(runs.mean()), sd=sd)
