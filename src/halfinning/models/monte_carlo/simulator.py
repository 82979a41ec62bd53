"""Monte Carlo half-inning simulator over an estimated base/outs chain.

Each half-inning is a walk from a starting state to the absorbing state.  One
uniform draw per step selects the next state from the current row of ``P``,
and the run matrix ``R`` credits the runs scored on that step.  Repeating the
walk gives the run distribution for a starting state.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

import numpy as np
from joblib import Parallel, delayed
from tqdm import tqdm

from halfinning.config import settings
from halfinning.constants import ABSORBING_STATE
from halfinning.errors import MalformedChainError, SimulationError
from halfinning.models import HalfInning
from halfinning.models.markov.chain import MarkovChain
from halfinning.models.markov.runs import build_run_matrix
from halfinning.models.markov.states import State, as_state, labels, state_label
from halfinning.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class SimParams:
    """Tunable parameters for the half-inning simulator."""

    n_sims: int = 1000
    max_steps: int = 1000
    n_jobs: int = 1


class HalfInningSimulator:
    """Simulate half-innings from a chain and its aligned run matrix."""

    def __init__(
        self,
        chain: MarkovChain,
        runs: np.ndarray | None = None,
        params: SimParams | None = None,
    ):
        self.chain = chain
        self.params = params or SimParams(
            n_sims=settings.n_simulations,
            max_steps=settings.max_half_inning_steps,
            n_jobs=settings.n_jobs,
        )
        self.runs = build_run_matrix(chain.states) if runs is None else np.asarray(runs)
        if self.runs.shape != chain.probs.shape:
            raise MalformedChainError(
                f"run matrix shape {self.runs.shape} does not match chain {chain.probs.shape}"
            )
        self._check_absorption()
        self._cumulative = np.cumsum(chain.probs, axis=1)
        self._last_positive = np.array([np.flatnonzero(row > 0)[-1] for row in chain.probs])
        self._absorbing = chain.position(ABSORBING_STATE)

    def _check_absorption(self) -> None:
        """Every transient state must be able to reach three outs."""
        n = len(self.chain)
        a = self.chain.index[ABSORBING_STATE]
        reaches = np.zeros(n, dtype=bool)
        reaches[a] = True
        incoming = [np.flatnonzero(self.chain.probs[:, j] > 0) for j in range(n)]
        queue = deque([a])
        while queue:
            j = queue.popleft()
            for i in incoming[j]:
                if not reaches[i]:
                    reaches[i] = True
                    queue.append(i)
        if not reaches.all():
            stuck = labels([self.chain.states[i] for i in np.flatnonzero(~reaches)])
            raise MalformedChainError(f"states that never reach three outs: {stuck}")

    def _next(self, i: int, rng: np.random.Generator) -> int:
        j = int(np.searchsorted(self._cumulative[i], rng.random(), side="right"))
        if j >= len(self.chain):
            # the row total rounded below the draw
            j = int(self._last_positive[i])
        return j

    def simulate(self, start: State | str, rng: np.random.Generator) -> HalfInning:
        """Play one half-inning from ``start`` until the third out."""
        i = self.chain.position(start)
        trace = [self.chain.states[i]]
        total = 0
        steps = 0
        while i != self._absorbing:
            if steps >= self.params.max_steps:
                raise SimulationError(
                    f"half-inning from {state_label(trace[0])!r} exceeded "
                    f"{self.params.max_steps} plays"
                )
            j = self._next(i, rng)
            total += int(self.runs[i, j])
            trace.append(self.chain.states[j])
            i = j
            steps += 1
        return HalfInning(runs=total, trace=tuple(trace))

    def sample_runs(
        self, start: State | str, rng: np.random.Generator, n_sims: int | None = None
    ) -> np.ndarray:
        """Run distribution: runs scored in each of ``n_sims`` half-innings."""
        n = self.params.n_sims if n_sims is None else n_sims
        return np.array([self.simulate(start, rng).runs for _ in range(n)], dtype=int)

    def sample_all_states(
        self,
        seed: int | np.random.SeedSequence | None = None,
        n_sims: int | None = None,
        n_jobs: int | None = None,
    ) -> dict[str, np.ndarray]:
        """Run distributions for every transient state in the chain.

        Each state draws from its own child stream of ``seed``, so the output
        does not depend on ``n_jobs``.
        """
        n = self.params.n_sims if n_sims is None else n_sims
        jobs = n_jobs or self.params.n_jobs
        if seed is None:
            seed = settings.random_seed
        seq = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)

        starts = list(self.chain.transient_states)
        streams = seq.spawn(len(starts))
        log.info("sampling_run_distributions", states=len(starts), n_sims=n, n_jobs=jobs)

        if jobs == 1:
            samples = [
                self.sample_runs(s, np.random.default_rng(stream), n)
                for s, stream in tqdm(
                    list(zip(starts, streams)), desc="States", disable=len(starts) < 2
                )
            ]
        else:
            samples = Parallel(n_jobs=jobs)(
                delayed(self.sample_runs)(s, np.random.default_rng(stream), n)
                for s, stream in zip(starts, streams)
            )
        return {state_label(s): runs for s, runs in zip(starts, samples)}


def simulate_half_inning(
    chain: MarkovChain,
    runs: np.ndarray,
    start: State | str,
    rng: np.random.Generator,
) -> HalfInning:
    """Single half-inning walk; see ``HalfInningSimulator.simulate``."""
    return HalfInningSimulator(chain, runs).simulate(as_state(start), rng)


def sample_run_distribution(
    chain: MarkovChain,
    runs: np.ndarray,
    start: State | str,
    n_sims: int,
    rng: np.random.Generator,
) -> np.ndarray:
    return HalfInningSimulator(chain, runs).sample_runs(start, rng, n_sims)
