"""Compare Markov chains estimated on two partitions of the same events.

The usual split is by batting side: visiting teams bat in the top half and
home teams in the bottom half.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from halfinning.config import settings
from halfinning.models import RunSummary
from halfinning.models.markov.chain import MarkovChain, estimate_chain
from halfinning.models.markov.states import ALL_STATES, State, as_state, labels, state_label
from halfinning.models.monte_carlo.simulator import HalfInningSimulator, SimParams
from halfinning.utils.logging import get_logger
from halfinning.utils.stats import frobenius_distance, game_scale, pooled_sd

log = get_logger(__name__)


@dataclass
class ChainComparison:
    """Distance between two chains and their simulated run distributions."""

    names: tuple[str, str]
    states: list[str]
    distance: float
    start_state: str
    summaries: tuple[RunSummary, RunSummary]
    pooled_sd: float
    innings: int
    runs: tuple[np.ndarray, np.ndarray] = field(repr=False, default=(None, None))

    @property
    def mean_difference(self) -> float:
        """First minus second, runs per half-inning."""
        return self.summaries[0].mean - self.summaries[1].mean

    @property
    def game_difference(self) -> float:
        return game_scale(self.mean_difference, self.innings)

    @property
    def game_sd(self) -> float:
        return game_scale(self.pooled_sd, self.innings)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {"partition": s_name, "n": s.n, "mean": s.mean, "sd": s.sd}
                for s_name, s in zip(self.names, self.summaries)
            ]
        )


def common_states(first: MarkovChain, second: MarkovChain) -> list[State]:
    """Union of both chains' states in canonical order, absorbing last."""
    present = set(first.states) | set(second.states)
    return [s for s in ALL_STATES if s in present]


def matrix_distance(first: MarkovChain, second: MarkovChain) -> float:
    """Frobenius distance after aligning both chains to a common ordering.

    A state missing from one chain contributes a zero row and column there.
    """
    states = common_states(first, second)
    missing = set(first.states) ^ set(second.states)
    if missing:
        log.warning("chains_cover_different_states", states=labels(sorted(missing)))
    return frobenius_distance(first.aligned(states), second.aligned(states))


def compare_chains(
    first: MarkovChain,
    second: MarkovChain,
    start: State | str = "0000",
    n_sims: int | None = None,
    seed: int | None = None,
    names: tuple[str, str] = ("away", "home"),
    innings: int | None = None,
) -> ChainComparison:
    """Compare two estimated chains by matrix distance and simulated runs."""
    n = settings.n_simulations if n_sims is None else n_sims
    seq = np.random.SeedSequence(settings.random_seed if seed is None else seed)
    streams = seq.spawn(2)
    params = SimParams(n_sims=n, max_steps=settings.max_half_inning_steps)

    start_state = as_state(start)
    samples = tuple(
        HalfInningSimulator(chain, params=params).sample_runs(
            start_state, np.random.default_rng(stream)
        )
        for chain, stream in zip((first, second), streams)
    )
    label = state_label(start_state)
    result = ChainComparison(
        names=names,
        states=labels(common_states(first, second)),
        distance=matrix_distance(first, second),
        start_state=label,
        summaries=tuple(RunSummary.from_runs(label, s) for s in samples),
        pooled_sd=pooled_sd(*samples),
        innings=innings or settings.innings_per_game,
        runs=samples,
    )
    log.info(
        "chains_compared",
        distance=round(result.distance, 4),
        mean_difference=round(result.mean_difference, 4),
        pooled_sd=round(result.pooled_sd, 4),
    )
    return result


def compare_partitions(
    transitions: pd.DataFrame,
    by: str = "bat_home_id",
    names: tuple[str, str] = ("away", "home"),
    values: tuple[object, object] = (0, 1),
    **kwargs,
) -> ChainComparison:
    """Estimate one chain per value of ``by`` and compare them."""
    chains = [
        estimate_chain(transitions[transitions[by] == value]) for value in values
    ]
    return compare_chains(chains[0], chains[1], names=names, **kwargs)
