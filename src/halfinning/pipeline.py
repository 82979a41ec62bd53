"""End-to-end model pipeline for one partition of the event data.

Pipeline steps:
  1. Estimate the transition matrix from encoded transitions
  2. Build the aligned run matrix
  3. Simulate run distributions from every transient state
  4. Reduce to the run-expectancy table
  5. Fundamental-matrix analysis (expected plays, analytical expectancy)
  6. Persist artifacts
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from halfinning import persistence
from halfinning.config import settings
from halfinning.models.markov.chain import MarkovChain, estimate_chain
from halfinning.models.markov.expectancy import run_expectancy_table
from halfinning.models.markov.fundamental import expected_plays, expected_runs
from halfinning.models.markov.runs import build_run_matrix
from halfinning.models.monte_carlo.simulator import HalfInningSimulator, SimParams
from halfinning.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class PipelineResult:
    """Everything estimated for one partition."""

    partition: str
    chain: MarkovChain
    runs: np.ndarray
    distributions: dict[str, np.ndarray]
    expectancy: pd.DataFrame
    analytical: pd.DataFrame
    output_dir: Path | None = None


def run_pipeline(
    transitions: pd.DataFrame,
    partition: str = "all",
    n_sims: int | None = None,
    seed: int | None = None,
    n_jobs: int | None = None,
    save: bool = True,
    output_root: Path | None = None,
) -> PipelineResult:
    """Estimate, simulate and analyze the chain for one partition.

    Parameters
    ----------
    transitions : pd.DataFrame
        Filtered events with ``state`` / ``new_state`` columns.
    partition : str
        Artifact subdirectory name (``all``, ``home``, ``away``).
    """
    log.info("pipeline_starting", partition=partition, transitions=len(transitions))

    # Step 1 — transition matrix
    chain = estimate_chain(transitions)

    # Step 2 — run matrix
    runs = build_run_matrix(chain.states)

    # Step 3 — run distributions
    params = SimParams(
        n_sims=settings.n_simulations if n_sims is None else n_sims,
        max_steps=settings.max_half_inning_steps,
        n_jobs=n_jobs or settings.n_jobs,
    )
    sim = HalfInningSimulator(chain, runs, params)
    distributions = sim.sample_all_states(seed=seed)

    # Step 4 — run expectancy
    expectancy = run_expectancy_table(distributions)

    # Step 5 — analytical cross-check
    analytical = pd.concat(
        [expected_runs(chain, runs), expected_plays(chain)], axis=1
    )
    simulated = pd.Series({s: float(np.mean(r)) for s, r in distributions.items()})
    analytical["simulated_runs"] = simulated.reindex(analytical.index)

    result = PipelineResult(
        partition=partition,
        chain=chain,
        runs=runs,
        distributions=distributions,
        expectancy=expectancy,
        analytical=analytical,
    )

    # Step 6 — persist
    if save:
        directory = persistence.artifact_dir(partition, output_root)
        persistence.save_chain(chain, directory)
        persistence.save_run_matrix(chain, directory)
        persistence.save_run_expectancy(expectancy, directory)
        persistence.save_run_distributions(distributions, directory)
        result.output_dir = directory

    log.info("pipeline_complete", partition=partition, states=len(chain))
    return result
