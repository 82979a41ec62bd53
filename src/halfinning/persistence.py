"""Artifact persistence.

Directory structure::

    output/{partition}/chain.joblib            — estimated chain (for reuse)
    output/{partition}/transition_matrix.csv   — labeled P
    output/{partition}/run_matrix.csv          — labeled R
    output/{partition}/run_expectancy.csv      — 8 x 3 table, 2 decimals
    output/{partition}/run_distributions.csv   — long format samples
"""

from __future__ import annotations

from pathlib import Path

import joblib
import numpy as np
import pandas as pd

from halfinning.config import settings
from halfinning.models.markov.chain import MarkovChain
from halfinning.models.markov.runs import run_matrix_frame
from halfinning.utils.logging import get_logger

log = get_logger(__name__)


def artifact_dir(partition: str, root: Path | None = None) -> Path:
    """Return (and create) the directory for a partition's artifacts."""
    path = (root or settings.output_dir) / partition
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_chain(chain: MarkovChain, directory: Path) -> Path:
    path = directory / "chain.joblib"
    joblib.dump(
        {"states": chain.states, "probs": np.asarray(chain.probs), "counts": chain.counts},
        path,
    )
    chain.to_frame().to_csv(directory / "transition_matrix.csv")
    log.info("chain_saved", path=str(path))
    return path


def load_chain(directory: Path) -> MarkovChain:
    """Load a chain saved by ``save_chain``; validation runs again on load."""
    data = joblib.load(directory / "chain.joblib")
    return MarkovChain(states=data["states"], probs=data["probs"], counts=data["counts"])


def save_run_matrix(chain: MarkovChain, directory: Path) -> Path:
    path = directory / "run_matrix.csv"
    run_matrix_frame(chain.states).to_csv(path)
    log.info("run_matrix_saved", path=str(path))
    return path


def save_run_expectancy(table: pd.DataFrame, directory: Path) -> Path:
    path = directory / "run_expectancy.csv"
    table.round(2).to_csv(path, float_format="%.2f")
    log.info("run_expectancy_saved", path=str(path))
    return path


def save_run_distributions(distributions: dict[str, np.ndarray], directory: Path) -> Path:
    path = directory / "run_distributions.csv"
    long = pd.DataFrame(
        [(state, int(r)) for state, runs in distributions.items() for r in runs],
        columns=["start_state", "runs"],
    )
    long.to_csv(path, index=False)
    log.info("run_distributions_saved", path=str(path), rows=len(long))
    return path


def load_run_distributions(directory: Path) -> dict[str, np.ndarray]:
    long = pd.read_csv(directory / "run_distributions.csv", dtype={"start_state": str})
    return {
        state: group["runs"].to_numpy()
        for state, group in long.groupby("start_state", sort=False)
    }
