"""Run-expectancy table: mean runs to end of inning by base configuration x outs."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import numpy as np
import pandas as pd

from halfinning.constants import BASE_CONFIGS, OUTS_PER_INNING
from halfinning.models.markov.states import as_state, state_label


def run_expectancy_table(
    distributions: Mapping[str, Sequence[float] | np.ndarray | float],
    decimals: int = 2,
) -> pd.DataFrame:
    """Reshape per-state run means into an 8 x 3 table.

    ``distributions`` maps state labels (or codes) to a run distribution or to
    an already computed mean.  Rows follow ``BASE_CONFIGS``, columns are outs
    0-2.  States without data are left as NaN.
    """
    means: dict[str, float] = {}
    for state, values in distributions.items():
        label = state_label(as_state(state))
        means[label] = float(np.mean(values))

    table = pd.DataFrame(
        [
            [means.get(f"{outs}{bases}", np.nan) for outs in range(OUTS_PER_INNING)]
            for bases in BASE_CONFIGS
        ],
        index=pd.Index(BASE_CONFIGS, name="bases"),
        columns=pd.Index(range(OUTS_PER_INNING), name="outs"),
    )
    return table.round(decimals)
