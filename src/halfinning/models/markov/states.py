"""Base/outs state encoding.

A transient state is stored as ``outs * 8 + mask`` where ``mask`` carries one
bit per occupied base (first=1, second=2, third=4).  Code 24 is the absorbing
three-outs state.  The human-readable label is ``OBBB`` (outs followed by
first/second/third occupancy flags), or ``"3"`` for the absorbing state.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd

from halfinning.constants import (
    ABSORBING_LABEL,
    ABSORBING_STATE,
    BASE_BITS,
    BASE_CONFIGS,
    DEST_COLUMNS,
    N_TRANSIENT_STATES,
    OUTS_PER_INNING,
    RUNNER_ID_COLUMNS,
)
from halfinning.errors import UnknownStateError

State = int


def encode_state(outs: int, on_first: bool, on_second: bool, on_third: bool) -> State:
    """Build a state code; three or more outs collapse to the absorbing state."""
    if outs < 0:
        raise UnknownStateError(f"negative outs: {outs}")
    if outs >= OUTS_PER_INNING:
        return ABSORBING_STATE
    mask = (
        (BASE_BITS[1] if on_first else 0)
        | (BASE_BITS[2] if on_second else 0)
        | (BASE_BITS[3] if on_third else 0)
    )
    return outs * 8 + mask


def is_absorbing(state: State) -> bool:
    return state == ABSORBING_STATE


def outs_of(state: State) -> int:
    if state == ABSORBING_STATE:
        return OUTS_PER_INNING
    return state // 8


def runners_of(state: State) -> tuple[int, int, int]:
    """Occupancy flags for (first, second, third)."""
    if state == ABSORBING_STATE:
        raise UnknownStateError("the absorbing state has no base configuration")
    mask = state % 8
    return tuple(int(bool(mask & BASE_BITS[b])) for b in (1, 2, 3))


def state_label(state: State) -> str:
    if state == ABSORBING_STATE:
        return ABSORBING_LABEL
    if not 0 <= state < N_TRANSIENT_STATES:
        raise UnknownStateError(f"invalid state code: {state!r}")
    first, second, third = runners_of(state)
    return f"{outs_of(state)}{first}{second}{third}"


def parse_state(label: str) -> State:
    """Parse an ``OBBB`` label (or ``"3"``) into a state code."""
    if label == ABSORBING_LABEL:
        return ABSORBING_STATE
    if len(label) != 4 or label[0] not in "012" or any(c not in "01" for c in label[1:]):
        raise UnknownStateError(f"invalid state label: {label!r}")
    return encode_state(int(label[0]), label[1] == "1", label[2] == "1", label[3] == "1")


def as_state(state: State | str) -> State:
    """Accept either a state code or a label."""
    if isinstance(state, str):
        return parse_state(state)
    state = int(state)
    if not 0 <= state <= ABSORBING_STATE:
        raise UnknownStateError(f"invalid state code: {state!r}")
    return state


# Transient states in reporting order: outs-major, then BASE_CONFIGS
TRANSIENT_STATES: list[State] = [
    parse_state(f"{outs}{bases}") for outs in range(OUTS_PER_INNING) for bases in BASE_CONFIGS
]
ALL_STATES: list[State] = TRANSIENT_STATES + [ABSORBING_STATE]


def encode_play(
    outs: int,
    outs_on_play: int,
    runners: Sequence[bool],
    bat_dest: int,
    runner_dests: Sequence[int],
) -> tuple[State, State]:
    """Encode a single batted-ball event as a (before, after) state pair.

    ``runners`` holds the occupancy of first/second/third before the play and
    ``runner_dests`` the destination code of the runner who started on each of
    those bases (0 when there was none).  A base is occupied after the play when
    the batter's or any runner's destination equals it.
    """
    before = encode_state(outs, *(bool(r) for r in runners))
    dests = [bat_dest, *runner_dests]
    after = encode_state(
        outs + outs_on_play,
        *(any(d == base for d in dests) for base in (1, 2, 3)),
    )
    return before, after


def encode_events(events: pd.DataFrame) -> pd.DataFrame:
    """Vectorized ``encode_play`` over a frame of normalized event records.

    Adds integer ``state`` and ``new_state`` columns.
    """
    df = events.copy()
    occupied = [df[col].notna() & (df[col].astype(str).str.strip() != "") for col in RUNNER_ID_COLUMNS]
    outs = df["outs_ct"].astype(int).to_numpy()
    new_outs = outs + df["event_outs_ct"].astype(int).to_numpy()

    before_mask = np.zeros(len(df), dtype=int)
    for base, flag in zip((1, 2, 3), occupied):
        before_mask |= np.where(flag.to_numpy(), BASE_BITS[base], 0)

    dests = df[DEST_COLUMNS].fillna(0).astype(int).to_numpy()
    after_mask = np.zeros(len(df), dtype=int)
    for base in (1, 2, 3):
        after_mask |= np.where((dests == base).any(axis=1), BASE_BITS[base], 0)

    df["state"] = np.where(outs >= OUTS_PER_INNING, ABSORBING_STATE, outs * 8 + before_mask)
    df["new_state"] = np.where(
        new_outs >= OUTS_PER_INNING, ABSORBING_STATE, new_outs * 8 + after_mask
    )
    return df


def labels(states: Sequence[State]) -> list[str]:
    return [state_label(s) for s in states]
