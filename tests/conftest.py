"""Shared pytest fixtures for halfinning tests."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from halfinning.data.events import filter_events, prepare_events
from halfinning.models.markov.chain import MarkovChain, estimate_chain


def play(
    game_id: str,
    inning: int,
    side: int,
    outs: int,
    outs_on_play: int,
    runners: tuple[str, str, str] = ("", "", ""),
    dests: tuple[int, int, int, int] = (0, 0, 0, 0),
    batted: bool = True,
) -> dict:
    """One normalized cwevent row."""
    return {
        "game_id": game_id,
        "inn_ct": inning,
        "bat_home_id": side,
        "outs_ct": outs,
        "event_outs_ct": outs_on_play,
        "bat_event_fl": "T" if batted else "F",
        "base1_run_id": runners[0],
        "base2_run_id": runners[1],
        "base3_run_id": runners[2],
        "bat_dest_id": dests[0],
        "run1_dest_id": dests[1],
        "run2_dest_id": dests[2],
        "run3_dest_id": dests[3],
    }


def three_up_three_down(game_id: str, inning: int, side: int) -> list[dict]:
    return [play(game_id, inning, side, o, 1) for o in range(3)]


def solo_homer_inning(game_id: str, inning: int, side: int) -> list[dict]:
    """Solo home run, then three outs: 0000->0000, 0000->1000, 1000->2000, 2000->3."""
    return [play(game_id, inning, side, 0, 0, dests=(4, 0, 0, 0))] + three_up_three_down(
        game_id, inning, side
    )


@pytest.fixture
def homer_transitions() -> pd.DataFrame:
    """P(0000 -> 0000) = 0.5 with one run; outs otherwise. Run expectancy from 0000 is 1."""
    pairs = [("0000", "0000"), ("0000", "1000"), ("1000", "2000"), ("2000", "3")] * 2
    return pd.DataFrame(pairs, columns=["state", "new_state"])


@pytest.fixture
def homer_chain(homer_transitions) -> MarkovChain:
    return estimate_chain(homer_transitions)


@pytest.fixture
def two_inning_chain() -> MarkovChain:
    """0000 -> 0100 or 3 with equal probability; 0100 -> 3."""
    return estimate_chain([("0000", "0100"), ("0100", "3"), ("0000", "3")])


@pytest.fixture
def sample_events() -> pd.DataFrame:
    """Two games' worth of normalized event rows with a mix of edge cases."""
    rows = []
    # Game 1: away solo homer inning, home 1-2-3 inning
    rows += solo_homer_inning("NYA202404010", 1, 0)
    rows += three_up_three_down("NYA202404010", 1, 1)
    # Away: single, pickoff throw (not batted), then three groundouts moving the runner up
    rows += [
        play("NYA202404010", 2, 0, 0, 0, dests=(1, 0, 0, 0)),
        play("NYA202404010", 2, 0, 0, 0, runners=("a", "", ""), dests=(0, 1, 0, 0), batted=False),
        play("NYA202404010", 2, 0, 0, 1, runners=("a", "", ""), dests=(0, 2, 0, 0)),
        play("NYA202404010", 2, 0, 1, 1, runners=("", "a", ""), dests=(0, 0, 3, 0)),
        play("NYA202404010", 2, 0, 2, 1, runners=("", "", "a"), dests=(0, 0, 0, 3)),
    ]
    # Walk-off style incomplete half-inning (only 1 out recorded)
    rows += [
        play("NYA202404010", 9, 1, 0, 1),
        play("NYA202404010", 9, 1, 1, 0, dests=(4, 0, 0, 0)),
    ]
    # Extra innings
    rows += three_up_three_down("NYA202404010", 10, 0)
    # Doubleheader nightcap: the 8th inning is an extra inning
    rows += three_up_three_down("NYA202404012", 8, 0)
    rows += three_up_three_down("NYA202404012", 7, 0)
    return prepare_events(pd.DataFrame(rows))


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(111653)


@pytest.fixture
def make_play():
    return play


@pytest.fixture
def sample_transitions(sample_events) -> pd.DataFrame:
    return filter_events(sample_events)
