"""Tests for the closed-form runs-on-transition function."""

from __future__ import annotations

import numpy as np
import pytest

from halfinning.constants import ABSORBING_STATE
from halfinning.errors import UnknownStateError
from halfinning.models.markov.runs import build_run_matrix, run_matrix_frame, runs_on_transition
from halfinning.models.markov.states import ALL_STATES, parse_state


class TestRunsOnTransition:
    @pytest.mark.parametrize(
        "state0, state1, runs",
        [
            ("0000", "1000", 0),  # out, bases empty
            ("1000", "2000", 0),  # out, bases empty
            ("0000", "0100", 0),  # single
            ("0000", "0000", 1),  # solo home run
            ("0111", "0000", 4),  # grand slam
            ("2111", "2111", 1),  # bases-loaded walk/single
            ("0001", "1000", 1),  # sacrifice fly
            ("1110", "2010", 1),  # runner scores from second on a groundout
            ("0011", "0101", 1),  # single, runner from third scores, second to third
        ],
    )
    def test_known_transitions(self, state0, state1, runs):
        assert runs_on_transition(state0, state1) == runs

    def test_formula(self):
        # (runners0 + outs0 + 1) - (runners1 + outs1)
        assert runs_on_transition("0001", "1100") == (1 + 0 + 1) - (1 + 1)
        assert runs_on_transition("0001", "1100") == 0

    def test_impossible_transition_negative(self):
        # not a real play; the identity does not guard against it
        assert runs_on_transition("0000", "1110") == -2

    def test_accepts_codes(self):
        assert runs_on_transition(parse_state("0111"), parse_state("0000")) == 4

    def test_absorbing_undefined(self):
        with pytest.raises(UnknownStateError):
            runs_on_transition("2000", "3")


class TestRunMatrix:
    def test_absorbing_row_and_column_zero(self):
        runs = build_run_matrix(ALL_STATES)
        a = ALL_STATES.index(ABSORBING_STATE)
        assert np.all(runs[a] == 0)
        assert np.all(runs[:, a] == 0)

    def test_aligned_to_order(self):
        order = [parse_state("0000"), parse_state("0111"), ABSORBING_STATE]
        runs = build_run_matrix(order)
        assert runs.shape == (3, 3)
        assert runs[1, 0] == 4
        assert runs[0, 0] == 1

    def test_frame_labels(self):
        frame = run_matrix_frame(ALL_STATES)
        assert frame.shape == (25, 25)
        assert frame.loc["0111", "0000"] == 4
        assert list(frame.columns)[-1] == "3"
