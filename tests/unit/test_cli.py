"""Tests for the Typer command-line interface."""

from __future__ import annotations

import pandas as pd
import pytest
from typer.testing import CliRunner

from halfinning.cli import app
from halfinning.config import settings
from halfinning.data.events import prepare_events

runner = CliRunner()


def write_events(events, path):
    raw = events.drop(columns=["half_inning", "runs_scored", "outs_inning"])
    raw.columns = [c.upper() for c in raw.columns]
    raw.to_csv(path, index=False)
    return path


@pytest.fixture
def events_csv(sample_events, tmp_path):
    return write_events(sample_events, tmp_path / "events.csv")


@pytest.fixture
def stolen_base_csv(make_play, tmp_path):
    """The runner steals second, so 0100 is only ever an after-state."""
    rows = [
        make_play("BOS202404010", 1, 0, 0, 0, dests=(1, 0, 0, 0)),
        make_play("BOS202404010", 1, 0, 0, 0, runners=("a", "", ""), dests=(0, 2, 0, 0), batted=False),
        make_play("BOS202404010", 1, 0, 0, 1, runners=("", "a", ""), dests=(0, 0, 2, 0)),
        make_play("BOS202404010", 1, 0, 1, 1, runners=("", "a", ""), dests=(0, 0, 2, 0)),
        make_play("BOS202404010", 1, 0, 2, 1, runners=("", "a", ""), dests=(0, 0, 2, 0)),
    ]
    return write_events(prepare_events(pd.DataFrame(rows)), tmp_path / "stolen.csv")


class TestCli:
    def test_estimate_writes_artifacts(self, events_csv, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "output_dir", tmp_path / "out")
        result = runner.invoke(app, ["estimate", str(events_csv), "--partition", "away"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "away" / "run_matrix.csv").exists()

    def test_expectancy_no_save(self, events_csv):
        result = runner.invoke(app, ["expectancy", str(events_csv), "--n-sims", "100", "--no-save"])
        assert result.exit_code == 0, result.output
        assert "Run Expectancy" in result.output

    def test_simulate_unknown_state(self, events_csv):
        result = runner.invoke(app, ["simulate", str(events_csv), "--start", "2111", "--n-sims", "10"])
        assert result.exit_code == 1
        assert "unknown state" in result.output

    def test_bad_partition(self, events_csv):
        result = runner.invoke(app, ["estimate", str(events_csv), "--partition", "neutral"])
        assert result.exit_code == 1

    def test_compare(self, events_csv):
        result = runner.invoke(app, ["compare", str(events_csv), "--n-sims", "100"])
        assert result.exit_code == 0, result.output
        assert "Frobenius distance" in result.output

    def test_estimate_malformed_chain(self, stolen_base_csv):
        result = runner.invoke(app, ["estimate", str(stolen_base_csv)])
        assert result.exit_code == 1
        assert "never observed" in result.output

    def test_expectancy_malformed_chain(self, stolen_base_csv):
        result = runner.invoke(app, ["expectancy", str(stolen_base_csv), "--no-save"])
        assert result.exit_code == 1
        assert "never observed" in result.output

    def test_compare_unknown_state(self, events_csv):
        result = runner.invoke(app, ["compare", str(events_csv), "--start", "2111", "--n-sims", "10"])
        assert result.exit_code == 1
        assert "unknown state" in result.output

    def test_fundamental(self, events_csv):
        result = runner.invoke(app, ["fundamental", str(events_csv)])
        assert result.exit_code == 0, result.output
        assert "0000" in result.output
