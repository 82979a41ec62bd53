"""Tests for the end-to-end pipeline."""

from __future__ import annotations

import numpy as np
import pytest

from halfinning.pipeline import run_pipeline


class TestPipeline:
    def test_outputs(self, homer_transitions, tmp_path):
        result = run_pipeline(
            homer_transitions, partition="all", n_sims=3000, seed=9, output_root=tmp_path
        )
        assert result.expectancy.shape == (8, 3)
        assert result.expectancy.loc["000", 0] == pytest.approx(1.0, abs=0.1)
        assert result.expectancy.loc["000", 1] == 0.0
        assert set(result.distributions) == {"0000", "1000", "2000"}

    def test_analytical_cross_check(self, sample_transitions, tmp_path):
        result = run_pipeline(
            sample_transitions, n_sims=4000, seed=11, output_root=tmp_path
        )
        a = result.analytical
        assert set(a.columns) == {"runs", "plays", "simulated_runs"}
        np.testing.assert_allclose(a["simulated_runs"], a["runs"], atol=0.05)

    def test_artifacts_written(self, homer_transitions, tmp_path):
        result = run_pipeline(homer_transitions, partition="home", n_sims=50, output_root=tmp_path)
        assert result.output_dir == tmp_path / "home"
        for name in [
            "chain.joblib",
            "transition_matrix.csv",
            "run_matrix.csv",
            "run_expectancy.csv",
            "run_distributions.csv",
        ]:
            assert (result.output_dir / name).exists()

    def test_no_save(self, homer_transitions, tmp_path):
        result = run_pipeline(homer_transitions, n_sims=50, save=False, output_root=tmp_path)
        assert result.output_dir is None
        assert not any(tmp_path.iterdir())
