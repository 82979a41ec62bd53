"""halfinning CLI — powered by Typer.

Usage::

    uv run halfinning estimate data/events.csv [--partition home]
    uv run halfinning simulate data/events.csv --start 0100 [--n-sims 1000]
    uv run halfinning expectancy data/events.csv [--n-sims 1000] [--no-save]
    uv run halfinning fundamental data/events.csv
    uv run halfinning compare data/events.csv [--start 0000]
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import typer
from rich.console import Console
from rich.table import Table

from halfinning.config import settings
from halfinning.errors import ChainError

app = typer.Typer(name="halfinning", help="Base/outs Markov chain model of half-innings")
console = Console()

PARTITIONS = ("all", "away", "home")


def _transitions(events: Path, partition: str) -> pd.DataFrame:
    from halfinning.data.events import load_transitions, split_by_batting_side

    if partition not in PARTITIONS:
        console.print(f"[red]Unknown partition {partition!r}; use all, away or home[/red]")
        raise typer.Exit(1)
    df = load_transitions(events)
    if partition == "all":
        return df
    away, home = split_by_batting_side(df)
    return away if partition == "away" else home


def _estimate(events: Path, partition: str):
    from halfinning.models.markov.chain import estimate_chain

    try:
        return estimate_chain(_transitions(events, partition))
    except ChainError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _frame_table(df: pd.DataFrame, title: str, fmt: str = "{:.2f}") -> Table:
    table = Table(title=title)
    table.add_column(df.index.name or "", style="cyan")
    for col in df.columns:
        table.add_column(str(col), justify="right")
    for idx, row in df.iterrows():
        table.add_row(str(idx), *("" if pd.isna(v) else fmt.format(v) for v in row))
    return table


@app.command("estimate")
def estimate(
    events: Path = typer.Argument(..., help="cwevent CSV/Parquet file"),
    partition: str = typer.Option("all", help="all, away or home"),
) -> None:
    """Estimate and save the transition and run matrices."""
    from halfinning import persistence

    chain = _estimate(events, partition)
    directory = persistence.artifact_dir(partition)
    persistence.save_chain(chain, directory)
    persistence.save_run_matrix(chain, directory)
    console.print(
        f"[green]Estimated {len(chain)}-state chain[/green] -> {directory}"
    )


@app.command("simulate")
def simulate(
    events: Path = typer.Argument(..., help="cwevent CSV/Parquet file"),
    start: str = typer.Option("0000", help="Starting state (OBBB)"),
    n_sims: int = typer.Option(None, help="Half-innings to simulate (default: config)"),
    seed: int = typer.Option(None, help="Random seed (default: config)"),
    partition: str = typer.Option("all", help="all, away or home"),
) -> None:
    """Simulate half-innings from one starting state."""
    from halfinning.models.monte_carlo.simulator import HalfInningSimulator

    chain = _estimate(events, partition)
    rng = np.random.default_rng(settings.random_seed if seed is None else seed)
    try:
        runs = HalfInningSimulator(chain).sample_runs(start, rng, n_sims)
    except ChainError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    counts = pd.Series(runs).value_counts().sort_index()
    table = Table(title=f"Runs from {start} ({len(runs)} half-innings)")
    table.add_column("Runs", style="cyan")
    table.add_column("Share", justify="right")
    for r, c in counts.items():
        table.add_row(str(r), f"{c / len(runs):.1%}")
    console.print(table)
    console.print(f"Mean {runs.mean():.3f}  SD {runs.std(ddof=1):.3f}")


@app.command("expectancy")
def expectancy(
    events: Path = typer.Argument(..., help="cwevent CSV/Parquet file"),
    n_sims: int = typer.Option(None, help="Half-innings per state (default: config)"),
    seed: int = typer.Option(None, help="Random seed (default: config)"),
    n_jobs: int = typer.Option(None, help="Parallel workers (default: config)"),
    partition: str = typer.Option("all", help="all, away or home"),
    save: bool = typer.Option(True, help="Write artifacts to the output directory"),
) -> None:
    """Run the full pipeline and print the run-expectancy table."""
    from halfinning.pipeline import run_pipeline

    transitions = _transitions(events, partition)
    try:
        result = run_pipeline(
            transitions,
            partition=partition,
            n_sims=n_sims,
            seed=seed,
            n_jobs=n_jobs,
            save=save,
        )
    except ChainError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(_frame_table(result.expectancy, "Run Expectancy (bases x outs)"))
    if result.output_dir is not None:
        console.print(f"[green]Artifacts saved:[/green] {result.output_dir}")


@app.command("fundamental")
def fundamental(
    events: Path = typer.Argument(..., help="cwevent CSV/Parquet file"),
    partition: str = typer.Option("all", help="all, away or home"),
) -> None:
    """Expected plays and analytical run expectancy from the fundamental matrix."""
    from halfinning.models.markov.fundamental import expected_plays, expected_runs

    chain = _estimate(events, partition)
    try:
        summary = pd.concat([expected_runs(chain), expected_plays(chain)], axis=1)
    except ChainError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    summary.index.name = "state"
    console.print(_frame_table(summary.sort_index(), "Fundamental Matrix Summary"))


@app.command("compare")
def compare(
    events: Path = typer.Argument(..., help="cwevent CSV/Parquet file"),
    start: str = typer.Option("0000", help="Common starting state"),
    n_sims: int = typer.Option(None, help="Half-innings per chain (default: config)"),
    seed: int = typer.Option(None, help="Random seed (default: config)"),
) -> None:
    """Compare the away and home batting chains."""
    from halfinning.models.markov.compare import compare_partitions

    transitions = _transitions(events, "all")
    try:
        result = compare_partitions(transitions, start=start, n_sims=n_sims, seed=seed)
    except ChainError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"\n[bold]Away vs Home — start {result.start_state}[/bold]\n")
    console.print(f"Frobenius distance: {result.distance:.4f}")
    console.print(_frame_table(result.to_frame().set_index("partition"), "Run Distributions", "{:.3f}"))
    console.print(
        f"Per inning: diff {result.mean_difference:+.3f}, pooled SD {result.pooled_sd:.3f}"
    )
    console.print(
        f"Per game ({result.innings} inn.): diff {result.game_difference:+.3f}, "
        f"approx. SD {result.game_sd:.3f}"
    )


if __name__ == "__main__":
    app()
