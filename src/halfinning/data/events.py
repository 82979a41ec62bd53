"""Play-by-play event loading and filtering.

Reads Chadwick ``cwevent`` output (one row per Retrosheet event) that has
already been exported to CSV or Parquet, and reduces it to the batted-ball
events of complete, regulation half-innings.
Field reference: https://chadwick.sourceforge.net/doc/cwevent.html
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from halfinning.config import settings
from halfinning.constants import (
    AWAY,
    DEST_COLUMNS,
    DEST_HOME,
    EVENT_COLUMNS,
    HOME,
    OUTS_PER_INNING,
)
from halfinning.models.markov.states import encode_events
from halfinning.utils.logging import get_logger

log = get_logger(__name__)

_TRUE_FLAGS = {"T", "TRUE", "1", "Y"}


def _normalize_flag(values: pd.Series) -> pd.Series:
    """Map Retrosheet ``T``/``F`` (or bool/int) flags to booleans."""
    if values.dtype == bool:
        return values
    return values.astype(str).str.strip().str.upper().isin(_TRUE_FLAGS)


def load_events(path: Path | str) -> pd.DataFrame:
    """Load a cwevent table and normalize column names to snake_case."""
    path = Path(path)
    log.info("loading_events", path=str(path))
    if path.suffix == ".parquet":
        raw = pd.read_parquet(path)
    else:
        raw = pd.read_csv(path, low_memory=False)
    raw.columns = [c.strip().upper() for c in raw.columns]

    missing = [c for c in EVENT_COLUMNS if c not in raw.columns]
    if missing:
        raise ValueError(f"Event file missing required columns: {missing}")

    df = raw.rename(columns=str.lower)
    log.info("loaded_events", path=str(path), events=len(df))
    return prepare_events(df)


def prepare_events(df: pd.DataFrame) -> pd.DataFrame:
    """Add half-inning bookkeeping columns to normalized event records."""
    df = df.copy()
    df["bat_event_fl"] = _normalize_flag(df["bat_event_fl"])
    for col in ["inn_ct", "bat_home_id", "outs_ct", "event_outs_ct", *DEST_COLUMNS]:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0).astype(int)

    df["half_inning"] = (
        df["game_id"].astype(str) + "-" + df["inn_ct"].astype(str) + "-" + df["bat_home_id"].astype(str)
    )
    df["runs_scored"] = (df[DEST_COLUMNS] >= DEST_HOME).sum(axis=1)
    df["outs_inning"] = df.groupby("half_inning")["event_outs_ct"].transform("sum")
    return df


def is_extra_inning(df: pd.DataFrame) -> pd.Series:
    """Plays after regulation: inning > 9, or > 7 in a doubleheader nightcap."""
    nightcap = df["game_id"].astype(str).str.strip().str[-1] == "2"
    return (df["inn_ct"] > settings.regulation_innings) | (
        nightcap & (df["inn_ct"] > settings.doubleheader_innings)
    )


def filter_events(df: pd.DataFrame, drop_null: bool | None = None) -> pd.DataFrame:
    """Keep batted-ball events from complete, regulation half-innings.

    Adds ``state`` / ``new_state`` columns.  With ``drop_null`` (default
    ``settings.drop_null_transitions``) plays that leave the state unchanged
    without scoring are removed.
    """
    drop_null = settings.drop_null_transitions if drop_null is None else drop_null
    n_before = len(df)
    keep = (
        df["bat_event_fl"]
        & (df["outs_inning"] == OUTS_PER_INNING)
        & ~is_extra_inning(df)
    )
    out = encode_events(df[keep])
    if drop_null:
        out = out[(out["state"] != out["new_state"]) | (out["runs_scored"] > 0)]

    log.info("events_filtered", before=n_before, after=len(out))
    return out.reset_index(drop=True)


def split_by_batting_side(df: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Return (away, home) partitions."""
    return df[df["bat_home_id"] == AWAY], df[df["bat_home_id"] == HOME]


def load_transitions(path: Path | str) -> pd.DataFrame:
    """Load, filter and encode an event file in one step."""
    return filter_events(load_events(path))
