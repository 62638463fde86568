from __future__ import annotations

"""Load Parquet stats and compute derived metrics."""

from pathlib import Path

import pandas as pd

from .metrics import compute_metrics


def load_and_prepare(parquet_path: Path) -> pd.DataFrame:
    """Read attempt rows and aggregate them per (session, subject).

    - Ensures 'subject' is categorical.
    - Sorts by (session_start, session_id).
    - Adds a stable session index 'session_idx'.
    """
    df = pd.read_parquet(parquet_path)
    if "subject" in df.columns:
        df["subject"] = df["subject"].astype("category")
    df = compute_metrics(df)
    df = df.sort_values(["session_start", "session_id"], kind="stable").reset_index(drop=True)
    df["session_idx"] = pd.factorize(df["session_id"])[0]
    return df
