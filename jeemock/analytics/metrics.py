from __future__ import annotations

"""Metric computations over attempt rows."""

import numpy as np
import pandas as pd


def compute_metrics(df: pd.DataFrame) -> pd.DataFrame:
    """Aggregate attempt rows to one row per (session, subject).

    Columns: session_id, session_start, subject, questions, attempted,
    correct, score, acc (0..1 of attempted), time_mean_s (per attempted).
    """
    out = df.copy()
    outcome = out["outcome"].astype("string")
    out["attempted"] = (outcome != "skipped").astype("int32")
    out["correct"] = (outcome == "correct").astype("int32")
    out["points"] = out["points"].astype("int32")
    out["time_s"] = out["time_s"].astype("float32")
    g = (
        out.groupby(["session_id", "session_start", "subject"], observed=True)
        .agg(
            questions=("question_id", "count"),
            attempted=("attempted", "sum"),
            correct=("correct", "sum"),
            score=("points", "sum"),
            time_s=("time_s", "sum"),
        )
        .reset_index()
    )
    attempted = g["attempted"].to_numpy(dtype="float32")
    safe = np.where(attempted > 0, attempted, 1.0)
    g["acc"] = np.where(attempted > 0, g["correct"].to_numpy(dtype="float32") / safe, 0.0).astype("float32")
    g["time_mean_s"] = np.where(attempted > 0, g["time_s"].to_numpy(dtype="float32") / safe, 0.0).astype("float32")
    return g


def weak_chapters(df: pd.DataFrame, *, min_attempts: int = 3, top_n: int = 5) -> pd.DataFrame:
    """Rank chapters by accuracy (lowest first) across all sessions.

    Chapters with fewer than ``min_attempts`` attempted questions are left out.
    """
    out = df.copy()
    outcome = out["outcome"].astype("string")
    out["attempted"] = (outcome != "skipped").astype("int32")
    out["correct"] = (outcome == "correct").astype("int32")
    out["chapter"] = out["chapter"].astype("string").fillna("")
    g = (
        out[out["chapter"] != ""]
        .groupby(["subject", "chapter"], observed=True)
        .agg(attempted=("attempted", "sum"), correct=("correct", "sum"))
        .reset_index()
    )
    g = g[g["attempted"] >= int(min_attempts)].copy()
    g["acc"] = (g["correct"] / g["attempted"]).astype("float32")
    return g.sort_values(["acc", "attempted"], ascending=[True, False], kind="stable").head(int(top_n)).reset_index(drop=True)
