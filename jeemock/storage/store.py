from __future__ import annotations

"""Parquet-backed store for per-question attempt stats using pandas + pyarrow.

Unit of data: (session × question) rows, plus one metadata row per session.
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ..models import Subject
from ..session.engine import FinishedSession
from ..stats.scoring import ResultReport
from .schema import DTYPES, META_DTYPES, QuestionAttemptRow, SessionMeta

logger = logging.getLogger(__name__)

DATA_FILE = "question_attempts.parquet"
META_FILE = "sessions.parquet"


def _empty_df(dtypes: dict = DTYPES) -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in dtypes.items()})


def init_store(data_dir: Path) -> None:
    """Ensure data directory and empty Parquet files with correct schema exist."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    stats_path = data_dir / DATA_FILE
    meta_path = data_dir / META_FILE
    if not stats_path.exists():
        _empty_df().to_parquet(stats_path, engine="pyarrow", compression="zstd")
    if not meta_path.exists():
        _empty_df(META_DTYPES).to_parquet(meta_path, engine="pyarrow", compression="zstd")


def attempt_records(snapshot: FinishedSession, report: ResultReport) -> list[QuestionAttemptRow]:
    """Flatten a scored session into one row per question."""
    return [
        QuestionAttemptRow(
            session_id=snapshot.session_id,
            session_start=snapshot.started_at,
            question_id=o.question_id,
            subject=o.subject.value,
            qtype=o.type.value,
            chapter=o.chapter,
            outcome=o.outcome.value,
            time_s=o.time_spent_seconds,
            points=o.points,
        )
        for o in report.outcomes
    ]


def validate_records(records: list[QuestionAttemptRow]) -> pd.DataFrame:
    """Validate a list of QuestionAttemptRow and return a DataFrame with proper dtypes."""
    if not isinstance(records, list):
        raise TypeError("records must be a list[QuestionAttemptRow]")
    rows = [r if isinstance(r, QuestionAttemptRow) else QuestionAttemptRow.model_validate(r) for r in records]
    if not rows:
        return _empty_df()
    df = pd.DataFrame([r.model_dump() for r in rows])
    return _fix_dtypes(df)


def _fix_dtypes(df: pd.DataFrame, dtypes: dict = DTYPES) -> pd.DataFrame:
    for col, dt in dtypes.items():
        if col not in df.columns:
            df[col] = pd.NA
        df[col] = df[col].astype(dt)
    return df[list(dtypes.keys())]


def append_attempts(df_new: pd.DataFrame, data_path: Path) -> None:
    """Append rows to the attempts table.

    - Reads existing, concatenates, fixes dtypes, drops rows repeating a (session, question) pair.
    - Uses pyarrow with zstd compression.
    """
    data_path = Path(data_path)
    data_path.mkdir(parents=True, exist_ok=True)
    f = data_path / DATA_FILE
    df_old = pd.read_parquet(f, engine="pyarrow") if f.exists() else _empty_df()
    combined = pd.concat([_fix_dtypes(df_old), _fix_dtypes(df_new.copy())], ignore_index=True)
    combined = _fix_dtypes(combined)
    # a session is written once; re-appending it must not double count
    combined = combined.drop_duplicates(subset=["session_id", "question_id"], keep="first")
    combined.to_parquet(f, engine="pyarrow", compression="zstd", index=False)
    logger.debug("Wrote %d attempt rows to %s", len(combined), f)


def upsert_session_meta(meta: SessionMeta, data_path: Path) -> None:
    """Insert or update a single session metadata row keyed by session_id."""
    data_path = Path(data_path)
    data_path.mkdir(parents=True, exist_ok=True)
    f = data_path / META_FILE
    row = SessionMeta.model_validate(meta).model_dump()
    df_new = _fix_dtypes(pd.DataFrame([row]), META_DTYPES)
    if f.exists():
        df = pd.read_parquet(f, engine="pyarrow")
        if "session_id" in df.columns and not df.empty:
            df = df[df["session_id"].astype("string") != row["session_id"]]
        df = pd.concat([_fix_dtypes(df, META_DTYPES), df_new], ignore_index=True)
    else:
        df = df_new
    _fix_dtypes(df, META_DTYPES).to_parquet(f, engine="pyarrow", compression="zstd", index=False)


def load_sessions(data_path: Path) -> pd.DataFrame:
    f = Path(data_path) / META_FILE
    if not f.exists():
        return _empty_df(META_DTYPES)
    return _fix_dtypes(pd.read_parquet(f, engine="pyarrow"), META_DTYPES)


def load_all(data_path: Path) -> pd.DataFrame:
    """Load all attempt rows with dtypes enforced, plus convenience columns.

    Adds:
    - attempted: bool, outcome != skipped
    - correct: bool, outcome == correct
    """
    f = Path(data_path) / DATA_FILE
    df = _fix_dtypes(pd.read_parquet(f, engine="pyarrow")) if f.exists() else _empty_df()
    outcome = df["outcome"].astype("string")
    df["attempted"] = (outcome != "skipped").astype(bool)
    df["correct"] = (outcome == "correct").astype(bool)
    return df


def query_trend(df: pd.DataFrame, *, subject: Optional[str] = None) -> pd.DataFrame:
    """Per-session accuracy for one subject (or all subjects), oldest first.

    Columns: session_id, session_start, attempted, correct, score, accuracy (0-100).
    """
    dff = df
    if subject is not None:
        name = Subject.parse(subject).value
        dff = df[df["subject"].astype("string") == name]
    if dff.empty:
        return pd.DataFrame(
            {
                "session_id": pd.Series(dtype="string"),
                "session_start": pd.Series(dtype=pd.DatetimeTZDtype(tz="UTC")),
                "attempted": pd.Series(dtype="int64"),
                "correct": pd.Series(dtype="int64"),
                "score": pd.Series(dtype="int64"),
                "accuracy": pd.Series(dtype="float64"),
            }
        )
    g = (
        dff.assign(points=dff["points"].astype("int64"))
        .groupby(["session_id", "session_start"], observed=True)
        .agg(attempted=("attempted", "sum"), correct=("correct", "sum"), score=("points", "sum"))
        .reset_index()
    )
    att = g["attempted"].where(g["attempted"] > 0, other=1)
    g["accuracy"] = (g["correct"] / att * 100).where(g["attempted"] > 0, other=0.0).round(1)
    return g.sort_values(["session_start", "session_id"], kind="stable").reset_index(drop=True)


def export_ndjson(df: pd.DataFrame, out_path: Path) -> None:
    """Export a DataFrame to line-delimited JSON (NDJSON) for quick inspection."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_json(out_path, orient="records", lines=True, date_format="iso")
