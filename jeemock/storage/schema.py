from __future__ import annotations

"""Schema constants and Pydantic models for Parquet-backed attempt stats."""

from datetime import datetime, timezone
from typing import Literal, Optional

import pandas as pd
from pandas.api.types import CategoricalDtype
from pydantic import BaseModel, Field, field_validator, model_validator

from ..models import SUBJECTS, QuestionType
from ..stats.scoring import Outcome

# --- Constants ---

SUBJECT_NAMES = {s.value for s in SUBJECTS}
QTYPES = {t.value for t in QuestionType}
OUTCOMES = {o.value for o in Outcome}
REASONS = {"submitted", "timeout"}


def _cat_dtype(categories: set[str]) -> CategoricalDtype:
    return CategoricalDtype(categories=sorted(categories), ordered=False)


DTYPES = {
    "session_id": "string",
    # timezone-aware UTC timestamps
    "session_start": pd.DatetimeTZDtype(tz="UTC"),
    "question_id": "string",
    "subject": _cat_dtype(SUBJECT_NAMES),
    "qtype": _cat_dtype(QTYPES),
    "chapter": "string",
    "outcome": _cat_dtype(OUTCOMES),
    "time_s": "UInt32",
    "points": "Int8",
}

META_DTYPES = {
    "session_id": "string",
    "session_start": pd.DatetimeTZDtype(tz="UTC"),
    "duration_minutes": "UInt16",
    "reason": _cat_dtype(REASONS),
    "score": "Int32",
    "max_score": "UInt32",
    "app_version": "string",
}


def _to_utc(v: datetime) -> datetime:
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


# --- Pydantic models ---

class QuestionAttemptRow(BaseModel):
    session_id: str
    session_start: datetime
    question_id: str
    subject: Literal[tuple(sorted(SUBJECT_NAMES))]  # type: ignore[valid-type]
    qtype: Literal[tuple(sorted(QTYPES))]  # type: ignore[valid-type]
    chapter: str = ""
    outcome: Literal[tuple(sorted(OUTCOMES))]  # type: ignore[valid-type]
    time_s: int = Field(default=0, ge=0, le=4294967295)
    points: int = Field(ge=-128, le=127)

    @field_validator("session_start")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        return _to_utc(v)

    @model_validator(mode="after")
    def _skipped_scores_zero(self) -> "QuestionAttemptRow":
        if self.outcome == Outcome.SKIPPED.value and self.points != 0:
            raise ValueError("skipped questions carry no points")
        return self


class SessionMeta(BaseModel):
    session_id: str
    session_start: datetime
    duration_minutes: int = Field(gt=0, le=65535)
    reason: Literal[tuple(sorted(REASONS))]  # type: ignore[valid-type]
    score: int
    max_score: int = Field(ge=0)
    app_version: Optional[str] = None

    @field_validator("session_start")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        return _to_utc(v)
