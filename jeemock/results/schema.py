from __future__ import annotations

"""Pydantic models for persisted history entries."""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import DIFFICULTIES, Subject, TestConfig
from ..stats.scoring import ResultReport


class HistoryConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    subjects: List[str]
    chapters: List[str] = Field(default_factory=list)
    question_count: int = Field(ge=1)
    duration_minutes: int = Field(gt=0)
    difficulty: Literal[DIFFICULTIES]  # type: ignore[valid-type]

    @field_validator("subjects")
    @classmethod
    def _known_subjects(cls, v: List[str]) -> List[str]:
        return [Subject.parse(s).value for s in v]

    @classmethod
    def from_test_config(cls, config: TestConfig) -> "HistoryConfig":
        return cls.model_validate(config.to_json())

    def to_test_config(self) -> TestConfig:
        return TestConfig.from_json(self.model_dump())


class HistoryEntry(BaseModel):
    """Write-once summary of one finished attempt."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    score: int
    max_score: int = Field(ge=0)
    accuracy: int = Field(ge=0, le=100)
    topics: str
    config: HistoryConfig
    verdict: Optional[str] = None
    session_id: Optional[str] = None

    @classmethod
    def from_result(
        cls,
        report: ResultReport,
        config: TestConfig,
        *,
        session_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "HistoryEntry":
        now = now or datetime.now(timezone.utc)
        return cls(
            id=str(int(now.timestamp() * 1000)),
            date=now.date().isoformat(),
            score=report.score,
            max_score=report.max_score,
            accuracy=report.accuracy,
            topics=config.topics,
            config=HistoryConfig.from_test_config(config),
            verdict=report.verdict.band.value,
            session_id=session_id,
        )
