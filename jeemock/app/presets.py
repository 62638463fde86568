from __future__ import annotations

"""Curated exam presets.

``quick``, ``practice`` and ``full`` are the per-subject choices (5, 15, 25
questions per subject); ``quick_start`` is the one-click full-syllabus test.
"""

from typing import Any, Dict, Iterable, Optional

from ..config.config import derived_duration
from ..models import SUBJECTS, Subject, TestConfig

EXAM_PRESETS: Dict[str, Dict[str, Any]] = {
    "quick": {"questions_per_subject": 5},
    "practice": {"questions_per_subject": 15},
    "full": {"questions_per_subject": 25},
    # fixed total, not per subject
    "quick_start": {"question_count": 15, "duration_minutes": 30},
}


def duration_for(questions_per_subject: int) -> int:
    return derived_duration(questions_per_subject)


def preset_names() -> list[str]:
    return list(EXAM_PRESETS)


def describe(name: str) -> str:
    cfg = from_preset(name)
    return f"{name}: {cfg.question_count} questions, {cfg.duration_minutes} min, {cfg.topics}"


def from_preset(
    name: str,
    *,
    subjects: Optional[Iterable[Subject]] = None,
    chapters: Optional[Iterable[str]] = None,
    difficulty: str = "Mixed",
) -> TestConfig:
    """Build a TestConfig from a named preset."""
    try:
        preset = EXAM_PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown preset: {name!r}") from None
    if name == "quick_start":
        # always all subjects, full syllabus
        return TestConfig(
            subjects=list(SUBJECTS),
            chapters=[],
            question_count=preset["question_count"],
            duration_minutes=preset["duration_minutes"],
            difficulty="Mixed",
        )
    subs = list(subjects) if subjects else list(SUBJECTS)
    per_subject = int(preset["questions_per_subject"])
    return TestConfig(
        subjects=subs,
        chapters=list(chapters or []),
        question_count=per_subject * len(subs),
        duration_minutes=duration_for(per_subject),
        difficulty=difficulty,
    )


def from_settings(cfg: Dict[str, Any]) -> TestConfig:
    """Build a TestConfig from a validated config's ``exam`` section."""
    exam = cfg["exam"]
    subs = [Subject.parse(s) for s in exam["subjects"]]
    return TestConfig(
        subjects=subs,
        chapters=list(exam["chapters"]),
        question_count=int(exam["questions_per_subject"]) * len(subs),
        duration_minutes=int(exam["duration_minutes"]),
        difficulty=str(exam["difficulty"]),
    )
