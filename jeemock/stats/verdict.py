from __future__ import annotations

"""Qualitative verdict for a finished attempt.

Rules are evaluated top to bottom and the first match wins. Later rules
assume earlier ones failed, so the order of ``RULES`` is part of the
classification and must not be changed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from ..util.mathutil import round_half_up


class Band(str, Enum):
    PERFECT = "perfect"
    EXCELLENT = "excellent"
    CAUTIOUS = "cautious"
    GUESSWORK = "guesswork"
    CRITICAL = "critical"
    BALANCED = "balanced"


@dataclass(frozen=True)
class VerdictInputs:
    score: int
    accuracy: int
    attempted: int
    max_score: int
    total_questions: int

    @property
    def percentage(self) -> int:
        if self.max_score <= 0:
            return 0
        return int(round_half_up(self.score / self.max_score * 100))


@dataclass(frozen=True)
class Verdict:
    band: Band
    title: str
    message: str

    def to_json(self) -> dict:
        return {"band": self.band.value, "title": self.title, "message": self.message}


@dataclass(frozen=True)
class VerdictRule:
    verdict: Verdict
    matches: Callable[[VerdictInputs], bool]


RULES: Tuple[VerdictRule, ...] = (
    VerdictRule(
        Verdict(Band.PERFECT, "Godlike!", "Perfect score. You are absolutely ready for JEE Advanced."),
        lambda v: v.score == v.max_score,
    ),
    VerdictRule(
        Verdict(
            Band.EXCELLENT,
            "Excellent Performance",
            "High accuracy and great conceptual clarity. Keep maintaining this pace.",
        ),
        lambda v: v.accuracy > 85 and v.percentage > 70,
    ),
    VerdictRule(
        Verdict(Band.CAUTIOUS, "Cautious Sniper", "Great accuracy but low attempts. You need to increase your speed."),
        lambda v: v.accuracy > 85 and v.percentage < 50,
    ),
    VerdictRule(
        Verdict(Band.GUESSWORK, "Guesswork Hazard", "Too many negative marks. Stop guessing and focus on accuracy."),
        lambda v: v.accuracy < 60 and v.attempted > v.total_questions * 0.8,
    ),
    VerdictRule(
        Verdict(Band.CRITICAL, "Critical Condition", "Concepts are weak. Revisit your basics immediately."),
        lambda v: v.score < 0,
    ),
)

DEFAULT_VERDICT = Verdict(
    Band.BALANCED,
    "Balanced Effort",
    "Good start, but there is room for improvement in both speed and accuracy.",
)


def classify(
    score: int,
    accuracy: int,
    attempted: int,
    max_score: int,
    total_questions: Optional[int] = None,
) -> Verdict:
    """Return the first matching verdict; ``total_questions`` defaults to max_score / 4."""
    if total_questions is None:
        total_questions = max_score // 4
    inputs = VerdictInputs(
        score=int(score),
        accuracy=int(accuracy),
        attempted=int(attempted),
        max_score=int(max_score),
        total_questions=int(total_questions),
    )
    for rule in RULES:
        if rule.matches(inputs):
            return rule.verdict
    return DEFAULT_VERDICT
