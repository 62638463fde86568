from __future__ import annotations

"""Scoring engine: finished responses + answer key -> ResultReport.

Total over well-formed input. Responses for unknown question ids are left
out of every aggregate; questions with no response count as unattempted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..models import SUBJECTS, Question, QuestionType, Response, Subject
from ..util.mathutil import percent, round_half_up
from .verdict import Verdict, classify


class Outcome(str, Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ScoringScheme:
    correct: int = 4
    incorrect: int = -1
    unattempted: int = 0

    def points(self, outcome: Outcome) -> int:
        if outcome is Outcome.CORRECT:
            return self.correct
        if outcome is Outcome.WRONG:
            return self.incorrect
        return self.unattempted


@dataclass(frozen=True)
class QuestionOutcome:
    question_id: str
    subject: Subject
    type: QuestionType
    chapter: str
    outcome: Outcome
    user_answer: Optional[str]
    correct_answer: str
    time_spent_seconds: int
    points: int


@dataclass(frozen=True)
class SubjectBreakdown:
    subject: Subject
    total: int
    attempted: int
    correct: int
    incorrect: int
    skipped: int
    accuracy: int
    time_spent_seconds: int

    def to_json(self) -> Dict[str, Any]:
        return {
            "subject": self.subject.value,
            "total": self.total,
            "attempted": self.attempted,
            "correct": self.correct,
            "incorrect": self.incorrect,
            "skipped": self.skipped,
            "accuracy": self.accuracy,
            "time_spent_seconds": self.time_spent_seconds,
        }


@dataclass(frozen=True)
class ResultReport:
    total_questions: int
    attempted: int
    correct: int
    incorrect: int
    unattempted: int
    score: int
    max_score: int
    accuracy: int
    percentage: int
    percentile: float
    total_time_seconds: int
    avg_time_per_attempt: int
    verdict: Verdict
    responses: Tuple[Response, ...]
    outcomes: Tuple[QuestionOutcome, ...] = field(default_factory=tuple)
    by_subject: Tuple[SubjectBreakdown, ...] = field(default_factory=tuple)

    def subject(self, subject: Subject) -> SubjectBreakdown:
        for b in self.by_subject:
            if b.subject is subject:
                return b
        raise KeyError(subject)

    def to_json(self) -> Dict[str, Any]:
        return {
            "total_questions": self.total_questions,
            "attempted": self.attempted,
            "correct": self.correct,
            "incorrect": self.incorrect,
            "unattempted": self.unattempted,
            "score": self.score,
            "max_score": self.max_score,
            "accuracy": self.accuracy,
            "percentage": self.percentage,
            "percentile": self.percentile,
            "total_time_seconds": self.total_time_seconds,
            "avg_time_per_attempt": self.avg_time_per_attempt,
            "verdict": self.verdict.to_json(),
            "by_subject": [b.to_json() for b in self.by_subject],
            "responses": [r.to_json() for r in self.responses],
        }


def is_correct(question: Question, selected: str) -> bool:
    """Exact match for MCQ indices; trimmed exact match for numerical answers."""
    if question.type is QuestionType.MCQ:
        return selected == question.correct_answer
    return selected.strip() == question.correct_answer.strip()


def grade(question: Question, response: Optional[Response]) -> Outcome:
    if response is None or response.selected_option is None:
        return Outcome.SKIPPED
    return Outcome.CORRECT if is_correct(question, response.selected_option) else Outcome.WRONG


def _index_responses(responses: Iterable[Response], known: set[str]) -> Dict[str, Response]:
    table: Dict[str, Response] = {}
    for r in responses:
        # unknown ids are dropped; first entry wins on duplicates
        if r.question_id in known and r.question_id not in table:
            table[r.question_id] = r
    return table


def _simulated_percentile(percentage: int, accuracy: int) -> float:
    raw = percentage * 0.8 + 40 + accuracy * 0.1
    return float(round_half_up(min(99.9, max(10.0, raw)), 1))


def _breakdown(subject: Subject, outcomes: Sequence[QuestionOutcome]) -> SubjectBreakdown:
    rows = [o for o in outcomes if o.subject is subject]
    correct = sum(1 for o in rows if o.outcome is Outcome.CORRECT)
    incorrect = sum(1 for o in rows if o.outcome is Outcome.WRONG)
    attempted = correct + incorrect
    return SubjectBreakdown(
        subject=subject,
        total=len(rows),
        attempted=attempted,
        correct=correct,
        incorrect=incorrect,
        skipped=len(rows) - attempted,
        accuracy=percent(correct, attempted),
        time_spent_seconds=sum(o.time_spent_seconds for o in rows),
    )


def score_session(
    questions: Sequence[Question],
    responses: Iterable[Response],
    scheme: ScoringScheme = ScoringScheme(),
) -> ResultReport:
    responses = tuple(responses)
    table = _index_responses(responses, {q.id for q in questions})

    outcomes: List[QuestionOutcome] = []
    for q in questions:
        res = table.get(q.id)
        outcome = grade(q, res)
        outcomes.append(
            QuestionOutcome(
                question_id=q.id,
                subject=q.subject,
                type=q.type,
                chapter=q.chapter,
                outcome=outcome,
                user_answer=res.selected_option if res else None,
                correct_answer=q.correct_answer,
                time_spent_seconds=res.time_spent_seconds if res else 0,
                points=scheme.points(outcome),
            )
        )

    total = len(questions)
    correct = sum(1 for o in outcomes if o.outcome is Outcome.CORRECT)
    incorrect = sum(1 for o in outcomes if o.outcome is Outcome.WRONG)
    attempted = correct + incorrect
    score = sum(o.points for o in outcomes)
    max_score = total * scheme.correct
    accuracy = percent(correct, attempted)
    percentage = int(round_half_up(score / max_score * 100)) if max_score > 0 else 0
    total_time = sum(o.time_spent_seconds for o in outcomes)

    return ResultReport(
        total_questions=total,
        attempted=attempted,
        correct=correct,
        incorrect=incorrect,
        unattempted=total - attempted,
        score=score,
        max_score=max_score,
        accuracy=accuracy,
        percentage=percentage,
        percentile=_simulated_percentile(percentage, accuracy),
        total_time_seconds=total_time,
        avg_time_per_attempt=int(round_half_up(total_time / attempted)) if attempted else 0,
        verdict=classify(score, accuracy, attempted, max_score, total),
        responses=responses,
        outcomes=tuple(outcomes),
        by_subject=tuple(_breakdown(s, outcomes) for s in SUBJECTS),
    )


def subject_chart_data(report: ResultReport) -> Dict[str, List[Dict[str, Any]]]:
    """Rows for the radar (accuracy) and bar (correct/wrong/skipped) charts."""
    radar = [{"subject": b.subject.value, "accuracy": b.accuracy, "fullMark": 100} for b in report.by_subject]
    bars = [
        {"name": b.subject.value[:4], "Correct": b.correct, "Wrong": b.incorrect, "Skipped": b.skipped}
        for b in report.by_subject
    ]
    pie = [
        {"name": "Correct", "value": report.correct},
        {"name": "Incorrect", "value": report.incorrect},
        {"name": "Skipped", "value": report.unattempted},
    ]
    return {"radar": radar, "bars": bars, "pie": pie}
