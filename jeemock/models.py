from __future__ import annotations

"""Core data model: questions, responses and test configuration."""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .session.status import QuestionStatus


class Subject(str, Enum):
    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    MATHS = "Mathematics"

    @classmethod
    def parse(cls, value: Any) -> "Subject":
        """Accept either the member name ("MATHS") or the display value ("Mathematics")."""
        if isinstance(value, Subject):
            return value
        text = str(value).strip()
        for member in cls:
            if text.upper() == member.name or text.lower() == member.value.lower():
                return member
        if text.lower() in ("math", "maths"):
            return cls.MATHS
        raise ValueError(f"Unknown subject: {value!r}")


SUBJECTS: Tuple[Subject, ...] = (Subject.PHYSICS, Subject.CHEMISTRY, Subject.MATHS)


class QuestionType(str, Enum):
    MCQ = "MCQ"
    NUMERICAL = "NUMERICAL"


DIFFICULTIES = ("Easy", "Medium", "Hard", "Mixed")


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    correct_answer: str
    type: QuestionType
    subject: Subject
    chapter: str = ""
    year: str = ""
    explanation: str = ""
    options: Optional[Tuple[str, ...]] = None
    diagram_svg: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type is QuestionType.MCQ:
            if not self.options:
                raise ValueError(f"MCQ question {self.id!r} has no options")
            try:
                idx = int(self.correct_answer)
            except (TypeError, ValueError):
                raise ValueError(f"MCQ question {self.id!r} has non-index answer {self.correct_answer!r}") from None
            if not (0 <= idx < len(self.options)):
                raise ValueError(f"MCQ question {self.id!r} answer index {idx} outside options")

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "correctAnswer": self.correct_answer,
            "type": self.type.value,
            "subject": self.subject.value,
            "chapter": self.chapter,
            "year": self.year,
            "explanation": self.explanation,
        }
        if self.options is not None:
            data["options"] = list(self.options)
        if self.diagram_svg:
            data["diagramSvg"] = self.diagram_svg
        return data

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Question":
        qtype = QuestionType(str(data.get("type", QuestionType.MCQ.value)).upper())
        raw_options = data.get("options")
        options = tuple(str(o) for o in raw_options) if isinstance(raw_options, list) and raw_options else None
        # Numerical questions never carry options
        if qtype is QuestionType.NUMERICAL:
            options = None
        return cls(
            id=str(data["id"]),
            text=str(data.get("text", "")),
            correct_answer=str(data.get("correctAnswer", data.get("correct_answer", ""))),
            type=qtype,
            subject=Subject.parse(data.get("subject", Subject.PHYSICS.value)),
            chapter=str(data.get("chapter", "")),
            year=str(data.get("year", "")),
            explanation=str(data.get("explanation", "")),
            options=options,
            diagram_svg=data.get("diagramSvg", data.get("diagram_svg")),
        )


@dataclass(frozen=True)
class Response:
    question_id: str
    selected_option: Optional[str] = None
    status: QuestionStatus = QuestionStatus.NOT_VISITED
    time_spent_seconds: int = 0

    @property
    def has_selection(self) -> bool:
        return self.selected_option is not None

    def to_json(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "selectedOption": self.selected_option,
            "status": self.status.value,
            "timeSpentSeconds": self.time_spent_seconds,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Response":
        return cls(
            question_id=str(data["questionId"]),
            selected_option=data.get("selectedOption"),
            status=QuestionStatus(data.get("status", QuestionStatus.NOT_VISITED.value)),
            time_spent_seconds=int(data.get("timeSpentSeconds", 0)),
        )


@dataclass
class TestConfig:
    subjects: List[Subject] = field(default_factory=lambda: list(SUBJECTS))
    chapters: List[str] = field(default_factory=list)
    question_count: int = 15
    duration_minutes: int = 45
    difficulty: str = "Mixed"

    # not a test case
    __test__ = False

    @property
    def is_full_syllabus(self) -> bool:
        return not self.chapters

    @property
    def topics(self) -> str:
        return f"{len(self.chapters)} Chapters" if self.chapters else "Full Syllabus"

    def to_json(self) -> Dict[str, Any]:
        data = asdict(self)
        data["subjects"] = [s.value for s in self.subjects]
        data["chapters"] = list(self.chapters)
        return data

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "TestConfig":
        return cls(
            subjects=[Subject.parse(s) for s in data.get("subjects", [s.value for s in SUBJECTS])],
            chapters=[str(c) for c in data.get("chapters", [])],
            question_count=int(data.get("question_count", 15)),
            duration_minutes=int(data.get("duration_minutes", 45)),
            difficulty=str(data.get("difficulty", "Mixed")),
        )
