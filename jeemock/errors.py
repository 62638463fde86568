from __future__ import annotations

"""Error kinds raised (or recovered) by the exam core."""


class ExamError(Exception):
    """Base class for jeemock errors."""


class ConfigurationError(ExamError):
    """A session or config cannot be built from the given input."""


class InvalidNavigationIndex(ExamError):
    """Navigation target outside [0, len(questions))."""

    def __init__(self, index: int, length: int) -> None:
        super().__init__(f"index {index} out of range for {length} questions")
        self.index = index
        self.length = length


class MissingResponseEntry(ExamError):
    """An action referenced a question id absent from the response table."""

    def __init__(self, question_id: str) -> None:
        super().__init__(f"no response entry for question {question_id!r}")
        self.question_id = question_id


class HistoryWriteError(ExamError):
    """The history file could not be written."""
