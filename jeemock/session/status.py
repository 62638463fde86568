from __future__ import annotations

"""Per-question status model.

A status is the closed tag for the orthogonal flags (visited, answered,
marked). Transitions are pure functions ``Response -> Response``; none of
them can fail and none of them returns a question to NOT_VISITED.
"""

from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from ..models import Response


class QuestionStatus(str, Enum):
    NOT_VISITED = "not_visited"
    NOT_ANSWERED = "not_answered"
    ANSWERED = "answered"
    MARKED_FOR_REVIEW = "marked"
    ANSWERED_AND_MARKED = "answered_marked"

    @property
    def visited(self) -> bool:
        return self is not QuestionStatus.NOT_VISITED

    @property
    def answered(self) -> bool:
        return self in (QuestionStatus.ANSWERED, QuestionStatus.ANSWERED_AND_MARKED)

    @property
    def marked(self) -> bool:
        return self in (QuestionStatus.MARKED_FOR_REVIEW, QuestionStatus.ANSWERED_AND_MARKED)

    @property
    def flags(self) -> Tuple[bool, bool]:
        return (self.answered, self.marked)


# (answered, marked) -> status, for visited questions
_BY_FLAGS: Dict[Tuple[bool, bool], QuestionStatus] = {
    (False, False): QuestionStatus.NOT_ANSWERED,
    (True, False): QuestionStatus.ANSWERED,
    (False, True): QuestionStatus.MARKED_FOR_REVIEW,
    (True, True): QuestionStatus.ANSWERED_AND_MARKED,
}


def compose(answered: bool, marked: bool) -> QuestionStatus:
    """Map the orthogonal pair onto the tag set (always a visited status)."""
    return _BY_FLAGS[(bool(answered), bool(marked))]


def visit(response: "Response") -> "Response":
    if response.status is QuestionStatus.NOT_VISITED:
        return replace(response, status=QuestionStatus.NOT_ANSWERED)
    return response


def select_option(response: "Response", value: str) -> "Response":
    status = compose(True, response.status.marked)
    if response.selected_option == value and response.status is status:
        return response
    return replace(response, selected_option=value, status=status)


def enter_numerical(response: "Response", text: Optional[str]) -> "Response":
    """Like select_option, but empty text means "no selection"."""
    if not text:
        status = compose(False, response.status.marked)
        if response.selected_option is None and response.status is status:
            return response
        return replace(response, selected_option=None, status=status)
    return select_option(response, text)


def toggle_mark(response: "Response") -> "Response":
    current = response.status
    if current is QuestionStatus.MARKED_FOR_REVIEW:
        status = QuestionStatus.NOT_ANSWERED
    elif current is QuestionStatus.ANSWERED_AND_MARKED:
        status = QuestionStatus.ANSWERED
    else:
        status = compose(response.selected_option is not None, True)
    return replace(response, status=status)


def clear(response: "Response") -> "Response":
    if response.status is QuestionStatus.ANSWERED_AND_MARKED:
        status = QuestionStatus.MARKED_FOR_REVIEW
    else:
        status = QuestionStatus.NOT_ANSWERED
    return replace(response, selected_option=None, status=status)
