from __future__ import annotations

"""Exam Session Engine.

Owns the ordered questions, the response table, the current position and the
countdown. Every event (tick or user action) is applied under one lock, so a
timer thread and a UI thread never interleave partial updates. The only
lifecycle transition is active -> finished; once finished the response table
is frozen into a ``FinishedSession`` and every mutating call is a no-op.
"""

import logging
import threading
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from ..app.events import FINISH, SESSION_STARTED, EventBus
from ..app.ticker import TickSource
from ..errors import ConfigurationError, InvalidNavigationIndex, MissingResponseEntry
from ..models import SUBJECTS, Question, QuestionType, Response, Subject
from . import status as transitions
from .status import QuestionStatus
from .timer import Countdown, format_clock

logger = logging.getLogger(__name__)

REASON_SUBMITTED = "submitted"
REASON_TIMEOUT = "timeout"

_TYPE_ORDER = (QuestionType.MCQ, QuestionType.NUMERICAL)


@dataclass(frozen=True)
class FinishedSession:
    """Read-only snapshot handed to scoring and history once a session ends."""

    session_id: str
    started_at: datetime
    finished_at: datetime
    duration_minutes: int
    questions: Tuple[Question, ...]
    responses: Tuple[Response, ...]
    remaining_seconds: int
    reason: str

    @property
    def elapsed_seconds(self) -> int:
        return self.duration_minutes * 60 - self.remaining_seconds

    def response_for(self, question_id: str) -> Optional[Response]:
        for r in self.responses:
            if r.question_id == question_id:
                return r
        return None


@dataclass(frozen=True)
class PaletteEntry:
    index: int
    question_id: str
    subject: Subject
    type: QuestionType
    status: QuestionStatus
    current: bool


class ExamSession:
    def __init__(
        self,
        questions: Sequence[Question],
        duration_minutes: int,
        *,
        ticker: Optional[TickSource] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        questions = tuple(questions)
        if not questions:
            raise ConfigurationError("Cannot start a session without questions")
        if int(duration_minutes) <= 0:
            raise ConfigurationError(f"duration_minutes must be positive, got {duration_minutes}")
        ids = [q.id for q in questions]
        if len(set(ids)) != len(ids):
            raise ConfigurationError("Question ids must be unique within a session")

        self.session_id = str(uuid4())
        self.started_at = datetime.now(timezone.utc)
        self.questions: Tuple[Question, ...] = questions
        self.duration_minutes = int(duration_minutes)
        self.events = events if events is not None else EventBus()

        self._lock = threading.RLock()
        self._responses: Dict[str, Response] = {q.id: Response(question_id=q.id) for q in questions}
        self._index = 0
        first = questions[0].id
        self._responses[first] = transitions.visit(self._responses[first])
        self._timer = Countdown(self.duration_minutes)
        self._snapshot: Optional[FinishedSession] = None
        self._ticker: Optional[TickSource] = None

        logger.info(
            "Session %s started: %d questions, %d min",
            self.session_id,
            len(questions),
            self.duration_minutes,
        )
        self.events.emit(
            SESSION_STARTED,
            {"session_id": self.session_id, "questions": len(questions), "duration_minutes": self.duration_minutes},
        )
        if ticker is not None:
            self._ticker = ticker
            ticker.start(self.tick)

    # --- read side ---

    @property
    def is_finished(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> Optional[FinishedSession]:
        return self._snapshot

    @property
    def current_index(self) -> int:
        with self._lock:
            return self._index

    @property
    def current_question(self) -> Question:
        with self._lock:
            return self.questions[self._index]

    @property
    def current_response(self) -> Response:
        with self._lock:
            return self._responses[self.current_question.id]

    @property
    def active_subject(self) -> Subject:
        with self._lock:
            return self.questions[self._index].subject

    @property
    def remaining_seconds(self) -> int:
        with self._lock:
            return self._timer.remaining

    @property
    def remaining_clock(self) -> str:
        return format_clock(self.remaining_seconds)

    def status_of(self, question_id: str) -> QuestionStatus:
        with self._lock:
            return self._lookup(question_id).status

    def responses(self) -> List[Response]:
        with self._lock:
            return [self._responses[q.id] for q in self.questions]

    def status_counts(self) -> Dict[QuestionStatus, int]:
        with self._lock:
            counts = Counter(r.status for r in self._responses.values())
        return {s: counts.get(s, 0) for s in QuestionStatus}

    def palette(self, subject: Optional[Subject] = None) -> List[PaletteEntry]:
        """Question palette grouped by subject tab, then MCQ before numerical."""
        with self._lock:
            entries = [
                PaletteEntry(
                    index=i,
                    question_id=q.id,
                    subject=q.subject,
                    type=q.type,
                    status=self._responses[q.id].status,
                    current=(i == self._index),
                )
                for i, q in enumerate(self.questions)
                if subject is None or q.subject is subject
            ]
        entries.sort(key=lambda e: (SUBJECTS.index(e.subject), _TYPE_ORDER.index(e.type), e.index))
        return entries

    def subjects(self) -> List[Subject]:
        """Subjects present in this session, in first-appearance order."""
        seen: List[Subject] = []
        for q in self.questions:
            if q.subject not in seen:
                seen.append(q.subject)
        return seen

    # --- navigation ---

    def navigate_to(self, index: int) -> bool:
        with self._lock:
            try:
                self._check_index(index)
            except InvalidNavigationIndex as exc:
                logger.debug("Ignoring navigation: %s", exc)
                return False
            if self._snapshot is None:
                qid = self.questions[index].id
                try:
                    self._responses[qid] = transitions.visit(self._lookup(qid))
                except MissingResponseEntry as exc:
                    logger.warning("Ignoring visit: %s", exc)
            self._index = index
            return True

    def next(self) -> bool:
        return self.navigate_to(min(len(self.questions) - 1, self._index + 1))

    def previous(self) -> bool:
        return self.navigate_to(max(0, self._index - 1))

    def switch_subject(self, subject: Subject) -> bool:
        """Tab switch: jump to the first question of ``subject``."""
        for i, q in enumerate(self.questions):
            if q.subject is subject:
                return self.navigate_to(i)
        return False

    # --- answering ---

    def select_option(self, value: str) -> Optional[Response]:
        return self._apply("select_option", transitions.select_option, value)

    def enter_numerical(self, text: str) -> Optional[Response]:
        return self._apply("enter_numerical", transitions.enter_numerical, text)

    def toggle_mark(self) -> Optional[Response]:
        return self._apply("toggle_mark", transitions.toggle_mark)

    def clear_response(self) -> Optional[Response]:
        return self._apply("clear_response", transitions.clear)

    # --- time and lifecycle ---

    def tick(self) -> bool:
        """Apply one second. Returns True if this tick ended the session."""
        with self._lock:
            if self._snapshot is not None:
                return False
            qid = self.current_question.id
            try:
                current = self._lookup(qid)
            except MissingResponseEntry as exc:
                logger.warning("Ignoring tick credit: %s", exc)
                return False
            credited, expired = self._timer.tick(current)
            self._responses[qid] = credited
            if not expired:
                return False
            snapshot = self._freeze(REASON_TIMEOUT)
        self.events.emit(FINISH, snapshot)
        return True

    def finish(self) -> FinishedSession:
        """Explicit submit. Repeated calls return the same snapshot and emit nothing."""
        with self._lock:
            if self._snapshot is not None:
                return self._snapshot
            snapshot = self._freeze(REASON_SUBMITTED)
        self.events.emit(FINISH, snapshot)
        return snapshot

    def close(self) -> None:
        """Caller teardown: release the tick subscription without finishing."""
        with self._lock:
            self._release_ticker()

    def __enter__(self) -> "ExamSession":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # --- internals ---

    def _check_index(self, index: int) -> None:
        if not (0 <= index < len(self.questions)):
            raise InvalidNavigationIndex(index, len(self.questions))

    def _lookup(self, question_id: str) -> Response:
        try:
            return self._responses[question_id]
        except KeyError:
            raise MissingResponseEntry(question_id) from None

    def _apply(self, action: str, transition: Callable[..., Response], *args: object) -> Optional[Response]:
        with self._lock:
            if self._snapshot is not None:
                logger.debug("Ignoring %s after finish", action)
                return None
            qid = self.current_question.id
            try:
                current = self._lookup(qid)
            except MissingResponseEntry as exc:
                logger.warning("Ignoring %s: %s", action, exc)
                return None
            updated = transition(current, *args)
            self._responses[qid] = updated
            return updated

    def _release_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None

    def _freeze(self, reason: str) -> FinishedSession:
        self._timer.stop()
        self._release_ticker()
        self._snapshot = FinishedSession(
            session_id=self.session_id,
            started_at=self.started_at,
            finished_at=datetime.now(timezone.utc),
            duration_minutes=self.duration_minutes,
            questions=self.questions,
            responses=tuple(self._responses[q.id] for q in self.questions),
            remaining_seconds=self._timer.remaining,
            reason=reason,
        )
        logger.info("Session %s finished (%s), %ds left", self.session_id, reason, self._timer.remaining)
        return self._snapshot
