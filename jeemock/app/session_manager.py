from __future__ import annotations

"""Session Manager: orchestrates question supply, the exam session, scoring and persistence.

It is CLI-agnostic: a front end starts a session, drives the returned
``ExamSession`` and reads the ``ResultReport`` once the session finishes,
whether by submit or by timeout.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .. import __version__
from ..errors import ConfigurationError, ExamError, HistoryWriteError
from ..models import TestConfig
from ..results.persist import HistoryStore
from ..results.schema import HistoryConfig, HistoryEntry
from ..samplers.question_sampler import QuestionProvider
from ..session.engine import ExamSession, FinishedSession
from ..stats.scoring import ResultReport, ScoringScheme, score_session
from ..storage.schema import SessionMeta
from ..storage.store import append_attempts, attempt_records, init_store, upsert_session_meta, validate_records
from .events import FINISH, EventBus
from .explain import trace as xtrace
from .ticker import TickSource

logger = logging.getLogger(__name__)

# how long submit() waits for a finish already running on the ticker thread
_FINISH_WAIT_S = 5.0


@dataclass(frozen=True)
class SessionContext:
    config: TestConfig
    preset: Optional[str]
    started_at: datetime


class SessionManager:
    def __init__(
        self,
        cfg: Dict[str, Any],
        provider: QuestionProvider,
        *,
        history: Optional[HistoryStore] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        hist = cfg.get("history", {})
        self.history = history or HistoryStore(hist.get("path", "./jeemock_history.json"), hist.get("max_entries", 50))
        stats = cfg.get("stats", {})
        self.stats_dir: Optional[Path] = None if stats.get("disable") else Path(stats.get("data_dir", "./jeemock_data"))
        scoring = cfg.get("scoring", {})
        self.scheme = ScoringScheme(correct=int(scoring.get("correct", 4)), incorrect=int(scoring.get("incorrect", -1)))
        self.events = events or EventBus()
        self.events.subscribe(FINISH, self._on_finish)

        self.ctx: Optional[SessionContext] = None
        self.session: Optional[ExamSession] = None
        self.persist_error: Optional[HistoryWriteError] = None
        self.entry: Optional[HistoryEntry] = None
        self._report: Optional[ResultReport] = None
        self._lock = threading.Lock()
        self._done = threading.Event()

    def start(
        self,
        config: TestConfig,
        *,
        ticker: Optional[TickSource] = None,
        preset: Optional[str] = None,
    ) -> ExamSession:
        """Draw questions for ``config`` and start a session.

        Raises:
            ConfigurationError: the config cannot be recorded in history, or
                no questions could be supplied.
            ExamError: a previous session is still running.
        """
        if self.session is not None and not self.session.is_finished:
            raise ExamError("A session is already running")
        try:
            HistoryConfig.from_test_config(config)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid test config: {exc}") from exc
        questions = self.provider.provide(config)
        if not questions:
            raise ConfigurationError("No questions were generated for this configuration")

        with self._lock:
            self._report = None
            self.entry = None
            self.persist_error = None
            self._done.clear()
        self.ctx = SessionContext(config=config, preset=preset, started_at=datetime.now(timezone.utc))
        self.session = ExamSession(questions, config.duration_minutes, ticker=ticker, events=self.events)
        xtrace(
            "session_started",
            {
                "session_id": self.session.session_id,
                "preset": preset,
                "questions": len(questions),
                "duration_minutes": config.duration_minutes,
                "topics": config.topics,
            },
        )
        return self.session

    @property
    def report(self) -> Optional[ResultReport]:
        """The scored result, available even when persisting it failed."""
        return self._report

    def result(self) -> Optional[ResultReport]:
        """Scored result of the finished session, or None while it is running.

        Raises:
            HistoryWriteError: the result was scored but could not be saved.
        """
        if self.session is None or not self.session.is_finished:
            return None
        self._done.wait(_FINISH_WAIT_S)
        if self.persist_error is not None:
            raise self.persist_error
        return self._report

    def submit(self) -> Optional[ResultReport]:
        if self.session is None:
            raise ExamError("No session has been started")
        self.session.finish()
        return self.result()

    def close(self) -> None:
        if self.session is not None:
            self.session.close()

    def load_history(self) -> List[HistoryEntry]:
        return self.history.load()

    # --- finish path ---

    def _on_finish(self, snapshot: FinishedSession) -> None:
        with self._lock:
            # only the current session is recorded, and only once
            if self.session is None or snapshot.session_id != self.session.session_id or self._report is not None:
                return
            try:
                self._record(snapshot)
            finally:
                self._done.set()

    def _record(self, snapshot: FinishedSession) -> None:
        assert self.ctx is not None
        report = score_session(snapshot.questions, snapshot.responses, self.scheme)
        self._report = report
        xtrace(
            "session_finished",
            {
                "session_id": snapshot.session_id,
                "reason": snapshot.reason,
                "score": report.score,
                "max_score": report.max_score,
                "accuracy": report.accuracy,
                "verdict": report.verdict.title,
            },
        )

        try:
            entry = HistoryEntry.from_result(report, self.ctx.config, session_id=snapshot.session_id, now=snapshot.finished_at)
            kept = self.history.append(entry)
        except ValueError as exc:
            logger.error("History entry not built: %s", exc)
            self.persist_error = HistoryWriteError(f"History entry not built: {exc}")
        except HistoryWriteError as exc:
            logger.error("History not saved: %s", exc)
            self.persist_error = exc
        else:
            self.entry = entry
            xtrace("history_appended", {"id": entry.id, "entries": len(kept)})

        if self.stats_dir is not None:
            self._write_stats(snapshot, report)

    def _write_stats(self, snapshot: FinishedSession, report: ResultReport) -> None:
        assert self.stats_dir is not None
        try:
            init_store(self.stats_dir)
            append_attempts(validate_records(attempt_records(snapshot, report)), self.stats_dir)
            upsert_session_meta(
                SessionMeta(
                    session_id=snapshot.session_id,
                    session_start=snapshot.started_at,
                    duration_minutes=snapshot.duration_minutes,
                    reason=snapshot.reason,
                    score=report.score,
                    max_score=report.max_score,
                    app_version=__version__,
                ),
                self.stats_dir,
            )
        except (OSError, ValueError) as exc:
            # attempt stats are secondary to history; the result stays valid
            logger.warning("Attempt stats not written to %s: %s", self.stats_dir, exc)
