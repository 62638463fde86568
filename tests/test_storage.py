import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from jeemock.storage.schema import QuestionAttemptRow
from jeemock.storage.store import (
    DATA_FILE,
    append_attempts,
    export_ndjson,
    init_store,
    load_all,
    query_trend,
    validate_records,
)

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _row(sid: str, qid: str, subject: str, outcome: str, *, start: datetime = T0, chapter: str = "Kinematics") -> QuestionAttemptRow:
    points = {"correct": 4, "wrong": -1, "skipped": 0}[outcome]
    return QuestionAttemptRow(
        session_id=sid,
        session_start=start,
        question_id=qid,
        subject=subject,
        qtype="MCQ",
        chapter=chapter,
        outcome=outcome,
        time_s=30,
        points=points,
    )


class SchemaTests(unittest.TestCase):
    def test_naive_start_becomes_utc(self) -> None:
        r = _row("s", "q", "Physics", "correct", start=datetime(2025, 3, 1, 9, 0))
        self.assertEqual(r.session_start.tzinfo, timezone.utc)

    def test_rejects_unknown_subject_and_scored_skip(self) -> None:
        with self.assertRaises(ValidationError):
            _row("s", "q", "Biology", "correct")
        with self.assertRaises(ValidationError):
            QuestionAttemptRow(
                session_id="s", session_start=T0, question_id="q", subject="Physics",
                qtype="MCQ", outcome="skipped", points=4,
            )


class StoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name) / "data"
        init_store(self.dir)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_init_creates_empty_tables(self) -> None:
        self.assertTrue((self.dir / DATA_FILE).exists())
        self.assertTrue(load_all(self.dir).empty)

    def test_validate_sets_dtypes(self) -> None:
        df = validate_records([_row("s1", "q1", "Physics", "correct")])
        self.assertIsInstance(df["subject"].dtype, pd.CategoricalDtype)
        self.assertEqual(str(df["time_s"].dtype), "UInt32")
        self.assertEqual(str(df["session_start"].dtype), "datetime64[ns, UTC]")

    def test_append_is_idempotent_per_session_question(self) -> None:
        rows = validate_records([_row("s1", "q1", "Physics", "correct"), _row("s1", "q2", "Physics", "wrong")])
        append_attempts(rows, self.dir)
        append_attempts(rows, self.dir)
        df = load_all(self.dir)
        self.assertEqual(len(df), 2)
        self.assertEqual(df["correct"].tolist(), [True, False])

    def test_query_trend_orders_sessions(self) -> None:
        later = T0 + timedelta(days=1)
        rows = [
            _row("s2", "q1", "Physics", "correct", start=later),
            _row("s2", "q2", "Physics", "correct", start=later),
            _row("s1", "q1", "Physics", "correct"),
            _row("s1", "q2", "Physics", "wrong"),
            _row("s1", "q3", "Physics", "skipped"),
            _row("s1", "q4", "Chemistry", "wrong", chapter="Equilibrium"),
        ]
        append_attempts(validate_records(rows), self.dir)
        df = load_all(self.dir)
        trend = query_trend(df, subject="physics")
        self.assertEqual(trend["session_id"].tolist(), ["s1", "s2"])
        self.assertEqual(trend["accuracy"].tolist(), [50.0, 100.0])
        self.assertEqual(trend["score"].tolist(), [3, 8])
        self.assertTrue(query_trend(df, subject="Mathematics").empty)
        self.assertEqual(query_trend(df)["attempted"].tolist(), [3, 2])

    def test_export_ndjson(self) -> None:
        append_attempts(validate_records([_row("s1", "q1", "Physics", "correct")]), self.dir)
        out = Path(self.tmp.name) / "out" / "trend.ndjson"
        export_ndjson(query_trend(load_all(self.dir)), out)
        lines = out.read_text(encoding="utf-8").strip().splitlines()
        self.assertEqual(len(lines), 1)
        self.assertIn('"session_id":"s1"', lines[0])


if __name__ == "__main__":
    unittest.main()
