import json
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from jeemock.errors import HistoryWriteError
from jeemock.models import Response, Subject, TestConfig
from jeemock.results.persist import HistoryStore
from jeemock.results.schema import HistoryEntry
from jeemock.stats.scoring import score_session

from tests.factories import mcq

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _entry(i: int, config: TestConfig | None = None) -> HistoryEntry:
    qs = [mcq("a"), mcq("b")]
    report = score_session(qs, [Response(question_id="a", selected_option="0")])
    return HistoryEntry.from_result(report, config or TestConfig(), now=T0 + timedelta(seconds=i))


class HistoryEntryTests(unittest.TestCase):
    def test_from_result(self) -> None:
        e = _entry(0, TestConfig(subjects=[Subject.MATHS], chapters=["Limits", "Matrices"], question_count=5))
        self.assertEqual(e.score, 4)
        self.assertEqual(e.max_score, 8)
        self.assertEqual(e.accuracy, 100)
        self.assertEqual(e.topics, "2 Chapters")
        self.assertEqual(e.date, "2025-01-01")
        self.assertEqual(e.id, str(int(T0.timestamp() * 1000)))
        self.assertEqual(e.config.subjects, ["Mathematics"])
        self.assertEqual(e.config.to_test_config().subjects, [Subject.MATHS])

    def test_full_syllabus_topics(self) -> None:
        self.assertEqual(_entry(0).topics, "Full Syllabus")


class HistoryStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "history.json"

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_missing_file_is_empty(self) -> None:
        self.assertEqual(HistoryStore(self.path).load(), [])

    def test_append_prepends(self) -> None:
        store = HistoryStore(self.path)
        store.append(_entry(1))
        store.append(_entry(2))
        ids = [e.id for e in store.load()]
        self.assertEqual(ids, [_entry(2).id, _entry(1).id])

    def test_capped_at_fifty(self) -> None:
        store = HistoryStore(self.path)
        for i in range(55):
            store.append(_entry(i))
        entries = store.load()
        self.assertEqual(len(entries), 50)
        self.assertEqual(entries[0].id, _entry(54).id)
        self.assertEqual(entries[-1].id, _entry(5).id)

    def test_corrupt_file_treated_as_empty(self) -> None:
        self.path.write_text("{not json", encoding="utf-8")
        store = HistoryStore(self.path)
        with self.assertLogs("jeemock.results.persist", level="ERROR"):
            self.assertEqual(store.load(), [])
        store.append(_entry(1))
        self.assertEqual(len(store.load()), 1)

    def test_bare_list_and_invalid_entries(self) -> None:
        good = _entry(1).model_dump(mode="json")
        self.path.write_text(json.dumps([good, {"id": "broken"}]), encoding="utf-8")
        with self.assertLogs("jeemock.results.persist", level="WARNING"):
            entries = HistoryStore(self.path).load()
        self.assertEqual([e.id for e in entries], [good["id"]])

    def test_clear(self) -> None:
        store = HistoryStore(self.path)
        store.append(_entry(1))
        store.clear()
        self.assertEqual(store.load(), [])

    def test_write_failure_raises(self) -> None:
        store = HistoryStore(Path(self.tmp.name))  # a directory, not a file
        with self.assertRaises(HistoryWriteError):
            store.append(_entry(1))


if __name__ == "__main__":
    unittest.main()
