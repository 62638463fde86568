import contextlib
import io
import tempfile
import unittest
from pathlib import Path

import yaml

from jeemock.app.cli import main, run_console
from jeemock.app.session_manager import SessionManager
from jeemock.config.config import validate_config
from jeemock.models import TestConfig

from tests.factories import paper
from tests.test_session_manager import FixedProvider


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        root = Path(self.tmp.name)
        self.cfg_path = root / "cfg.yml"
        self.cfg_path.write_text(
            yaml.safe_dump(
                {
                    "history": {"path": str(root / "history.json")},
                    "stats": {"data_dir": str(root / "data")},
                }
            ),
            encoding="utf-8",
        )

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def _main(self, *argv: str):
        out = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(io.StringIO()):
            rc = main(list(argv))
        return rc, out.getvalue()

    def test_presets(self) -> None:
        rc, out = self._main("presets")
        self.assertEqual(rc, 0)
        self.assertIn("quick_start: 15 questions, 30 min, Full Syllabus", out)

    def test_missing_config_exits_1(self) -> None:
        rc, _ = self._main("history", "--config", str(Path(self.tmp.name) / "nope.yml"))
        self.assertEqual(rc, 1)

    def test_usage_error_exits_2(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["run", "--preset", "marathon"])
        self.assertEqual(ctx.exception.code, 2)

    def test_empty_history_and_trend(self) -> None:
        rc, out = self._main("history", "--config", str(self.cfg_path))
        self.assertEqual(rc, 0)
        self.assertIn("No tests taken yet.", out)
        rc, out = self._main("trend", "--config", str(self.cfg_path))
        self.assertEqual(rc, 0)
        self.assertIn("No attempt data yet.", out)

    def test_console_session_then_history_and_trend(self) -> None:
        cfg = validate_config(yaml.safe_load(self.cfg_path.read_text(encoding="utf-8")))
        sm = SessionManager(cfg, FixedProvider(paper(2)))
        script = iter(["a", "mark", "n", "ans 12", "palette", "goto 99", "tab chemistry", "b", "submit"])
        lines: list[str] = []
        rc = run_console(sm, TestConfig(question_count=6, duration_minutes=5), ask=lambda _p: next(script), inform=lines.append)
        self.assertEqual(rc, 0)
        report = sm.report
        self.assertEqual((report.correct, report.incorrect, report.unattempted), (2, 1, 3))
        self.assertEqual(report.score, 7)
        self.assertTrue(any("No question '99'" in line for line in lines))
        self.assertTrue(sm.session.is_finished)

        rc, out = self._main("history", "--config", str(self.cfg_path))
        self.assertEqual(rc, 0)
        self.assertIn("7/24", out)

        rc, out = self._main("trend", "--config", str(self.cfg_path), "--export", str(Path(self.tmp.name) / "t.ndjson"))
        self.assertEqual(rc, 0)
        self.assertIn("Physics", out)
        self.assertTrue((Path(self.tmp.name) / "t.ndjson").exists())

        rc, out = self._main("history", "--config", str(self.cfg_path), "--clear")
        self.assertEqual(rc, 0)
        self.assertEqual(sm.load_history(), [])

    def test_closed_input_abandons_without_scoring(self) -> None:
        cfg = validate_config(yaml.safe_load(self.cfg_path.read_text(encoding="utf-8")))
        sm = SessionManager(cfg, FixedProvider(paper(2)))
        script = iter(["a"])

        def ask(_prompt: str) -> str:
            try:
                return next(script)
            except StopIteration:
                raise EOFError from None

        lines: list[str] = []
        rc = run_console(sm, TestConfig(question_count=6, duration_minutes=5), ask=ask, inform=lines.append)
        self.assertEqual(rc, 1)
        self.assertIsNone(sm.report)
        self.assertFalse(sm.session.is_finished)
        self.assertEqual(sm.load_history(), [])
        self.assertTrue(any("abandoned" in line for line in lines))


if __name__ == "__main__":
    unittest.main()
