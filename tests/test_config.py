import tempfile
import unittest
from pathlib import Path

from jeemock.app import presets
from jeemock.config.config import BUNDLED_BANK, derived_duration, load_config, validate_config
from jeemock.errors import ConfigurationError
from jeemock.models import SUBJECTS, Subject


class ConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = validate_config(load_config())
        self.assertEqual(cfg["exam"]["questions_per_subject"], 5)
        self.assertEqual(cfg["exam"]["duration_minutes"], 45)
        self.assertEqual(cfg["exam"]["subjects"], ["Physics", "Chemistry", "Mathematics"])
        self.assertEqual(cfg["scoring"], {"correct": 4, "incorrect": -1})
        self.assertEqual(cfg["history"]["max_entries"], 50)
        self.assertEqual(cfg["bank"]["path"], str(BUNDLED_BANK))
        self.assertTrue(BUNDLED_BANK.exists())

    def test_empty_config_gets_every_section(self) -> None:
        cfg = validate_config({})
        for name in ("exam", "scoring", "history", "stats", "ticker", "bank"):
            self.assertIn(name, cfg)
        self.assertEqual(cfg["ticker"]["interval_s"], 1.0)
        self.assertFalse(cfg["stats"]["disable"])

    def test_duration_derived_from_count_unless_set(self) -> None:
        self.assertEqual(validate_config({"exam": {"questions_per_subject": 15}})["exam"]["duration_minutes"], 90)
        self.assertEqual(validate_config({"exam": {"questions_per_subject": 25}})["exam"]["duration_minutes"], 180)
        cfg = validate_config({"exam": {"questions_per_subject": 25, "duration_minutes": 60}})
        self.assertEqual(cfg["exam"]["duration_minutes"], 60)
        self.assertEqual(derived_duration(10), 30)

    def test_sanitises_with_warnings(self) -> None:
        raw = {
            "exam": {"difficulty": "Insane", "subjects": ["maths", "Biology", "Physics"], "duration_minutes": -5},
            "ticker": {"interval_s": 0},
        }
        with self.assertLogs("jeemock.config.config", level="WARNING") as logs:
            cfg = validate_config(raw)
        self.assertEqual(cfg["exam"]["difficulty"], "Mixed")
        self.assertEqual(cfg["exam"]["subjects"], ["Mathematics", "Physics"])
        self.assertEqual(cfg["exam"]["duration_minutes"], 45)
        self.assertEqual(cfg["ticker"]["interval_s"], 1.0)
        self.assertGreaterEqual(len(logs.output), 4)

    def test_missing_and_malformed_files(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_config("/nonexistent/jeemock.yml")
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "cfg.yml"
            p.write_text("- just\n- a list\n", encoding="utf-8")
            with self.assertRaises(ConfigurationError):
                load_config(str(p))
            p.write_text("exam: [unclosed\n", encoding="utf-8")
            with self.assertRaises(ConfigurationError):
                load_config(str(p))


class PresetTests(unittest.TestCase):
    def test_per_subject_presets(self) -> None:
        self.assertEqual((presets.from_preset("quick").question_count, presets.from_preset("quick").duration_minutes), (15, 45))
        practice = presets.from_preset("practice")
        self.assertEqual((practice.question_count, practice.duration_minutes), (45, 90))
        full = presets.from_preset("full", subjects=[Subject.PHYSICS])
        self.assertEqual((full.question_count, full.duration_minutes), (25, 180))

    def test_quick_start(self) -> None:
        cfg = presets.from_preset("quick_start", chapters=["Kinematics"])
        self.assertEqual((cfg.question_count, cfg.duration_minutes), (15, 30))
        self.assertEqual(cfg.subjects, list(SUBJECTS))
        self.assertTrue(cfg.is_full_syllabus)

    def test_unknown_preset(self) -> None:
        with self.assertRaises(ValueError):
            presets.from_preset("marathon")

    def test_from_settings(self) -> None:
        cfg = validate_config({"exam": {"questions_per_subject": 15, "subjects": ["Chemistry"]}})
        tc = presets.from_settings(cfg)
        self.assertEqual(tc.subjects, [Subject.CHEMISTRY])
        self.assertEqual((tc.question_count, tc.duration_minutes), (15, 90))


if __name__ == "__main__":
    unittest.main()
