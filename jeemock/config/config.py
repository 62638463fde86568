from __future__ import annotations

"""Configuration loading and validation for jeemock.

This module loads YAML configuration, applies defaults, and sanitises
enumerations and numbers, logging a warning for every value it replaces.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigurationError
from ..models import DIFFICULTIES, SUBJECTS, Subject

logger = logging.getLogger(__name__)

# per-subject question count -> exam minutes
DURATION_BY_COUNT = {5: 45, 15: 90, 25: 180}
BUNDLED_BANK = Path(__file__).resolve().parent.parent / "resources" / "banks" / "sample.yml"


def derived_duration(questions_per_subject: int) -> int:
    """Exam minutes for a per-subject count: the listed choices, else 3 min per question."""
    return DURATION_BY_COUNT.get(int(questions_per_subject), max(1, 3 * int(questions_per_subject)))


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigurationError(f"Config file not found: {path}") from None
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        return _load_yaml(Path(path))
    return _load_yaml(Path(__file__).with_name("defaults.yml"))


def _positive_int(section: Dict[str, Any], key: str, fallback: int) -> None:
    try:
        value = int(section.get(key))
    except (TypeError, ValueError):
        value = 0
    if value <= 0:
        logger.warning("Invalid %s %r, using %d", key, section.get(key), fallback)
        value = fallback
    section[key] = value


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    for name in ("exam", "scoring", "history", "stats", "ticker", "bank"):
        if not isinstance(cfg.get(name), dict):
            cfg[name] = {}

    exam = cfg["exam"]
    scoring = cfg["scoring"]
    history = cfg["history"]
    stats = cfg["stats"]
    ticker = cfg["ticker"]
    bank = cfg["bank"]

    exam.setdefault("questions_per_subject", 5)
    exam.setdefault("difficulty", "Mixed")
    exam.setdefault("subjects", [s.value for s in SUBJECTS])
    exam.setdefault("chapters", [])

    scoring.setdefault("correct", 4)
    scoring.setdefault("incorrect", -1)

    history.setdefault("path", "./jeemock_history.json")
    history.setdefault("max_entries", 50)

    stats.setdefault("data_dir", "./jeemock_data")
    stats.setdefault("disable", False)

    ticker.setdefault("interval_s", 1.0)

    if not bank.get("path"):
        bank["path"] = str(BUNDLED_BANK)

    # Exam
    _positive_int(exam, "questions_per_subject", 5)
    if exam.get("duration_minutes") is None:
        exam["duration_minutes"] = derived_duration(exam["questions_per_subject"])
    else:
        _positive_int(exam, "duration_minutes", derived_duration(exam["questions_per_subject"]))

    difficulty = exam.get("difficulty")
    if difficulty not in DIFFICULTIES:
        logger.warning("Unsupported difficulty '%s', using 'Mixed'.", difficulty)
        exam["difficulty"] = "Mixed"

    subjects = []
    for raw in exam.get("subjects") or []:
        try:
            subject = Subject.parse(raw)
        except ValueError:
            logger.warning("Unknown subject '%s' ignored.", raw)
            continue
        if subject.value not in subjects:
            subjects.append(subject.value)
    if not subjects:
        logger.warning("No valid subjects configured, using all three.")
        subjects = [s.value for s in SUBJECTS]
    exam["subjects"] = subjects

    chapters = exam.get("chapters") or []
    if not isinstance(chapters, list):
        logger.warning("exam.chapters must be a list, using full syllabus.")
        chapters = []
    exam["chapters"] = [str(c) for c in chapters]

    # Scoring
    for key, fallback in (("correct", 4), ("incorrect", -1)):
        try:
            scoring[key] = int(scoring[key])
        except (TypeError, ValueError):
            logger.warning("Invalid scoring.%s %r, using %d", key, scoring[key], fallback)
            scoring[key] = fallback

    # History / stats / ticker
    _positive_int(history, "max_entries", 50)
    stats["disable"] = bool(stats.get("disable"))
    try:
        interval = float(ticker["interval_s"])
    except (TypeError, ValueError):
        interval = 0.0
    if interval <= 0:
        logger.warning("Invalid ticker.interval_s %r, using 1.0", ticker["interval_s"])
        interval = 1.0
    ticker["interval_s"] = interval

    return cfg
