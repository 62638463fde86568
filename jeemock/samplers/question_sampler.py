from __future__ import annotations

"""Question supply: draw an exam from a local YAML/JSON question bank.

The counts follow the paper layout: the total is split across subjects
(remainder to the earlier ones), and each subject is split 80/20 between
MCQs and numericals with at least one MCQ.
"""

import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

import yaml

from ..models import Question, QuestionType, Subject, TestConfig
from ..util.randomness import make_rng

logger = logging.getLogger(__name__)


# ---- Provider seam ----
class QuestionProvider(Protocol):
    def provide(self, config: TestConfig) -> List[Question]: ...


def distribute_count(total: int, parts: int) -> List[int]:
    """Split ``total`` into ``parts`` near-equal counts, remainder to the front."""
    if parts <= 0:
        return []
    base, remainder = divmod(max(0, int(total)), parts)
    return [base + 1 if i < remainder else base for i in range(parts)]


def split_types(count: int) -> Tuple[int, int]:
    """(mcq, numerical) for a subject total; 0 stays 0."""
    if count <= 0:
        return 0, 0
    mcq = max(1, int(count * 0.8))
    return mcq, max(0, count - mcq)


def _read_records(path: Path) -> List[Dict[str, Any]]:
    text = path.read_text(encoding="utf-8")
    data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    if isinstance(data, dict):
        data = data.get("questions", [])
    return data if isinstance(data, list) else []


def load_bank(path: str | Path) -> List[Question]:
    """Load questions from a bank file; invalid records are skipped with a warning."""
    p = Path(path)
    questions: List[Question] = []
    seen: set[str] = set()
    for i, raw in enumerate(_read_records(p)):
        if not isinstance(raw, dict):
            logger.warning("Skipping bank record %d: not a mapping", i)
            continue
        try:
            q = Question.from_json(raw)
        except (KeyError, ValueError) as exc:
            logger.warning("Skipping bank record %d: %s", i, exc)
            continue
        if q.id in seen:
            logger.warning("Skipping bank record %d: duplicate id %r", i, q.id)
            continue
        seen.add(q.id)
        questions.append(q)
    logger.info("Loaded %d questions from %s", len(questions), p)
    return questions


@dataclass
class SamplerConfig:
    rng_seed: Optional[int] = None


class BankSampler:
    """QuestionProvider backed by an in-memory bank.

    Difficulty is carried on the TestConfig but the bank has no difficulty
    labels, so it does not filter the draw.
    """

    def __init__(self, questions: Iterable[Question], rng: Optional[random.Random] = None) -> None:
        self.questions: Tuple[Question, ...] = tuple(questions)
        self.rng = rng if rng is not None else make_rng()

    @classmethod
    def from_file(cls, path: str | Path, cfg: Optional[SamplerConfig] = None) -> "BankSampler":
        cfg = cfg or SamplerConfig()
        return cls(load_bank(path), make_rng(cfg.rng_seed))

    def chapters(self, subject: Subject) -> List[str]:
        out: List[str] = []
        for q in self.questions:
            if q.subject is subject and q.chapter and q.chapter not in out:
                out.append(q.chapter)
        return out

    def _pool(self, subject: Subject, qtype: QuestionType, chapters: Sequence[str]) -> List[Question]:
        return [
            q
            for q in self.questions
            if q.subject is subject and q.type is qtype and (not chapters or q.chapter in chapters)
        ]

    def _draw(self, pool: List[Question], n: int) -> List[Question]:
        if n <= 0 or not pool:
            return []
        if n > len(pool):
            logger.warning("Bank short: wanted %d, have %d", n, len(pool))
            n = len(pool)
        return self.rng.sample(pool, n)

    def provide(self, config: TestConfig) -> List[Question]:
        subjects = list(config.subjects)
        if not subjects:
            return []
        counts = distribute_count(config.question_count, len(subjects))
        out: List[Question] = []
        for subject, total in zip(subjects, counts):
            if total == 0:
                continue
            chapters: List[str] = []
            if config.chapters:
                own = set(self.chapters(subject))
                chapters = [c for c in config.chapters if c in own]
                # chapters were chosen, none for this subject
                if not chapters:
                    continue
            n_mcq, n_num = split_types(total)
            out += self._draw(self._pool(subject, QuestionType.MCQ, chapters), n_mcq)
            out += self._draw(self._pool(subject, QuestionType.NUMERICAL, chapters), n_num)
        logger.debug("Sampled %d/%d questions", len(out), config.question_count)
        return out
