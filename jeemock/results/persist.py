from __future__ import annotations

"""Durable JSON history of finished attempts.

File layout (schema 1)::

    {"schema": 1, "entries": [ {id, date, score, max_score, accuracy, topics, config, ...}, ... ]}

Notes:
- Entries are newest first; appending prepends.
- The list is capped (50 by default); every write replaces the whole file.
- A bare JSON list is accepted on load for files written by older clients.
"""

import json
import logging
from pathlib import Path
from typing import Any, List

from pydantic import ValidationError

from ..errors import HistoryWriteError
from .schema import HistoryEntry

logger = logging.getLogger(__name__)

SCHEMA = 1
DEFAULT_MAX_ENTRIES = 50


def _raw_entries(data: Any) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and int(data.get("schema", 0)) == SCHEMA:
        entries = data.get("entries", [])
        return entries if isinstance(entries, list) else []
    return []


class HistoryStore:
    def __init__(self, path: str | Path, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self.path = Path(path)
        self.max_entries = int(max_entries)

    def load(self) -> List[HistoryEntry]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to parse history %s: %s", self.path, exc)
            return []
        entries: List[HistoryEntry] = []
        for raw in _raw_entries(data):
            try:
                entries.append(HistoryEntry.model_validate(raw))
            except ValidationError as exc:
                logger.warning("Skipping invalid history entry: %s", exc.errors()[:1])
        return entries

    def save(self, entries: List[HistoryEntry]) -> List[HistoryEntry]:
        capped = list(entries)[: self.max_entries]
        doc = {"schema": SCHEMA, "entries": [e.model_dump(mode="json") for e in capped]}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2)
        except OSError as exc:
            raise HistoryWriteError(f"Could not write history to {self.path}: {exc}") from exc
        return capped

    def append(self, entry: HistoryEntry) -> List[HistoryEntry]:
        """Prepend ``entry`` and rewrite the capped list."""
        return self.save([entry, *self.load()])

    def clear(self) -> None:
        self.save([])
