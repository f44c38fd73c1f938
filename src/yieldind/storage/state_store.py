"""State repositories: in-memory and append-only JSONL journal.

Journal layout (one file per state kind)::

    <root>/pnl.jsonl
    <root>/apr.jsonl
    <root>/daily_avg.jsonl

Each save appends one line ``{"subject", "state", "updated_at"}`` where
`state` is the vector with every Decimal written as a string (exact round
trip). On load the last line for a subject wins.
"""

from __future__ import annotations

import json
import logging
import os
import time
from decimal import Decimal, InvalidOperation
from pathlib import Path

from yieldind.core.interfaces import IStateRepository

logger = logging.getLogger(__name__)


class InMemoryStateStore(IStateRepository):
    """Dict-backed repository; state lives as long as the process."""

    def __init__(self) -> None:
        self._states: dict[tuple[str, str], list[Decimal]] = {}

    def load(self, kind: str, subject: str) -> list[Decimal]:
        return list(self._states.get((kind, subject), []))

    def save(self, kind: str, subject: str, data: list[Decimal]) -> None:
        self._states[(kind, subject)] = list(data)


class JsonlStateStore(IStateRepository):
    """Append-only journal of state vectors, one JSONL file per kind.

    Single writer: the in-memory index is built from the journal on first
    access to a kind and kept in sync by `save`.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._index: dict[str, dict[str, list[Decimal]]] = {}

    def journal_path(self, kind: str) -> Path:
        return self.root / f"{kind}.jsonl"

    def load(self, kind: str, subject: str) -> list[Decimal]:
        return list(self._kind_index(kind).get(subject, []))

    def save(self, kind: str, subject: str, data: list[Decimal]) -> None:
        rec = {"subject": subject, "state": [str(v) for v in data], "updated_at": time.time()}
        line = json.dumps(rec, separators=(",", ":")) + "\n"
        self._write_line(self.journal_path(kind), line)
        self._kind_index(kind)[subject] = list(data)

    def _kind_index(self, kind: str) -> dict[str, list[Decimal]]:
        index = self._index.get(kind)
        if index is None:
            index = self._replay(self.journal_path(kind))
            self._index[kind] = index
        return index

    @staticmethod
    def _replay(path: Path) -> dict[str, list[Decimal]]:
        index: dict[str, list[Decimal]] = {}
        if not path.is_file():
            return index
        with open(path) as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    rec = json.loads(line)
                    index[rec["subject"]] = [Decimal(v) for v in rec["state"]]
                except (ValueError, KeyError, TypeError, InvalidOperation) as e:
                    # a torn last line after a crash is expected; keep the previous state
                    logger.warning("Skipping corrupt journal line %s:%d (%s)", path, lineno, e)
        return index

    @staticmethod
    def _write_line(path: Path, line: str) -> None:
        """Write a line to file with immediate flush and sync."""
        with open(path, "a", buffering=1) as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())
