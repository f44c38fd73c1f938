from __future__ import annotations

from decimal import Decimal
from typing import List, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# IStateRepository
# ---------------------------------------------------------------------------

@runtime_checkable
class IStateRepository(Protocol):
    """
    Abstract store for calculator state vectors.

    Domain expectations:
    - A state is an opaque, ordered list of Decimal values.
    - States are namespaced by `kind` ("pnl", "apr", "daily_avg") and keyed by
      `subject` (an investor position id, a vault address, ...).
    - Calls for one subject are serialized by the caller; the repository does
      not need to guard against concurrent writers of the same key.
    """

    def load(self, kind: str, subject: str) -> List[Decimal]:
        """
        Return the last saved state for (kind, subject), or [] when unknown.

        Implementations:
        - In-memory dict (tests, one-shot replays)
        - JSONL journal on disk (resumable replays)
        - The indexing host's entity store
        """
        ...

    def save(self, kind: str, subject: str, data: List[Decimal]) -> None:
        """
        Persist a state vector, replacing any previous one for (kind, subject).
        """
        ...
