from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from yieldind.core.config import AnalyticsConfig
from yieldind.core.use_cases.position_analytics import PositionAnalyticsService
from yieldind.storage.state_store import InMemoryStateStore, JsonlStateStore


@pytest.fixture
def memory_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def journal_store(tmp_path: Path) -> JsonlStateStore:
    return JsonlStateStore(tmp_path / "state")


@pytest.fixture
def service(memory_store: InMemoryStateStore) -> PositionAnalyticsService:
    return PositionAnalyticsService(memory_store, AnalyticsConfig())


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[str, Sequence[str], Sequence[Sequence[object]]], Path]:
    """Write a small CSV under tmp_path and return its path."""

    def _write(name: str, header: Sequence[str], rows: Sequence[Sequence[object]]) -> Path:
        path = tmp_path / name
        lines = [",".join(header)] + [",".join(str(v) for v in row) for row in rows]
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write
