"""Storage components for calculator state and replay results.

This package provides:
- InMemoryStateStore / JsonlStateStore: state vector repositories
- write_results: Parquet writer for per-subject metrics
"""

from yieldind.storage.results import results_to_arrow_table, write_results
from yieldind.storage.state_store import InMemoryStateStore, JsonlStateStore

__all__ = [
    "InMemoryStateStore",
    "JsonlStateStore",
    "results_to_arrow_table",
    "write_results",
]
