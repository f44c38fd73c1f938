"""
queries.py
----------

DuckDB loading of observation files for replays.

Accepted inputs:
    - a CSV file with a header row (read as all-VARCHAR)
    - a Parquet file or glob, e.g. ``data/shards/**/*.parquet``

Requested columns come back as strings so amounts keep every digit; rows
are ordered by ``timestamp``, then ``log_index`` when the source has one,
then source order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from contextlib import contextmanager
from pathlib import Path

import duckdb
import pandas as pd

logger = logging.getLogger(__name__)


# =====================================================================
# DuckDB connection setup
# =====================================================================

@contextmanager
def get_connection(memory_limit: str = "2GB", threads: int = 4):
    """Context manager for DuckDB connections with performance PRAGMAs.

    Args:
        memory_limit: Maximum memory allocation for DuckDB.
        threads: Number of threads for parallel execution.
    """
    con = duckdb.connect()
    try:
        con.execute(f"PRAGMA threads={threads}")
        con.execute(f"PRAGMA memory_limit='{memory_limit}'")
        con.execute("PRAGMA enable_object_cache=true")
        yield con
    finally:
        con.close()


# =====================================================================
# Observations
# =====================================================================

def _reader(path: str) -> str:
    if path.lower().endswith(".csv"):
        return "read_csv(?, header=true, all_varchar=true)"
    return "read_parquet(?, union_by_name=true)"


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def load_observations(
    path: Path | str,
    columns: Sequence[str],
    optional: Sequence[str] = (),
) -> pd.DataFrame:
    """Load observation rows from a CSV or Parquet source.

    Args:
        path: CSV file, Parquet file or Parquet glob.
        columns: Columns that must exist; always includes ``timestamp``.
        optional: Columns returned only when the source has them.

    Returns:
        DataFrame with the present columns as strings, in replay order.

    Raises:
        ValueError: if a required column is missing.
    """
    source = str(path)
    reader = _reader(source)
    wanted = list(dict.fromkeys(["timestamp", *columns]))

    with get_connection() as con:
        con.execute(f"SELECT * FROM {reader} LIMIT 0", [source])
        available = [d[0] for d in con.description]

        missing = [c for c in wanted if c not in available]
        if missing:
            logger.error("load_observations: %s lacks columns %s", source, missing)
            raise ValueError(f"{source} is missing required columns: {', '.join(missing)}")

        selected = wanted + [c for c in optional if c in available and c not in wanted]
        projection = ", ".join(f"CAST({_quote(c)} AS VARCHAR) AS {_quote(c)}" for c in selected)
        order = ['CAST("timestamp" AS BIGINT)']
        if "log_index" in available:
            order.append('CAST("log_index" AS BIGINT)')
        order.append("_row")

        query = f"""
        WITH src AS (
          SELECT *, row_number() OVER () AS _row
          FROM {reader}
        )
        SELECT {projection}
        FROM src
        ORDER BY {", ".join(order)};
        """
        frame = con.execute(query, [source]).df()

    logger.debug("Loaded %d rows from %s", len(frame), source)
    return frame
