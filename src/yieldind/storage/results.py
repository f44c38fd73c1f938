from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pyarrow as pa
import pyarrow.parquet as pq


def results_to_arrow_table(rows: Sequence[dict[str, Any]]) -> pa.Table:
    """Convert result rows to an Arrow table sorted by subject.

    All values are stored as strings (or None) so Decimals keep their exact
    digits. Columns follow the key order of the first row, with keys first
    seen in later rows appended after.
    """
    names: list[str] = []
    for row in rows:
        for k in row:
            if k not in names:
                names.append(k)

    arrays: dict[str, pa.Array] = {}
    for name in names:
        values = [None if row.get(name) is None else str(row[name]) for row in rows]
        arrays[name] = pa.array(values, type=pa.string())
    schema = pa.schema([pa.field(n, pa.string()) for n in names])
    table = pa.Table.from_pydict(arrays, schema=schema)
    if "subject" in names:
        table = table.sort_by([("subject", "ascending")])
    return table


def write_results(rows: Sequence[dict[str, Any]], path: Path | str, *, codec: str = "zstd") -> Path:
    """Write result rows to a single Parquet file."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    pq.write_table(results_to_arrow_table(rows), out, compression=codec)
    return out
