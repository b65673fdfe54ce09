"""Output helper utilities.

The routines in this module provide thin wrappers around :mod:`pandas`
functionality to serialise threshold-pressure tables.  CSV holds the
labelled matrix, JSON a summary with the flat values, and Parquet the
long-form ``(region1, region2, pressure)`` table.  All functions ensure that
destination directories are created when necessary.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Literal

import numpy as np
import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from ..thpres import ThresholdPressureTable

PRESSURE_UNIT = "Pa"


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def table_summary(table: ThresholdPressureTable) -> Dict[str, Any]:
    return {
        "num_regions": table.num_regions,
        "irreversible": table.irreversible,
        "unit": PRESSURE_UNIT,
        "values": table.to_list(),
    }


def long_frame(table: ThresholdPressureTable) -> pd.DataFrame:
    """Return one row per ordered region pair, region numbers 1-based."""
    n = table.num_regions
    region1, region2 = np.divmod(np.arange(n * n), n) if n else (np.zeros(0, int), np.zeros(0, int))
    return pd.DataFrame(
        {
            "region1": np.asarray(region1, dtype=np.int64) + 1,
            "region2": np.asarray(region2, dtype=np.int64) + 1,
            "pressure": np.asarray(table.values, dtype=float),
        }
    )


def write_csv(table: ThresholdPressureTable, path: Path) -> None:
    """Write the labelled ``R × R`` matrix to CSV."""
    _ensure_parent(path)
    table.to_frame().to_csv(path, float_format="%.6g")


def write_json(table: ThresholdPressureTable, path: Path) -> None:
    _ensure_parent(path)
    path.write_text(json.dumps(table_summary(table), indent=2), encoding="utf-8")


def write_parquet(table: ThresholdPressureTable, path: Path, *, compression: str = "snappy") -> None:
    """Write the long-form table to Parquet using ``pyarrow``.

    The pressure unit and the irreversible flag are stored in the schema
    metadata.
    """
    _ensure_parent(path)
    arrow_table = pa.Table.from_pandas(long_frame(table), preserve_index=False)
    metadata = dict(arrow_table.schema.metadata or {})
    metadata[b"pressure_unit"] = PRESSURE_UNIT.encode()
    metadata[b"irreversible"] = str(table.irreversible).lower().encode()
    metadata[b"num_regions"] = str(table.num_regions).encode()
    arrow_table = arrow_table.replace_schema_metadata(metadata)
    pq.write_table(arrow_table, path, compression=compression)


def write_table(
    table: ThresholdPressureTable,
    path: Path,
    fmt: Literal["csv", "json", "parquet"] = "csv",
) -> Path:
    """Dispatch to the writer for ``fmt`` and return the written path."""
    path = Path(path)
    if fmt == "csv":
        write_csv(table, path)
    elif fmt == "json":
        write_json(table, path)
    elif fmt == "parquet":
        write_parquet(table, path)
    else:
        raise ValueError(f"Unknown output format {fmt!r}")
    return path


__all__ = [
    "PRESSURE_UNIT",
    "table_summary",
    "long_frame",
    "write_csv",
    "write_json",
    "write_parquet",
    "write_table",
]
