from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pyarrow.parquet as pq
import pytest

from resdeck.deck import parse_string
from resdeck.io import writer
from resdeck.thpres import ThresholdPressureTable, build_threshold_pressure
from thpres_decks import DECK_THPRES, EXPECTED_3X3


@pytest.fixture
def table(make_grid_properties) -> ThresholdPressureTable:
    return build_threshold_pressure(parse_string(DECK_THPRES), make_grid_properties())


def test_write_csv(tmp_path: Path, table: ThresholdPressureTable) -> None:
    path = writer.write_table(table, tmp_path / "out" / "thpres.csv", "csv")
    frame = pd.read_csv(path, index_col=0)
    assert frame.shape == (3, 3)
    assert frame.to_numpy().ravel().tolist() == EXPECTED_3X3


def test_write_json(tmp_path: Path, table: ThresholdPressureTable) -> None:
    path = writer.write_table(table, tmp_path / "thpres.json", "json")
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["num_regions"] == 3
    assert payload["unit"] == "Pa"
    assert payload["irreversible"] is False
    assert payload["values"] == EXPECTED_3X3


def test_write_parquet(tmp_path: Path, table: ThresholdPressureTable) -> None:
    path = writer.write_table(table, tmp_path / "thpres.parquet", "parquet")
    arrow_table = pq.read_table(path)
    assert arrow_table.schema.metadata[b"pressure_unit"] == b"Pa"
    frame = arrow_table.to_pandas()
    assert len(frame) == 9
    row = frame[(frame.region1 == 2) & (frame.region2 == 3)]
    assert row.pressure.iloc[0] == pytest.approx(7.0e5)


def test_long_frame_of_empty_table() -> None:
    frame = writer.long_frame(ThresholdPressureTable.empty())
    assert frame.empty
    assert list(frame.columns) == ["region1", "region2", "pressure"]


def test_unknown_format(tmp_path: Path, table: ThresholdPressureTable) -> None:
    with pytest.raises(ValueError, match="xlsx"):
        writer.write_table(table, tmp_path / "t.xlsx", "xlsx")  # type: ignore[arg-type]
