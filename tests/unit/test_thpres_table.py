from __future__ import annotations

import numpy as np
import pytest

from resdeck import errors
from resdeck.deck import parse_string
from resdeck.grid import GridDims
from resdeck.properties import GridProperties, KeywordInfo
from resdeck.thpres import (
    Stage,
    ThresholdPressure,
    ThresholdPressureResult,
    ThresholdPressureTable,
    build_threshold_pressure,
    evaluate_threshold_pressure,
)
from resdeck.warnings import DeckWarning
from thpres_decks import (
    DECK_INCONSISTENT,
    DECK_IRREVERS_EMPTY,
    DECK_IRREVERS_ONLY,
    DECK_MISSING_VALUE,
    DECK_NO_SOLUTION,
    DECK_NO_THPRES_ANYWHERE,
    DECK_OPTION_NOT_THPRES,
    DECK_REGION_TOO_HIGH,
    DECK_THPRES,
    EXPECTED_3X3,
)


def test_three_region_table(make_grid_properties) -> None:
    table = ThresholdPressure(parse_string(DECK_THPRES), make_grid_properties()).table
    assert len(table) == 9
    assert table.num_regions == 3
    assert table.to_list() == EXPECTED_3X3


def test_table_is_symmetric_with_zero_diagonal(make_grid_properties) -> None:
    table = build_threshold_pressure(parse_string(DECK_THPRES), make_grid_properties())
    matrix = table.as_matrix()
    assert np.array_equal(matrix, matrix.T)
    assert np.all(np.diag(matrix) == 0.0)
    assert table.get(1, 2) == 12.0 * 1e5
    assert table.get(3, 2) == 7.0 * 1e5


def test_no_solution_section_gives_empty_table(make_grid_properties) -> None:
    table = build_threshold_pressure(parse_string(DECK_NO_SOLUTION), make_grid_properties())
    assert len(table) == 0
    assert table.is_empty


def test_inactive_option_gives_empty_table(make_grid_properties) -> None:
    props = make_grid_properties()
    table = build_threshold_pressure(parse_string(DECK_NO_THPRES_ANYWHERE), props)
    assert len(table) == 0
    with pytest.warns(DeckWarning, match="ss"):
        table2 = build_threshold_pressure(parse_string(DECK_OPTION_NOT_THPRES), props)
    assert len(table2) == 0


def test_inactive_option_ignores_region_property(make_grid_properties) -> None:
    # EQLNUM is never looked up when THPRES is not requested
    props = make_grid_properties(add_keyword=False)
    table = build_threshold_pressure(parse_string(DECK_NO_THPRES_ANYWHERE), props)
    assert len(table) == 0


def test_irrevers_with_empty_thpres_is_inconsistent(make_grid_properties) -> None:
    with pytest.raises(errors.InconsistentDeckError, match="no records"):
        build_threshold_pressure(parse_string(DECK_IRREVERS_EMPTY), make_grid_properties())


def test_missing_thpres_keyword_is_inconsistent(make_grid_properties) -> None:
    with pytest.raises(errors.InconsistentDeckError, match="no THPRES keyword"):
        build_threshold_pressure(parse_string(DECK_INCONSISTENT), make_grid_properties())


def test_region_number_above_count(make_grid_properties) -> None:
    with pytest.raises(errors.RegionRangeError, match="region 4"):
        build_threshold_pressure(parse_string(DECK_REGION_TOO_HIGH), make_grid_properties())


def test_region_number_zero(make_grid_properties) -> None:
    deck = parse_string(DECK_THPRES.replace("1 3 5.0/", "0 3 5.0/"))
    with pytest.raises(errors.RegionRangeError):
        build_threshold_pressure(deck, make_grid_properties())


def test_missing_pressure_value(make_grid_properties) -> None:
    with pytest.raises(errors.MissingDataError, match="VALUE"):
        build_threshold_pressure(parse_string(DECK_MISSING_VALUE), make_grid_properties())


def test_defaulted_region_is_missing_data(make_grid_properties) -> None:
    deck = parse_string(DECK_THPRES.replace("1 3 5.0/", "1* 3 5.0/"))
    with pytest.raises(errors.MissingDataError, match="REGION1"):
        build_threshold_pressure(deck, make_grid_properties())


def test_region_property_not_added(make_grid_properties) -> None:
    props = make_grid_properties(add_keyword=False)
    with pytest.raises(errors.UninitializedError, match="supported - but not initialized"):
        build_threshold_pressure(parse_string(DECK_THPRES), props)


def test_region_property_not_supported() -> None:
    props = GridProperties(GridDims(3, 3, 3), [KeywordInfo("FIPNUM", 1)])
    with pytest.raises(errors.SchemaError, match="not supported"):
        build_threshold_pressure(parse_string(DECK_THPRES), props)


def test_all_zero_regions(make_grid_properties) -> None:
    props = make_grid_properties(default_eqlnum=0)
    with pytest.raises(errors.InvalidRegionCountError):
        build_threshold_pressure(parse_string(DECK_THPRES), props)


def test_last_record_wins_for_repeated_pair(make_grid_properties) -> None:
    deck = parse_string(DECK_THPRES.replace("2 3 7.0/", "2 3 7.0/\n3 2 9.5/"))
    table = build_threshold_pressure(deck, make_grid_properties())
    assert table.get(2, 3) == pytest.approx(9.5e5)
    assert table.get(3, 2) == pytest.approx(9.5e5)


def test_same_region_pair_keeps_diagonal_zero(make_grid_properties) -> None:
    deck = parse_string(DECK_THPRES.replace("2 3 7.0/", "2 2 7.0/"))
    table = build_threshold_pressure(deck, make_grid_properties())
    assert table.get(2, 2) == 0.0


def test_unlisted_pairs_stay_zero(make_grid_properties) -> None:
    props = make_grid_properties(default_eqlnum=4)
    table = build_threshold_pressure(parse_string(DECK_THPRES), props)
    assert table.num_regions == 4
    assert table.get(1, 4) == 0.0
    assert table.get(4, 3) == 0.0
    assert table.get(1, 3) == pytest.approx(5.0e5)


def test_region_count_follows_max_region_value(make_grid_properties) -> None:
    props = make_grid_properties(default_eqlnum=1)
    props.get_initialized("EQLNUM").set(26, 3)
    table = build_threshold_pressure(parse_string(DECK_THPRES), props)
    assert table.to_list() == EXPECTED_3X3


def test_irreversible_flag_is_recorded(make_grid_properties) -> None:
    deck = parse_string(DECK_THPRES.replace("THPRES /", "THPRES IRREVERS /", 1))
    table = build_threshold_pressure(deck, make_grid_properties())
    assert table.irreversible
    assert table.to_list() == EXPECTED_3X3


def test_build_is_idempotent(make_grid_properties) -> None:
    deck = parse_string(DECK_THPRES)
    props = make_grid_properties()
    first = build_threshold_pressure(deck, props)
    second = build_threshold_pressure(deck, props)
    assert first.values.tobytes() == second.values.tobytes()
    assert first.values is not second.values


def test_table_values_are_read_only(make_grid_properties) -> None:
    table = build_threshold_pressure(parse_string(DECK_THPRES), make_grid_properties())
    with pytest.raises(ValueError):
        table.values[1] = 0.0


def test_evaluate_reports_failing_stage(make_grid_properties) -> None:
    props = make_grid_properties()

    ok = evaluate_threshold_pressure(parse_string(DECK_THPRES), props)
    assert ok.ok and ok.stage is Stage.RECORDS
    assert ok.unwrap().to_list() == EXPECTED_3X3

    inactive = evaluate_threshold_pressure(parse_string(DECK_NO_THPRES_ANYWHERE), props)
    assert inactive.ok and inactive.stage is Stage.OPTION

    pending = evaluate_threshold_pressure(parse_string(DECK_NO_SOLUTION), props)
    assert pending.ok and pending.stage is Stage.PRESENCE
    assert len(pending.table) == 0

    inconsistent = evaluate_threshold_pressure(parse_string(DECK_INCONSISTENT), props)
    assert not inconsistent.ok
    assert inconsistent.stage is Stage.PRESENCE
    assert inconsistent.table is None
    assert isinstance(inconsistent.error, errors.InconsistentDeckError)

    bad_record = evaluate_threshold_pressure(parse_string(DECK_MISSING_VALUE), props)
    assert bad_record.stage is Stage.RECORDS
    with pytest.raises(errors.MissingDataError):
        bad_record.unwrap()


def test_errors_share_base_class(make_grid_properties) -> None:
    with pytest.raises(errors.ResDeckError):
        build_threshold_pressure(parse_string(DECK_INCONSISTENT), make_grid_properties())
    with pytest.raises(RuntimeError):
        build_threshold_pressure(parse_string(DECK_REGION_TOO_HIGH), make_grid_properties())


def test_table_frame_uses_region_labels(make_grid_properties) -> None:
    table = build_threshold_pressure(parse_string(DECK_THPRES), make_grid_properties())
    frame = table.to_frame()
    assert list(frame.index) == [1, 2, 3]
    assert list(frame.columns) == [1, 2, 3]
    assert frame.loc[1, 3] == pytest.approx(5.0e5)


def test_table_shape_is_checked() -> None:
    with pytest.raises(ValueError):
        ThresholdPressureTable(2, np.zeros(3))


def test_irrevers_alone_does_not_activate(make_grid_properties) -> None:
    result = evaluate_threshold_pressure(parse_string(DECK_IRREVERS_ONLY), make_grid_properties())
    assert result.ok
    assert result.stage is Stage.OPTION
    assert result.table.is_empty
    assert result.table.irreversible


def test_unwrap_without_table_or_error() -> None:
    with pytest.raises(errors.ResDeckError, match="neither a table nor an error"):
        ThresholdPressureResult(Stage.OPTION).unwrap()
