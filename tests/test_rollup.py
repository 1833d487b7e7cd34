from __future__ import annotations

import pytest

from attainment.calculation.grouping import group_records
from attainment.calculation.rollup import rollup_all, rollup_series
from attainment.models.enums import MeasurementMode, RollupScope, SourceFeed
from attainment.models.period import Period, PeriodTarget
from attainment.models.series import IndicatorSeries
from conftest import make_record


def _series(*records) -> IndicatorSeries:
    (series,) = group_records(list(records)).values()
    return series


def test_month_target_uses_exact_record() -> None:
    series = _series(make_record(100, 50, month=1), make_record(100, 80, month=2))

    result = rollup_series(series, PeriodTarget(year=2025, month=2))

    assert result.value == pytest.approx(80.0)
    assert result.period == Period(year=2025, month=2)
    assert result.team == "CONSULTORIA"
    assert result.source == SourceFeed.KPI
    assert result.indicator_key == "receita"


def test_missing_month_is_none_not_zero() -> None:
    series = _series(make_record(100, 50, month=1))
    result = rollup_series(series, PeriodTarget(year=2025, month=2))
    assert result.value is None
    assert not result.has_value


def test_month_target_ignores_mode_and_uses_point_evaluation() -> None:
    mode = MeasurementMode.ACCUMULATED
    series = _series(
        make_record(100, 50, month=1, mode=mode),
        make_record(100, 100, month=2, mode=mode),
    )
    result = rollup_series(series, PeriodTarget(year=2025, month=2))
    assert result.value == pytest.approx(100.0)
    assert result.basis == MeasurementMode.ACCUMULATED


def test_year_to_date_accumulates_through_target_month() -> None:
    mode = MeasurementMode.ACCUMULATED
    series = _series(
        make_record(100, 80, month=1, mode=mode),
        make_record(100, None, month=2, mode=mode),
        make_record(100, 90, month=3, mode=mode),
    )

    result = rollup_series(
        series, PeriodTarget(year=2025, month=2, scope=RollupScope.YEAR)
    )

    assert result.value == pytest.approx(80.0)
    assert result.period == Period(year=2025)


def test_year_to_date_evolution_uses_december_meta() -> None:
    series = _series(
        make_record(100, 50, month=1),
        make_record(100, 60, month=2),
        make_record(200, None, month=12),
    )
    result = rollup_series(
        series, PeriodTarget(year=2025, month=2, scope=RollupScope.YEAR)
    )
    assert result.value == pytest.approx(30.0)


def test_year_to_date_without_final_meta_uses_latest_meta_in_range() -> None:
    series = _series(make_record(100, 50, month=1), make_record(120, 60, month=2))
    result = rollup_series(
        series, PeriodTarget(year=2025, month=2, scope=RollupScope.YEAR)
    )
    assert result.value == pytest.approx(50.0)


def test_other_years_are_ignored() -> None:
    series = _series(
        make_record(100, 100, month=12, year=2024),
        make_record(100, None, month=1, year=2025),
    )
    result = rollup_series(
        series, PeriodTarget(year=2025, month=3, scope=RollupScope.YEAR)
    )
    assert result.value is None


def test_quarter_to_date_window_and_final_month() -> None:
    series = _series(
        make_record(100, 100, month=3),
        make_record(100, 40, month=4),
        make_record(100, 45, month=5),
        make_record(90, None, month=6),
    )

    result = rollup_series(
        series, PeriodTarget(year=2025, month=5, scope=RollupScope.QUARTER)
    )

    assert result.value == pytest.approx(50.0)
    assert result.period == Period(year=2025, quarter=2)


def test_rollup_all_keeps_series_order() -> None:
    series_map = group_records(
        [make_record(100, 90, key="b"), make_record(100, 80, key="a")]
    )
    results = rollup_all(series_map, PeriodTarget(year=2025, month=1))
    assert [result.indicator_key for result in results] == ["a", "b"]
