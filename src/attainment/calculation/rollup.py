from typing import Dict, List, Optional

from loguru import logger

from attainment.models.enums import RollupScope
from attainment.models.period import Period, PeriodTarget, quarter_of
from attainment.models.record import MetricRecord
from attainment.models.results import AttainmentResult
from attainment.models.series import IndicatorSeries, SeriesKey

from .attainment import point_attainment, series_attainment


def result_period(target: PeriodTarget) -> Period:
    """The period an AttainmentResult for ``target`` is reported under."""
    if target.scope == RollupScope.YEAR:
        return Period(year=target.year)
    if target.scope == RollupScope.QUARTER:
        return Period(year=target.year, quarter=quarter_of(target.month))
    return target.period


def records_in_range(
    series: IndicatorSeries, target: PeriodTarget
) -> List[MetricRecord]:
    """Records of the target year from the range start up to the target month."""
    selected = []
    for record in series.records:
        period = record.effective_period
        if period is None or period.year != target.year or period.month is None:
            continue
        if target.range_start_month <= period.month <= target.month:
            selected.append(record)
    return selected


def final_period_meta(
    series: IndicatorSeries, target: PeriodTarget, window: List[MetricRecord]
) -> Optional[float]:
    """
    Meta of the last month of the comparison range.

    For a yearly rollup that is December's meta, even when December has no
    result yet. Falls back to the latest record in ``window`` carrying a meta.
    """
    final = series.record_for(Period(year=target.year, month=target.range_final_month))
    if final is not None and final.meta is not None:
        return final.meta

    for record in reversed(window):
        if record.meta is not None:
            return record.meta
    return None


def rollup_series(series: IndicatorSeries, target: PeriodTarget) -> AttainmentResult:
    """
    Evaluates one indicator series for the target period.

    Month targets look up the record of exactly that month; a missing month
    gives a None value. Quarter and year targets evaluate the records so far
    with the indicator's measurement mode.
    """
    if target.scope == RollupScope.MONTH:
        record = series.record_for(target.period)
        value = point_attainment(record) if record is not None else None
    else:
        window = records_in_range(series, target)
        final_meta = final_period_meta(series, target, window)
        value = series_attainment(
            window, series.measurement_mode, series.trend, final_meta
        )

    logger.bind(feed=series.source).debug(
        f"{series.team} / {series.indicator_name} [{target.label}]: {value}"
    )
    return AttainmentResult(
        value=value,
        basis=series.measurement_mode,
        period=result_period(target),
        source=series.source,
        team=series.team,
        indicator_key=series.indicator_key,
        indicator_name=series.indicator_name,
    )


def rollup_all(
    series_map: Dict[SeriesKey, IndicatorSeries], target: PeriodTarget
) -> List[AttainmentResult]:
    """Evaluates every series for ``target``, keeping the series-map order."""
    results = [rollup_series(series, target) for series in series_map.values()]
    with_value = sum(1 for result in results if result.has_value)
    logger.info(
        f"Rolled up {len(results)} indicators for {target.label} "
        f"({with_value} with a value)."
    )
    return results
