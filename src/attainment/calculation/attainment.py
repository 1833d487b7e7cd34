from typing import List, Optional, Sequence

from loguru import logger

from attainment.config.engine import EngineConfig
from attainment.models.enums import MeasurementMode, SourceFeed, Trend
from attainment.models.record import MetricRecord


def ratio_attainment(
    meta: Optional[float], result: Optional[float], trend: Trend
) -> Optional[float]:
    """
    Attainment in percent of ``result`` against ``meta``.

    HIGHER_BETTER gives result/meta, LOWER_BETTER gives meta/result. A missing
    side counts as zero for the numerator; a zero or missing denominator gives
    None instead of an infinite value.
    """
    if trend == Trend.LOWER_BETTER:
        if not result or meta is None:
            return None
        return meta / result * 100

    if not meta:
        return None
    return (result or 0.0) / meta * 100


def point_attainment(record: MetricRecord) -> Optional[float]:
    """
    Attainment of a single month cell.

    None only when the cell was never measured (meta and result both absent
    or zero) or a division guard trips. A present meta with a zero or blank
    result is a valid 0%.
    """
    if not record.has_signal:
        return None
    return ratio_attainment(record.meta, record.result, record.trend)


def last_with_result(records: Sequence[MetricRecord]) -> Optional[int]:
    """Index of the last record carrying a non-null result."""
    for index in range(len(records) - 1, -1, -1):
        if records[index].result is not None:
            return index
    return None


def accumulated_attainment(
    records: Sequence[MetricRecord], trend: Trend
) -> Optional[float]:
    """Sums meta and result up to the last realized record and compares them.

    Records after the last non-null result are future targets and are left
    out of both sums.
    """
    last_index = last_with_result(records)
    if last_index is None:
        return None

    realized = records[: last_index + 1]
    sum_meta = sum(record.meta or 0.0 for record in realized)
    sum_result = sum(record.result or 0.0 for record in realized)
    return ratio_attainment(sum_meta, sum_result, trend)


def evolution_attainment(
    records: Sequence[MetricRecord],
    trend: Trend,
    final_meta: Optional[float] = None,
) -> Optional[float]:
    """Compares the latest realized result with the final-period meta.

    When ``final_meta`` is not known the meta of the latest realized record
    is used instead.
    """
    last_index = last_with_result(records)
    if last_index is None:
        return None

    last = records[last_index]
    meta = final_meta if final_meta is not None else last.meta
    return ratio_attainment(meta, last.result, trend)


def series_attainment(
    records: Sequence[MetricRecord],
    mode: MeasurementMode,
    trend: Trend,
    final_meta: Optional[float] = None,
) -> Optional[float]:
    """Evaluates a chronological run of records with the indicator's mode."""
    if not records:
        return None

    if mode == MeasurementMode.ACCUMULATED:
        return accumulated_attainment(records, trend)
    if mode in (MeasurementMode.EVOLUTION, MeasurementMode.AVERAGE):
        return evolution_attainment(records, trend, final_meta)

    logger.warning(f"Unsupported measurement mode: {mode}")
    return None


def clamp_for_feed(
    value: Optional[float], source: SourceFeed, config: EngineConfig
) -> Optional[float]:
    """Caps values of the clamped feeds (OKR by default) at the ceiling."""
    if value is None:
        return None
    if source in config.clamped_feeds:
        return min(value, config.clamp_ceiling)
    return value


def mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)
