from typing import Dict, List, Tuple

from loguru import logger

from attainment.models.period import Period
from attainment.models.record import MetricRecord
from attainment.models.series import IndicatorSeries, SeriesKey


def group_records(records: List[MetricRecord]) -> Dict[SeriesKey, IndicatorSeries]:
    """
    Groups resolved records into chronological indicator series.

    Records sharing a period keep only the one appended last. A record whose
    period is implicit gets it from its date; records with neither are
    dropped.

    Args:
        records: MetricRecords with canonical_team already set.

    Returns:
        Series keyed by (team, source, indicator_key), in key order.
    """
    # Key: series key, Value: (period sort key -> (period, record))
    buckets: Dict[SeriesKey, Dict[Tuple[int, int], Tuple[Period, MetricRecord]]] = {}
    names: Dict[SeriesKey, str] = {}
    dropped = 0

    for record in records:
        if record.canonical_team is None:
            logger.warning(
                f"Record '{record.indicator_name}' reached grouping without a team. Skipping."
            )
            dropped += 1
            continue

        period = record.effective_period
        if period is None:
            logger.bind(feed=record.source).warning(
                f"Record '{record.indicator_name}' of {record.canonical_team} "
                f"(row {record.row_number}) has no period or date. Skipping."
            )
            dropped += 1
            continue
        if record.period is None:
            record = record.model_copy(update={"period": period})

        key = SeriesKey(record.canonical_team, record.source, record.indicator_key)
        # Later rows for the same period replace earlier ones
        buckets.setdefault(key, {})[period.sort_key] = (period, record)
        names[key] = record.indicator_name

    series_map: Dict[SeriesKey, IndicatorSeries] = {}
    for key in sorted(buckets, key=lambda k: (k.team, k.source.value, k.indicator_key)):
        by_period = buckets[key]
        ordered = [by_period[sort_key][1] for sort_key in sorted(by_period)]
        series_map[key] = IndicatorSeries(
            team=key.team,
            source=key.source,
            indicator_key=key.indicator_key,
            indicator_name=names[key],
            records=ordered,
        )

    logger.info(
        f"Grouped {len(records) - dropped} records into {len(series_map)} series "
        f"({dropped} dropped)."
    )
    return series_map
