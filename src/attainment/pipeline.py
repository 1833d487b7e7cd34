from typing import Dict, List, Mapping, Optional, Sequence

from loguru import logger

from attainment.calculation.grouping import group_records
from attainment.calculation.rollup import rollup_all
from attainment.calculation.scorecard import attention_list, build_scorecards, summarize
from attainment.config.engine import EngineConfig
from attainment.models.enums import SourceFeed
from attainment.models.period import PeriodTarget
from attainment.models.results import PipelineOutput
from attainment.models.rows import RawRow
from attainment.normalization.aliases import AliasRegistry
from attainment.normalization.normalizer import Normalizer, RowInput
from attainment.utils.misc_utils import stable_digest


def _row_cells(row: RowInput) -> List[str]:
    if isinstance(row, RawRow):
        return list(row.cells)
    return ["" if cell is None else str(cell) for cell in row]


def refresh_cache_key(
    rows_by_feed: Mapping[SourceFeed, Sequence[RowInput]], target: PeriodTarget
) -> str:
    """Stable key for memoizing a refresh of ``rows_by_feed`` at ``target``."""
    payload = {
        "target": target.model_dump(mode="json"),
        "rows": {
            source.value: [_row_cells(row) for row in rows_by_feed.get(source) or []]
            for source in SourceFeed
        },
    }
    return stable_digest(payload)


def run_pipeline(
    rows_by_feed: Mapping[SourceFeed, Sequence[RowInput]],
    target: PeriodTarget,
    config: Optional[EngineConfig] = None,
    registry: Optional[AliasRegistry] = None,
) -> PipelineOutput:
    """
    Runs one refresh from raw sheet rows to ranked team scorecards.

    Every stage returns new values, so calling this twice with the same
    arguments yields identical output.

    Args:
        rows_by_feed: Rows per feed, header rows already stripped.
        target: The month, quarter-to-date or year-to-date to evaluate.
        config: Engine configuration; the built-in defaults when omitted.
        registry: Prebuilt alias registry for ``config.alias_table``.

    Returns:
        PipelineOutput with scorecards, summary, drill-down results and the
        attention list.
    """
    config = config or EngineConfig()
    registry = registry or AliasRegistry(config.alias_table)

    row_counts: Dict[str, int] = {
        source.value: len(rows_by_feed.get(source) or []) for source in SourceFeed
    }
    logger.info(f"Starting refresh for {target.label} with rows {row_counts}")

    records = Normalizer(config).normalize(rows_by_feed)
    resolved = registry.resolve_records(records)
    series_map = group_records(resolved)
    results = rollup_all(series_map, target)
    scorecards = build_scorecards(results, config)
    summary = summarize(scorecards, config.pass_bar)

    output = PipelineOutput(
        target=target,
        scorecards=scorecards,
        summary=summary,
        results=results,
        attention=attention_list(results, config.attention_threshold),
        cache_key=refresh_cache_key(rows_by_feed, target),
    )
    logger.success(
        f"Refresh complete for {target.label}: {summary.team_count} teams, "
        f"{summary.meeting_bar_count} meeting the {config.pass_bar:.0f}% bar."
    )
    return output
