import sys
import argparse
import csv
from pathlib import Path
from typing import Dict, List, Optional

# --- Settings/Logging ---
from attainment.logging.setup import setup_logging
from attainment.config.settings import build_engine_config, load_settings

settings = load_settings()
setup_logging(settings.log_level)

from loguru import logger

# --- End Settings/Logging ---

from attainment.config.aliases import ConfigurationError
from attainment.models.enums import RollupScope, SourceFeed
from attainment.models.period import PeriodTarget
from attainment.models.results import PipelineOutput
from attainment.pipeline import run_pipeline

from rich import print
from rich.panel import Panel
from rich.table import Table


def read_feed(path: Optional[Path], source: SourceFeed) -> List[List[str]]:
    """Reads one exported sheet, dropping its header row."""
    if path is None:
        logger.bind(feed=source).info("No file given, feed left empty.")
        return []
    with open(path, newline="", encoding="utf-8-sig") as f:
        rows = list(csv.reader(f))
    logger.bind(feed=source).info(f"Read {max(len(rows) - 1, 0)} rows from {path}")
    return rows[1:]


def _fmt(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.1f}%"


def render(output: PipelineOutput) -> None:
    table = Table(title=f"Scorecards {output.target.label}")
    table.add_column("#", justify="right")
    table.add_column("Team")
    table.add_column("KPI", justify="right")
    table.add_column("OKR", justify="right")
    table.add_column("Projects", justify="right")
    table.add_column("Overall", justify="right")
    table.add_column("Indicators", justify="right")

    for position, card in enumerate(output.scorecards, start=1):
        style = "green" if card.meets_bar else "red"
        table.add_row(
            str(position),
            card.team,
            _fmt(card.kpi_avg),
            _fmt(card.okr_avg),
            _fmt(card.project_avg),
            f"[{style}]{card.overall_avg:.1f}%[/{style}]",
            str(card.indicator_count),
        )
    print(table)

    summary = output.summary
    print(
        Panel(
            f"{summary.meeting_bar_count} of {summary.team_count} teams at or above "
            f"{summary.pass_bar:.0f}% ({summary.meeting_bar_pct:.1f}%)\n"
            f"Consolidated average: {_fmt(summary.consolidated_avg)}\n"
            f"{len(output.attention)} KPIs need attention",
            title="Summary",
        )
    )
    for result in output.attention[:10]:
        print(
            f"  [yellow]{result.team}[/yellow] {result.source.value} "
            f"{result.indicator_name}: {_fmt(result.value)}"
        )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute team attainment scorecards from exported sheets."
    )
    parser.add_argument("--kpi", type=Path, help="CSV export of the KPI sheet")
    parser.add_argument("--okr", type=Path, help="CSV export of the OKR sheet")
    parser.add_argument("--project", type=Path, help="CSV export of the project sheet")
    parser.add_argument("--year", type=int, required=True)
    parser.add_argument("--month", type=int, required=True)
    parser.add_argument(
        "--scope",
        choices=[scope.value for scope in RollupScope],
        default=RollupScope.MONTH.value,
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the full output as JSON"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command-line shell."""
    args = parse_args(argv)
    logger.info("Starting attainment refresh")

    try:
        config = build_engine_config(settings)
    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}")
        return 2

    try:
        rows_by_feed: Dict[SourceFeed, List[List[str]]] = {
            SourceFeed.KPI: read_feed(args.kpi, SourceFeed.KPI),
            SourceFeed.OKR: read_feed(args.okr, SourceFeed.OKR),
            SourceFeed.PROJECT: read_feed(args.project, SourceFeed.PROJECT),
        }
    except OSError as e:
        logger.error(f"Failed to read input file: {e}")
        return 1

    target = PeriodTarget(
        year=args.year, month=args.month, scope=RollupScope(args.scope)
    )
    output = run_pipeline(rows_by_feed, target, config)

    if args.json:
        sys.stdout.write(output.model_dump_json(indent=2) + "\n")
    else:
        render(output)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
