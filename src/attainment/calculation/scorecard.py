from typing import Dict, List

from loguru import logger

from attainment.config.engine import EngineConfig
from attainment.models.enums import SourceFeed
from attainment.models.results import AttainmentResult, ScorecardSummary, TeamScorecard

from .attainment import clamp_for_feed, mean


def build_scorecards(
    results: List[AttainmentResult], config: EngineConfig
) -> List[TeamScorecard]:
    """
    Combines per-indicator results into one scorecard per canonical team.

    Source averages only take non-null values, with clamped feeds capped
    first. The overall average weighs each available source equally.
    Scorecards come back ranked by overall average, best first.

    Args:
        results: AttainmentResults of one evaluation target.
        config: Engine configuration (pass bar and clamping).

    Returns:
        Ranked list of TeamScorecards.
    """
    # Key: team, Value: (feed -> usable values)
    values_by_team: Dict[str, Dict[SourceFeed, List[float]]] = {}

    for result in results:
        if result.team is None or result.source is None:
            logger.warning(
                f"Result for '{result.indicator_name}' has no team or source. Skipping."
            )
            continue
        by_feed = values_by_team.setdefault(result.team, {})
        value = clamp_for_feed(result.value, result.source, config)
        if value is None:
            by_feed.setdefault(result.source, [])
            continue
        by_feed.setdefault(result.source, []).append(value)

    scorecards: List[TeamScorecard] = []
    for team, by_feed in values_by_team.items():
        kpi_avg = mean(by_feed.get(SourceFeed.KPI, []))
        okr_avg = mean(by_feed.get(SourceFeed.OKR, []))
        project_avg = mean(by_feed.get(SourceFeed.PROJECT, []))
        available = [avg for avg in (kpi_avg, okr_avg, project_avg) if avg is not None]
        if not available:
            logger.debug(f"No values for {team} in this period, no scorecard.")
            continue

        scorecards.append(
            TeamScorecard(
                team=team,
                kpi_avg=kpi_avg,
                okr_avg=okr_avg,
                project_avg=project_avg,
                overall_avg=mean(available),
                indicator_count=sum(len(values) for values in by_feed.values()),
                pass_bar=config.pass_bar,
            )
        )

    scorecards.sort(key=lambda card: (-card.overall_avg, card.team))
    logger.info(
        f"Built {len(scorecards)} team scorecards "
        f"({len(values_by_team) - len(scorecards)} teams without values)."
    )
    return scorecards


def summarize(scorecards: List[TeamScorecard], pass_bar: float) -> ScorecardSummary:
    """Headline figures: teams meeting the bar and the consolidated average.

    The consolidated average weighs each team's overall average by the number
    of indicators behind it.
    """
    meeting = sum(1 for card in scorecards if card.overall_avg >= pass_bar)
    total = len(scorecards)
    indicators = sum(card.indicator_count for card in scorecards)
    consolidated = None
    if indicators:
        weighted = sum(card.overall_avg * card.indicator_count for card in scorecards)
        consolidated = weighted / indicators
    return ScorecardSummary(
        team_count=total,
        meeting_bar_count=meeting,
        meeting_bar_pct=(meeting / total * 100) if total else 0.0,
        consolidated_avg=consolidated,
        pass_bar=pass_bar,
    )


def attention_list(
    results: List[AttainmentResult], threshold: float
) -> List[AttainmentResult]:
    """KPIs with a value below ``threshold``, lowest first."""
    flagged = [
        result
        for result in results
        if result.source == SourceFeed.KPI
        and result.value is not None
        and result.value < threshold
    ]
    flagged.sort(
        key=lambda result: (
            result.value,
            result.team or "",
            result.indicator_key or "",
        )
    )
    return flagged
