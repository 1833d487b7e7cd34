from typing import Dict, List, Set, Tuple

from loguru import logger

from attainment.config.aliases import AliasTable
from attainment.models.enums import SourceFeed
from attainment.models.record import MetricRecord
from attainment.models.team import CanonicalTeam


def _alias_key(name: str) -> str:
    return (name or "").strip().upper()


class AliasRegistry:
    """Resolves per-feed team spellings to canonical team ids.

    Built once from an AliasTable and shared by reference. A spelling listed
    under several canonical teams fans out to all of them; a spelling listed
    in the table's exclusions resolves to no team at all.
    """

    def __init__(self, table: AliasTable):
        self.table = table
        # Key: (feed, upper-cased spelling), Value: canonical ids in table order
        self._forward: Dict[Tuple[SourceFeed, str], List[str]] = {}
        self._excluded: Set[Tuple[SourceFeed, str]] = set()
        self._warned_unknown: Set[Tuple[SourceFeed, str]] = set()

        for team_id, spellings_by_feed in table.teams.items():
            for feed, spellings in spellings_by_feed.items():
                for spelling in spellings:
                    targets = self._forward.setdefault((feed, _alias_key(spelling)), [])
                    if team_id not in targets:
                        targets.append(team_id)

        for feed, spellings in table.exclusions.items():
            for spelling in spellings:
                self._excluded.add((feed, _alias_key(spelling)))

        logger.debug(
            f"Alias registry built: {len(table.teams)} teams, "
            f"{len(self._forward)} spellings, {len(self._excluded)} exclusions."
        )

    def resolve(self, name: str, feed: SourceFeed) -> List[str]:
        """Returns the canonical ids for ``name`` as spelled in ``feed``.

        An empty list means the team is excluded. Unknown names come back as
        their own trimmed spelling so the rows stay visible.
        """
        key = (feed, _alias_key(name))
        if key in self._excluded:
            return []
        targets = self._forward.get(key)
        if targets:
            return list(targets)

        if key not in self._warned_unknown:
            self._warned_unknown.add(key)
            logger.bind(feed=feed).warning(
                f"No alias entry for team '{name}', bucketing under its own name."
            )
        return [(name or "").strip()]

    def resolve_records(self, records: List[MetricRecord]) -> List[MetricRecord]:
        """Sets canonical_team on every record, duplicating fan-out records."""
        resolved: List[MetricRecord] = []
        excluded = 0
        for record in records:
            targets = self.resolve(record.source_team_name, record.source)
            if not targets:
                excluded += 1
                continue
            for team_id in targets:
                resolved.append(record.model_copy(update={"canonical_team": team_id}))

        logger.info(
            f"Resolved {len(records)} records into {len(resolved)} "
            f"({excluded} excluded by alias table)."
        )
        return resolved

    def aliases_for(self, team_id: str, feed: SourceFeed) -> List[str]:
        return list(self.table.teams.get(team_id, {}).get(feed, []))

    def canonical_teams(self) -> List[CanonicalTeam]:
        return [
            CanonicalTeam(id=team_id, aliases_by_source=spellings)
            for team_id, spellings in self.table.teams.items()
        ]
