from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger

from attainment.config.engine import EngineConfig
from attainment.models.enums import MeasureKind, MeasurementMode, SourceFeed, Trend
from attainment.models.record import MetricRecord
from attainment.models.rows import ColumnContract, KpiRow, OkrRow, ProjectRow, RawRow
from attainment.normalization.columns import DEFAULT_CONTRACTS
from attainment.normalization.parsing import (
    clean_text,
    is_blank,
    parse_br_date,
    parse_competency,
    parse_metric_cell,
)
from attainment.utils.misc_utils import generate_canonical_id, generate_composite_key

# Rows as handed over by the caller: already-wrapped RawRows or plain cell lists
RowInput = Union[RawRow, Sequence[Optional[str]]]


class NormalizationError(Exception):
    """Raised when a single row cannot be turned into a MetricRecord."""

    pass


class Normalizer:
    """Turns raw sheet rows of the three feeds into typed MetricRecords.

    This is the only component that knows the column layout of each feed.
    """

    def __init__(
        self,
        config: EngineConfig,
        contracts: Optional[Mapping[SourceFeed, ColumnContract]] = None,
    ):
        self.config = config
        self.contracts: Dict[SourceFeed, ColumnContract] = dict(
            contracts or DEFAULT_CONTRACTS
        )
        # Key: upper-cased cell text, Value: tag it stands for
        self.trend_aliases: Dict[str, Trend] = {
            "MAIOR, MELHOR": Trend.HIGHER_BETTER,
            "MAIOR MELHOR": Trend.HIGHER_BETTER,
            "AUMENTAR": Trend.HIGHER_BETTER,
            "SUBIR": Trend.HIGHER_BETTER,
            "MENOR, MELHOR": Trend.LOWER_BETTER,
            "MENOR MELHOR": Trend.LOWER_BETTER,
            "DIMINUIR": Trend.LOWER_BETTER,
            "DESCER": Trend.LOWER_BETTER,
            "BAIXAR": Trend.LOWER_BETTER,
            "REDUZIR": Trend.LOWER_BETTER,
        }
        self.mode_aliases: Dict[str, MeasurementMode] = {
            "ACUMULADO NO ANO": MeasurementMode.ACCUMULATED,
            "ACUMULADO": MeasurementMode.ACCUMULATED,
            "MÉDIA NO ANO": MeasurementMode.AVERAGE,
            "MEDIA NO ANO": MeasurementMode.AVERAGE,
            "MÉDIA": MeasurementMode.AVERAGE,
            "MEDIA": MeasurementMode.AVERAGE,
            "EVOLUÇÃO": MeasurementMode.EVOLUTION,
            "EVOLUCAO": MeasurementMode.EVOLUTION,
            "PONTUAL": MeasurementMode.EVOLUTION,
            "DEGRAU": MeasurementMode.EVOLUTION,
            "PADRÃO": MeasurementMode.EVOLUTION,
            "PADRAO": MeasurementMode.EVOLUTION,
        }
        self.measure_aliases: Dict[str, MeasureKind] = {
            "%": MeasureKind.PERCENT,
            "PORCENTAGEM": MeasureKind.PERCENT,
            "PERCENTUAL": MeasureKind.PERCENT,
            "MOEDA": MeasureKind.CURRENCY,
            "R$": MeasureKind.CURRENCY,
            "REAL": MeasureKind.CURRENCY,
            "NÚMERO INTEIRO": MeasureKind.INTEGER,
            "NUMERO INTEIRO": MeasureKind.INTEGER,
            "INTEIRO": MeasureKind.INTEGER,
        }
        self._excluded_access = {
            level.strip().upper() for level in config.excluded_kpi_access_levels
        }
        self._excluded_status = {
            status.strip().upper() for status in config.excluded_project_statuses
        }
        logger.debug(
            f"Normalizer initialized with contracts for {[s.value for s in self.contracts]}"
        )

    def normalize(
        self, rows_by_feed: Mapping[SourceFeed, Sequence[RowInput]]
    ) -> List[MetricRecord]:
        """Normalizes the rows of every feed, dropping rows that cannot be used.

        Args:
            rows_by_feed: Rows per feed, header rows already stripped.

        Returns:
            MetricRecords in feed order, then row order.
        """
        records: List[MetricRecord] = []

        for source in SourceFeed:
            rows = rows_by_feed.get(source) or []
            if not rows:
                logger.bind(feed=source).debug("No rows received, skipping.")
                continue

            kept = 0
            for index, row in enumerate(rows):
                raw = self._as_raw_row(source, row, index)
                try:
                    record = self.normalize_row(raw)
                except Exception as e:
                    logger.bind(feed=source).exception(
                        f"Unexpected error normalizing row {raw.row_number}: {e}"
                    )
                    continue
                if record is not None:
                    records.append(record)
                    kept += 1

            logger.bind(feed=source).info(
                f"Normalized {kept} of {len(rows)} rows ({len(rows) - kept} dropped)."
            )

        return records

    def normalize_row(self, raw: RawRow) -> Optional[MetricRecord]:
        """Normalizes one row; returns None when the row is dropped."""
        try:
            if raw.source == SourceFeed.KPI:
                return self._normalize_kpi_row(raw)
            if raw.source == SourceFeed.OKR:
                return self._normalize_okr_row(raw)
            if raw.source == SourceFeed.PROJECT:
                return self._normalize_project_row(raw)
        except NormalizationError as e:
            logger.bind(feed=raw.source).warning(
                f"Dropping row {raw.row_number}: {e}"
            )
            return None

        logger.warning(f"Normalization not implemented for feed: {raw.source}")
        return None

    # --- Per-feed schemas ---

    def _read_kpi_row(self, raw: RawRow) -> KpiRow:
        columns = self.contracts[SourceFeed.KPI]
        team, kpi = self._required_identity(raw, columns)
        return KpiRow(
            team=team,
            kpi=kpi,
            meta=raw.cell(columns.meta),
            result=raw.cell(columns.result),
            measure=raw.cell(columns.measure),
            trend=raw.cell(columns.trend),
            mode=raw.cell(columns.mode),
            competency=raw.cell(columns.competency),
            access_level=raw.cell(columns.access_level),
        )

    def _read_okr_row(self, raw: RawRow) -> OkrRow:
        columns = self.contracts[SourceFeed.OKR]
        team, indicator = self._required_identity(raw, columns)
        return OkrRow(
            team=team,
            indicator=indicator,
            key=raw.cell(columns.key),
            objective=raw.cell(columns.objective),
            meta=raw.cell(columns.meta),
            result=raw.cell(columns.result),
            measure=raw.cell(columns.measure),
            trend=raw.cell(columns.trend),
            mode=raw.cell(columns.mode),
            date=raw.cell(columns.date),
        )

    def _read_project_row(self, raw: RawRow) -> ProjectRow:
        columns = self.contracts[SourceFeed.PROJECT]
        team = clean_text(raw.cell(columns.team))
        project = clean_text(raw.cell(columns.objective))
        # A project without an explicit indicator is measured by its own name
        indicator = clean_text(raw.cell(columns.indicator)) or project
        if not team or not indicator:
            raise NormalizationError("missing team or indicator name")
        return ProjectRow(
            project_id=clean_text(raw.cell(columns.key)) or None,
            project=project or None,
            team=team,
            indicator=indicator,
            expected=raw.cell(columns.meta),
            achieved=raw.cell(columns.result),
            trend=raw.cell(columns.trend),
            impact_date=raw.cell(columns.date),
            status=raw.cell(columns.status),
        )

    # --- Per-feed records ---

    def _normalize_kpi_row(self, raw: RawRow) -> Optional[MetricRecord]:
        row = self._read_kpi_row(raw)

        if clean_text(row.access_level).upper() in self._excluded_access:
            logger.bind(feed=raw.source).debug(
                f"Skipping restricted row {raw.row_number} ({row.access_level})."
            )
            return None

        period = parse_competency(row.competency)
        if period is None and not is_blank(row.competency):
            raise NormalizationError(f"unparsable competency '{row.competency}'")

        kind = self._map_measure_kind(row.measure)
        return MetricRecord(
            source=SourceFeed.KPI,
            source_team_name=row.team,
            indicator_name=row.kpi,
            indicator_key=generate_canonical_id(row.kpi),
            period=period,
            measure_kind=kind,
            meta=parse_metric_cell(row.meta, kind),
            result=parse_metric_cell(row.result, kind),
            trend=self._map_trend(row.trend),
            measurement_mode=self._map_mode(row.mode, SourceFeed.KPI),
            row_number=raw.row_number,
        )

    def _normalize_okr_row(self, raw: RawRow) -> Optional[MetricRecord]:
        row = self._read_okr_row(raw)

        record_date = parse_br_date(row.date)
        if record_date is None and not is_blank(row.date):
            raise NormalizationError(f"unparsable date '{row.date}'")

        objective = clean_text(row.objective) or None
        key = clean_text(row.key) or generate_composite_key(
            objective or "", row.indicator
        )
        kind = self._map_measure_kind(row.measure)
        return MetricRecord(
            source=SourceFeed.OKR,
            source_team_name=row.team,
            indicator_name=row.indicator,
            indicator_key=key,
            objective=objective,
            record_date=record_date,
            measure_kind=kind,
            meta=parse_metric_cell(row.meta, kind),
            result=parse_metric_cell(row.result, kind),
            trend=self._map_trend(row.trend),
            measurement_mode=self._map_mode(row.mode, SourceFeed.OKR),
            row_number=raw.row_number,
        )

    def _normalize_project_row(self, raw: RawRow) -> Optional[MetricRecord]:
        row = self._read_project_row(raw)

        if clean_text(row.status).upper() in self._excluded_status:
            logger.bind(feed=raw.source).debug(
                f"Skipping project row {raw.row_number} with status {row.status}."
            )
            return None

        record_date = parse_br_date(row.impact_date)
        if record_date is None and not is_blank(row.impact_date):
            raise NormalizationError(f"unparsable impact date '{row.impact_date}'")

        key = row.project_id or generate_composite_key(
            row.project or "", row.indicator
        )
        return MetricRecord(
            source=SourceFeed.PROJECT,
            source_team_name=row.team,
            indicator_name=row.indicator,
            indicator_key=key,
            objective=row.project,
            record_date=record_date,
            measure_kind=MeasureKind.INTEGER,
            meta=parse_metric_cell(row.expected, MeasureKind.INTEGER),
            result=parse_metric_cell(row.achieved, MeasureKind.INTEGER),
            trend=self._map_trend(row.trend),
            measurement_mode=self.config.default_mode_for(SourceFeed.PROJECT),
            row_number=raw.row_number,
        )

    # --- Helpers ---

    @staticmethod
    def _as_raw_row(source: SourceFeed, row: RowInput, index: int) -> RawRow:
        if isinstance(row, RawRow):
            return row
        cells = ["" if cell is None else str(cell) for cell in row]
        return RawRow(source=source, cells=cells, row_number=index + 1)

    @staticmethod
    def _required_identity(raw: RawRow, columns: ColumnContract) -> Tuple[str, str]:
        team = clean_text(raw.cell(columns.team))
        indicator = clean_text(raw.cell(columns.indicator))
        if not team or not indicator:
            raise NormalizationError("missing team or indicator name")
        return team, indicator

    def _map_trend(self, raw_value: Optional[str]) -> Trend:
        text = clean_text(raw_value).upper()
        if not text:
            return self.config.default_trend
        if text in self.trend_aliases:
            return self.trend_aliases[text]
        if "MENOR" in text or "DIMINU" in text:
            return Trend.LOWER_BETTER
        if "MAIOR" in text or "AUMENT" in text:
            return Trend.HIGHER_BETTER
        logger.debug(f"Unknown trend tag '{raw_value}', using default.")
        return self.config.default_trend

    def _map_mode(self, raw_value: Optional[str], source: SourceFeed) -> MeasurementMode:
        text = clean_text(raw_value).upper()
        if text in self.mode_aliases:
            return self.mode_aliases[text]
        if text:
            logger.bind(feed=source).debug(
                f"Unknown measurement mode '{raw_value}', using feed default."
            )
        return self.config.default_mode_for(source)

    def _map_measure_kind(self, raw_value: Optional[str]) -> MeasureKind:
        text = clean_text(raw_value).upper()
        if text in self.measure_aliases:
            return self.measure_aliases[text]
        if "PORCENT" in text or "PERCENT" in text:
            return MeasureKind.PERCENT
        if "MOEDA" in text or "R$" in text:
            return MeasureKind.CURRENCY
        return MeasureKind.INTEGER
