from __future__ import annotations

from datetime import date
from typing import Optional

import pytest

from attainment.config.aliases import AliasTable
from attainment.config.engine import EngineConfig
from attainment.models.enums import MeasurementMode, SourceFeed, Trend
from attainment.models.period import Period
from attainment.models.record import MetricRecord
from attainment.normalization.columns import KPI_COLUMNS, OKR_COLUMNS, PROJECT_COLUMNS


def _place(width: int, values: dict[Optional[int], str]) -> list[str]:
    cells = [""] * width
    for index, value in values.items():
        if index is not None:
            cells[index] = value
    return cells


def make_kpi_row(
    team: str,
    kpi: str,
    meta: str,
    result: str,
    *,
    competency: str = "01/01/2025",
    trend: str = "MAIOR, MELHOR",
    mode: str = "ACUMULADO NO ANO",
    measure: str = "NÚMERO INTEIRO",
    access_level: str = "TODOS",
) -> list[str]:
    return _place(
        30,
        {
            KPI_COLUMNS.team: team,
            KPI_COLUMNS.indicator: kpi,
            KPI_COLUMNS.meta: meta,
            KPI_COLUMNS.result: result,
            KPI_COLUMNS.competency: competency,
            KPI_COLUMNS.trend: trend,
            KPI_COLUMNS.mode: mode,
            KPI_COLUMNS.measure: measure,
            KPI_COLUMNS.access_level: access_level,
        },
    )


def make_okr_row(
    team: str,
    indicator: str,
    meta: str,
    result: str,
    *,
    row_date: str = "15/01/2025",
    key: str = "",
    objective: str = "Crescer com eficiência",
    trend: str = "",
    measure: str = "",
    mode: str = "",
) -> list[str]:
    return _place(
        18,
        {
            OKR_COLUMNS.date: row_date,
            OKR_COLUMNS.team: team,
            OKR_COLUMNS.objective: objective,
            OKR_COLUMNS.indicator: indicator,
            OKR_COLUMNS.meta: meta,
            OKR_COLUMNS.result: result,
            OKR_COLUMNS.trend: trend,
            OKR_COLUMNS.measure: measure,
            OKR_COLUMNS.mode: mode,
            OKR_COLUMNS.key: key,
        },
    )


def make_project_row(
    team: str,
    project: str,
    expected: str,
    achieved: str,
    *,
    project_id: str = "",
    indicator: str = "",
    trend: str = "Subir",
    impact_date: str = "20/01/2025",
    status: str = "EM ANDAMENTO",
) -> list[str]:
    return _place(
        21,
        {
            PROJECT_COLUMNS.key: project_id,
            PROJECT_COLUMNS.objective: project,
            PROJECT_COLUMNS.team: team,
            PROJECT_COLUMNS.indicator: indicator,
            PROJECT_COLUMNS.trend: trend,
            PROJECT_COLUMNS.meta: expected,
            PROJECT_COLUMNS.result: achieved,
            PROJECT_COLUMNS.date: impact_date,
            PROJECT_COLUMNS.status: status,
        },
    )


def make_record(
    meta: Optional[float],
    result: Optional[float],
    *,
    month: Optional[int] = 1,
    year: int = 2025,
    team: str = "CONSULTORIA",
    source: SourceFeed = SourceFeed.KPI,
    key: str = "receita",
    trend: Trend = Trend.HIGHER_BETTER,
    mode: MeasurementMode = MeasurementMode.EVOLUTION,
    record_date: Optional[date] = None,
) -> MetricRecord:
    return MetricRecord(
        source=source,
        source_team_name=team,
        canonical_team=team,
        indicator_name=key.title(),
        indicator_key=key,
        period=Period(year=year, month=month) if month is not None else None,
        record_date=record_date,
        meta=meta,
        result=result,
        trend=trend,
        measurement_mode=mode,
    )


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def fanout_config() -> EngineConfig:
    table = AliasTable(
        teams={
            "VENDAS": {SourceFeed.KPI: ["VENDAS"], SourceFeed.OKR: ["COMERCIAL"]},
            "PARCERIAS": {SourceFeed.KPI: ["PARCERIAS"], SourceFeed.OKR: ["COMERCIAL"]},
        },
        exclusions={SourceFeed.OKR: ["DIRETORIA"]},
    )
    return EngineConfig(alias_table=table)
