from __future__ import annotations

import pytest

from attainment.config.engine import EngineConfig
from attainment.models.enums import RollupScope, SourceFeed
from attainment.models.period import PeriodTarget
from attainment.pipeline import refresh_cache_key, run_pipeline
from conftest import make_kpi_row, make_okr_row, make_project_row

JANUARY = PeriodTarget(year=2025, month=1)


@pytest.fixture
def consultoria_rows() -> dict[SourceFeed, list[list[str]]]:
    return {
        SourceFeed.KPI: [
            make_kpi_row(
                "CONSULTORIA PERFORMANCE",
                "Receita recorrente",
                "100",
                "90",
                mode="ACUMULADO NO ANO",
                trend="MAIOR, MELHOR",
            )
        ],
        SourceFeed.OKR: [make_okr_row("CONSULTORIA", "Novos clientes", "100", "120")],
    }


def test_consultoria_end_to_end(consultoria_rows, engine_config: EngineConfig) -> None:
    output = run_pipeline(consultoria_rows, JANUARY, engine_config)

    (card,) = output.scorecards
    assert card.team == "CONSULTORIA"
    assert card.kpi_avg == pytest.approx(90.0)
    assert card.okr_avg == pytest.approx(100.0)
    assert card.project_avg is None
    assert card.overall_avg == pytest.approx(95.0)
    assert card.indicator_count == 2
    assert card.meets_bar

    # Drill-down keeps the raw OKR value; the clamp only applies to averages
    okr_result = next(r for r in output.results if r.source == SourceFeed.OKR)
    assert okr_result.value == pytest.approx(120.0)


def test_pipeline_is_idempotent(consultoria_rows) -> None:
    first = run_pipeline(consultoria_rows, JANUARY)
    second = run_pipeline(consultoria_rows, JANUARY)
    assert first.model_dump_json() == second.model_dump_json()
    assert first.cache_key == second.cache_key


def test_empty_feeds_give_empty_scorecards() -> None:
    output = run_pipeline({}, JANUARY)
    assert output.scorecards == []
    assert output.results == []
    assert output.summary.team_count == 0


def test_okr_fanout_reaches_both_teams(fanout_config: EngineConfig) -> None:
    rows = {
        SourceFeed.KPI: [
            make_kpi_row("VENDAS", "Receita", "100", "70"),
            make_kpi_row("PARCERIAS", "Contratos", "10", "9"),
        ],
        SourceFeed.OKR: [
            make_okr_row("COMERCIAL", "Pipeline", "100", "80"),
            make_okr_row("DIRETORIA", "Margem", "100", "10"),
        ],
    }

    output = run_pipeline(rows, JANUARY, fanout_config)

    cards = {card.team: card for card in output.scorecards}
    assert set(cards) == {"VENDAS", "PARCERIAS"}
    assert cards["VENDAS"].okr_avg == pytest.approx(80.0)
    assert cards["PARCERIAS"].okr_avg == pytest.approx(80.0)
    assert cards["VENDAS"].overall_avg == pytest.approx(75.0)
    assert cards["PARCERIAS"].overall_avg == pytest.approx(85.0)
    assert [card.team for card in output.scorecards] == ["PARCERIAS", "VENDAS"]


def test_unknown_team_stays_visible(engine_config: EngineConfig) -> None:
    rows = {SourceFeed.KPI: [make_kpi_row("TIME NOVO", "Receita", "100", "40")]}
    output = run_pipeline(rows, JANUARY, engine_config)
    (card,) = output.scorecards
    assert card.team == "TIME NOVO"
    assert [result.indicator_name for result in output.attention] == ["Receita"]


def test_year_to_date_scorecard(engine_config: EngineConfig) -> None:
    rows = {
        SourceFeed.KPI: [
            make_kpi_row("TI", "Chamados", "100", "80", competency="01/01/2025"),
            make_kpi_row("TI", "Chamados", "100", "", competency="01/02/2025"),
        ],
        SourceFeed.PROJECT: [
            make_project_row("TI", "Novo ERP", "100", "50", impact_date="10/02/2025"),
        ],
    }
    target = PeriodTarget(year=2025, month=2, scope=RollupScope.YEAR)

    output = run_pipeline(rows, target, engine_config)

    (card,) = output.scorecards
    assert card.kpi_avg == pytest.approx(80.0)
    assert card.project_avg == pytest.approx(50.0)
    assert card.overall_avg == pytest.approx(65.0)
    assert output.summary.meeting_bar_count == 0


def test_cache_key_tracks_rows_and_target(consultoria_rows) -> None:
    key = refresh_cache_key(consultoria_rows, JANUARY)
    assert key == refresh_cache_key(dict(consultoria_rows), JANUARY)
    assert key != refresh_cache_key(consultoria_rows, PeriodTarget(year=2025, month=2))

    changed = dict(consultoria_rows)
    changed[SourceFeed.OKR] = [make_okr_row("CONSULTORIA", "Novos clientes", "100", "121")]
    assert key != refresh_cache_key(changed, JANUARY)


def test_team_silent_in_target_month_is_left_out(engine_config: EngineConfig) -> None:
    rows = {
        SourceFeed.KPI: [
            make_kpi_row("TI", "Chamados", "100", "90", competency="01/2025"),
            make_kpi_row("MARKETING", "Leads", "100", "95", competency="02/2025"),
        ]
    }

    output = run_pipeline(rows, PeriodTarget(year=2025, month=2), engine_config)

    assert [card.team for card in output.scorecards] == ["MARKETING"]
    assert output.summary.team_count == 1
    assert output.summary.meeting_bar_pct == pytest.approx(100.0)
    assert output.summary.consolidated_avg == pytest.approx(95.0)
