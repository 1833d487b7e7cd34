from typing import Dict, FrozenSet, List

from pydantic import BaseModel, ConfigDict, Field

from attainment.models.enums import MeasurementMode, SourceFeed, Trend

from .aliases import DEFAULT_ALIAS_TABLE, AliasTable


class EngineConfig(BaseModel):
    """Everything the pipeline needs besides the rows themselves.

    Passed explicitly into ``run_pipeline``; nothing in the engine reads
    module-level settings.
    """

    model_config = ConfigDict(frozen=True)

    alias_table: AliasTable = DEFAULT_ALIAS_TABLE

    pass_bar: float = Field(
        80.0, ge=0, description="Overall average a team needs to meet the bar."
    )
    attention_threshold: float = Field(
        60.0, ge=0, description="Indicators below this attainment are flagged."
    )

    # OKR attainment is capped before averaging, KPI and project attainment
    # is not. Kept as observed in the source portal.
    clamp_ceiling: float = 100.0
    clamped_feeds: FrozenSet[SourceFeed] = frozenset({SourceFeed.OKR})

    # Used when a row's mode or trend cell is blank or unrecognised
    default_modes: Dict[SourceFeed, MeasurementMode] = Field(
        default_factory=lambda: {
            SourceFeed.KPI: MeasurementMode.EVOLUTION,
            SourceFeed.OKR: MeasurementMode.ACCUMULATED,
            SourceFeed.PROJECT: MeasurementMode.EVOLUTION,
        }
    )
    default_trend: Trend = Trend.HIGHER_BETTER

    excluded_kpi_access_levels: List[str] = Field(
        default_factory=lambda: ["GESTORES"]
    )
    excluded_project_statuses: List[str] = Field(
        default_factory=lambda: ["CANCELADO", "INATIVO"]
    )

    def default_mode_for(self, source: SourceFeed) -> MeasurementMode:
        return self.default_modes.get(source, MeasurementMode.EVOLUTION)
