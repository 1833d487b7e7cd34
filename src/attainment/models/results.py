from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .enums import MeasurementMode, SourceFeed
from .period import Period, PeriodTarget


class AttainmentResult(BaseModel):
    """Attainment of one indicator for one period, in percent.

    ``value`` is None when there is no usable data; callers must exclude it
    from averages rather than read it as 0%.
    """

    model_config = ConfigDict(frozen=True)

    value: Optional[float] = None
    basis: MeasurementMode
    period: Optional[Period] = None
    source: Optional[SourceFeed] = None
    team: Optional[str] = None
    indicator_key: Optional[str] = None
    indicator_name: Optional[str] = None

    @property
    def has_value(self) -> bool:
        return self.value is not None


class TeamScorecard(BaseModel):
    """Per-team averages across feeds for one evaluation target."""

    model_config = ConfigDict(frozen=True)

    team: str
    kpi_avg: Optional[float] = None
    okr_avg: Optional[float] = None
    project_avg: Optional[float] = None
    overall_avg: float = 0.0
    indicator_count: int = 0
    pass_bar: float = Field(80.0, exclude=True)

    @computed_field  # type: ignore[misc]
    @property
    def meets_bar(self) -> bool:
        return self.overall_avg >= self.pass_bar


class ScorecardSummary(BaseModel):
    """Headline figures over a whole scorecard set."""

    model_config = ConfigDict(frozen=True)

    team_count: int = 0
    meeting_bar_count: int = 0
    meeting_bar_pct: float = 0.0
    consolidated_avg: Optional[float] = None  # Indicator-weighted overall average
    pass_bar: float = 80.0


class PipelineOutput(BaseModel):
    """Everything one refresh produces, ready for serialization."""

    model_config = ConfigDict(frozen=True)

    target: PeriodTarget
    scorecards: List[TeamScorecard] = []
    summary: ScorecardSummary = ScorecardSummary()
    results: List[AttainmentResult] = []
    attention: List[AttainmentResult] = []
    cache_key: Optional[str] = None
