from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import MeasureKind, MeasurementMode, SourceFeed, Trend
from .period import Period


class MetricRecord(BaseModel):
    """One indicator observation for one team and one period.

    ``meta`` and ``result`` are None when the source cell was blank. A parsed
    zero stays 0.0; the two are never interchangeable downstream.
    """

    model_config = ConfigDict(frozen=True)

    source: SourceFeed
    source_team_name: str
    canonical_team: Optional[str] = None  # Set by the alias resolver
    indicator_name: str
    indicator_key: str
    objective: Optional[str] = None
    period: Optional[Period] = None  # Explicit competency, when the feed has one
    record_date: Optional[date] = None
    measure_kind: MeasureKind = MeasureKind.INTEGER
    meta: Optional[float] = None
    result: Optional[float] = None
    trend: Trend = Trend.HIGHER_BETTER
    measurement_mode: MeasurementMode = MeasurementMode.EVOLUTION
    row_number: Optional[int] = Field(None, description="Row position in the feed.")

    @property
    def has_signal(self) -> bool:
        """False when both meta and result are absent or zero."""
        return bool(self.meta) or bool(self.result)

    @property
    def effective_period(self) -> Optional[Period]:
        if self.period is not None:
            return self.period
        if self.record_date is not None:
            return Period.from_date(self.record_date)
        return None
