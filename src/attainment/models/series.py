from typing import List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, computed_field

from .enums import MeasurementMode, SourceFeed, Trend
from .period import Period
from .record import MetricRecord


class SeriesKey(NamedTuple):
    team: str
    source: SourceFeed
    indicator_key: str


class IndicatorSeries(BaseModel):
    """Chronological records of one indicator for one canonical team."""

    model_config = ConfigDict(frozen=True)

    team: str
    source: SourceFeed
    indicator_key: str
    indicator_name: str
    records: List[MetricRecord] = []

    @property
    def key(self) -> SeriesKey:
        return SeriesKey(self.team, self.source, self.indicator_key)

    @computed_field  # type: ignore[misc]
    @property
    def trend(self) -> Trend:
        # The latest row carries the current tag if the sheet was re-tagged
        if not self.records:
            return Trend.HIGHER_BETTER
        return self.records[-1].trend

    @computed_field  # type: ignore[misc]
    @property
    def measurement_mode(self) -> MeasurementMode:
        if not self.records:
            return MeasurementMode.EVOLUTION
        return self.records[-1].measurement_mode

    def record_for(self, period: Period) -> Optional[MetricRecord]:
        """Returns the record of exactly ``period`` (month granularity)."""
        for record in self.records:
            if record.effective_period == period:
                return record
        return None
