import math
from datetime import date
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from .enums import RollupScope


def quarter_of(month: int) -> int:
    return math.ceil(month / 3)


class Period(BaseModel):
    """A reporting period: a month, a quarter or a whole year."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: Optional[int] = Field(None, ge=1, le=12)
    quarter: Optional[int] = Field(None, ge=1, le=4)

    @model_validator(mode="before")
    @classmethod
    def _derive_quarter(cls, data: Any) -> Any:
        # Quarter always follows the month when both are known
        if isinstance(data, dict) and data.get("month") is not None:
            data = {**data, "quarter": quarter_of(int(data["month"]))}
        return data

    @classmethod
    def from_date(cls, value: date) -> "Period":
        return cls(year=value.year, month=value.month)

    @property
    def sort_key(self) -> Tuple[int, int]:
        if self.month is not None:
            return (self.year, self.month)
        if self.quarter is not None:
            return (self.year, self.quarter * 3)
        return (self.year, 12)

    @computed_field  # type: ignore[misc]
    @property
    def label(self) -> str:
        if self.month is not None:
            return f"{self.month:02d}/{self.year}"
        if self.quarter is not None:
            return f"Q{self.quarter}/{self.year}"
        return str(self.year)

    def __lt__(self, other: "Period") -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return self.sort_key < other.sort_key


class PeriodTarget(BaseModel):
    """The period a refresh is evaluated for.

    ``month`` is the last month taken into account. For ``QUARTER`` and
    ``YEAR`` scopes the comparison range runs from the start of the quarter
    or year up to and including that month.
    """

    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(..., ge=1, le=12)
    scope: RollupScope = RollupScope.MONTH

    @property
    def period(self) -> Period:
        return Period(year=self.year, month=self.month)

    @property
    def range_start_month(self) -> int:
        if self.scope == RollupScope.YEAR:
            return 1
        if self.scope == RollupScope.QUARTER:
            return (quarter_of(self.month) - 1) * 3 + 1
        return self.month

    @property
    def range_final_month(self) -> int:
        """Last month of the comparison range (December for a yearly rollup)."""
        if self.scope == RollupScope.YEAR:
            return 12
        if self.scope == RollupScope.QUARTER:
            return quarter_of(self.month) * 3
        return self.month

    @computed_field  # type: ignore[misc]
    @property
    def label(self) -> str:
        if self.scope == RollupScope.YEAR:
            return f"{self.year} YTD ({self.month:02d})"
        if self.scope == RollupScope.QUARTER:
            return f"Q{quarter_of(self.month)}/{self.year} QTD ({self.month:02d})"
        return f"{self.month:02d}/{self.year}"
