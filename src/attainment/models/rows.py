from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import SourceFeed


class RawRow(BaseModel):
    """A spreadsheet row exactly as read, tagged with the feed it came from."""

    model_config = ConfigDict(frozen=True)

    source: SourceFeed
    cells: List[str] = Field(default_factory=list)
    row_number: Optional[int] = None  # 1-based position in the feed, for logs

    def cell(self, index: Optional[int]) -> Optional[str]:
        """Returns the cell at ``index`` or None when the row is too short."""
        if index is None or index < 0 or index >= len(self.cells):
            return None
        value = self.cells[index]
        return None if value is None else str(value)


class ColumnContract(BaseModel):
    """Fixed 0-based column positions of one feed.

    ``None`` means the feed has no such column.
    """

    model_config = ConfigDict(frozen=True)

    team: int
    indicator: int
    meta: int
    result: int
    key: Optional[int] = None
    objective: Optional[int] = None
    measure: Optional[int] = None
    trend: Optional[int] = None
    mode: Optional[int] = None
    competency: Optional[int] = None
    date: Optional[int] = None
    access_level: Optional[int] = None
    status: Optional[int] = None


# Typed views over a RawRow, built once by the normalizer. All values are
# the trimmed cell text; numeric and date parsing happens afterwards.


class KpiRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    team: str
    kpi: str
    meta: Optional[str] = None
    result: Optional[str] = None
    measure: Optional[str] = None
    trend: Optional[str] = None
    mode: Optional[str] = None
    competency: Optional[str] = None
    access_level: Optional[str] = None


class OkrRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    team: str
    indicator: str
    key: Optional[str] = None
    objective: Optional[str] = None
    meta: Optional[str] = None
    result: Optional[str] = None
    measure: Optional[str] = None
    trend: Optional[str] = None
    mode: Optional[str] = None
    date: Optional[str] = None


class ProjectRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: Optional[str] = None
    project: Optional[str] = None
    team: str
    indicator: str
    expected: Optional[str] = None
    achieved: Optional[str] = None
    trend: Optional[str] = None
    impact_date: Optional[str] = None
    status: Optional[str] = None
