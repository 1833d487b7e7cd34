from enum import Enum


class SourceFeed(str, Enum):
    KPI = "KPI"
    OKR = "OKR"
    PROJECT = "PROJECT"


class MeasureKind(str, Enum):
    CURRENCY = "CURRENCY"
    PERCENT = "PERCENT"
    INTEGER = "INTEGER"


class Trend(str, Enum):
    HIGHER_BETTER = "HIGHER_BETTER"
    LOWER_BETTER = "LOWER_BETTER"


class MeasurementMode(str, Enum):
    ACCUMULATED = "ACCUMULATED"  # Sum of results vs sum of targets to date
    EVOLUTION = "EVOLUTION"  # Latest result vs the final period's target
    AVERAGE = "AVERAGE"  # Average-in-year, evaluated like EVOLUTION


class RollupScope(str, Enum):
    MONTH = "MONTH"
    QUARTER = "QUARTER"  # Quarter to date
    YEAR = "YEAR"  # Year so far
