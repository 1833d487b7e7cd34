"""Locale-aware cell parsing for the Brazilian spreadsheets.

Numbers use ``.`` for thousands and ``,`` for decimals, may carry an
``R$`` prefix or a ``%`` suffix, and dates are ``DD/MM/YYYY``.
"""

import math
import re
from datetime import date, datetime
from typing import Optional

from attainment.models.enums import MeasureKind
from attainment.models.period import Period

# Cells that mean "intentionally blank" rather than zero
BLANK_MARKERS = {"", "-"}

_STRIP_CHARS = re.compile(r"[R$%\s ]")


def is_blank(value: Optional[str]) -> bool:
    return value is None or str(value).strip() in BLANK_MARKERS


def parse_br_number(value: Optional[str]) -> float:
    """Parses a pt-BR formatted number, falling back to 0.0 on garbage.

    When only dots are present they are thousands separators if there is
    more than one, or if the fragment after the last one is not exactly two
    digits; otherwise the single dot is a decimal point.
    """
    if value is None:
        return 0.0
    clean = _STRIP_CHARS.sub("", str(value))
    if not clean:
        return 0.0

    has_dot = "." in clean
    has_comma = "," in clean
    if has_dot and has_comma:
        clean = clean.replace(".", "").replace(",", ".")
    elif has_comma:
        clean = clean.replace(",", ".")
    elif has_dot:
        dot_count = clean.count(".")
        after_last_dot = len(clean) - clean.rfind(".") - 1
        if dot_count > 1 or after_last_dot != 2:
            clean = clean.replace(".", "")

    try:
        number = float(clean)
    except ValueError:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def parse_metric_cell(value: Optional[str], kind: MeasureKind) -> Optional[float]:
    """Parses a meta/result cell.

    Blank cells give None. Percent-typed cells are stored as fractions, so
    ``"50%"`` becomes 0.5.
    """
    if is_blank(value):
        return None
    number = parse_br_number(value)
    if kind == MeasureKind.PERCENT:
        return number / 100
    return number


def parse_br_date(value: Optional[str]) -> Optional[date]:
    """Parses ``DD/MM/YYYY``; returns None when the text is not such a date."""
    if is_blank(value):
        return None
    try:
        return datetime.strptime(str(value).strip(), "%d/%m/%Y").date()
    except ValueError:
        return None


def parse_competency(value: Optional[str]) -> Optional[Period]:
    """Parses a competency cell, either ``DD/MM/YYYY`` or ``MM/YYYY``."""
    if is_blank(value):
        return None
    text = str(value).strip()
    parsed = parse_br_date(text)
    if parsed is not None:
        return Period.from_date(parsed)
    try:
        month_year = datetime.strptime(text, "%m/%Y")
    except ValueError:
        return None
    return Period(year=month_year.year, month=month_year.month)


def clean_text(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).strip()
