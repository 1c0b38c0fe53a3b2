# bol_export/utils/dates.py
from __future__ import annotations

import re
from datetime import date

from bol_export.errors import UnknownMonthError

_DAY = re.compile(r"[0-9]{1,2}")
_YEAR = re.compile(r"[0-9]{4}")

# nombre del mes → número con dos dígitos, en orden de calendario
DUTCH_MONTHS: dict[str, str] = {
    "januari": "01",
    "februari": "02",
    "maart": "03",
    "april": "04",
    "mei": "05",
    "juni": "06",
    "juli": "07",
    "augustus": "08",
    "september": "09",
    "oktober": "10",
    "november": "11",
    "december": "12",
}


def format_dutch_date(value: str) -> str:
    """'5 januari 2024' -> '2024-01-05'.

    Lanza UnknownMonthError si el nombre del mes no es uno de DUTCH_MONTHS y
    ValueError si el día o el año no son numéricos.
    """
    s = str(value or "").strip()
    parts = s.split()
    if len(parts) != 3:
        raise UnknownMonthError(s, s)
    day, month_str, year = parts
    month = DUTCH_MONTHS.get(month_str.lower())
    if month is None:
        raise UnknownMonthError(month_str, s)
    if not _DAY.fullmatch(day) or not _YEAR.fullmatch(year):
        raise ValueError(f"Fecha inválida: '{s}'")
    return f"{year}-{month}-{day.zfill(2)}"


def parse_dutch_date(value: str) -> date:
    # ValueError también si el día no existe en ese mes ("31 februari 2024")
    return date.fromisoformat(format_dutch_date(value))


def month_number(value: str | int) -> int:
    """Acepta 'maart', 'Maart', '3', '03' o 3."""
    if isinstance(value, int):
        n = value
    else:
        s = str(value).strip().lower()
        if s in DUTCH_MONTHS:
            return int(DUTCH_MONTHS[s])
        if not s.isdigit():
            raise UnknownMonthError(str(value))
        n = int(s)
    if not 1 <= n <= 12:
        raise UnknownMonthError(str(value))
    return n


def cutoff_date(year: int, month: str | int) -> date:
    """Primer día del mes elegido (inclusive)."""
    return date(int(year), month_number(month), 1)

