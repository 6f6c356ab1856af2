# utils/dates.py
import calendar
import math
from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime, str, None]

_UNIT_DAYS = {
     "days": 1,
     "weeks": 7,
     "months": 30,
     "years": 365,
}


def parse_date(value: DateLike) -> Optional[datetime]:
     """Return a datetime for date/datetime/ISO string input, None when invalid."""
     if value is None or value == "":
          return None
     if isinstance(value, datetime):
          return value
     if isinstance(value, date):
          return datetime(value.year, value.month, value.day)
     try:
          return datetime.fromisoformat(str(value))
     except ValueError:
          return None


def format_date(value: DateLike) -> str:
     """DD/MM/YYYY, or an empty string for missing/invalid input."""
     parsed = parse_date(value)
     return parsed.strftime("%d/%m/%Y") if parsed else ""


def format_date_long(value: DateLike) -> str:
     """e.g. "Monday, January 15, 2025"."""
     parsed = parse_date(value)
     if not parsed:
          return ""
     return f"{parsed:%A}, {parsed:%B} {parsed.day}, {parsed.year}"


def date_difference(start: DateLike, end: DateLike, unit: str = "days") -> int:
     """
     Whole units between two dates, rounded up.

     Months count as 30 days and years as 365. Unknown units fall back to days.
     Missing or invalid input gives 0.
     """
     start_dt, end_dt = parse_date(start), parse_date(end)
     if start_dt is None or end_dt is None:
          return 0
     days = (end_dt - start_dt).total_seconds() / 86400
     return math.ceil(days / _UNIT_DAYS.get(unit, 1))


def add_months(value: date, months: int, day: Optional[int] = None) -> date:
     """
     Shift a date by whole months, optionally pinning the day of month.

     The day is clamped to the length of the target month, so Jan 31 + 1
     month is Feb 28 (or 29).
     """
     month_index = value.month - 1 + months
     year = value.year + month_index // 12
     month = month_index % 12 + 1
     last_day = calendar.monthrange(year, month)[1]
     return date(year, month, min(day or value.day, last_day))


def first_of_next_month(value: date) -> date:
     return add_months(value, 1, day=1)
