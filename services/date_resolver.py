"""
Date Resolver Service

- Converts Indonesian time expressions into concrete instants
- Every relative reference is grounded on the injected "now", never on the system clock
"""

import calendar
import re
from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from configurations.config import DEFAULT_GOAL_MONTHS

# Relative keywords for transaction dates, scanned left to right
RELATIVE_KEYWORDS = {
    "hari ini": relativedelta(),
    "sekarang": relativedelta(),
    "kemarin": relativedelta(days=-1),
    "besok": relativedelta(days=1),
    "bulan lalu": relativedelta(months=-1),
    "minggu lalu": relativedelta(weeks=-1),
}

# Forward-looking keywords for goal deadlines
FUTURE_KEYWORDS = {
    "besok": relativedelta(days=1),
    "lusa": relativedelta(days=2),
    "minggu depan": relativedelta(weeks=1),
    "bulan depan": relativedelta(months=1),
    "tahun depan": relativedelta(years=1),
}

DURATION_UNITS = {
    "hari": "days",
    "minggu": "weeks",
    "bulan": "months",
    "tahun": "years",
}

MONTH_NAMES = {
    "januari": 1, "jan": 1,
    "februari": 2, "feb": 2, "pebruari": 2,
    "maret": 3, "mar": 3,
    "april": 4, "apr": 4,
    "mei": 5,
    "juni": 6, "jun": 6,
    "juli": 7, "jul": 7,
    "agustus": 8, "agu": 8, "agt": 8,
    "september": 9, "sep": 9, "sept": 9,
    "oktober": 10, "okt": 10,
    "november": 11, "nov": 11, "nopember": 11,
    "desember": 12, "des": 12,
}


def _alternation(words) -> str:
    return "|".join(sorted((re.escape(w) for w in words), key=len, reverse=True))


RELATIVE_RE = re.compile(r"\b(" + _alternation(RELATIVE_KEYWORDS) + r")\b")
FUTURE_RE = re.compile(r"\b(" + _alternation(FUTURE_KEYWORDS) + r")\b")
EXPLICIT_DATE_RE = re.compile(r"\b(\d{1,2})[/-](\d{1,2})(?:[/-](\d{4}|\d{2}))?\b")
MONTH_YEAR_RE = re.compile(r"\b(" + _alternation(MONTH_NAMES) + r")\b(?:\s+(\d{4})\b)?")
# A count of at most three digits; longer numbers are amounts ("10000000 bulan depan")
DURATION_RE = re.compile(r"(?<![\d.,])\b(\d{1,3})\s*(hari|minggu|bulan|tahun)\b")


def _full_year(raw: Optional[str], default: int) -> int:
    if not raw:
        return default
    if len(raw) == 2:
        return 2000 + int(raw)
    return int(raw)


def resolve_relative(text: str, now: datetime) -> Optional[datetime]:
    """Earliest relative keyword in the text wins."""
    match = RELATIVE_RE.search(text)
    if not match:
        return None
    return now + RELATIVE_KEYWORDS[match.group(1)]


def resolve_explicit(text: str, now: datetime) -> Optional[datetime]:
    """
    D/M, D/M/YY or D/M/YYYY (also with '-'). Impossible calendar dates are skipped.
    The time of day is taken from `now`.
    """
    for match in EXPLICIT_DATE_RE.finditer(text):
        day, month = int(match.group(1)), int(match.group(2))
        year = _full_year(match.group(3), now.year)
        try:
            return now.replace(year=year, month=month, day=day)
        except ValueError:
            continue
    return None


def resolve_transaction_date(text: str, now: datetime) -> datetime:
    """
    Relative keywords first, explicit dates second, otherwise now.
    """
    return resolve_relative(text, now) or resolve_explicit(text, now) or now


def _end_of_month(year: int, month: int, now: datetime) -> datetime:
    last_day = calendar.monthrange(year, month)[1]
    return now.replace(year=year, month=month, day=last_day)


def resolve_month_name(text: str, now: datetime) -> Optional[datetime]:
    """
    "desember 2024" -> end of December 2024.
    Without a year, the next end-of-month that is not in the past.
    """
    match = MONTH_YEAR_RE.search(text)
    if not match:
        return None
    month = MONTH_NAMES[match.group(1)]
    if match.group(2):
        try:
            return _end_of_month(int(match.group(2)), month, now)
        except ValueError:
            return None
    candidate = _end_of_month(now.year, month, now)
    if candidate < now:
        candidate = _end_of_month(now.year + 1, month, now)
    return candidate


def resolve_duration(text: str, now: datetime) -> Optional[datetime]:
    match = DURATION_RE.search(text)
    if not match:
        return None
    amount, unit = int(match.group(1)), DURATION_UNITS[match.group(2)]
    try:
        return now + relativedelta(**{unit: amount})
    except (ValueError, OverflowError):
        return None


def resolve_target_date(text: str, now: datetime) -> datetime:
    """
    Resolve a goal deadline: explicit date, month name, duration, then a
    future keyword. Falls back to DEFAULT_GOAL_MONTHS from now.
    """
    for resolver in (resolve_explicit, resolve_month_name, resolve_duration):
        resolved = resolver(text, now)
        if resolved is not None:
            return resolved

    match = FUTURE_RE.search(text)
    if match:
        return now + FUTURE_KEYWORDS[match.group(1)]

    return now + relativedelta(months=DEFAULT_GOAL_MONTHS)


def days_until(target: datetime, now: datetime) -> int:
    return (target - now) // timedelta(days=1)
