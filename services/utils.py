import calendar
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple

from dateutil.relativedelta import relativedelta

CENT = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_rupiah(amount: Decimal) -> str:
    """
    Format an amount the id-ID way: "Rp 1.250.000" or "Rp 1.666.666,67".
    """
    value = quantize_money(amount)
    sign = "-" if value < 0 else ""
    value = abs(value)
    if value == value.to_integral_value():
        body = f"{int(value):,}".replace(",", ".")
    else:
        body = f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}Rp {body}"


def months_between(start: datetime, end: datetime) -> int:
    """Whole calendar months from `start` to `end` (negative when end is earlier)."""
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months


def add_months(value: datetime, months: int) -> datetime:
    return value + relativedelta(months=months)


def month_bounds(value: datetime) -> Tuple[datetime, datetime]:
    """First and last instant of the month containing `value`."""
    start = value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_day = calendar.monthrange(value.year, value.month)[1]
    end = value.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999999)
    return start, end


def format_date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


INDONESIAN_MONTHS = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def format_long_date(value: datetime) -> str:
    return f"{value.day:02d} {INDONESIAN_MONTHS[value.month - 1]} {value.year}"


AVERAGE_MONTH = timedelta(days=365.2425 / 12)


def fractional_months(start: datetime, end: datetime) -> float:
    return (end - start) / AVERAGE_MONTH
