"""
Display formatting helpers.
Numbers, money and dates as shown on the dashboard and the till.
"""
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from typing import Union, Optional

Number = Union[int, float, Decimal, str, None]


def _to_decimal(value: Number) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None


def _group_thousands(integer_part: str) -> str:
    reversed_int = integer_part[::-1]
    groups = [reversed_int[i:i+3] for i in range(0, len(reversed_int), 3)]
    return ','.join(groups)[::-1]


def format_number(value: Number, decimals: Optional[int] = None) -> str:
    """
    Format a number with thousands separators.

    Trailing zero decimals are dropped unless a fixed number of decimals is given.

    Examples:
        format_number(1500) -> "1,500"
        format_number(1500.5) -> "1,500.5"
        format_number(185.00) -> "185"
        format_number(None) -> "-"
    """
    num = _to_decimal(value)
    if num is None:
        return "-"

    if decimals is not None:
        num = num.quantize(Decimal(10) ** -decimals)
        num_str = f"{num:.{decimals}f}"
    else:
        num_str = f"{num:f}"

    sign = ''
    if num_str.startswith('-'):
        sign = '-'
        num_str = num_str[1:]

    if '.' in num_str:
        integer_part, decimal_part = num_str.split('.')
        if decimals is None:
            decimal_part = decimal_part.rstrip('0')
    else:
        integer_part, decimal_part = num_str, ''

    if integer_part.strip('0') == '' and not decimal_part.strip('0'):
        sign = ''

    integer_formatted = _group_thousands(integer_part)
    if decimal_part:
        return f"{sign}{integer_formatted}.{decimal_part}"
    return f"{sign}{integer_formatted}"


def format_money(value: Number, symbol: Optional[str] = None) -> str:
    """
    Format a monetary amount with exactly two decimals.

    Examples:
        format_money(1500) -> "1,500.00"
        format_money(Decimal('-20.5'), 'IQD') -> "-20.50 IQD"
    """
    text = format_number(value, decimals=2)
    if text == "-" or not symbol:
        return text
    return f"{text} {symbol}"


def format_date(value: Union[date, datetime, None]) -> str:
    """
    Format a date as YYYY-MM-DD.

    Examples:
        format_date(date(2026, 1, 12)) -> "2026-01-12"
    """
    if value is None:
        return "-"

    if isinstance(value, datetime):
        value = value.date()

    if not isinstance(value, date):
        return "-"

    return value.strftime("%Y-%m-%d")


def format_datetime(value: Union[datetime, None], with_time: bool = True) -> str:
    """
    Format a datetime as YYYY-MM-DD HH:MM.

    Examples:
        format_datetime(datetime(2026, 1, 12, 15, 30)) -> "2026-01-12 15:30"
    """
    if not isinstance(value, datetime):
        return "-"

    if with_time:
        return value.strftime("%Y-%m-%d %H:%M")
    return value.strftime("%Y-%m-%d")


def day_label(value: Union[date, datetime, None]) -> str:
    """Short weekday label for chart axes, e.g. "Mon 12"."""
    if value is None:
        return "-"
    return f"{value.strftime('%a')} {value.day}"
