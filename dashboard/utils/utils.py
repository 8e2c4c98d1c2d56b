import datetime
from typing import Optional


def fmt_num(v, places: int = 2) -> str:
    """
    Format a number with space as thousands separator.

    Non-numeric input (None, '', garbage) is rendered as 0.

    Example:
        fmt_num(1234.5) -> "1 234.50"
    """
    try:
        f = float(v)
    except (TypeError, ValueError):
        f = 0.0
    if f != f:
        f = 0.0
    return f"{f:,.{places}f}".replace(',', ' ')


def fmt_price(v) -> str:
    """Format a price for the chart header; missing prices render as '—'."""
    if v is None:
        return '—'
    return fmt_num(v, 2)


def fmt_change(v) -> str:
    """
    Format a percentage change with an explicit sign.

    Example:
        fmt_change(1.234) -> "+1.23%"
        fmt_change(-0.5)  -> "-0.50%"
    """
    if v is None:
        return '—'
    try:
        f = float(v)
    except (TypeError, ValueError):
        return '—'
    return f"{'+' if f >= 0 else ''}{f:.2f}%"


def change_class(v) -> str:
    """CSS text colour class for a change value."""
    try:
        f = float(v)
    except (TypeError, ValueError):
        return 'text-grey-5'
    return 'text-positive' if f >= 0 else 'text-negative'


def fmt_ts(ts: Optional[int], with_time: bool = False) -> str:
    """
    Format unix seconds as a UTC date string.

    Args:
        ts: Unix seconds, or None.
        with_time: Append HH:MM.

    Returns:
        "YYYY-MM-DD" (or "YYYY-MM-DD HH:MM"), '' for None.
    """
    if ts is None:
        return ''
    dt = datetime.datetime.fromtimestamp(int(ts), tz=datetime.timezone.utc)
    return dt.strftime('%Y-%m-%d %H:%M' if with_time else '%Y-%m-%d')


def normalize_symbol(value: Optional[str]) -> str:
    """Upper-case and strip a ticker symbol typed by the user."""
    return (value or '').strip().upper()
