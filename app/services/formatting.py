"""Numeric, currency and date formatting shared by the analytics views and reports."""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from app.core.config import settings

Number = Union[int, float]

PLACEHOLDER = "—"
MIN_BAR_PCT = 4


def is_finite(value: Optional[Number]) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def round_decimal(value: Number, decimals: int = 0) -> Decimal:
    """Half-up (away from zero) rounding on the decimal text of `value`; never -0."""
    rounded = Decimal(str(value)).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    return rounded.copy_abs() if rounded.is_zero() else rounded


def format_number(value: Optional[Number], decimals: int = 0) -> str:
    """Thousands-grouped number; `—` for None, NaN and infinities."""
    if not is_finite(value):
        return PLACEHOLDER
    return f"{round_decimal(value, decimals):,.{decimals}f}"


def format_currency(value: Optional[Number], decimals: int = 0, symbol: Optional[str] = None) -> str:
    """
    Currency with a fixed symbol prefix.

    Aggregate totals use 0 decimals, unit prices 2.
    """
    text = format_number(value, decimals)
    if text == PLACEHOLDER:
        return text
    symbol = settings.CURRENCY_SYMBOL if symbol is None else symbol
    if text.startswith("-"):
        return f"-{symbol}{text[1:]}"
    return f"{symbol}{text}"


def format_count(value: Optional[Number]) -> str:
    """Plain integer, no grouping."""
    if not is_finite(value):
        return PLACEHOLDER
    return str(round_half_up(value))


def format_percent(value: Optional[Number], decimals: int = 1, signed: bool = True) -> str:
    if not is_finite(value):
        return PLACEHOLDER
    rounded = round_decimal(value, decimals)
    sign = "+" if signed and rounded > 0 else ""
    return f"{sign}{rounded:.{decimals}f}%"


def _as_date(value: Union[str, date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def format_long_date(value: Union[str, date, datetime]) -> str:
    """`Monday, January 1, 2024`"""
    d = _as_date(value)
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def format_short_date(value: Union[str, date, datetime]) -> str:
    """`Jan 1`"""
    d = _as_date(value)
    return f"{d:%b} {d.day}"


def format_numeric_date(value: Union[str, date, datetime]) -> str:
    """`1/1/2024`"""
    d = _as_date(value)
    return f"{d.month}/{d.day}/{d.year}"


def bar_width_pct(value: Optional[Number], max_value: Optional[Number]) -> int:
    """
    Width of a proportional bar in percent of the track.

    The 4% floor keeps zero and near-zero values visible; the denominator never
    drops below 1 so an all-zero set does not divide by zero.
    """
    if not is_finite(value):
        value = 0
    denominator = max(1, max_value) if is_finite(max_value) else 1
    return max(MIN_BAR_PCT, min(100, round_half_up(value / denominator * 100)))


def truncate_label(text: str, length: int = 28, ellipsis: str = "…") -> str:
    if len(text) <= length:
        return text
    return text[: max(0, length - len(ellipsis))].rstrip() + ellipsis
