"""
Numeric input parsing and GBP formatting.

Values typed into fee fields arrive as free text ("£1,234.56", "", "abc").
Unparsable input never raises: each field falls back to its policy default.
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Optional

logger = logging.getLogger(__name__)

MONEY_QUANTUM = Decimal("0.01")
PERCENT_QUANTUM = Decimal("0.1")

# Typed numbers are saturated to this magnitude; smaller magnitudes read as 0
MAX_NUMERIC_INPUT = Decimal("1e15")
MIN_NUMERIC_INPUT = Decimal("1e-15")

# Characters stripped from user-typed currency strings
_CURRENCY_NOISE = str.maketrans("", "", "£, \t\n")


def parse_decimal(value: Any, default: Optional[Decimal]) -> Optional[Decimal]:
    """
    Parse a user-supplied numeric value.

    Accepts Decimal, int, float and numeric strings (currency symbol,
    thousands separators and whitespace are ignored). Returns `default`
    for None, blank or non-numeric text, NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.translate(_CURRENCY_NOISE)
        if not cleaned:
            return default
        try:
            result = Decimal(cleaned)
        except InvalidOperation:
            logger.debug(f"Non-numeric input {value!r}, using default {default}")
            return default
    else:
        logger.debug(f"Unsupported numeric input type {type(value).__name__}, using default {default}")
        return default

    if not result.is_finite():
        return default
    if result.copy_abs() > MAX_NUMERIC_INPUT:
        logger.debug(f"Numeric input {value!r} saturated to {MAX_NUMERIC_INPUT}")
        return MAX_NUMERIC_INPUT.copy_sign(result)
    if result and result.copy_abs() < MIN_NUMERIC_INPUT:
        return Decimal("0")
    return result


def parse_amount(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """Parse a monetary amount, floored at zero."""
    amount = parse_decimal(value, default)
    if amount < 0:
        return Decimal("0")
    return amount


def parse_gbp(formatted: Optional[str]) -> Decimal:
    """
    Parse a UK currency string to a Decimal.
    Handles: £1,234.56 -> 1234.56; empty or invalid -> 0
    """
    if not formatted:
        return Decimal("0")
    return parse_decimal(formatted, Decimal("0"))


def _quantize(value: Decimal, quantum: Decimal) -> Decimal:
    # Widen precision so large values keep every integer digit
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() - quantum.adjusted() + 2)
        return value.quantize(quantum, rounding=ROUND_HALF_UP)


def quantize_money(value: Decimal) -> Decimal:
    return _quantize(value, MONEY_QUANTUM)


def quantize_percent(value: Decimal) -> Decimal:
    return _quantize(value, PERCENT_QUANTUM)


def _display_value(value: Any) -> Optional[Decimal]:
    # Computed amounts are shown as-is, only raw input goes through parsing
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    return parse_decimal(value, None)


def format_gbp(value: Any) -> str:
    """Format a number as UK currency (£1,234.56). Empty or invalid -> ''."""
    if value is None or value == "":
        return ""
    amount = _display_value(value)
    if amount is None:
        return ""

    amount = quantize_money(amount)
    sign = "-" if amount < 0 else ""
    return f"{sign}£{amount.copy_abs():,.2f}"


def format_percent(value: Any) -> str:
    """Format a percentage with one decimal place (15.0%)."""
    pct = _display_value(value)
    if pct is None:
        return ""
    return f"{quantize_percent(pct)}%"
