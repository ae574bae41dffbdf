# core/money.py

"""
FIXED-POINT HELPERS

Rules:
- Currency: 2 decimal places.
- Litres and meter values: 3 decimal places.
- Rounding is ROUND_HALF_UP everywhere (sale totals, variance, percentages)
  so the payment-split tolerance and settlement sums agree.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

TWOPLACES = Decimal("0.01")
THREEPLACES = Decimal("0.001")
ZERO = Decimal("0.00")


def _to_decimal(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0")
    if isinstance(v, Decimal):
        return v
    try:
        return Decimal(str(v))
    except InvalidOperation as exc:
        raise ValueError(f"Not a decimal value: {v!r}") from exc


def money(v) -> Decimal:
    return _to_decimal(v).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def litres(v) -> Decimal:
    return _to_decimal(v).quantize(THREEPLACES, rounding=ROUND_HALF_UP)


def sale_total(litres_sold, price_per_litre) -> Decimal:
    """
    total = litres x price, rounded once at the end.
    """
    return money(_to_decimal(litres_sold) * _to_decimal(price_per_litre))


def percent(numerator, denominator) -> Decimal:
    return money(_to_decimal(numerator) / _to_decimal(denominator) * Decimal("100"))
