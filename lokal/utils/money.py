# lokal/utils/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Money = Decimal
MAX_INTEGER_DIGITS = 10

def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))

def round_money(x) -> Money:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

def to_minor_units(x) -> int:
    """Major currency units (e.g. pounds) to the integer minor units Stripe expects."""
    return int((D(x) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def from_minor_units(x) -> float:
    return float(D(x) / 100)

def parse_amount(value):
    """Return the value as Money, or None when it isn't a number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = D(value)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not amount.is_finite():
        return None
    # Numeric(12, 2) keeps at most 10 digits before the point
    if amount and amount.adjusted() >= MAX_INTEGER_DIGITS:
        return None
    return amount
