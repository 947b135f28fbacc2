"""Fixed-point money helpers. Balances and amounts are ``Decimal`` with two places."""

from decimal import Decimal, InvalidOperation

from ledger_service.core.errors import InvalidAmount

CENT = Decimal("0.01")

# 15 significant digits survive a round trip through a double, which is how
# SQLite stores NUMERIC columns
MAX_DIGITS = 15
MAX_AMOUNT = Decimal("9999999999999.99")


def to_amount(value, allow_zero: bool = False) -> Decimal:
    """
    Coerce ``value`` to a two-place Decimal.

    Floats go through ``str`` so ``0.1`` stays ``0.10``. Values with more
    than two decimal places, values above ``MAX_AMOUNT``, non-finite values
    and non-positive values (zero allowed when ``allow_zero``) raise
    ``InvalidAmount``.
    """
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(value, "Amount is not a number")

    if not amount.is_finite():
        raise InvalidAmount(value, "Amount is not a number")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmount(value)
    if amount > MAX_AMOUNT:
        raise InvalidAmount(value, f"Amount exceeds the maximum of {MAX_AMOUNT}")
    if amount != amount.quantize(CENT):
        raise InvalidAmount(value, "Amount has more than two decimal places")

    return amount.quantize(CENT)
