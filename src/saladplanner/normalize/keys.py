"""Key normalization shared by write-time filtering and read-time matching."""

from decimal import ROUND_HALF_UP, Decimal

_ONE_DECIMAL = Decimal("0.1")
_CENTS = Decimal("0.01")


def normalize_ingredient_key(name: str) -> str:
    """
    Normalize an ingredient name into its matching key.

    - Strip surrounding whitespace
    - Lowercase

    Unlike recipe import normalization, descriptors are kept: "Red Onion"
    and "Onion" are different ingredients on a shopping list.
    """
    if not name:
        return ""
    return name.strip().lower()


def normalize_email(email: str) -> str:
    """Normalize an email address for case-insensitive uniqueness checks."""
    if not email:
        return ""
    return email.strip().lower()


def _quantize(value: float, step: Decimal) -> float:
    # Go through repr so 0.35 rounds as written, not as its binary neighbour
    return float(Decimal(repr(value)).quantize(step, rounding=ROUND_HALF_UP))


def round_quantity(value: float) -> float:
    """Round a scaled quantity to one decimal place, halves away from zero."""
    return _quantize(value, _ONE_DECIMAL)


def round_money(value: float) -> float:
    """Round an amount to cents, halves away from zero."""
    return _quantize(value, _CENTS)
