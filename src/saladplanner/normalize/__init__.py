"""Normalization of names, emails and quantities."""

from saladplanner.normalize.keys import (
    normalize_email,
    normalize_ingredient_key,
    round_money,
    round_quantity,
)

__all__ = [
    "normalize_email",
    "normalize_ingredient_key",
    "round_money",
    "round_quantity",
]
