"""Shopping list aggregation for the active recipe and the current roster."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime

from saladplanner.logging_config import get_logger
from saladplanner.normalize.keys import normalize_ingredient_key, round_quantity

logger = get_logger(__name__)


@dataclass(frozen=True)
class IngredientLine:
    """Ingredient quantity expressed per the template's baseline servings."""

    name: str
    quantity: float
    unit: str = ""

    @property
    def key(self) -> str:
        return normalize_ingredient_key(self.name)


@dataclass(frozen=True)
class TemplateSnapshot:
    """Read-only copy of a recipe template."""

    id: int
    title: str
    servings: int
    ingredients: tuple[IngredientLine, ...] = ()
    updated_at: datetime | None = None

    @property
    def ingredient_keys(self) -> set[str]:
        return {line.key for line in self.ingredients}


@dataclass
class ShoppingItem:
    """A single scaled line of the shopping list."""

    name: str
    unit: str
    quantity: float
    excluded_by: list[str] = field(default_factory=list)


@dataclass
class ShoppingList:
    """Shopping list for the active template, or an empty one if none is active."""

    participant_count: int
    template: TemplateSnapshot | None = None
    items: list[ShoppingItem] = field(default_factory=list)


def _distinct(names: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(names))


def build_shopping_list(
    template: TemplateSnapshot | None,
    participant_count: int,
    exclusions_by_key: Mapping[str, Iterable[str]] | None = None,
) -> ShoppingList:
    """
    Scale the template's ingredients to the people who will eat them.

    Each ingredient is scaled by (participants not excluded from it) divided
    by the template's baseline servings, then rounded to one decimal.

    Args:
        template: Active template, or None if no template is active.
        participant_count: Number of people currently on the roster.
        exclusions_by_key: Ingredient key -> display names of participants
            who opted out of that ingredient.

    Returns:
        ShoppingList with one item per ingredient in template order. Never
        raises; missing data gives empty or zero results.
    """
    participant_count = max(participant_count, 0)
    if template is None:
        return ShoppingList(participant_count=participant_count)

    servings = template.servings
    if servings < 1:
        logger.warning(
            f"Template {template.id} has invalid baseline servings {servings}, using 1"
        )
        servings = 1

    if participant_count == 0:
        items = [
            ShoppingItem(name=line.name, unit=line.unit, quantity=0)
            for line in template.ingredients
        ]
        return ShoppingList(participant_count=0, template=template, items=items)

    exclusions_by_key = exclusions_by_key or {}
    items = []
    for line in template.ingredients:
        excluded_by = _distinct(exclusions_by_key.get(line.key, ()))
        eligible_count = max(participant_count - len(excluded_by), 0)
        factor = eligible_count / servings
        items.append(
            ShoppingItem(
                name=line.name,
                unit=line.unit,
                quantity=round_quantity(line.quantity * factor),
                excluded_by=excluded_by,
            )
        )

    return ShoppingList(participant_count=participant_count, template=template, items=items)
