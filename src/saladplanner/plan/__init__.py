"""Shopping list, exclusion and billing logic."""

from saladplanner.plan.billing import CostSplit, split_cost
from saladplanner.plan.exclusions import canonical_ingredient_names, select_exclusions
from saladplanner.plan.shopping_list import (
    IngredientLine,
    ShoppingItem,
    ShoppingList,
    TemplateSnapshot,
    build_shopping_list,
)

__all__ = [
    "CostSplit",
    "IngredientLine",
    "ShoppingItem",
    "ShoppingList",
    "TemplateSnapshot",
    "build_shopping_list",
    "canonical_ingredient_names",
    "select_exclusions",
    "split_cost",
]
