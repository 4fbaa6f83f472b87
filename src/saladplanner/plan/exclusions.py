"""Selection of a user's ingredient opt-outs against the active template."""

from typing import Any

from saladplanner.normalize.keys import normalize_ingredient_key
from saladplanner.plan.shopping_list import TemplateSnapshot


def canonical_ingredient_names(template: TemplateSnapshot) -> dict[str, str]:
    """Map each ingredient key to the template's own name for it (first occurrence wins)."""
    names: dict[str, str] = {}
    for line in template.ingredients:
        names.setdefault(line.key, line.name.strip())
    return names


def select_exclusions(template: TemplateSnapshot, requested: list[Any]) -> dict[str, str]:
    """
    Reduce a free-form list of ingredient names to the keys the template knows.

    Non-strings and blank entries are ignored, unknown ingredients are
    dropped without error and duplicates collapse onto the first occurrence.

    Returns:
        Ingredient key -> canonical display name, in request order.
    """
    canonical = canonical_ingredient_names(template)
    selected: dict[str, str] = {}
    for name in requested:
        if not isinstance(name, str):
            continue
        key = normalize_ingredient_key(name)
        if key and key in canonical and key not in selected:
            selected[key] = canonical[key]
    return selected
