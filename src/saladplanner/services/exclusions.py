"""Per-user ingredient opt-outs for the active template."""

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from saladplanner.logging_config import get_logger
from saladplanner.models import IngredientExclusion, Participant
from saladplanner.normalize.keys import normalize_ingredient_key
from saladplanner.plan.exclusions import select_exclusions
from saladplanner.services.templates import load_active_template

logger = get_logger(__name__)


class NoActiveRecipeError(Exception):
    """Raised when exclusions are written while no template is active."""

    def __init__(self) -> None:
        super().__init__("No active recipe")


@dataclass
class UserExclusions:
    """A user's opt-outs for one template."""

    template_id: int | None
    exclusions: list[str] = field(default_factory=list)


async def get_exclusions_by_key(db: AsyncSession, template_id: int) -> dict[str, list[str]]:
    """
    Ingredient key -> names of current participants who opted out of it.

    Exclusions belong to accounts; only accounts that are on the roster
    (through a linked participant) contribute a name.
    """
    result = await db.execute(
        select(IngredientExclusion.ingredient_key, Participant.name)
        .join(Participant, Participant.user_id == IngredientExclusion.user_id)
        .where(IngredientExclusion.template_id == template_id)
        .order_by(IngredientExclusion.id.asc(), Participant.id.asc())
    )

    by_key: dict[str, list[str]] = {}
    for key, name in result.all():
        names = by_key.setdefault(key, [])
        if name not in names:
            names.append(name)
    return by_key


async def get_user_exclusions(db: AsyncSession, user_id: int) -> UserExclusions:
    """The user's stored opt-outs that still match an ingredient of the active template."""
    template = await load_active_template(db)
    if template is None:
        return UserExclusions(template_id=None)

    result = await db.execute(
        select(IngredientExclusion.ingredient_name)
        .where(
            IngredientExclusion.user_id == user_id,
            IngredientExclusion.template_id == template.id,
        )
        .order_by(IngredientExclusion.ingredient_name.asc())
    )
    keys = template.ingredient_keys
    names = [name for name in result.scalars().all() if normalize_ingredient_key(name) in keys]
    return UserExclusions(template_id=template.id, exclusions=names)


async def replace_exclusions(db: AsyncSession, user_id: int, requested: list[Any]) -> UserExclusions:
    """
    Replace the user's opt-outs for the active template.

    Unknown ingredient names are dropped silently. The old set is removed and
    the new one inserted in a single transaction.

    Raises:
        NoActiveRecipeError: If no template is active. Nothing is changed.
    """
    template = await load_active_template(db)
    if template is None:
        raise NoActiveRecipeError()

    selected = select_exclusions(template, requested)

    await db.execute(
        delete(IngredientExclusion).where(
            IngredientExclusion.user_id == user_id,
            IngredientExclusion.template_id == template.id,
        )
    )
    db.add_all(
        IngredientExclusion(
            user_id=user_id,
            template_id=template.id,
            ingredient_name=name,
            ingredient_key=key,
        )
        for key, name in selected.items()
    )
    await db.commit()

    logger.info(
        f"User {user_id} excludes {len(selected)} ingredients of template {template.id}"
    )
    return UserExclusions(template_id=template.id, exclusions=list(selected.values()))
