"""Recipe template library and the active template."""

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from saladplanner.logging_config import get_logger
from saladplanner.models import RecipeTemplate, TemplateIngredient
from saladplanner.plan.shopping_list import IngredientLine, TemplateSnapshot
from saladplanner.services.settings import get_reset_settings

logger = get_logger(__name__)


def snapshot_of(template: RecipeTemplate) -> TemplateSnapshot:
    """Copy a loaded template into the engine's read-only form."""
    return TemplateSnapshot(
        id=template.id,
        title=template.title,
        servings=template.servings,
        ingredients=tuple(
            IngredientLine(name=i.name, quantity=i.quantity, unit=i.unit or "")
            for i in template.ingredients
        ),
        updated_at=template.updated_at,
    )


async def list_templates(db: AsyncSession) -> list[RecipeTemplate]:
    """Template library, most recently edited first."""
    result = await db.execute(
        select(RecipeTemplate).order_by(
            RecipeTemplate.updated_at.desc(), RecipeTemplate.id.desc()
        )
    )
    return list(result.scalars().all())


async def get_template(db: AsyncSession, template_id: int) -> RecipeTemplate | None:
    """Template with its ingredients loaded."""
    result = await db.execute(
        select(RecipeTemplate)
        .options(selectinload(RecipeTemplate.ingredients))
        .where(RecipeTemplate.id == template_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def load_template(db: AsyncSession, template_id: int) -> TemplateSnapshot | None:
    template = await get_template(db, template_id)
    return snapshot_of(template) if template else None


async def load_active_template(db: AsyncSession) -> TemplateSnapshot | None:
    """The template the shopping list is built from, or None if none is active."""
    settings = await get_reset_settings(db)
    if settings.active_template_id is None:
        return None
    return await load_template(db, settings.active_template_id)


async def save_template(
    db: AsyncSession,
    *,
    title: str,
    servings: int,
    ingredients: Sequence[IngredientLine],
    template_id: int | None = None,
    user_id: int | None = None,
) -> RecipeTemplate | None:
    """
    Create a template, or replace an existing one's title, servings and ingredients.

    Ingredients are stored in the given order. Returns None when updating a
    template that doesn't exist.
    """
    lines = [
        TemplateIngredient(name=line.name.strip(), quantity=line.quantity, unit=line.unit or "")
        for line in ingredients
    ]

    if template_id is None:
        template = RecipeTemplate(
            title=title.strip(),
            servings=servings,
            created_by_user_id=user_id,
            updated_at=datetime.now(),
            ingredients=lines,
        )
        db.add(template)
    else:
        template = await get_template(db, template_id)
        if template is None:
            return None
        template.title = title.strip()
        template.servings = servings
        template.updated_at = datetime.now()
        template.ingredients = lines

    await db.commit()
    logger.info(f"Saved template {template.id} with {len(lines)} ingredients")
    return await get_template(db, template.id)


async def activate_template(db: AsyncSession, template_id: int) -> RecipeTemplate | None:
    """Make a template the active one. Returns None if it doesn't exist."""
    template = await get_template(db, template_id)
    if template is None:
        return None
    settings = await get_reset_settings(db)
    settings.active_template_id = template.id
    await db.commit()
    logger.info(f"Template {template.id} is now active")
    return template


async def delete_template(db: AsyncSession, template_id: int) -> tuple[bool, int | None]:
    """
    Delete a template with its ingredients and exclusions.

    Returns:
        (removed, active_template_id after the delete)
    """
    template = await get_template(db, template_id)
    settings = await get_reset_settings(db)
    if template is None:
        return False, settings.active_template_id

    if settings.active_template_id == template.id:
        settings.active_template_id = None
    await db.delete(template)
    await db.commit()
    logger.info(f"Template {template_id} deleted")
    return True, settings.active_template_id
