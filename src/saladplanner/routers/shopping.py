"""API routes for the shopping list and ingredient opt-outs."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from saladplanner.auth import require_user
from saladplanner.database import get_db
from saladplanner.logging_config import get_logger
from saladplanner.models import User
from saladplanner.plan.shopping_list import ShoppingList, build_shopping_list
from saladplanner.schemas import CamelModel
from saladplanner.services.exclusions import (
    NoActiveRecipeError,
    get_exclusions_by_key,
    get_user_exclusions,
    replace_exclusions,
)
from saladplanner.services.participants import count_participants
from saladplanner.services.templates import load_active_template

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["shopping"])


class ShoppingTemplateInfo(CamelModel):
    id: int
    title: str
    servings: int


class ShoppingListItemResponse(CamelModel):
    """One scaled ingredient."""

    name: str
    unit: str
    quantity: float
    excluded_by: list[str]


class ShoppingListResponse(CamelModel):
    """Shopping list for the active template and the current roster."""

    participant_count: int
    template: ShoppingTemplateInfo | None
    items: list[ShoppingListItemResponse]

    @classmethod
    def from_shopping_list(cls, shopping_list: ShoppingList) -> "ShoppingListResponse":
        template = shopping_list.template
        return cls(
            participant_count=shopping_list.participant_count,
            template=(
                ShoppingTemplateInfo(
                    id=template.id, title=template.title, servings=template.servings
                )
                if template
                else None
            ),
            items=[
                ShoppingListItemResponse(
                    name=item.name,
                    unit=item.unit,
                    quantity=item.quantity,
                    excluded_by=item.excluded_by,
                )
                for item in shopping_list.items
            ],
        )


class ExclusionsRequest(CamelModel):
    """Ingredient names to opt out of. Entries that aren't strings are ignored."""

    exclusions: list[Any]


class ExclusionsResponse(CamelModel):
    template_id: int | None
    exclusions: list[str]


@router.get("/shopping-list", response_model=ShoppingListResponse)
async def get_shopping_list(db: AsyncSession = Depends(get_db)) -> ShoppingListResponse:
    """Ingredients of the active template scaled to the roster."""
    template = await load_active_template(db)
    participant_count = await count_participants(db)
    exclusions = await get_exclusions_by_key(db, template.id) if template else {}

    shopping_list = build_shopping_list(template, participant_count, exclusions)
    return ShoppingListResponse.from_shopping_list(shopping_list)


@router.get("/ingredient-exclusions", response_model=ExclusionsResponse)
async def get_ingredient_exclusions(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> ExclusionsResponse:
    """The caller's opt-outs for the active template."""
    result = await get_user_exclusions(db, user.id)
    return ExclusionsResponse(template_id=result.template_id, exclusions=result.exclusions)


@router.put("/ingredient-exclusions", response_model=ExclusionsResponse)
async def put_ingredient_exclusions(
    request: ExclusionsRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> ExclusionsResponse:
    """Replace the caller's opt-outs for the active template."""
    try:
        result = await replace_exclusions(db, user.id, request.exclusions)
    except NoActiveRecipeError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    return ExclusionsResponse(template_id=result.template_id, exclusions=result.exclusions)
