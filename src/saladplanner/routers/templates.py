"""API routes for the recipe template library."""

import math

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from saladplanner.auth import require_user
from saladplanner.database import get_db
from saladplanner.logging_config import get_logger
from saladplanner.models import RecipeTemplate, User
from saladplanner.plan.shopping_list import IngredientLine
from saladplanner.schemas import (
    CamelModel,
    IngredientSchema,
    TemplateResponse,
    TemplateSummaryResponse,
)
from saladplanner.services.settings import get_reset_settings
from saladplanner.services.templates import (
    activate_template,
    delete_template,
    get_template,
    list_templates,
    save_template,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["templates"])


class IngredientInput(CamelModel):
    """Ingredient as submitted by the editor; blank rows are skipped."""

    name: str = ""
    quantity: float | None = None
    unit: str | None = ""


class TemplateRequest(CamelModel):
    """Create or replace a template."""

    title: str
    servings: int
    ingredients: list[IngredientInput]


class TemplateListResponse(CamelModel):
    templates: list[TemplateSummaryResponse]


class TemplateEnvelope(CamelModel):
    template: TemplateResponse | None


class TemplateDeletedResponse(CamelModel):
    removed_id: int
    active_template_id: int | None


def to_response(template: RecipeTemplate) -> TemplateResponse:
    return TemplateResponse(
        id=template.id,
        title=template.title,
        servings=template.servings,
        updated_at=template.updated_at,
        ingredients=[
            IngredientSchema(name=i.name, quantity=i.quantity, unit=i.unit or "")
            for i in template.ingredients
        ],
    )


def parse_template_request(request: TemplateRequest) -> tuple[str, list[IngredientLine]]:
    """
    Validate a template body.

    Returns:
        (title, ingredient lines). Rows without a name or quantity are skipped.

    Raises:
        HTTPException: 400 if the title is blank, servings is below 1, no
            ingredient remains, or a quantity is negative or not finite.
    """
    title = request.title.strip()
    if not title:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Title and ingredients are required",
        )
    if request.servings < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Servings must be at least 1",
        )

    lines = []
    for item in request.ingredients:
        if not item.name.strip() or item.quantity is None:
            continue
        if not math.isfinite(item.quantity) or item.quantity < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid quantity for {item.name.strip()}",
            )
        lines.append(
            IngredientLine(name=item.name.strip(), quantity=item.quantity, unit=item.unit or "")
        )

    if not lines:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one ingredient is required",
        )
    return title, lines


@router.get("/templates", response_model=TemplateListResponse)
async def get_templates(db: AsyncSession = Depends(get_db)) -> TemplateListResponse:
    """All templates, most recently edited first."""
    templates = await list_templates(db)
    return TemplateListResponse(
        templates=[TemplateSummaryResponse.model_validate(t) for t in templates]
    )


@router.get("/template", response_model=TemplateEnvelope)
async def get_active_template(db: AsyncSession = Depends(get_db)) -> TemplateEnvelope:
    """The active template, or null."""
    settings = await get_reset_settings(db)
    if settings.active_template_id is None:
        return TemplateEnvelope(template=None)
    template = await get_template(db, settings.active_template_id)
    return TemplateEnvelope(template=to_response(template) if template else None)


@router.post("/template", response_model=TemplateEnvelope, status_code=status.HTTP_201_CREATED)
async def create_template(
    request: TemplateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> TemplateEnvelope:
    """Create a template and make it the active one."""
    title, lines = parse_template_request(request)
    template = await save_template(
        db, title=title, servings=request.servings, ingredients=lines, user_id=user.id
    )
    template = await activate_template(db, template.id)
    return TemplateEnvelope(template=to_response(template))


@router.put("/template/{template_id}", response_model=TemplateEnvelope)
async def update_template(
    template_id: int,
    request: TemplateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> TemplateEnvelope:
    """Replace a template's title, servings and ingredients."""
    title, lines = parse_template_request(request)
    template = await save_template(
        db,
        title=title,
        servings=request.servings,
        ingredients=lines,
        template_id=template_id,
        user_id=user.id,
    )
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template {template_id} not found",
        )
    return TemplateEnvelope(template=to_response(template))


@router.delete("/template/{template_id}", response_model=TemplateDeletedResponse)
async def remove_template(
    template_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> TemplateDeletedResponse:
    """Delete a template; if it was active, no template is active afterwards."""
    removed, active_template_id = await delete_template(db, template_id)
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template {template_id} not found",
        )
    return TemplateDeletedResponse(removed_id=template_id, active_template_id=active_template_id)


@router.post("/template/{template_id}/activate", response_model=TemplateEnvelope)
async def make_active(
    template_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
) -> TemplateEnvelope:
    """Make a template the source of the shopping list."""
    template = await activate_template(db, template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template {template_id} not found",
        )
    return TemplateEnvelope(template=to_response(template))
