"""Common API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys, as the web client expects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserResponse(CamelModel):
    """Registered account."""

    id: int
    name: str
    email: str


class ParticipantResponse(CamelModel):
    """Participant on the weekly roster."""

    id: int
    name: str
    email: str
    user_id: int | None = None
    created_by_user_id: int | None = None
    created_at: datetime | None = None


class TemplateSummaryResponse(CamelModel):
    """Template without its ingredients."""

    id: int
    title: str
    servings: int
    updated_at: datetime | None = None


class IngredientSchema(CamelModel):
    """Ingredient line, quantity per baseline servings."""

    name: str
    quantity: float
    unit: str = ""


class TemplateResponse(TemplateSummaryResponse):
    """Template with ingredients in stored order."""

    ingredients: list[IngredientSchema]
