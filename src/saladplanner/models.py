"""SQLAlchemy database models."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from saladplanner.database import Base


class User(Base):
    """Registered account. Login is by email only."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    sessions: Mapped[list["LoginSession"]] = relationship(
        "LoginSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )


class LoginSession(Base):
    """Login session identified by an opaque token."""

    __tablename__ = "sessions"

    token: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="sessions")


class Participant(Base):
    """Person enrolled on this week's roster."""

    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)  # stored normalized
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_by_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    __table_args__ = (
        Index("idx_participants_email", "email"),
        Index("idx_participants_user_id", "user_id"),
    )


class RecipeTemplate(Base):
    """Recipe whose ingredient quantities are expressed per `servings` people."""

    __tablename__ = "recipe_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    servings: Mapped[int] = mapped_column(Integer, nullable=False)
    created_by_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now
    )

    ingredients: Mapped[list["TemplateIngredient"]] = relationship(
        "TemplateIngredient",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="TemplateIngredient.id",
        passive_deletes=True,
    )

    __table_args__ = (CheckConstraint("servings >= 1", name="ck_template_servings_positive"),)


class TemplateIngredient(Base):
    """Ingredient line of a recipe template."""

    __tablename__ = "template_ingredients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    template_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipe_templates.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(50), default="", nullable=False)

    template: Mapped["RecipeTemplate"] = relationship(
        "RecipeTemplate", back_populates="ingredients"
    )


class ResetSettings(Base):
    """Singleton row (id=1) holding the weekly reset schedule and active recipe."""

    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    reset_day_of_week: Mapped[int] = mapped_column(Integer, nullable=False, default=5)  # 0=Sunday
    reset_hour: Mapped[int] = mapped_column(Integer, nullable=False, default=23)
    reset_minute: Mapped[int] = mapped_column(Integer, nullable=False, default=59)
    last_reset: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    active_template_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("recipe_templates.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (CheckConstraint("id = 1", name="ck_settings_singleton"),)


class IngredientExclusion(Base):
    """A user opting out of one ingredient of one template."""

    __tablename__ = "ingredient_exclusions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    template_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipe_templates.id", ondelete="CASCADE"), nullable=False
    )
    ingredient_name: Mapped[str] = mapped_column(Text, nullable=False)
    ingredient_key: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    __table_args__ = (
        UniqueConstraint(
            "user_id", "template_id", "ingredient_key", name="uq_ingredient_exclusion"
        ),
        Index("idx_ingredient_exclusions_template_id", "template_id"),
    )
