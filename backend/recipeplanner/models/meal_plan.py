"""
RecipePlanner Backend - Meal Plan SQLAlchemy Model
===================================================

What:  Assigns one of the user's saved recipes to a day of the week and a meal.
How:   Read back joined with `recipes` so the client gets title and image
       without a second request.

Both foreign keys cascade: deleting the user or the recipe removes the entry.
"""

from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from recipeplanner.database import Base
from recipeplanner.models import recipe, user  # noqa: F401  (register FK targets)

DAYS_OF_WEEK = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")


class MealPlan(Base):
    """One slot of a user's weekly plan."""

    __tablename__ = "meal_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    recipe_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("recipes.id", ondelete="CASCADE"),
        nullable=False,
    )

    day_of_week: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="Monday..Sunday",
    )

    meal_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="breakfast, lunch, dinner or snack",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_meal_plans_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<MealPlan(id={self.id}, user_id={self.user_id}, recipe_id={self.recipe_id}, "
            f"day='{self.day_of_week}', meal='{self.meal_type}')>"
        )
