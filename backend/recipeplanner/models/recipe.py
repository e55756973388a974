"""
RecipePlanner Backend - Recipe SQLAlchemy Model
================================================

What:  A recipe bookmarked by a user from the Spoonacular catalogue.
How:   Rows are created by "save" and removed by "delete"; never updated in place.

Query Patterns:
    - List a user's recipes:  WHERE user_id = :uid   → idx_recipes_user_id
    - Delete one recipe:      WHERE id = :id AND user_id = :uid
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, TIMESTAMP, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from recipeplanner.database import Base
from recipeplanner.models import user  # noqa: F401  (registers users for the FK)


class Recipe(Base):
    """A saved recipe, owned by exactly one user."""

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    spoonacular_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Recipe id in the Spoonacular API",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # JSON keeps the list shape on both PostgreSQL and SQLite
    ingredients: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ingredient names as returned by the recipe API",
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_recipes_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, title='{self.title}', user_id={self.user_id})>"
