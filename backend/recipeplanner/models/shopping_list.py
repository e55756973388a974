"""
RecipePlanner Backend - Shopping List SQLAlchemy Model
=======================================================

What:  One row per ingredient on a user's shopping list.
How:   The list is never diffed. Every update deletes all of the user's rows
       and inserts the submitted items, inside one transaction.

`position` preserves the order the client submitted, so a GET returns the
list exactly as it was last written.
"""

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from recipeplanner.database import Base
from recipeplanner.models import user  # noqa: F401  (registers users for the FK)


class ShoppingListItem(Base):
    """A single ingredient line."""

    __tablename__ = "shopping_lists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    ingredient: Mapped[str] = mapped_column(String(255), nullable=False)

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_shopping_lists_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<ShoppingListItem(user_id={self.user_id}, ingredient='{self.ingredient}')>"
