"""
RecipePlanner Backend - Ownership-Scoped Resource Store
========================================================

What:  The one place that builds queries against user-owned tables.
How:   Every statement it emits carries `user_id = :owner_id`, whatever the
       resource. Recipes, meal-plan entries and shopping-list items all go
       through an instance of OwnedResourceStore, so no route or service
       writes its own ownership filter.

Rules:
    create  → the new row is stamped with the owner's id
    read    → filtered by owner
    delete  → both record id and owner id must match; zero affected rows is
              NotFoundOrForbiddenError, whether the row is missing or simply
              belongs to somebody else

Errors:
    SQLAlchemy failures are logged with context and re-raised as
    DatabaseError. NotFoundOrForbiddenError propagates unchanged.
"""

import logging
from typing import Any, Dict, Generic, List, Sequence, Type, TypeVar

from sqlalchemy import Select, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recipeplanner.exceptions import DatabaseError, NotFoundOrForbiddenError
from recipeplanner.models.meal_plan import MealPlan
from recipeplanner.models.recipe import Recipe
from recipeplanner.models.shopping_list import ShoppingListItem

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class OwnedResourceStore(Generic[ModelT]):
    """
    Owner-filtered CRUD for one ORM model.

    Args:
        model:          ORM class with integer `id` and `user_id` columns
        resource_name:  Human name used in error messages ("recipe", ...)
    """

    def __init__(self, model: Type[ModelT], resource_name: str):
        self.model = model
        self.resource_name = resource_name

    async def add(self, db: AsyncSession, owner_id: int, **fields: Any) -> ModelT:
        """Insert a row owned by `owner_id` and flush to obtain its id."""
        if "user_id" in fields:
            raise ValueError("user_id is set from the authenticated owner")
        record = self.model(user_id=owner_id, **fields)
        try:
            db.add(record)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to create %s for user %s: %s", self.resource_name, owner_id, e)
            raise DatabaseError(
                message=f"Could not save the {self.resource_name}. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return record

    async def list(self, db: AsyncSession, owner_id: int, *order_by: Any) -> List[ModelT]:
        """All rows owned by `owner_id`, ordered by `order_by` (default: id)."""
        query = select(self.model).where(self.model.user_id == owner_id)
        query = query.order_by(*(order_by or (self.model.id,)))
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Failed to list %s for user %s: %s", self.resource_name, owner_id, e)
            raise DatabaseError(
                message=f"Could not retrieve your {self.resource_name}s. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, owner_id: int, record_id: int) -> ModelT:
        """
        Fetch one row by id, only if `owner_id` owns it.

        Raises:
            NotFoundOrForbiddenError: no such row for this owner
        """
        query = select(self.model).where(
            self.model.id == record_id,
            self.model.user_id == owner_id,
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Failed to fetch %s %s: %s", self.resource_name, record_id, e)
            raise DatabaseError(
                message=f"Could not retrieve the {self.resource_name}. Please try again.",
                context={"error_type": type(e).__name__},
            )
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFoundOrForbiddenError(resource=self.resource_name, resource_id=str(record_id))
        return record

    async def delete(self, db: AsyncSession, owner_id: int, record_id: int) -> None:
        """
        Delete one row by id, only if `owner_id` owns it.

        Raises:
            NotFoundOrForbiddenError: the statement affected zero rows
        """
        statement = delete(self.model).where(
            self.model.id == record_id,
            self.model.user_id == owner_id,
        )
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Failed to delete %s %s: %s", self.resource_name, record_id, e)
            raise DatabaseError(
                message=f"Could not delete the {self.resource_name}. Please try again.",
                context={"error_type": type(e).__name__},
            )
        if result.rowcount == 0:
            # Log the owner for support; the client only gets the generic 404
            logger.info(
                "Delete of %s %s by user %s matched no row",
                self.resource_name,
                record_id,
                owner_id,
            )
            raise NotFoundOrForbiddenError(resource=self.resource_name, resource_id=str(record_id))

    async def add_many(
        self, db: AsyncSession, owner_id: int, rows: Sequence[Dict[str, Any]]
    ) -> List[ModelT]:
        """Insert several rows owned by `owner_id` with a single flush."""
        if any("user_id" in fields for fields in rows):
            raise ValueError("user_id is set from the authenticated owner")
        records = [self.model(user_id=owner_id, **fields) for fields in rows]
        try:
            db.add_all(records)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to create %s rows for user %s: %s", self.resource_name, owner_id, e)
            raise DatabaseError(
                message=f"Could not save your {self.resource_name}s. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return records

    def scoped_select(self, owner_id: int, *entities: Any) -> Select:
        """
        A SELECT over this model already restricted to `owner_id`.

        For joins and projections the plain list()/get() can't express;
        callers add their own joins and ordering on top.
        """
        return select(*(entities or (self.model,))).where(self.model.user_id == owner_id)

    async def delete_all(self, db: AsyncSession, owner_id: int, *criteria: Any) -> int:
        """
        Delete every row owned by `owner_id` that also matches `criteria`.

        Returns:
            The affected row count (0 is not an error here).
        """
        statement = delete(self.model).where(self.model.user_id == owner_id, *criteria)
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Failed to clear %s for user %s: %s", self.resource_name, owner_id, e)
            raise DatabaseError(
                message=f"Could not update your {self.resource_name}s. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return result.rowcount


# ── Store Instances ───────────────────────────────────────────────────────
# One per user-owned table; shared by the resource services and by
# AuthService.delete_account
recipe_store: OwnedResourceStore[Recipe] = OwnedResourceStore(Recipe, "recipe")
meal_plan_store: OwnedResourceStore[MealPlan] = OwnedResourceStore(MealPlan, "meal plan entry")
shopping_list_store: OwnedResourceStore[ShoppingListItem] = OwnedResourceStore(
    ShoppingListItem, "shopping list item"
)
