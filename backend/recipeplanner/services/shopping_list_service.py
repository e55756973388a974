"""
RecipePlanner Backend - Shopping List Service
==============================================

What:  Read and replace the caller's shopping list.
How:   replace_items() deletes every stored item, then inserts the submitted
       ones in order. Both statements run in the request transaction
       (committed by get_db_session), so a failure half-way leaves the
       previous list intact rather than a partially emptied one.

There is no merge: after replace_items(["flour"]) the list is exactly
["flour"], whatever it held before.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recipeplanner.exceptions import DatabaseError, ValidationError
from recipeplanner.models.shopping_list import ShoppingListItem
from recipeplanner.services.scoped_store import shopping_list_store

logger = logging.getLogger(__name__)

MAX_INGREDIENT_LENGTH = 255


class ShoppingListService:

    async def get_items(self, db: AsyncSession, owner_id: int) -> List[str]:
        query = shopping_list_store.scoped_select(owner_id, ShoppingListItem.ingredient).order_by(
            ShoppingListItem.position, ShoppingListItem.id
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error reading shopping list for user %s: %s", owner_id, e)
            raise DatabaseError(
                message="Could not retrieve your shopping list. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return list(result.scalars().all())

    async def replace_items(
        self, db: AsyncSession, owner_id: int, ingredients: List[str]
    ) -> List[str]:
        """
        Make the stored list equal to `ingredients`.

        Raises:
            ValidationError: an item is blank or too long (every bad index listed)
        """
        errors = []
        for index, ingredient in enumerate(ingredients):
            if not ingredient.strip():
                errors.append({"field": f"ingredients.{index}", "message": "Ingredient must not be blank"})
            elif len(ingredient) > MAX_INGREDIENT_LENGTH:
                errors.append({
                    "field": f"ingredients.{index}",
                    "message": f"Ingredient must be at most {MAX_INGREDIENT_LENGTH} characters",
                })
        if errors:
            raise ValidationError(message="Invalid ingredients", errors=errors)

        removed = await shopping_list_store.delete_all(db, owner_id)
        if ingredients:
            await shopping_list_store.add_many(
                db,
                owner_id,
                [
                    {"ingredient": ingredient, "position": position}
                    for position, ingredient in enumerate(ingredients)
                ],
            )
        logger.info(
            "User %s replaced shopping list (%d removed, %d added)",
            owner_id,
            removed,
            len(ingredients),
        )
        return list(ingredients)


# ── Singleton Instance ────────────────────────────────────────────────────
shopping_list_service = ShoppingListService()
