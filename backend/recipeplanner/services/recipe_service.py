"""
RecipePlanner Backend - Saved Recipe Service
=============================================

What:  Save, list and delete the caller's bookmarked recipes.
How:   Every query goes through `recipe_store`, which scopes it to the
       owner id taken from the verified token.
Who:   Called by /api/recipes route handlers.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from recipeplanner.models.meal_plan import MealPlan
from recipeplanner.schemas.recipe import RecipeResponse
from recipeplanner.services.scoped_store import meal_plan_store, recipe_store

logger = logging.getLogger(__name__)


class RecipeService:
    """Bookmarks of Spoonacular recipes."""

    async def save_recipe(
        self,
        db: AsyncSession,
        owner_id: int,
        title: str,
        spoonacular_id: Optional[int] = None,
        image_url: Optional[str] = None,
        ingredients: Optional[List[str]] = None,
    ) -> RecipeResponse:
        recipe = await recipe_store.add(
            db,
            owner_id,
            spoonacular_id=spoonacular_id,
            title=title,
            image_url=image_url,
            ingredients=list(ingredients or []),
        )
        logger.info("User %s saved recipe %s (spoonacular_id=%s)", owner_id, recipe.id, spoonacular_id)
        return RecipeResponse.model_validate(recipe)

    async def list_recipes(self, db: AsyncSession, owner_id: int) -> List[RecipeResponse]:
        recipes = await recipe_store.list(db, owner_id)
        return [RecipeResponse.model_validate(r) for r in recipes]

    async def delete_recipe(self, db: AsyncSession, owner_id: int, recipe_id: int) -> None:
        """
        Delete one of the caller's recipes and the meal-plan entries using it.

        Raises:
            NotFoundOrForbiddenError: no such recipe for this owner
        """
        # Entries first, so the count is ours and not the FK cascade's. A
        # caller only ever has entries for their own recipes.
        removed = await meal_plan_store.delete_all(db, owner_id, MealPlan.recipe_id == recipe_id)
        await recipe_store.delete(db, owner_id, recipe_id)
        logger.info(
            "User %s deleted recipe %s (%d meal-plan entries removed)",
            owner_id,
            recipe_id,
            removed,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
recipe_service = RecipeService()
