"""
RecipePlanner Backend - Meal Plan Service
==========================================

What:  Add, list and delete entries of the caller's weekly meal plan.
How:   Entries reference saved recipes. Adding an entry first loads the
       recipe through `recipe_store`, so a caller can only plan meals from
       their own bookmarks; someone else's recipe id gets the same 404 as a
       nonexistent one.

Listing Order:
    Monday → Sunday, then breakfast → lunch → dinner → snack, then insertion.
    Day names are ordered by weekday, not alphabetically.
"""

import logging
from typing import List

from sqlalchemy import case
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recipeplanner.exceptions import DatabaseError
from recipeplanner.models.meal_plan import DAYS_OF_WEEK, MEAL_TYPES, MealPlan
from recipeplanner.models.recipe import Recipe
from recipeplanner.schemas.meal_plan import MealPlanEntryResponse
from recipeplanner.services.scoped_store import meal_plan_store, recipe_store

logger = logging.getLogger(__name__)

_DAY_ORDER = case(
    {day: index for index, day in enumerate(DAYS_OF_WEEK)},
    value=MealPlan.day_of_week,
    else_=len(DAYS_OF_WEEK),
)

_MEAL_ORDER = case(
    {meal: index for index, meal in enumerate(MEAL_TYPES)},
    value=MealPlan.meal_type,
    else_=len(MEAL_TYPES),
)


class MealPlanService:
    """Weekly plan built from the caller's saved recipes."""

    async def add_entry(
        self,
        db: AsyncSession,
        owner_id: int,
        recipe_id: int,
        day_of_week: str,
        meal_type: str,
    ) -> MealPlanEntryResponse:
        """
        Put a saved recipe on the plan.

        Raises:
            NotFoundOrForbiddenError: recipe missing or not the caller's
        """
        recipe = await recipe_store.get(db, owner_id, recipe_id)
        entry = await meal_plan_store.add(
            db,
            owner_id,
            recipe_id=recipe.id,
            day_of_week=day_of_week,
            meal_type=meal_type,
        )
        logger.info(
            "User %s planned recipe %s for %s %s",
            owner_id,
            recipe.id,
            day_of_week,
            meal_type,
        )
        return self._to_response(entry, recipe.title, recipe.image_url)

    async def list_entries(self, db: AsyncSession, owner_id: int) -> List[MealPlanEntryResponse]:
        query = (
            meal_plan_store.scoped_select(owner_id, MealPlan, Recipe.title, Recipe.image_url)
            .join(Recipe, Recipe.id == MealPlan.recipe_id)
            .where(Recipe.user_id == owner_id)
            .order_by(_DAY_ORDER, _MEAL_ORDER, MealPlan.id)
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing meal plan for user %s: %s", owner_id, e)
            raise DatabaseError(
                message="Could not retrieve your meal plan. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [
            self._to_response(entry, title, image_url)
            for entry, title, image_url in result.all()
        ]

    async def delete_entry(self, db: AsyncSession, owner_id: int, entry_id: int) -> None:
        """
        Raises:
            NotFoundOrForbiddenError: no such entry for this owner
        """
        await meal_plan_store.delete(db, owner_id, entry_id)
        logger.info("User %s removed meal-plan entry %s", owner_id, entry_id)

    @staticmethod
    def _to_response(entry: MealPlan, title: str, image_url) -> MealPlanEntryResponse:
        return MealPlanEntryResponse(
            id=entry.id,
            recipe_id=entry.recipe_id,
            day_of_week=entry.day_of_week,
            meal_type=entry.meal_type,
            title=title,
            image_url=image_url,
            created_at=entry.created_at,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
meal_plan_service = MealPlanService()
