"""
RecipePlanner Backend - Meal Plan Route Handlers
=================================================

What:  POST /api/meal-plans/add, GET /api/meal-plans,
       DELETE /api/meal-plans/delete/{entry_id}. All protected.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recipeplanner.database import get_db_session
from recipeplanner.middleware.auth_guard import CurrentUser, require_user
from recipeplanner.schemas.common import ErrorResponse, MessageResponse
from recipeplanner.schemas.meal_plan import MealPlanCreateRequest, MealPlanEntryResponse
from recipeplanner.services.meal_plan_service import meal_plan_service

router = APIRouter(
    prefix="/api/meal-plans",
    tags=["Meal Plans"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.post(
    "/add",
    status_code=201,
    response_model=MealPlanEntryResponse,
    responses={
        400: {"description": "Invalid day or meal type", "model": ErrorResponse},
        404: {"description": "Recipe missing or owned by someone else", "model": ErrorResponse},
    },
    summary="Put a saved recipe on the weekly plan",
)
async def add_meal_plan_entry(
    body: MealPlanCreateRequest,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> MealPlanEntryResponse:
    return await meal_plan_service.add_entry(
        db,
        user.id,
        recipe_id=body.recipe_id,
        day_of_week=body.day_of_week,
        meal_type=body.meal_type,
    )


@router.get(
    "",
    response_model=List[MealPlanEntryResponse],
    summary="The caller's weekly plan, Monday to Sunday",
)
async def list_meal_plan(
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[MealPlanEntryResponse]:
    return await meal_plan_service.list_entries(db, user.id)


@router.delete(
    "/delete/{entry_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Entry missing or owned by someone else", "model": ErrorResponse}},
    summary="Remove one entry from the plan",
)
async def delete_meal_plan_entry(
    entry_id: int,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await meal_plan_service.delete_entry(db, user.id, entry_id)
    return MessageResponse(message="Meal plan deleted successfully")
