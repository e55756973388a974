"""
RecipePlanner Backend - Meal Plan Schemas
==========================================

What:  Bodies for adding and listing meal-plan entries.

`day_of_week` and `meal_type` are normalised before validation, so
"monday" / "DINNER" are accepted and stored as "Monday" / "dinner".
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

DayOfWeek = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class MealPlanCreateRequest(BaseModel):
    recipe_id: int = Field(description="Id of one of the caller's saved recipes")
    day_of_week: DayOfWeek
    meal_type: MealType

    @field_validator("day_of_week", mode="before")
    @classmethod
    def normalise_day(cls, v):
        return v.strip().capitalize() if isinstance(v, str) else v

    @field_validator("meal_type", mode="before")
    @classmethod
    def normalise_meal_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class MealPlanEntryResponse(BaseModel):
    """One entry joined with the recipe it points to."""
    id: int
    recipe_id: int
    day_of_week: str
    meal_type: str
    title: str = Field(description="Title of the referenced recipe")
    image_url: Optional[str] = Field(default=None, description="Image of the referenced recipe")
    created_at: datetime
