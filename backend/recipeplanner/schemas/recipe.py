"""
RecipePlanner Backend - Saved Recipe Schemas
=============================================

What:  Bodies for saving and listing bookmarked recipes.

Search and detail responses from Spoonacular are passed through as raw JSON
and have no schema here.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RecipeCreateRequest(BaseModel):
    spoonacular_id: Optional[int] = Field(default=None, description="Recipe id in Spoonacular")
    title: str = Field(min_length=1, max_length=255)
    image_url: Optional[str] = Field(default=None, max_length=1024)
    ingredients: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title must not be blank")
        return v.strip()


class RecipeResponse(BaseModel):
    id: int
    spoonacular_id: Optional[int] = None
    title: str
    image_url: Optional[str] = None
    ingredients: List[str]
    created_at: datetime

    model_config = {"from_attributes": True}
