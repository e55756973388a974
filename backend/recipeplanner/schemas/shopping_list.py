"""
RecipePlanner Backend - Shopping List Schemas
==============================================

What:  Body for replacing the shopping list. GET returns a bare JSON array
       of strings, so it needs no model.
"""

from typing import List

from pydantic import BaseModel, Field


class ShoppingListUpdateRequest(BaseModel):
    """
    The complete new list. Whatever was stored before is discarded.

    Example:
        {"ingredients": ["eggs", "milk"]}
    """
    ingredients: List[str] = Field(description="Every item on the list, in display order")
