"""
RecipePlanner Backend - Shopping List Route Handlers
=====================================================

What:  GET and POST /api/shopping-list. Both protected.

POST replaces the whole list; there is no per-item add or delete.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recipeplanner.database import get_db_session
from recipeplanner.middleware.auth_guard import CurrentUser, require_user
from recipeplanner.schemas.common import ErrorResponse, MessageResponse
from recipeplanner.schemas.shopping_list import ShoppingListUpdateRequest
from recipeplanner.services.shopping_list_service import shopping_list_service

router = APIRouter(
    prefix="/api/shopping-list",
    tags=["Shopping List"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.get("", response_model=List[str], summary="The caller's shopping list")
async def get_shopping_list(
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[str]:
    return await shopping_list_service.get_items(db, user.id)


@router.post(
    "",
    response_model=MessageResponse,
    responses={400: {"description": "Blank or oversized ingredient", "model": ErrorResponse}},
    summary="Replace the caller's shopping list",
)
async def replace_shopping_list(
    body: ShoppingListUpdateRequest,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await shopping_list_service.replace_items(db, user.id, body.ingredients)
    return MessageResponse(message="Shopping list saved successfully")
