"""
RecipePlanner Backend - Recipe Route Handlers
==============================================

What:  Saved recipes (protected) and Spoonacular search/detail (public).

Route Order:
    /my-recipes and /save-recipe are declared before /{recipe_id} so the
    literal paths win; /{recipe_id} only matches integers anyway.

Caching:
    Upstream search/detail responses get a short private cache header.
    Saved-recipe lists are never cached (they change on every save/delete).
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from recipeplanner.database import get_db_session
from recipeplanner.middleware.auth_guard import CurrentUser, get_recipe_source, require_user
from recipeplanner.schemas.common import ErrorResponse, MessageResponse
from recipeplanner.schemas.recipe import RecipeCreateRequest, RecipeResponse
from recipeplanner.services.recipe_service import recipe_service
from recipeplanner.services.recipe_source import RecipeSource

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recipes", tags=["Recipes"])

_UPSTREAM_CACHE_CONTROL = "private, max-age=300"


# ── Saved recipes (protected) ─────────────────────────────────────────────

@router.post(
    "/save-recipe",
    status_code=201,
    response_model=RecipeResponse,
    responses={
        400: {"description": "Invalid recipe body", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
    },
    summary="Bookmark a recipe",
)
async def save_recipe(
    body: RecipeCreateRequest,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeResponse:
    return await recipe_service.save_recipe(
        db,
        user.id,
        title=body.title,
        spoonacular_id=body.spoonacular_id,
        image_url=body.image_url,
        ingredients=body.ingredients,
    )


@router.get(
    "/my-recipes",
    response_model=List[RecipeResponse],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="List the caller's saved recipes",
)
async def list_my_recipes(
    response: Response,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[RecipeResponse]:
    response.headers["Cache-Control"] = "no-store"
    return await recipe_service.list_recipes(db, user.id)


@router.delete(
    "/my-recipes/{recipe_id}",
    response_model=MessageResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Recipe missing or owned by someone else", "model": ErrorResponse},
    },
    summary="Delete one of the caller's saved recipes",
)
async def delete_my_recipe(
    recipe_id: int,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await recipe_service.delete_recipe(db, user.id, recipe_id)
    return MessageResponse(message="Recipe deleted successfully")


# ── Spoonacular pass-through (public) ─────────────────────────────────────

@router.get(
    "/search/{ingredients}",
    responses={503: {"description": "Recipe API unavailable", "model": ErrorResponse}},
    summary="Search recipes by ingredients",
    description=(
        "Comma-separated ingredients, e.g. /search/apples,flour,sugar. "
        "Returns the Spoonacular response unchanged, 10 results per page."
    ),
)
async def search_recipes(
    response: Response,
    ingredients: str = Path(min_length=1, max_length=500),
    page: int = Query(default=1, ge=1, le=1000, description="1-based page number"),
    source: RecipeSource = Depends(get_recipe_source),
) -> Any:
    result = await source.search_by_ingredients(ingredients, page=page)
    response.headers["Cache-Control"] = _UPSTREAM_CACHE_CONTROL
    return result


@router.get(
    "/{recipe_id}",
    responses={503: {"description": "Recipe API unavailable", "model": ErrorResponse}},
    summary="Full details of a Spoonacular recipe",
)
async def get_recipe_information(
    recipe_id: int,
    response: Response,
    source: RecipeSource = Depends(get_recipe_source),
) -> Any:
    result = await source.get_recipe_information(recipe_id)
    response.headers["Cache-Control"] = _UPSTREAM_CACHE_CONTROL
    return result
