"""
RecipePlanner Backend - Abstract Recipe Source
===============================================

What:  The contract for the third-party recipe catalogue.
Who:   Implemented by SpoonacularService; called by the /api/recipes search
       and detail routes; swapped for a fake in tests.

Responses are passed through to the client as the provider returned them.
Implementations translate every provider failure into
UpstreamUnavailableError; callers never see transport exceptions.
"""

from abc import ABC, abstractmethod
from typing import Any


class RecipeSource(ABC):
    """
    Contract:
        - search_by_ingredients() pages through recipes using the given ingredients
        - get_recipe_information() returns the full record of one recipe
        - All provider-specific errors are wrapped in UpstreamUnavailableError
    """

    @abstractmethod
    async def search_by_ingredients(self, ingredients: str, page: int = 1) -> Any:
        """
        Find recipes that use `ingredients`.

        Args:
            ingredients: Comma-separated ingredient names, e.g. "apples,flour,sugar"
            page:        1-based page number

        Raises:
            UpstreamUnavailableError: provider unreachable or returned an error
        """
        ...

    @abstractmethod
    async def get_recipe_information(self, recipe_id: int) -> Any:
        """
        Full details of one recipe.

        Raises:
            UpstreamUnavailableError: provider unreachable or returned an error
        """
        ...

    @abstractmethod
    async def health_check(self) -> str:
        """"available", "unavailable" or "circuit_open"; never raises."""
        ...

    async def aclose(self) -> None:
        """Release network resources. Called once at shutdown."""
        return None
