"""
RecipePlanner Backend - Spoonacular Recipe Source
==================================================

What:  Pass-through client for the Spoonacular food API.
How:   One shared httpx.AsyncClient with a bounded timeout, guarded by a
       circuit breaker. Failures are mapped to UpstreamUnavailableError and
       never retried.
Who:   Created by create_app(); used by the recipe search/detail routes.

Endpoints used:
    GET /recipes/findByIngredients?ingredients=..&number=10&offset=..
    GET /recipes/{id}/information

Pagination:
    page N (1-based) → offset = (N - 1) * page_size, number = page_size
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx

from recipeplanner.exceptions import CircuitBreakerOpenError, UpstreamUnavailableError
from recipeplanner.services.circuit_breaker import CircuitBreaker
from recipeplanner.services.recipe_source import RecipeSource

logger = logging.getLogger(__name__)


class SpoonacularService(RecipeSource):
    """
    Args:
        api_key:           Spoonacular key (sent as the `apiKey` query parameter)
        base_url:          API root, default https://api.spoonacular.com
        page_size:         Results per search page
        timeout:           Seconds for any single call (connect + read)
        circuit_breaker:   Shared breaker; a default one is created if omitted
        transport:         Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.spoonacular.com",
        page_size: int = 10,
        timeout: float = 10.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self.page_size = page_size
        self.circuit_breaker = circuit_breaker or CircuitBreaker()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, app_settings) -> "SpoonacularService":
        return cls(
            api_key=app_settings.spoonacular_api_key.get_secret_value(),
            base_url=app_settings.spoonacular_base_url,
            page_size=app_settings.recipe_page_size,
            timeout=app_settings.upstream_timeout_seconds,
            circuit_breaker=CircuitBreaker(
                failure_threshold=app_settings.cb_failure_threshold,
                recovery_timeout=app_settings.cb_recovery_timeout,
            ),
        )

    async def search_by_ingredients(self, ingredients: str, page: int = 1) -> Any:
        if page < 1:
            raise ValueError("page is 1-based")
        return await self._get(
            "/recipes/findByIngredients",
            {
                "ingredients": ingredients,
                "number": self.page_size,
                "offset": (page - 1) * self.page_size,
            },
        )

    async def get_recipe_information(self, recipe_id: int) -> Any:
        return await self._get(f"/recipes/{recipe_id}/information", {})

    async def health_check(self) -> str:
        if self.circuit_breaker.state == CircuitBreaker.OPEN:
            return "circuit_open"
        if not self._api_key:
            return "unavailable"
        return "available"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        """
        Issue one GET and return the decoded JSON body.

        Raises:
            CircuitBreakerOpenError:  breaker is open; nothing was sent
            UpstreamUnavailableError: any other failure
        """
        if not self._api_key:
            logger.error("Spoonacular request to %s skipped: SPOONACULAR_API_KEY not set", path)
            raise UpstreamUnavailableError(context={"path": path, "reason": "missing_api_key"})

        self.circuit_breaker.can_execute()  # Raises CircuitBreakerOpenError if open

        start_time = time.perf_counter()
        try:
            response = await self._client.get(path, params={**params, "apiKey": self._api_key})
            response.raise_for_status()
            body = response.json()
        except CircuitBreakerOpenError:
            raise
        except (httpx.HTTPError, ValueError) as e:
            # HTTPStatusError, TimeoutException and TransportError are HTTPError;
            # ValueError covers an unparseable JSON body
            self.circuit_breaker.record_failure()
            duration_ms = (time.perf_counter() - start_time) * 1000
            status = getattr(getattr(e, "response", None), "status_code", None)
            logger.warning(
                "Spoonacular %s failed after %.0fms: %s (status=%s)",
                path,
                duration_ms,
                type(e).__name__,
                status,
            )
            raise UpstreamUnavailableError(
                context={"path": path, "error_type": type(e).__name__, "status": status},
            )

        self.circuit_breaker.record_success()
        logger.info(
            "Spoonacular %s completed in %.0fms",
            path,
            (time.perf_counter() - start_time) * 1000,
        )
        return body
