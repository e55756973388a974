"""
RecipePlanner Backend - Access Guard
=====================================

What:  The FastAPI dependency that protects authenticated routes.
How:   Reads the raw token from the `x-auth-token` header, verifies it with
       the app's TokenCodec and hands the route a CurrentUser.
Who:   Declared by every /api/auth/profile, /api/recipes/my-recipes,
       /api/recipes/save-recipe, /api/meal-plans and /api/shopping-list route.

Outcomes:
    header missing or blank  → 401 "No token, authorization denied"
    token rejected by codec  → 401 "Token is not valid"
    account gone or changed  → 401 "Token is not valid"
    token accepted           → CurrentUser(id, email), also on request.state.user

The codec's rejection reason (expired, bad_signature, ...) is logged here
and then dropped; every rejected token gets the same response.

A valid signature is not enough: the account named by the token must still
exist with the email the token was issued for. A token outliving its
account is rejected like any other bad token, so it can never write rows
for a deleted user or act as whoever is given that id later.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from recipeplanner.config import settings
from recipeplanner.database import get_db_session
from recipeplanner.exceptions import TokenInvalidError, UnauthenticatedError
from recipeplanner.middleware.request_id import request_id_var
from recipeplanner.services.auth_service import AuthService
from recipeplanner.services.recipe_source import RecipeSource
from recipeplanner.services.token_service import TokenCodec

logger = logging.getLogger(__name__)

# auto_error=False: the guard raises its own UnauthenticatedError so the
# response goes through the global handlers with the usual error body
token_header = APIKeyHeader(
    name=settings.auth_header_name,
    auto_error=False,
    description="Token returned by /api/auth/register or /api/auth/login",
)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller, as read from a verified token."""

    id: int
    email: str


# ── App-state accessors ───────────────────────────────────────────────────
# create_app() puts the shared collaborators on app.state; these are the
# dependencies routes use to reach them (and tests override)

def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_recipe_source(request: Request) -> RecipeSource:
    return request.app.state.recipe_source


class AccessGuard:
    """
    Callable dependency: `user: CurrentUser = Depends(require_user)`.

    Raises:
        UnauthenticatedError: no token, a token the codec rejects, or a token
                              whose account no longer exists
    """

    async def __call__(
        self,
        request: Request,
        token: Optional[str] = Security(token_header),
        db: AsyncSession = Depends(get_db_session),
    ) -> CurrentUser:
        if token is None or not token.strip():
            raise UnauthenticatedError(message="No token, authorization denied")

        codec = get_token_codec(request)
        try:
            claims = codec.verify(token.strip())
        except TokenInvalidError as e:
            logger.warning(
                "[%s] Rejected token on %s %s: %s",
                request_id_var.get(""),
                request.method,
                request.url.path,
                e.reason,
            )
            raise UnauthenticatedError(context={"reason": e.reason})

        if not await get_auth_service(request).identity_is_live(db, claims):
            logger.warning(
                "[%s] Rejected token on %s %s: account %s no longer matches",
                request_id_var.get(""),
                request.method,
                request.url.path,
                claims.user_id,
            )
            raise UnauthenticatedError(context={"reason": "account_gone"})

        user = CurrentUser(id=claims.user_id, email=claims.email)
        request.state.user = user
        return user


require_user = AccessGuard()
