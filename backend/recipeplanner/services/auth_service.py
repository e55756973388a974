"""
RecipePlanner Backend - Authentication Service
===============================================

What:  Registration, login, and the authenticated account operations
       (read / update / delete profile).
How:   Composes the password hasher, the token codec and the users table.
Who:   Called by the /api/auth route handlers.

Flows:
    Register: validate → look up email → hash → insert → issue token
    Login:    validate → look up email → verify hash → (rehash if cost changed) → issue token

Stateless: one instance is built by create_app() and shared by every
request. Each call receives the request's AsyncSession.

Security Properties:
    - An unknown email and a wrong password raise the same
      InvalidCredentialsError. For an unknown email a bcrypt check still
      runs against a throwaway digest so response time doesn't give the
      answer away either.
    - The "email already taken" pre-check is only an optimisation. The
      UNIQUE constraint is authoritative: if two registrations race past
      the pre-check, the second INSERT fails and is reported as
      DuplicateUserError.
"""

import logging
import re
import secrets
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from recipeplanner.exceptions import (
    DatabaseError,
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidCurrentPasswordError,
    NotFoundError,
    ValidationError,
)
from recipeplanner.models.user import User
from recipeplanner.services.password_service import BCRYPT_MAX_PASSWORD_BYTES, PasswordHasher
from recipeplanner.services.scoped_store import (
    meal_plan_store,
    recipe_store,
    shopping_list_store,
)
from recipeplanner.services.token_service import TokenClaims, TokenCodec

logger = logging.getLogger(__name__)

# Loose shape check, always applied with fullmatch: one "@", no whitespace,
# a dot in the domain part
EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")

# users.email is VARCHAR(255)
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 100


@dataclass(frozen=True)
class TokenResult:
    """What register/login hand back to the client."""

    token: str
    expires_in: int


class AuthService:
    """
    Account lifecycle and credential checks.

    Args:
        hasher:               bcrypt wrapper
        codec:                token signer/verifier holding the process secret
        min_password_length:  lower bound for new passwords (6)
    """

    def __init__(
        self,
        hasher: PasswordHasher,
        codec: TokenCodec,
        min_password_length: int = 6,
    ):
        self.hasher = hasher
        self.codec = codec
        self.min_password_length = min_password_length
        self._dummy_digest: Optional[str] = None

    # ── Unauthenticated flows ─────────────────────────────────────────────

    async def register(
        self,
        db: AsyncSession,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str] = None,
    ) -> TokenResult:
        """
        Create an account and log it in.

        Raises:
            ValidationError:    one or more fields invalid (all listed)
            DuplicateUserError: email already registered
            DatabaseError:      store failure
        """
        errors = (
            self._check_email(email)
            + self._check_new_password(password, field="password")
            + self._check_name(name)
        )
        if errors:
            raise ValidationError(errors=errors)

        if await self._find_by_email(db, email) is not None:
            logger.info("Registration rejected: email already registered")
            raise DuplicateUserError()

        digest = await run_in_threadpool(self.hasher.hash, password)
        user = User(email=email, name=name.strip() if name else None, password_hash=digest)

        try:
            db.add(user)
            await db.flush()
        except IntegrityError:
            # Lost the race with a concurrent registration for the same email
            logger.info("Registration rejected by unique constraint on users.email")
            raise DuplicateUserError()
        except SQLAlchemyError as e:
            logger.error("Database error during registration: %s", e)
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Registered user %s", user.id)
        return self._issue(user)

    async def login(
        self,
        db: AsyncSession,
        email: Optional[str],
        password: Optional[str],
    ) -> TokenResult:
        """
        Exchange email + password for a token.

        Raises:
            ValidationError:         malformed email or missing password
            InvalidCredentialsError: unknown email OR wrong password
        """
        errors = self._check_email(email)
        if not password:
            errors.append({"field": "password", "message": "Password is required"})
        if errors:
            raise ValidationError(errors=errors)

        user = await self._find_by_email(db, email)
        if user is None:
            dummy_digest = await run_in_threadpool(self._get_dummy_digest)
            await run_in_threadpool(self.hasher.verify, password, dummy_digest)
            logger.info("Login failed: unknown account")
            raise InvalidCredentialsError()

        if not await run_in_threadpool(self.hasher.verify, password, user.password_hash):
            logger.info("Login failed: bad password for user %s", user.id)
            raise InvalidCredentialsError()

        if self.hasher.needs_rehash(user.password_hash):
            # BCRYPT_ROUNDS changed since this digest was made
            user.password_hash = await run_in_threadpool(self.hasher.hash, password)
            logger.info("Upgraded password digest cost for user %s", user.id)

        logger.info("Login: user %s", user.id)
        return self._issue(user)

    # ── Authenticated flows ───────────────────────────────────────────────

    async def get_profile(self, db: AsyncSession, user_id: int) -> User:
        """
        Load the caller's own account.

        Raises:
            NotFoundError: the token outlived the account
        """
        try:
            result = await db.execute(select(User).where(User.id == user_id))
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", user_id, e)
            raise DatabaseError(
                message="Could not retrieve the profile. Please try again.",
                context={"user_id": user_id},
            )
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def identity_is_live(self, db: AsyncSession, claims: TokenClaims) -> bool:
        """True while the account named by a token still exists under the same email."""
        try:
            result = await db.execute(
                select(User.id).where(User.id == claims.user_id, User.email == claims.email)
            )
        except SQLAlchemyError as e:
            logger.error("Database error checking account %s: %s", claims.user_id, e)
            raise DatabaseError(
                message="Could not verify the account. Please try again.",
                context={"user_id": claims.user_id},
            )
        return result.scalar_one_or_none() is not None

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: int,
        name: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> User:
        """
        Change the display name and/or the password.

        The two changes are independent. Fields left as None are untouched.
        A password change needs both current_password and new_password.

        Raises:
            ValidationError:             nothing to update, or invalid values
            InvalidCurrentPasswordError: current_password does not match
            NotFoundError:               account no longer exists
        """
        wants_password_change = current_password is not None or new_password is not None
        if name is None and not wants_password_change:
            raise ValidationError(message="Nothing to update")

        errors = self._check_name(name)
        if wants_password_change:
            if not current_password:
                errors.append(
                    {"field": "current_password", "message": "Current password is required"}
                )
            errors += self._check_new_password(new_password, field="new_password")
        if errors:
            raise ValidationError(errors=errors)

        user = await self.get_profile(db, user_id)

        if wants_password_change:
            matches = await run_in_threadpool(
                self.hasher.verify, current_password, user.password_hash
            )
            if not matches:
                logger.info("Password change rejected for user %s", user_id)
                raise InvalidCurrentPasswordError()
            user.password_hash = await run_in_threadpool(self.hasher.hash, new_password)

        if name is not None:
            user.name = name.strip()

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, e)
            raise DatabaseError(
                message="Could not update the profile. Please try again.",
                context={"user_id": user_id},
            )

        logger.info(
            "Profile updated for user %s (name=%s, password=%s)",
            user_id,
            name is not None,
            wants_password_change,
        )
        return user

    async def delete_account(self, db: AsyncSession, user_id: int) -> None:
        """
        Delete the account and everything it owns.

        Meal-plan entries go first (they reference recipes), then the
        shopping list, recipes and finally the user row. All statements
        share the request transaction.

        Raises:
            NotFoundError: account already deleted
        """
        user = await self.get_profile(db, user_id)

        meal_plans = await meal_plan_store.delete_all(db, user_id)
        items = await shopping_list_store.delete_all(db, user_id)
        recipes = await recipe_store.delete_all(db, user_id)

        try:
            await db.delete(user)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting user %s: %s", user_id, e)
            raise DatabaseError(
                message="Could not delete the account. Please try again.",
                context={"user_id": user_id},
            )

        logger.info(
            "Deleted user %s with %d recipes, %d meal-plan entries, %d shopping-list items",
            user_id,
            recipes,
            meal_plans,
            items,
        )

    # ── Helpers ───────────────────────────────────────────────────────────

    def _issue(self, user: User) -> TokenResult:
        token = self.codec.issue(TokenClaims(user_id=user.id, email=user.email))
        return TokenResult(token=token, expires_in=int(self.codec.ttl.total_seconds()))

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == email))
        except SQLAlchemyError as e:
            logger.error("Database error looking up account: %s", e)
            raise DatabaseError(
                message="Could not look up the account. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return result.scalar_one_or_none()

    def _get_dummy_digest(self) -> str:
        # Same cost factor as real digests so both login paths take as long
        if self._dummy_digest is None:
            self._dummy_digest = self.hasher.hash(secrets.token_urlsafe(16))
        return self._dummy_digest

    @staticmethod
    def _check_email(email: Optional[str]) -> List[Dict[str, str]]:
        if not email or not EMAIL_PATTERN.fullmatch(email):
            return [{"field": "email", "message": "Please include a valid email"}]
        if len(email) > MAX_EMAIL_LENGTH:
            return [{
                "field": "email",
                "message": f"Email must be at most {MAX_EMAIL_LENGTH} characters",
            }]
        return []

    def _check_new_password(self, password: Optional[str], field: str) -> List[Dict[str, str]]:
        if not password or len(password) < self.min_password_length:
            return [{
                "field": field,
                "message": f"Password must be {self.min_password_length} or more characters",
            }]
        if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            return [{
                "field": field,
                "message": f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes",
            }]
        return []

    @staticmethod
    def _check_name(name: Optional[str]) -> List[Dict[str, str]]:
        if name is None:
            return []
        stripped = name.strip()
        if not stripped:
            return [{"field": "name", "message": "Name must not be blank"}]
        if len(stripped) > MAX_NAME_LENGTH:
            return [{
                "field": "name",
                "message": f"Name must be at most {MAX_NAME_LENGTH} characters",
            }]
        return []
