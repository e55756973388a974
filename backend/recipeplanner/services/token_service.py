"""
RecipePlanner Backend - Token Codec
====================================

What:  Issues and verifies the signed bearer tokens handed out at login.
How:   PyJWT, HS256 by default. Payload:

           {"sub": "<user id>", "email": "...", "iat": <unix>, "exp": <unix>}

Who:   AuthService issues tokens; the access guard verifies them.
When:  Once per register/login, once per protected request.

Verification Order:
    PyJWT checks the signature before it looks at any claim, so a tampered
    token is rejected as tampered even when it is also expired. Only a
    correctly signed token gets its `exp` compared with the clock.

Failure Reporting:
    Every rejection raises TokenInvalidError with a `reason` for the
    server log. Callers facing the client must collapse all reasons into
    one "invalid token" answer.

The secret is passed in by create_app() from settings and kept in a private
attribute that __repr__ leaves out.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from recipeplanner.config import MIN_JWT_SECRET_BYTES
from recipeplanner.exceptions import TokenInvalidError

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "email", "iat", "exp"]


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried inside a token."""

    user_id: int
    email: str


class TokenCodec:
    """
    Signs and verifies identity tokens with a process-wide secret.

    Args:
        secret:      HMAC key (raw string, not the SecretStr wrapper)
        algorithm:   HS256 / HS384 / HS512
        ttl_seconds: Default lifetime of an issued token (3600 = 1 hour)
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 3600):
        if not secret:
            raise ValueError("TokenCodec requires a non-empty secret")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = timedelta(seconds=ttl_seconds)

    @classmethod
    def from_settings(cls, app_settings) -> "TokenCodec":
        """
        Build the codec from settings.

        An unset JWT_SECRET gets a random key that lives only as long as the
        process. A secret shorter than MIN_JWT_SECRET_BYTES is refused.

        Raises:
            ValueError: JWT_SECRET is set but too short
        """
        secret = app_settings.jwt_secret.get_secret_value()
        if not secret:
            logger.warning(
                "JWT_SECRET is not set; signing with a random per-process key. "
                "Issued tokens stop verifying when the process restarts."
            )
            secret = secrets.token_urlsafe(48)
        elif len(secret.encode("utf-8")) < MIN_JWT_SECRET_BYTES:
            raise ValueError(f"JWT_SECRET must be at least {MIN_JWT_SECRET_BYTES} bytes long")
        return cls(
            secret=secret,
            algorithm=app_settings.jwt_algorithm,
            ttl_seconds=app_settings.token_ttl_seconds,
        )

    def __repr__(self) -> str:
        return f"<TokenCodec(algorithm='{self.algorithm}', ttl={int(self.ttl.total_seconds())}s)>"

    def issue(self, claims: TokenClaims, ttl: Optional[timedelta] = None) -> str:
        """
        Sign `claims` into a token valid for `ttl` (default: the codec TTL).

        Returns:
            Compact JWT string.
        """
        now = datetime.now(timezone.utc)
        payload = {
            # PyJWT requires "sub" to be a string
            "sub": str(claims.user_id),
            "email": claims.email,
            "iat": now,
            "exp": now + (ttl if ttl is not None else self.ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Check signature, then expiry, then claim shape.

        Returns:
            TokenClaims decoded from a valid token.

        Raises:
            TokenInvalidError: for any token that is not accepted.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise TokenInvalidError(TokenInvalidError.EXPIRED)
        except jwt.InvalidSignatureError:
            raise TokenInvalidError(TokenInvalidError.BAD_SIGNATURE)
        except jwt.MissingRequiredClaimError:
            raise TokenInvalidError(TokenInvalidError.MISSING_CLAIMS)
        except jwt.InvalidTokenError:
            # DecodeError, InvalidAlgorithmError, ImmatureSignatureError, ...
            raise TokenInvalidError(TokenInvalidError.MALFORMED)

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise TokenInvalidError(TokenInvalidError.MISSING_CLAIMS)
        email = payload["email"]
        if not isinstance(email, str) or not email:
            raise TokenInvalidError(TokenInvalidError.MISSING_CLAIMS)

        return TokenClaims(user_id=user_id, email=email)
