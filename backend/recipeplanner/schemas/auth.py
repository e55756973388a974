"""
RecipePlanner Backend - Authentication Schemas
===============================================

What:  Request/response bodies for /api/auth.

Request fields are all Optional[str]. Shape checks (email format, password
length) happen in AuthService so that a single 400 response can list every
violation at once, instead of FastAPI stopping at schema-level errors.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class RegisterRequest(BaseModel):
    email: Optional[str] = Field(default=None, description="Login email, unique per account")
    password: Optional[str] = Field(default=None, description="At least 6 characters")
    name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("name", "username"),
        description="Display name (also accepted as `username`)",
    )


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    """
    Returned by register (201) and login (200).

    The client sends `token` back verbatim in the `x-auth-token` header.
    """
    token: str = Field(description="Signed bearer token")
    expires_in: int = Field(description="Seconds until the token expires")


class ProfileResponse(BaseModel):
    name: Optional[str] = Field(default=None, description="Display name")
    email: str = Field(description="Login email")

    model_config = {"from_attributes": True}


class ProfileUpdateRequest(BaseModel):
    """
    Any combination of fields; omitted fields are left untouched.

    A password change needs both `current_password` and `new_password`.
    """
    name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("name", "username"),
        description="New display name (also accepted as `username`)",
    )
    current_password: Optional[str] = Field(default=None, description="Required to change the password")
    new_password: Optional[str] = Field(default=None, description="At least 6 characters")
