"""
RecipePlanner Backend - Shared Response Schemas
================================================

What:  Response models used by more than one router: errors, plain
       confirmation messages and the health report.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "unauthenticated")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., the list of failed fields)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "unauthenticated",
            "message": "Token is not valid",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    """Confirmation body for operations that return no resource."""
    message: str = Field(description="Human-readable outcome")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    recipe_api: str = Field(description="Spoonacular status: available, unavailable, circuit_open")
    uptime_seconds: float = Field(description="Seconds since service started")
