"""
ResourcePulse Backend - Shared Response Schemas
===============================================

Error, health and plain-message responses used across routers.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for every non-2xx response raised by the app.

    Example:
        {
            "error": "not_found",
            "message": "Project with ID '7' was not found",
            "details": {"resource": "project", "resource_id": "7"},
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """
    Returned by GET /health for load balancers and monitoring.

    `unhealthy` means the database check failed; the endpoint then answers 503.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
