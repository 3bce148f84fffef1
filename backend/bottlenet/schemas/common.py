"""
BottleNet Backend: Shared Pydantic Schemas
============================================

What:  The camelCase base model plus response shapes shared by every router
       (errors, health, hello).
Why:   Clients speak camelCase JSON (senderId, keptMessages); Python code
       speaks snake_case. The alias generator bridges the two, and
       populate_by_name lets services and tests build models either way.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every API schema: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "message with ID '5f0c...' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HelloResponse(BaseModel):
    message: str = Field(description="Greeting")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and store status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
