"""
TerpTaster Backend - Shared Response Schemas
============================================

What:  Error envelope, health check and root banner models.
Who:   Global exception handlers (ErrorResponse), health route, root route.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for every non-2xx response.

    Example:
        {
            "error": "validation_error",
            "message": "Missing required fields",
            "details": {"missing_fields": ["strain", "overall_score"]},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Service and dependency status returned by GET /health.

    Status levels:
        healthy    database reachable and terpene dataset loaded
        degraded   database reachable, dataset missing (reviews work, scoring does not)
        unhealthy  database unreachable
    """
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    dataset: str = Field(description="Terpene dataset: loaded, missing")
    terpene_count: int = Field(description="Terpenes in the loaded dataset (0 if missing)")
    uptime_seconds: float = Field(description="Seconds since service started")


class RootResponse(BaseModel):
    """API banner returned by GET /."""
    message: str
    version: str
    features: List[str]
    endpoints: List[str]
