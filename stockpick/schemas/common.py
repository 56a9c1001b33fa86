"""Common schemas and error responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .reports import utcnow


class ErrorResponse(BaseModel):
    """Standard error response schema (RFC 7807 inspired)."""

    error: str = Field(..., description="Error code", examples=["NOT_FOUND"])
    message: str = Field(..., description="Human-readable error message")
    status: int = Field(..., description="HTTP status code")
    details: Optional[Dict[str, Any]] = Field(
        default=None, description="Additional error details"
    )

    model_config = {
        "json_schema_extra": {
            "example": {"error": "QUOTA_EXCEEDED", "message": "Monthly analysis quota reached", "status": 429}
        }
    }


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall health status", examples=["healthy", "degraded"])
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(default_factory=utcnow)
    checks: Dict[str, bool] = Field(default_factory=dict, description="Individual service health checks")


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str = Field(..., description="Response message")
