"""
Inkwell Backend — Shared Response Schemas
==========================================

What:  Envelope, error and health models used by every route module.

Every successful JSON response is wrapped as
    {"success": true, "data": <payload>}
and every failure as
    {"success": false, "error": <category>, "code": <CODE>,
     "message": ..., "details": {...}, "request_id": ...}
"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope."""

    success: bool = Field(default=True)
    data: T


class MessageResponse(BaseModel):
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error Response Model
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error:   Category (e.g. "conflict", "not_found")
        code:    Machine-readable code (e.g. "ALREADY_REVIEWED")
        message: Human-readable description for display to users
        details: Extra context for client errors (omitted for server errors)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "success": false,
            "error": "conflict",
            "code": "ALREADY_REVIEWED",
            "message": "Application already reviewed",
            "details": {"application_id": "…", "current_status": "approved"},
            "request_id": "3f2a9c1b"
        }
    """

    success: bool = Field(default=False)
    error: str = Field(description="Error category")
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


# ══════════════════════════════════════════════════════════════════════════
# Health
# ══════════════════════════════════════════════════════════════════════════


class HealthChecks(BaseModel):
    api: bool
    database: bool
    environment: bool


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /api/health for load balancers and uptime monitors.
    """

    status: str = Field(description="healthy or degraded")
    timestamp: datetime
    uptime_seconds: float = Field(description="Seconds since service started")
    version: str
    checks: HealthChecks
    errors: List[str] = Field(default_factory=list)
    response_time_ms: float
