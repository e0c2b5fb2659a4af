"""Error response schemas for consistent error handling."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class ErrorType(str, Enum):
    """Types of errors surfaced to callers of the aggregation engine."""

    VALIDATION_ERROR = "validation_error"
    MISSING_PARAMETER = "missing_parameter"
    INVALID_SCOPE = "invalid_scope"
    INVALID_CATEGORY = "invalid_category"


class ErrorResponse(BaseModel):
    """Standardized error payload carrying the offending value and permitted set."""

    error_type: ErrorType = Field(..., description="Category of error")
    message: str = Field(..., description="Human-readable error message")
    detail: str | None = Field(None, description="Additional error details or context")
    value: str | None = Field(None, description="Value that failed validation")
    permitted_values: list[str] = Field(
        default_factory=list, description="Values accepted for the failing parameter"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When error occurred"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "error_type": "invalid_category",
                "message": "Invalid category: punches",
                "detail": "Valid categories are: knockdowns, significant_strikes, ...",
                "value": "punches",
                "permitted_values": ["knockdowns", "significant_strikes"],
                "timestamp": "2025-11-03T10:30:00Z",
            }
        }
    }


__all__ = ["ErrorResponse", "ErrorType"]
