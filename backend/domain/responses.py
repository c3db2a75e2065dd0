"""
Standard API response helpers for consistent response formatting.

Envelopes:
- Success: { "success": true, "message": "...", <payload keys> }
- Paginated: { "success": true, <items key>: [...], "pagination": { "total", "page", "pages" } }
- Error: { "success": false, "message": "...", "error": { "code": "...", "message": "...", "details": {...} } }
"""
import math
from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error detail structure."""
    code: str = Field(..., description="Error code (e.g., 'not_found', 'validation_error')")
    message: str = Field(..., description="Human-readable error message")
    details: Any = Field(default=None, description="Additional error context")


class StandardErrorResponse(BaseModel):
    """Standard error response envelope."""
    success: bool = Field(False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error message")
    error: ErrorDetail = Field(..., description="Error details")


class PaginationMeta(BaseModel):
    """Page-based pagination metadata."""
    total: int = Field(..., description="Total number of matching items")
    page: int = Field(..., description="Current page (1-based)")
    pages: int = Field(..., description="Total number of pages")


def success_response(message: str | None = None, **payload: Any) -> dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        message: Optional human-readable message
        **payload: Top-level payload keys (e.g. order=..., orders=...)

    Returns:
        dict: { "success": true, "message": <message>, **payload }
    """
    response: dict[str, Any] = {"success": True}
    if message:
        response["message"] = message
    response.update(payload)
    return response


def page_count(total: int, page_size: int) -> int:
    """ceil(total / page_size); zero when there is nothing to page."""
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)


def paginated_response(
    key: str,
    items: list[Any],
    *,
    page: int,
    page_size: int,
    total: int,
) -> dict[str, Any]:
    """
    Create a standardized page-based response.

    Returns:
        dict: { "success": true, <key>: <items>, "pagination": { "total", "page", "pages" } }
    """
    meta = PaginationMeta(total=total, page=page, pages=page_count(total, page_size))
    return success_response(**{key: items, "pagination": meta.model_dump()})


def error_response(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Create a standardized error body."""
    return StandardErrorResponse(
        message=message,
        error=ErrorDetail(code=code, message=message, details=details or None),
    ).model_dump()
