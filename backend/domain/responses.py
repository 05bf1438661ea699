"""
Standard API response helpers for consistent response formatting.

All endpoints use these helpers so the frontend sees one envelope:
- Success: { "success": true, "data": <payload>, "message": "..." }
- Error:   { "success": false, "message": "...", "error": "...", "errors": [...] }
"""
import math
from typing import Any


def success_response(data: Any, message: str | None = None) -> dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: The response payload
        message: Optional human-readable message

    Returns:
        dict: { "success": true, "data": <data>, "message": <message> }
    """
    response = {"success": True, "data": data}
    if message:
        response["message"] = message
    return response


def error_response(
    message: str,
    error: str | None = None,
    errors: list[dict] | None = None,
) -> dict[str, Any]:
    """
    Create a standardized error response.

    ``error`` carries diagnostic text for 500s, ``errors`` the per-field list
    for validation failures. Both are omitted when not set.
    """
    response: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        response["error"] = error
    if errors is not None:
        response["errors"] = errors
    return response


def page_count(total: int, limit: int) -> int:
    """Number of pages needed for ``total`` items at ``limit`` per page."""
    if limit <= 0:
        return 0
    return math.ceil(total / limit)


def pagination_meta(total: int, page: int, limit: int) -> dict[str, int]:
    """Page-based pagination block: total, page, limit, pages."""
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": page_count(total, limit),
    }
