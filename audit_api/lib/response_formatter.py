"""
Response formatting utilities for the Audit Query API

Provides consistent JSON response structure with CORS headers.
"""

import json
from typing import Any, Dict, List, Optional

from .response_models import ErrorResponse, QueryPageResponse


def success_response(
    items: List[Dict[str, Any]], next_token: Optional[str] = None, status_code: int = 200
) -> Dict[str, Any]:
    """
    Build a page response.

    Args:
        items: Decoded items
        next_token: Cursor for the next page, omitted from the body when None
        status_code: HTTP status code (default 200)

    Returns:
        API Gateway response dict with CORS headers

    Example:
        success_response([{"auditId": "a1"}], next_token="eyJ...")
        # body: {"items": [{"auditId": "a1"}], "nextToken": "eyJ..."}
    """
    page = QueryPageResponse(items=items, next_token=next_token)
    body = page.model_dump(mode="json", by_alias=True, exclude_none=True)

    return {
        "statusCode": status_code,
        "headers": _get_cors_headers(),
        "body": json.dumps(body, default=str),
    }


def error_response(message: str, status_code: int = 400) -> Dict[str, Any]:
    """
    Build error response with consistent structure.

    Args:
        message: Error message
        status_code: HTTP status code (400, 404, 500)

    Returns:
        API Gateway response dict

    Example:
        error_response("Table not found", status_code=404)
    """
    body = ErrorResponse(error=message).model_dump()

    return {
        "statusCode": status_code,
        "headers": _get_cors_headers(),
        "body": json.dumps(body),
    }


def _get_cors_headers() -> Dict[str, str]:
    """
    Get CORS headers for API responses.

    Returns:
        Dict of CORS headers
    """
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
        "Content-Type": "application/json",
    }
