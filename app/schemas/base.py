from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Optional

from pydantic import PlainSerializer


def serialize_utc(value: datetime) -> str:
    """ISO 8601 in UTC with a ``Z`` suffix; naive values are stored UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


# Every timestamp leaves the API as an explicit UTC instant
UtcDateTime = Annotated[datetime, PlainSerializer(serialize_utc, return_type=str)]


# Envelope builders shared by every endpoint:
#   success:   {"success": true, "data": ...}
#   paginated: {"success": true, "data": [...], "meta": {page, limit, total, totalPages}}
#   error:     {"success": false, "error": {"code", "message", "details"?}}


def create_success_response(data: Any = None) -> Dict[str, Any]:
    return {
        "success": True,
        "data": data,
    }


def create_error_response(code: str, message: str, details: Optional[Any] = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {
        "success": False,
        "error": error,
    }


def create_paginated_response(items: List[Any], total: int, page: int, limit: int) -> Dict[str, Any]:
    total_pages = (total + limit - 1) // limit if limit else 0

    return {
        "success": True,
        "data": items,
        "meta": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
        },
    }
