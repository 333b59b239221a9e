import re
from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import IntegrityError
from app.core.errors import DomainError
from app.core.result import Result
from app.schemas.base import (
    create_success_response,
    create_error_response,
    create_paginated_response
)
from app.core.logging_config import get_logger

logger = get_logger(__name__)

_UNIQUE_PATTERNS = re.compile(r"duplicate key|unique constraint", re.IGNORECASE)
_RELATION_PATTERNS = re.compile(r"foreign key", re.IGNORECASE)


class ResponseWrapper:
    """Utility class for wrapping responses in standard format"""

    @staticmethod
    def success(data: Any = None) -> Dict[str, Any]:
        return jsonable_encoder(create_success_response(data))

    @staticmethod
    def error(
        message: str,
        error_code: str,
        details: Optional[Any] = None
    ) -> Dict[str, Any]:
        """Wrap error response and make it JSON-safe"""
        return jsonable_encoder(create_error_response(error_code, message, details))

    @staticmethod
    def paginated(items: List[Any], total: int, page: int, limit: int) -> Dict[str, Any]:
        return jsonable_encoder(create_paginated_response(items, total, page, limit))

    @staticmethod
    def created(data: Any = None) -> Dict[str, Any]:
        return jsonable_encoder(create_success_response(data))


def domain_error_to_http(error: DomainError) -> HTTPException:
    return HTTPException(
        status_code=error.http_status,
        detail=ResponseWrapper.error(message=error.message, error_code=error.code, details=error.details),
    )


def unwrap_result(result: Result) -> Any:
    """Return the value of an ``Ok`` or raise the ``Err`` as an HTTPException"""
    if result.is_ok:
        return result.value
    raise domain_error_to_http(result.error)


def handle_db_error(error: Exception) -> HTTPException:
    """
    Convert database errors to HTTP exceptions.

    The driver message is for the server log only; clients get a code and a
    generic message.
    """
    error_msg = str(getattr(error, "orig", error)).strip().replace("\n", " ")

    if isinstance(error, IntegrityError) and _UNIQUE_PATTERNS.search(error_msg):
        detail = ResponseWrapper.error(
            message="Resource already exists with the same values",
            error_code="DUPLICATE_RESOURCE",
        )
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)

    if isinstance(error, IntegrityError) and _RELATION_PATTERNS.search(error_msg):
        detail = ResponseWrapper.error(
            message="Resource is referenced by or references other records",
            error_code="RELATION_CONSTRAINT",
        )
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)

    logger.error(f"[DB] Unmapped database error: {error_msg}")
    detail = ResponseWrapper.error(
        message="Database operation failed",
        error_code="DATABASE_ERROR",
    )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def handle_http_error(error: Exception) -> HTTPException:
    """Convert HTTP and generic exceptions into structured ResponseWrapper format"""
    if isinstance(error, HTTPException):
        detail = getattr(error, "detail", str(error))
        if isinstance(detail, dict) and detail.get("success") is not None:
            return error

        code = {
            status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
            status.HTTP_403_FORBIDDEN: "FORBIDDEN",
            status.HTTP_404_NOT_FOUND: "NOT_FOUND",
        }.get(error.status_code, "HTTP_ERROR")
        return HTTPException(
            status_code=error.status_code,
            detail=ResponseWrapper.error(message=str(detail), error_code=code),
            headers=getattr(error, "headers", None),
        )

    logger.exception(f"Unexpected HTTP error: {error}")
    detail = ResponseWrapper.error(
        message="Unexpected server error",
        error_code="INTERNAL_SERVER_ERROR",
    )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
