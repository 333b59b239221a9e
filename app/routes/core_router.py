"""
Core / utility endpoints that live outside any domain-specific router.

Routes exposed:
    GET  /        - welcome message
    GET  /health  - liveness check, pings the database
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import text

from app.config import settings
from app.core.logging_config import get_logger
from app.database.session import get_db
from app.utils.response_utils import ResponseWrapper

logger = get_logger(__name__)

router = APIRouter(tags=["Core"])


@router.get("/")
def root():
    return ResponseWrapper.success({"message": f"Welcome to {settings.APP_NAME}"})


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"[Health] Database unreachable: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ResponseWrapper.error(message="Database unreachable", error_code="SERVICE_UNAVAILABLE"),
        )
    return ResponseWrapper.success({"status": "ok", "version": settings.APP_VERSION})
