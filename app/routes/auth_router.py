from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging_config import get_logger
from app.database.session import get_db
from app.schemas.account import LoginRequest, ProfileResponse, RegisterRequest, TokenResponse
from app.services.account_service import AccountService, get_account_service
from app.utils.response_utils import ResponseWrapper, handle_db_error, unwrap_result

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=dict, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
):
    try:
        profile = unwrap_result(service.register(payload))
        return ResponseWrapper.created(ProfileResponse.model_validate(profile).model_dump())
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[Register] Database error: {e}")
        raise handle_db_error(e)


@router.post("/login", response_model=dict)
def login(
    payload: LoginRequest,
    service: AccountService = Depends(get_account_service),
):
    token = unwrap_result(service.login(payload.email, payload.password))
    return ResponseWrapper.success(TokenResponse(**token).model_dump())
