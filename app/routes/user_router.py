from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.logging_config import get_logger
from app.database.session import get_db
from app.schemas.account import ProfileResponse, ProfileUpdate
from app.schemas.inscription import InscriptionResponse
from app.services.account_service import AccountService, get_account_service
from app.services.booking_manager import BookingManager, get_booking_manager
from app.utils.response_utils import ResponseWrapper, handle_db_error, unwrap_result
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=dict)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: AccountService = Depends(get_account_service),
    user_data=Depends(PermissionChecker(["ADMIN"])),
):
    total, profiles = unwrap_result(service.list_users(page, limit))
    items = [ProfileResponse.model_validate(p).model_dump() for p in profiles]
    return ResponseWrapper.paginated(items, total, page, limit)


# /me routes are declared before /{user_id} so "me" is never taken as an id
@router.get("/me", response_model=dict)
def get_me(
    service: AccountService = Depends(get_account_service),
    user_data=Depends(PermissionChecker(["USER"])),
):
    profile = unwrap_result(service.get_profile(user_data["user_id"]))
    return ResponseWrapper.success(ProfileResponse.model_validate(profile).model_dump())


@router.patch("/me", response_model=dict)
def update_me(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
    user_data=Depends(PermissionChecker(["USER"])),
):
    try:
        profile = unwrap_result(service.update_profile(user_data["user_id"], payload))
        return ResponseWrapper.success(ProfileResponse.model_validate(profile).model_dump())
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[UserUpdate] Database error for user={user_data['user_id']}: {e}")
        raise handle_db_error(e)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
    user_data=Depends(PermissionChecker(["USER"])),
):
    try:
        unwrap_result(service.anonymize(user_data["user_id"], user_data["user_id"], user_data["role"]))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[UserDelete] Database error for user={user_data['user_id']}: {e}")
        raise handle_db_error(e)


@router.get("/{user_id}", response_model=dict)
def get_user(
    user_id: str,
    service: AccountService = Depends(get_account_service),
    user_data=Depends(PermissionChecker(["USER"])),
):
    profile = unwrap_result(service.get_profile(user_id))
    return ResponseWrapper.success(ProfileResponse.model_validate(profile).model_dump())


@router.get("/{user_id}/inscriptions", response_model=dict)
def list_user_inscriptions(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    manager: BookingManager = Depends(get_booking_manager),
    user_data=Depends(PermissionChecker(["USER"])),
):
    """Bookings of one user; visible to that user and to ADMINs."""
    total, inscriptions = unwrap_result(
        manager.list_for_rider(user_id, page, limit, user_data["user_id"], user_data["role"])
    )
    items = [InscriptionResponse.model_validate(i).model_dump() for i in inscriptions]
    return ResponseWrapper.paginated(items, total, page, limit)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
    user_data=Depends(PermissionChecker(["USER"])),
):
    """Anonymize a user. Allowed for the user themself or an ADMIN."""
    try:
        unwrap_result(service.anonymize(user_id, user_data["user_id"], user_data["role"]))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[UserDelete] Database error for user={user_id}: {e}")
        raise handle_db_error(e)
