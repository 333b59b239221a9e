from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.logging_config import get_logger
from app.database.session import get_db
from app.schemas.inscription import InscriptionCreate, InscriptionResponse
from app.services.booking_manager import BookingManager, get_booking_manager
from app.utils.response_utils import ResponseWrapper, handle_db_error, unwrap_result
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/inscriptions", tags=["inscriptions"])


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_inscription(
    payload: InscriptionCreate,
    db: Session = Depends(get_db),
    manager: BookingManager = Depends(get_booking_manager),
    user_data=Depends(PermissionChecker(["USER"])),
):
    """Book one seat on a trip for the caller."""
    try:
        inscription = unwrap_result(manager.create_inscription(user_data["user_id"], payload.trip_id))
        return ResponseWrapper.created(InscriptionResponse.model_validate(inscription).model_dump())
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[BookingCreate] Database error for trip={payload.trip_id}: {e}")
        raise handle_db_error(e)


@router.get("/me", response_model=dict)
def list_my_inscriptions(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    manager: BookingManager = Depends(get_booking_manager),
    user_data=Depends(PermissionChecker(["USER"])),
):
    total, inscriptions = unwrap_result(manager.list_for_rider(user_data["user_id"], page, limit))
    items = [InscriptionResponse.model_validate(i).model_dump() for i in inscriptions]
    return ResponseWrapper.paginated(items, total, page, limit)


@router.delete("/{inscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_inscription(
    inscription_id: str,
    db: Session = Depends(get_db),
    manager: BookingManager = Depends(get_booking_manager),
    user_data=Depends(PermissionChecker(["USER"])),
):
    try:
        unwrap_result(manager.cancel_inscription(inscription_id, user_data["user_id"], user_data["role"]))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[BookingCancel] Database error for inscription={inscription_id}: {e}")
        raise handle_db_error(e)
