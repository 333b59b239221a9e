from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging_config import get_logger
from app.database.session import get_db
from app.schemas.driver import DriverCreate, DriverResponse
from app.services.driver_service import DriverService, get_driver_service
from app.utils.response_utils import ResponseWrapper, handle_db_error, unwrap_result
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_driver(
    payload: DriverCreate,
    db: Session = Depends(get_db),
    service: DriverService = Depends(get_driver_service),
    user_data=Depends(PermissionChecker(["USER"])),
):
    """
    Become a driver.

    Creates the caller's driver profile and upgrades their role to DRIVER.
    The response reflects the driver profile even if the role upgrade
    could not be saved.
    """
    try:
        driver = unwrap_result(service.become_driver(user_data["user_id"], payload.license_number))
        return ResponseWrapper.created(DriverResponse.model_validate(driver).model_dump())
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[DriverCreate] Database error: {e}")
        raise handle_db_error(e)
