from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging_config import get_logger
from app.database.session import get_db
from app.schemas.brand import BrandCreate, BrandResponse
from app.services.brand_service import BrandService, get_brand_service
from app.utils.response_utils import ResponseWrapper, handle_db_error, unwrap_result
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/brands", tags=["brands"])


@router.get("", response_model=dict)
def list_brands(
    service: BrandService = Depends(get_brand_service),
    user_data=Depends(PermissionChecker(["USER"])),
):
    brands = service.list_brands()
    return ResponseWrapper.success([BrandResponse.model_validate(b).model_dump() for b in brands])


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_brand(
    payload: BrandCreate,
    db: Session = Depends(get_db),
    service: BrandService = Depends(get_brand_service),
    user_data=Depends(PermissionChecker(["ADMIN"])),
):
    try:
        brand = unwrap_result(service.create_brand(payload.name))
        return ResponseWrapper.created(BrandResponse.model_validate(brand).model_dump())
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[BrandCreate] Database error: {e}")
        raise handle_db_error(e)
