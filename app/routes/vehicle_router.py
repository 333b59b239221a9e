from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.logging_config import get_logger
from app.database.session import get_db
from app.schemas.vehicle import VehicleCreate, VehiclePatch, VehicleResponse, VehicleUpdate
from app.services.vehicle_service import VehicleService, get_vehicle_service
from app.utils.response_utils import ResponseWrapper, handle_db_error, unwrap_result
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("", response_model=dict)
def list_vehicles(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: VehicleService = Depends(get_vehicle_service),
    user_data=Depends(PermissionChecker(["DRIVER"])),
):
    """Own vehicles for a driver, every vehicle for an ADMIN."""
    total, vehicles = unwrap_result(
        service.list_vehicles(user_data["user_id"], user_data["role"], page, limit)
    )
    items = [VehicleResponse.model_validate(v).model_dump() for v in vehicles]
    return ResponseWrapper.paginated(items, total, page, limit)


@router.get("/{vehicle_id}", response_model=dict)
def get_vehicle(
    vehicle_id: str,
    service: VehicleService = Depends(get_vehicle_service),
    user_data=Depends(PermissionChecker(["DRIVER"])),
):
    vehicle = unwrap_result(service.get_vehicle(vehicle_id))
    return ResponseWrapper.success(VehicleResponse.model_validate(vehicle).model_dump())


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_vehicle(
    payload: VehicleCreate,
    db: Session = Depends(get_db),
    service: VehicleService = Depends(get_vehicle_service),
    user_data=Depends(PermissionChecker(["DRIVER"])),
):
    try:
        vehicle = unwrap_result(service.create_vehicle(user_data["user_id"], payload))
        return ResponseWrapper.created(VehicleResponse.model_validate(vehicle).model_dump())
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[VehicleCreate] Database error: {e}")
        raise handle_db_error(e)


@router.put("/{vehicle_id}", response_model=dict)
def replace_vehicle(
    vehicle_id: str,
    payload: VehicleUpdate,
    db: Session = Depends(get_db),
    service: VehicleService = Depends(get_vehicle_service),
    user_data=Depends(PermissionChecker(["DRIVER"])),
):
    try:
        vehicle = unwrap_result(
            service.update_vehicle(vehicle_id, user_data["user_id"], user_data["role"], payload)
        )
        return ResponseWrapper.success(VehicleResponse.model_validate(vehicle).model_dump())
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[VehicleUpdate] Database error for vehicle={vehicle_id}: {e}")
        raise handle_db_error(e)


@router.patch("/{vehicle_id}", response_model=dict)
def patch_vehicle(
    vehicle_id: str,
    payload: VehiclePatch,
    db: Session = Depends(get_db),
    service: VehicleService = Depends(get_vehicle_service),
    user_data=Depends(PermissionChecker(["DRIVER"])),
):
    try:
        vehicle = unwrap_result(
            service.patch_vehicle(vehicle_id, user_data["user_id"], user_data["role"], payload)
        )
        return ResponseWrapper.success(VehicleResponse.model_validate(vehicle).model_dump())
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[VehicleUpdate] Database error for vehicle={vehicle_id}: {e}")
        raise handle_db_error(e)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vehicle(
    vehicle_id: str,
    db: Session = Depends(get_db),
    service: VehicleService = Depends(get_vehicle_service),
    user_data=Depends(PermissionChecker(["DRIVER"])),
):
    try:
        unwrap_result(service.delete_vehicle(vehicle_id, user_data["user_id"], user_data["role"]))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[VehicleDelete] Database error for vehicle={vehicle_id}: {e}")
        raise handle_db_error(e)
