from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.logging_config import get_logger
from app.database.session import get_db
from app.schemas.inscription import PassengerResponse
from app.schemas.trip import TripCreate, TripResponse, TripUpdate
from app.services.booking_manager import BookingManager, get_booking_manager
from app.services.trip_manager import TripManager, get_trip_manager
from app.utils.response_utils import ResponseWrapper, handle_db_error, unwrap_result
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/trips", tags=["trips"])


def _serialize(trips):
    return [TripResponse.model_validate(t).model_dump() for t in trips]


@router.get("", response_model=dict)
def list_trips(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    manager: TripManager = Depends(get_trip_manager),
    user_data=Depends(PermissionChecker(["USER"])),
):
    total, trips = manager.list_trips(page, limit)
    return ResponseWrapper.paginated(_serialize(trips), total, page, limit)


@router.get("/search", response_model=dict)
def search_trips(
    departure_city: Optional[str] = Query(None, min_length=1),
    arrival_city: Optional[str] = Query(None, min_length=1),
    trip_date: Optional[date] = Query(None, alias="date", description="UTC calendar day, YYYY-MM-DD"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    manager: TripManager = Depends(get_trip_manager),
    user_data=Depends(PermissionChecker(["USER"])),
):
    """
    Search trips by departure city, arrival city and UTC day.

    City names match exactly and only in their role: ``departure_city``
    never matches a trip arriving there. Filters combine with AND; none
    given returns every trip.
    """
    logger.info(f"[TripSearch] departure={departure_city} arrival={arrival_city} date={trip_date}")
    total, trips = manager.search_trips(departure_city, arrival_city, trip_date, page, limit)
    return ResponseWrapper.paginated(_serialize(trips), total, page, limit)


@router.get("/{trip_id}", response_model=dict)
def get_trip(
    trip_id: str,
    manager: TripManager = Depends(get_trip_manager),
    user_data=Depends(PermissionChecker(["USER"])),
):
    trip = unwrap_result(manager.get_trip(trip_id))
    return ResponseWrapper.success(TripResponse.model_validate(trip).model_dump())


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_trip(
    payload: TripCreate,
    db: Session = Depends(get_db),
    manager: TripManager = Depends(get_trip_manager),
    user_data=Depends(PermissionChecker(["DRIVER"])),
):
    try:
        trip = unwrap_result(manager.create_trip(user_data["user_id"], payload))
        return ResponseWrapper.created(TripResponse.model_validate(trip).model_dump())
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[TripCreate] Database error: {e}")
        raise handle_db_error(e)


@router.patch("/{trip_id}", response_model=dict)
def update_trip(
    trip_id: str,
    payload: TripUpdate,
    db: Session = Depends(get_db),
    manager: TripManager = Depends(get_trip_manager),
    user_data=Depends(PermissionChecker(["DRIVER"])),
):
    try:
        trip = unwrap_result(manager.update_trip(trip_id, user_data["user_id"], payload))
        return ResponseWrapper.success(TripResponse.model_validate(trip).model_dump())
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[TripUpdate] Database error for trip={trip_id}: {e}")
        raise handle_db_error(e)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_trip(
    trip_id: str,
    db: Session = Depends(get_db),
    manager: TripManager = Depends(get_trip_manager),
    user_data=Depends(PermissionChecker(["DRIVER"])),
):
    try:
        unwrap_result(manager.delete_trip(trip_id, user_data["user_id"]))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[TripDelete] Database error for trip={trip_id}: {e}")
        raise handle_db_error(e)


@router.get("/{trip_id}/passengers", response_model=dict)
def list_passengers(
    trip_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    manager: BookingManager = Depends(get_booking_manager),
    user_data=Depends(PermissionChecker(["USER"])),
):
    total, passengers = unwrap_result(manager.list_passengers(trip_id, page, limit))
    items = [PassengerResponse(**p).model_dump() for p in passengers]
    return ResponseWrapper.paginated(items, total, page, limit)
