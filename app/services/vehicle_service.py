from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, VehicleAlreadyExistsError, VehicleNotFoundError
from app.core.result import Err, Ok, Result
from app.crud.vehicle import vehicle_crud
from app.database.session import get_db
from app.models.account import RoleEnum
from app.models.vehicle import Vehicle
from app.schemas.vehicle import VehicleCreate, VehiclePatch, VehicleUpdate
from app.services.driver_resolver import DriverResolver, get_driver_resolver
from app.utils.pagination import paginate_query
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class VehicleService:
    """Vehicle CRUD; mutations are limited to the owning driver or an ADMIN."""

    def __init__(self, db: Session, driver_resolver: DriverResolver):
        self.db = db
        self.driver_resolver = driver_resolver

    def _finish(self, result: Result) -> Result:
        if result.is_ok:
            self.db.commit()
        else:
            self.db.rollback()
        return result

    def _plate_taken(self, license_plate: str, exclude_ref_id: Optional[int] = None) -> bool:
        existing = vehicle_crud.get_by_license_plate(self.db, license_plate=license_plate)
        return existing is not None and existing.ref_id != exclude_ref_id

    def list_vehicles(self, caller_user_id: str, caller_role: str, page: int, limit: int) -> Result[Tuple[int, List[Vehicle]], Exception]:
        if caller_role == RoleEnum.ADMIN.value:
            return Ok(paginate_query(vehicle_crud.query_for_driver(self.db), page, limit))

        driver_result = self.driver_resolver.resolve_driver(caller_user_id)
        if not driver_result.is_ok:
            return driver_result
        query = vehicle_crud.query_for_driver(self.db, driver_ref_id=driver_result.value.ref_id)
        return Ok(paginate_query(query, page, limit))

    def get_vehicle(self, vehicle_id: str) -> Result[Vehicle, VehicleNotFoundError]:
        vehicle = vehicle_crud.get(self.db, id=vehicle_id)
        if vehicle is None:
            return Err(VehicleNotFoundError(vehicle_id))
        return Ok(vehicle)

    def create_vehicle(self, caller_user_id: str, payload: VehicleCreate) -> Result[Vehicle, Exception]:
        return self._finish(self._create_vehicle(caller_user_id, payload))

    def _create_vehicle(self, caller_user_id: str, payload: VehicleCreate) -> Result:
        driver_result = self.driver_resolver.resolve_driver(caller_user_id)
        if not driver_result.is_ok:
            return driver_result

        if self._plate_taken(payload.license_plate):
            return Err(VehicleAlreadyExistsError(payload.license_plate))

        model_result = self.driver_resolver.resolve_vehicle_model(
            payload.model, brand_id=payload.brand_id, brand_name=payload.brand
        )
        if not model_result.is_ok:
            return model_result

        vehicle = vehicle_crud.create(
            self.db,
            license_plate=payload.license_plate,
            model_ref_id=model_result.value.ref_id,
            driver_ref_id=driver_result.value.ref_id,
        )
        logger.info(f"[VehicleCreate] driver user={caller_user_id} vehicle={vehicle.id} plate={vehicle.license_plate}")
        return Ok(vehicle)

    def _load_for_mutation(self, vehicle_id: str, caller_user_id: str, caller_role: str) -> Result[Vehicle, Exception]:
        vehicle = vehicle_crud.get(self.db, id=vehicle_id)
        if vehicle is None:
            return Err(VehicleNotFoundError(vehicle_id))
        if caller_role == RoleEnum.ADMIN.value:
            return Ok(vehicle)

        driver_result = self.driver_resolver.resolve_driver(caller_user_id)
        if not driver_result.is_ok:
            return driver_result
        if vehicle.driver_ref_id != driver_result.value.ref_id:
            logger.warning(f"[VehicleOwnership] user={caller_user_id} is not the owner of vehicle={vehicle_id}")
            return Err(ForbiddenError("vehicle", vehicle_id))
        return Ok(vehicle)

    def update_vehicle(
        self, vehicle_id: str, caller_user_id: str, caller_role: str, payload: VehicleUpdate
    ) -> Result[Vehicle, Exception]:
        """Full replacement of plate, model and brand."""
        return self._finish(self._apply_changes(vehicle_id, caller_user_id, caller_role, payload))

    def patch_vehicle(
        self, vehicle_id: str, caller_user_id: str, caller_role: str, payload: VehiclePatch
    ) -> Result[Vehicle, Exception]:
        return self._finish(self._apply_changes(vehicle_id, caller_user_id, caller_role, payload))

    def _apply_changes(self, vehicle_id: str, caller_user_id: str, caller_role: str, payload) -> Result:
        loaded = self._load_for_mutation(vehicle_id, caller_user_id, caller_role)
        if not loaded.is_ok:
            return loaded
        vehicle = loaded.value

        if payload.license_plate is not None and payload.license_plate != vehicle.license_plate:
            if self._plate_taken(payload.license_plate, exclude_ref_id=vehicle.ref_id):
                return Err(VehicleAlreadyExistsError(payload.license_plate))
            vehicle.license_plate = payload.license_plate

        if payload.model is not None:
            model_result = self.driver_resolver.resolve_vehicle_model(
                payload.model, brand_id=payload.brand_id, brand_name=payload.brand
            )
            if not model_result.is_ok:
                return model_result
            vehicle.model = model_result.value

        self.db.flush()
        logger.info(f"[VehicleUpdate] vehicle={vehicle_id} updated by user={caller_user_id}")
        return Ok(vehicle)

    def delete_vehicle(self, vehicle_id: str, caller_user_id: str, caller_role: str) -> Result[None, Exception]:
        """Hard delete; the database refuses while trips still reference the vehicle."""
        loaded = self._load_for_mutation(vehicle_id, caller_user_id, caller_role)
        if not loaded.is_ok:
            self.db.rollback()
            return loaded

        vehicle_crud.remove(self.db, db_obj=loaded.value)
        self.db.commit()
        logger.info(f"[VehicleDelete] vehicle={vehicle_id} deleted by user={caller_user_id}")
        return Ok(None)


def get_vehicle_service(
    db: Session = Depends(get_db),
    driver_resolver: DriverResolver = Depends(get_driver_resolver),
) -> VehicleService:
    return VehicleService(db, driver_resolver)
