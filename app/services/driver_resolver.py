from typing import Optional, Union

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.errors import (
    BrandNotFoundError,
    DriverNotFoundError,
    ForbiddenError,
    VehicleNotFoundError,
)
from app.core.result import Err, Ok, Result
from app.crud.driver import driver_crud
from app.crud.vehicle import brand_crud, vehicle_crud, vehicle_model_crud
from app.database.session import get_db
from app.models.driver import DriverProfile
from app.models.vehicle import Brand, Vehicle, VehicleModel
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class DriverResolver:
    """
    Resolves callers to driver profiles and vehicle references to rows.

    Nothing here commits or recovers from storage errors; callers own the
    transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve_driver(self, user_id: str) -> Result[DriverProfile, DriverNotFoundError]:
        driver = driver_crud.get_by_user_id(self.db, user_id=user_id)
        if driver is None:
            return Err(DriverNotFoundError(user_id))
        return Ok(driver)

    def resolve_brand_by_id(self, brand_id: str) -> Result[Brand, BrandNotFoundError]:
        brand = brand_crud.get(self.db, id=brand_id)
        if brand is None:
            return Err(BrandNotFoundError(brand_id))
        return Ok(brand)

    def resolve_brand_by_name(self, name: str) -> Result[Brand, BrandNotFoundError]:
        brand = brand_crud.get_by_name(self.db, name=name)
        if brand is None:
            return Err(BrandNotFoundError(name))
        return Ok(brand)

    def resolve_vehicle_model(
        self,
        model_name: str,
        *,
        brand_id: Optional[str] = None,
        brand_name: Optional[str] = None,
    ) -> Result[VehicleModel, BrandNotFoundError]:
        """
        Find or create ``model_name`` under an existing brand.

        The brand is looked up by id when ``brand_id`` is given, otherwise by
        case-insensitive name. A brand is never created here. Like cities,
        models are best-effort unique per brand.
        """
        if brand_id is not None:
            brand_result = self.resolve_brand_by_id(brand_id)
        else:
            brand_result = self.resolve_brand_by_name(brand_name or "")
        if not brand_result.is_ok:
            return brand_result

        brand = brand_result.value
        model = vehicle_model_crud.find(self.db, name=model_name, brand_ref_id=brand.ref_id)
        if model is None:
            model = vehicle_model_crud.create(self.db, name=model_name, brand_ref_id=brand.ref_id)
            logger.info(f"[ModelResolve] Created model '{model_name}' under brand '{brand.name}'")
        return Ok(model)

    def resolve_owned_vehicle(
        self, vehicle_id: str, driver: DriverProfile
    ) -> Result[Vehicle, Union[VehicleNotFoundError, ForbiddenError]]:
        vehicle = vehicle_crud.get(self.db, id=vehicle_id)
        if vehicle is None:
            return Err(VehicleNotFoundError(vehicle_id))
        if vehicle.driver_ref_id != driver.ref_id:
            return Err(ForbiddenError("vehicle", vehicle_id))
        return Ok(vehicle)


def get_driver_resolver(db: Session = Depends(get_db)) -> DriverResolver:
    return DriverResolver(db)
