from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, Query

from app.crud.base import CRUDBase
from app.models.vehicle import Brand, Vehicle, VehicleModel


class CRUDBrand(CRUDBase[Brand, None, None]):

    def get_by_name(self, db: Session, *, name: str) -> Optional[Brand]:
        """Case-insensitive brand lookup"""
        return db.query(Brand).filter(func.lower(Brand.name) == name.strip().lower()).first()

    def list_all(self, db: Session) -> List[Brand]:
        return db.query(Brand).order_by(Brand.name).all()

    def create(self, db: Session, *, name: str) -> Brand:
        return self.add(db, Brand(name=name.strip()))


class CRUDVehicleModel(CRUDBase[VehicleModel, None, None]):

    def find(self, db: Session, *, name: str, brand_ref_id: int) -> Optional[VehicleModel]:
        return (
            db.query(VehicleModel)
            .filter(VehicleModel.name == name, VehicleModel.brand_ref_id == brand_ref_id)
            .order_by(VehicleModel.ref_id)
            .first()
        )

    def create(self, db: Session, *, name: str, brand_ref_id: int) -> VehicleModel:
        return self.add(db, VehicleModel(name=name, brand_ref_id=brand_ref_id))


class CRUDVehicle(CRUDBase[Vehicle, None, None]):

    def get_by_license_plate(self, db: Session, *, license_plate: str) -> Optional[Vehicle]:
        return db.query(Vehicle).filter(Vehicle.license_plate == license_plate).first()

    def query_for_driver(self, db: Session, *, driver_ref_id: Optional[int] = None) -> Query:
        """All vehicles ordered by creation; narrowed to one driver when given"""
        query = db.query(Vehicle)
        if driver_ref_id is not None:
            query = query.filter(Vehicle.driver_ref_id == driver_ref_id)
        return query.order_by(Vehicle.ref_id)

    def create(self, db: Session, *, license_plate: str, model_ref_id: int, driver_ref_id: int) -> Vehicle:
        return self.add(
            db,
            Vehicle(license_plate=license_plate, model_ref_id=model_ref_id, driver_ref_id=driver_ref_id),
        )


brand_crud = CRUDBrand(Brand)
vehicle_model_crud = CRUDVehicleModel(VehicleModel)
vehicle_crud = CRUDVehicle(Vehicle)
