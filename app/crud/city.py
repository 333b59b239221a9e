from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.city import City


class CRUDCity(CRUDBase[City, None, None]):

    def find_by_name(self, db: Session, *, name: str) -> Optional[City]:
        # Oldest row wins when a race left duplicates behind
        return db.query(City).filter(City.name == name).order_by(City.ref_id).first()

    def create(self, db: Session, *, name: str, postal_code: str = "") -> City:
        return self.add(db, City(name=name, postal_code=postal_code))


city_crud = CRUDCity(City)
