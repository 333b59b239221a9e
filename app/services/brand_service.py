from typing import List

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.errors import BrandAlreadyExistsError
from app.core.result import Err, Ok, Result
from app.crud.vehicle import brand_crud
from app.database.session import get_db
from app.models.vehicle import Brand
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class BrandService:

    def __init__(self, db: Session):
        self.db = db

    def list_brands(self) -> List[Brand]:
        return brand_crud.list_all(self.db)

    def create_brand(self, name: str) -> Result[Brand, BrandAlreadyExistsError]:
        if brand_crud.get_by_name(self.db, name=name) is not None:
            return Err(BrandAlreadyExistsError(name))
        brand = brand_crud.create(self.db, name=name)
        self.db.commit()
        logger.info(f"[BrandCreate] brand={brand.id} name='{brand.name}'")
        return Ok(brand)


def get_brand_service(db: Session = Depends(get_db)) -> BrandService:
    return BrandService(db)
