from fastapi import Depends
from sqlalchemy.orm import Session

from app.crud.city import city_crud
from app.database.session import get_db
from app.models.city import City
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class CityResolver:
    """
    Find-or-create of cities by exact name.

    The lookup and the insert are separate statements and ``cities.name`` has
    no unique constraint, so two requests introducing the same new name at
    the same time can both insert it. Later lookups pick the oldest row.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve_city_ref(self, name: str) -> City:
        city = city_crud.find_by_name(self.db, name=name)
        if city is not None:
            return city

        city = city_crud.create(self.db, name=name, postal_code="")
        logger.info(f"[CityResolve] Created city '{name}' ref_id={city.ref_id}")
        return city


def get_city_resolver(db: Session = Depends(get_db)) -> CityResolver:
    return CityResolver(db)
