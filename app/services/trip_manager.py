from datetime import date
from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, SeatsBelowBookingsError, TripNotFoundError
from app.core.result import Err, Ok, Result
from app.crud.inscription import inscription_crud
from app.crud.trip import trip_crud
from app.database.session import get_db
from app.models.driver import DriverProfile
from app.models.trip import CityTripTypeEnum, Trip
from app.schemas.trip import TripCreate, TripUpdate
from app.services.city_resolver import CityResolver, get_city_resolver
from app.services.driver_resolver import DriverResolver, get_driver_resolver
from app.utils.pagination import paginate_query
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class TripManager:
    """
    Trip lifecycle and ownership rules.

    Every mutating operation ends its own transaction: commit when it
    returns ``Ok``, rollback when it returns ``Err``. Storage errors are
    not caught here.
    """

    def __init__(self, db: Session, city_resolver: CityResolver, driver_resolver: DriverResolver):
        self.db = db
        self.city_resolver = city_resolver
        self.driver_resolver = driver_resolver

    def _finish(self, result: Result) -> Result:
        if result.is_ok:
            self.db.commit()
        else:
            self.db.rollback()
        return result

    def create_trip(self, driver_user_id: str, payload: TripCreate) -> Result[Trip, Exception]:
        return self._finish(self._create_trip(driver_user_id, payload))

    def _create_trip(self, driver_user_id: str, payload: TripCreate) -> Result:
        driver_result = self.driver_resolver.resolve_driver(driver_user_id)
        if not driver_result.is_ok:
            return driver_result
        driver = driver_result.value

        vehicle_result = self.driver_resolver.resolve_owned_vehicle(payload.vehicle_id, driver)
        if not vehicle_result.is_ok:
            return vehicle_result

        departure = self.city_resolver.resolve_city_ref(payload.departure_city)
        arrival = self.city_resolver.resolve_city_ref(payload.arrival_city)

        trip = trip_crud.create_with_cities(
            self.db,
            driver_ref_id=driver.ref_id,
            vehicle_ref_id=vehicle_result.value.ref_id,
            departure_at=payload.departure_at,
            distance_km=payload.distance_km,
            seats=payload.seats,
            departure_city_ref_id=departure.ref_id,
            arrival_city_ref_id=arrival.ref_id,
        )
        logger.info(
            f"[TripCreate] driver={driver_user_id} trip={trip.id} "
            f"{payload.departure_city} -> {payload.arrival_city} seats={payload.seats}"
        )
        return Ok(trip)

    def get_trip(self, trip_id: str) -> Result[Trip, TripNotFoundError]:
        trip = trip_crud.get(self.db, id=trip_id)
        if trip is None:
            return Err(TripNotFoundError(trip_id))
        return Ok(trip)

    def list_trips(self, page: int, limit: int) -> Tuple[int, List[Trip]]:
        return paginate_query(trip_crud.query_all(self.db), page, limit)

    def search_trips(
        self,
        departure_city: Optional[str] = None,
        arrival_city: Optional[str] = None,
        day: Optional[date] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[int, List[Trip]]:
        query = trip_crud.query_search(
            self.db, departure_city=departure_city, arrival_city=arrival_city, day=day
        )
        return paginate_query(query, page, limit)

    def _load_owned_trip(self, trip_id: str, caller_user_id: str) -> Result[Tuple[Trip, DriverProfile], Exception]:
        """Trip row (locked) plus the caller's driver profile, if the caller owns it"""
        trip = trip_crud.get_for_update(self.db, id=trip_id)
        if trip is None:
            return Err(TripNotFoundError(trip_id))

        driver_result = self.driver_resolver.resolve_driver(caller_user_id)
        if not driver_result.is_ok:
            return driver_result
        driver = driver_result.value

        # Trips are driver-exclusive: ADMIN has no override here
        if trip.driver_ref_id != driver.ref_id:
            logger.warning(f"[TripOwnership] user={caller_user_id} is not the owner of trip={trip_id}")
            return Err(ForbiddenError("trip", trip_id))
        return Ok((trip, driver))

    def update_trip(self, trip_id: str, caller_user_id: str, payload: TripUpdate) -> Result[Trip, Exception]:
        return self._finish(self._update_trip(trip_id, caller_user_id, payload))

    def _update_trip(self, trip_id: str, caller_user_id: str, payload: TripUpdate) -> Result:
        owned = self._load_owned_trip(trip_id, caller_user_id)
        if not owned.is_ok:
            return owned
        trip, driver = owned.value
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        if "vehicle_id" in changes:
            vehicle_result = self.driver_resolver.resolve_owned_vehicle(changes["vehicle_id"], driver)
            if not vehicle_result.is_ok:
                return vehicle_result
            trip.vehicle_ref_id = vehicle_result.value.ref_id

        if "seats" in changes:
            active = inscription_crud.count_active(self.db, trip_ref_id=trip.ref_id)
            if changes["seats"] < active:
                return Err(SeatsBelowBookingsError(trip_id, changes["seats"], active))
            trip.seats = changes["seats"]

        if "departure_at" in changes:
            trip.departure_at = changes["departure_at"]
        if "distance_km" in changes:
            trip.distance_km = changes["distance_km"]

        if "departure_city" in changes:
            city = self.city_resolver.resolve_city_ref(changes["departure_city"])
            trip_crud.set_city(self.db, trip=trip, city_type=CityTripTypeEnum.DEPARTURE, city_ref_id=city.ref_id)
        if "arrival_city" in changes:
            city = self.city_resolver.resolve_city_ref(changes["arrival_city"])
            trip_crud.set_city(self.db, trip=trip, city_type=CityTripTypeEnum.ARRIVAL, city_ref_id=city.ref_id)

        self.db.flush()
        logger.info(f"[TripUpdate] trip={trip_id} fields={sorted(changes)}")
        return Ok(trip)

    def delete_trip(self, trip_id: str, caller_user_id: str) -> Result[None, Exception]:
        return self._finish(self._delete_trip(trip_id, caller_user_id))

    def _delete_trip(self, trip_id: str, caller_user_id: str) -> Result:
        owned = self._load_owned_trip(trip_id, caller_user_id)
        if not owned.is_ok:
            return owned
        trip, _ = owned.value

        trip_crud.delete_by_ref(self.db, ref_id=trip.ref_id)
        logger.info(f"[TripDelete] trip={trip_id} deleted by user={caller_user_id}")
        return Ok(None)


def get_trip_manager(
    db: Session = Depends(get_db),
    city_resolver: CityResolver = Depends(get_city_resolver),
    driver_resolver: DriverResolver = Depends(get_driver_resolver),
) -> TripManager:
    return TripManager(db, city_resolver, driver_resolver)
