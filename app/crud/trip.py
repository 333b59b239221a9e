from datetime import date, datetime, time, timedelta
from typing import Optional
from sqlalchemy.orm import Session, Query, aliased, selectinload, undefer

from app.crud.base import CRUDBase
from app.models.city import City
from app.models.trip import CityTripTypeEnum, Trip, TripCity


def utc_day_bounds(day: date):
    """Inclusive [00:00:00.000, 23:59:59.999] window of a UTC calendar day"""
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1) - timedelta(milliseconds=1)
    return start, end


class CRUDTrip(CRUDBase[Trip, None, None]):

    def get_for_update(self, db: Session, *, id: str) -> Optional[Trip]:
        """
        Load a trip and lock its row until the transaction ends.

        Concurrent bookings and owner mutations of the same trip queue up
        behind this lock on PostgreSQL. SQLite ignores FOR UPDATE.
        """
        return db.query(Trip).filter(Trip.id == id).with_for_update().first()

    def _listing(self, db: Session) -> Query:
        """Trips with seat counts, drivers and vehicles loaded up front"""
        return db.query(Trip).options(
            undefer(Trip.active_inscription_count),
            selectinload(Trip.driver),
            selectinload(Trip.vehicle),
        )

    def query_all(self, db: Session) -> Query:
        return self._listing(db).order_by(Trip.departure_at, Trip.ref_id)

    def query_search(
        self,
        db: Session,
        *,
        departure_city: Optional[str] = None,
        arrival_city: Optional[str] = None,
        day: Optional[date] = None,
    ) -> Query:
        """
        Trips filtered by typed city association and UTC day.

        Each city filter joins its own aliased association restricted to one
        role, so a departure filter never matches a trip's arrival city.
        """
        query = self._listing(db)

        if departure_city:
            link = aliased(TripCity)
            city = aliased(City)
            query = (
                query.join(link, (link.trip_ref_id == Trip.ref_id) & (link.type == CityTripTypeEnum.DEPARTURE))
                .join(city, city.ref_id == link.city_ref_id)
                .filter(city.name == departure_city)
            )

        if arrival_city:
            link = aliased(TripCity)
            city = aliased(City)
            query = (
                query.join(link, (link.trip_ref_id == Trip.ref_id) & (link.type == CityTripTypeEnum.ARRIVAL))
                .join(city, city.ref_id == link.city_ref_id)
                .filter(city.name == arrival_city)
            )

        if day is not None:
            start, end = utc_day_bounds(day)
            query = query.filter(Trip.departure_at >= start, Trip.departure_at <= end)

        return query.order_by(Trip.departure_at, Trip.ref_id)

    def create_with_cities(
        self,
        db: Session,
        *,
        driver_ref_id: int,
        vehicle_ref_id: int,
        departure_at: datetime,
        distance_km: int,
        seats: int,
        departure_city_ref_id: int,
        arrival_city_ref_id: int,
    ) -> Trip:
        """Insert the trip and both typed city links in one flush"""
        trip = Trip(
            driver_ref_id=driver_ref_id,
            vehicle_ref_id=vehicle_ref_id,
            departure_at=departure_at,
            distance_km=distance_km,
            seats=seats,
        )
        trip.city_links = [
            TripCity(type=CityTripTypeEnum.DEPARTURE, city_ref_id=departure_city_ref_id),
            TripCity(type=CityTripTypeEnum.ARRIVAL, city_ref_id=arrival_city_ref_id),
        ]
        return self.add(db, trip)

    def set_city(self, db: Session, *, trip: Trip, city_type: CityTripTypeEnum, city_ref_id: int) -> None:
        for link in trip.city_links:
            if link.type == city_type:
                link.city_ref_id = city_ref_id
                break
        else:
            trip.city_links.append(TripCity(type=city_type, city_ref_id=city_ref_id))
        db.flush()
        # relationship-loaded City objects are stale after swapping the key
        for link in trip.city_links:
            db.expire(link, ["city"])

    def delete_by_ref(self, db: Session, *, ref_id: int) -> int:
        """
        Delete a trip row directly; inscriptions and city links go with it
        through ON DELETE CASCADE.
        """
        deleted = db.query(Trip).filter(Trip.ref_id == ref_id).delete(synchronize_session=False)
        db.flush()
        return deleted


trip_crud = CRUDTrip(Trip)
