"""
Tests for TripManager.

Covers:
1. create_trip: driver resolution, vehicle ownership, city find-or-create,
   exactly one DEPARTURE and one ARRIVAL link
2. search_trips: typed city filters, UTC day window, AND semantics
3. update_trip / delete_trip: owner only, no ADMIN override, cascades
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from app.core.errors import (
    DriverNotFoundError,
    ForbiddenError,
    SeatsBelowBookingsError,
    TripNotFoundError,
    VehicleNotFoundError,
)
from app.crud.inscription import inscription_crud
from app.models.city import City
from app.models.inscription import Inscription
from app.models.trip import CityTripTypeEnum, Trip, TripCity
from app.schemas.trip import TripCreate, TripUpdate
from app.services.city_resolver import CityResolver
from app.services.driver_resolver import DriverResolver
from app.services.trip_manager import TripManager
from tests.fixtures import create_trip


def make_manager(db):
    return TripManager(db, CityResolver(db), DriverResolver(db))


def trip_payload(vehicle_id, **overrides):
    data = {
        "departure_at": datetime(2025, 6, 15, 8, 30),
        "distance_km": 465,
        "seats": 3,
        "departure_city": "Paris",
        "arrival_city": "Lyon",
        "vehicle_id": vehicle_id,
    }
    data.update(overrides)
    return TripCreate(**data)


class TestCreateTrip:
    """Test TripManager.create_trip"""

    def test_creates_trip_with_typed_cities(self, test_db, driver, vehicle):
        result = make_manager(test_db).create_trip(driver.id, trip_payload(vehicle.id))

        assert result.is_ok
        trip = result.value
        assert trip.departure_city == "Paris"
        assert trip.arrival_city == "Lyon"
        assert trip.seats == 3
        assert trip.available_seats == 3
        assert trip.driver_id == driver.driver.id
        assert trip.vehicle_id == vehicle.id

        links = test_db.query(TripCity).filter(TripCity.trip_ref_id == trip.ref_id).all()
        assert sorted(link.type for link in links) == [CityTripTypeEnum.ARRIVAL, CityTripTypeEnum.DEPARTURE]

    def test_reuses_existing_cities(self, test_db, driver, vehicle):
        test_db.add(City(name="Paris", postal_code="75000"))
        test_db.commit()

        make_manager(test_db).create_trip(driver.id, trip_payload(vehicle.id))

        assert test_db.query(City).filter(City.name == "Paris").count() == 1
        assert test_db.query(City).filter(City.name == "Lyon").one().postal_code == ""

    def test_departure_equal_to_arrival_is_allowed(self, test_db, driver, vehicle):
        result = make_manager(test_db).create_trip(
            driver.id, trip_payload(vehicle.id, departure_city="Lyon", arrival_city="Lyon")
        )

        assert result.is_ok
        assert result.value.departure_city == result.value.arrival_city == "Lyon"
        assert test_db.query(City).filter(City.name == "Lyon").count() == 1

    def test_aware_departure_is_stored_as_utc(self, test_db, driver, vehicle):
        paris_summer = timezone(timedelta(hours=2))
        payload = trip_payload(vehicle.id, departure_at=datetime(2025, 6, 15, 10, 0, tzinfo=paris_summer))

        trip = make_manager(test_db).create_trip(driver.id, payload).value

        assert trip.departure_at == datetime(2025, 6, 15, 8, 0)

    def test_non_driver_is_rejected(self, test_db, rider, vehicle):
        result = make_manager(test_db).create_trip(rider.id, trip_payload(vehicle.id))

        assert isinstance(result.error, DriverNotFoundError)
        assert test_db.query(Trip).count() == 0

    def test_unknown_vehicle(self, test_db, driver):
        result = make_manager(test_db).create_trip(driver.id, trip_payload("missing-vehicle"))

        assert isinstance(result.error, VehicleNotFoundError)

    def test_vehicle_of_another_driver_is_forbidden(self, test_db, driver, other_vehicle):
        result = make_manager(test_db).create_trip(driver.id, trip_payload(other_vehicle.id))

        assert isinstance(result.error, ForbiddenError)
        assert test_db.query(Trip).count() == 0
        assert test_db.query(City).count() == 0


class TestSearchTrips:
    """Test TripManager.search_trips"""

    @pytest.fixture
    def trips(self, test_db, driver, vehicle):
        paris_lyon = create_trip(test_db, driver, vehicle, departure_city="Paris", arrival_city="Lyon",
                                 departure_at=datetime(2025, 6, 15, 0, 0))
        lyon_paris = create_trip(test_db, driver, vehicle, departure_city="Lyon", arrival_city="Paris",
                                 departure_at=datetime(2025, 6, 15, 23, 59, 59, 999000))
        paris_nice = create_trip(test_db, driver, vehicle, departure_city="Paris", arrival_city="Nice",
                                 departure_at=datetime(2025, 6, 16, 0, 0))
        return paris_lyon, lyon_paris, paris_nice

    def test_departure_filter_uses_departure_role_only(self, test_db, trips):
        paris_lyon, lyon_paris, paris_nice = trips

        total, found = make_manager(test_db).search_trips(departure_city="Paris")

        assert total == 2
        assert {t.id for t in found} == {paris_lyon.id, paris_nice.id}
        assert lyon_paris.id not in {t.id for t in found}

    def test_arrival_filter_uses_arrival_role_only(self, test_db, trips):
        paris_lyon, lyon_paris, paris_nice = trips

        total, found = make_manager(test_db).search_trips(arrival_city="Paris")

        assert [t.id for t in found] == [lyon_paris.id]

    def test_filters_are_anded(self, test_db, trips):
        paris_lyon, _, _ = trips

        total, found = make_manager(test_db).search_trips(departure_city="Paris", arrival_city="Lyon")

        assert total == 1
        assert found[0].id == paris_lyon.id

    def test_date_is_a_utc_calendar_day(self, test_db, trips):
        paris_lyon, lyon_paris, paris_nice = trips

        total, found = make_manager(test_db).search_trips(day=date(2025, 6, 15))

        # both ends of the day are included, the next midnight is not
        assert {t.id for t in found} == {paris_lyon.id, lyon_paris.id}

    def test_no_filters_returns_everything(self, test_db, trips):
        total, found = make_manager(test_db).search_trips()

        assert total == 3

    def test_no_match(self, test_db, trips):
        total, found = make_manager(test_db).search_trips(departure_city="Marseille")

        assert total == 0
        assert found == []

    def test_pagination_is_applied_in_storage(self, test_db, trips):
        total, found = make_manager(test_db).search_trips(page=2, limit=2)

        assert total == 3
        assert len(found) == 1


class TestUpdateTrip:
    """Test TripManager.update_trip"""

    def test_owner_updates_fields_and_cities(self, test_db, driver, trip):
        result = make_manager(test_db).update_trip(
            trip.id, driver.id, TripUpdate(seats=4, distance_km=500, arrival_city="Grenoble")
        )

        assert result.is_ok
        updated = result.value
        assert updated.seats == 4
        assert updated.distance_km == 500
        assert updated.departure_city == "Paris"
        assert updated.arrival_city == "Grenoble"
        assert test_db.query(TripCity).filter(TripCity.trip_ref_id == trip.ref_id).count() == 2

    def test_other_driver_is_forbidden(self, test_db, other_driver, trip):
        result = make_manager(test_db).update_trip(trip.id, other_driver.id, TripUpdate(seats=5))

        assert isinstance(result.error, ForbiddenError)
        test_db.expire_all()
        assert test_db.query(Trip).filter(Trip.id == trip.id).one().seats == 2

    def test_admin_has_no_override(self, test_db, admin, trip):
        """Trips are driver-exclusive; an ADMIN without a driver profile is not the owner"""
        result = make_manager(test_db).update_trip(trip.id, admin.id, TripUpdate(seats=5))

        assert isinstance(result.error, DriverNotFoundError)

    def test_seats_cannot_drop_below_active_bookings(self, test_db, driver, trip, rider, rider_b):
        for profile in (rider, rider_b):
            inscription_crud.insert_if_seat_available(test_db, rider_ref_id=profile.ref_id, trip_ref_id=trip.ref_id)
        test_db.commit()

        result = make_manager(test_db).update_trip(trip.id, driver.id, TripUpdate(seats=1))

        assert isinstance(result.error, SeatsBelowBookingsError)
        assert result.error.details == {"seats": 1, "active_inscriptions": 2}

    def test_switch_to_vehicle_of_another_driver_is_forbidden(self, test_db, driver, trip, other_vehicle):
        result = make_manager(test_db).update_trip(trip.id, driver.id, TripUpdate(vehicle_id=other_vehicle.id))

        assert isinstance(result.error, ForbiddenError)

    def test_missing_trip(self, test_db, driver):
        result = make_manager(test_db).update_trip("missing", driver.id, TripUpdate(seats=3))

        assert isinstance(result.error, TripNotFoundError)


class TestDeleteTrip:
    """Test TripManager.delete_trip"""

    def test_owner_deletes_and_cascades(self, test_db, driver, trip, rider):
        inscription_crud.insert_if_seat_available(test_db, rider_ref_id=rider.ref_id, trip_ref_id=trip.ref_id)
        test_db.commit()
        trip_id, trip_ref_id = trip.id, trip.ref_id
        manager = make_manager(test_db)

        result = manager.delete_trip(trip_id, driver.id)

        assert result.is_ok
        assert isinstance(manager.get_trip(trip_id).error, TripNotFoundError)
        assert test_db.query(Inscription).filter(Inscription.trip_ref_id == trip_ref_id).count() == 0
        assert test_db.query(TripCity).filter(TripCity.trip_ref_id == trip_ref_id).count() == 0
        # cities themselves outlive the trip
        assert test_db.query(City).count() == 2

    def test_non_owner_is_forbidden(self, test_db, other_driver, trip):
        manager = make_manager(test_db)

        result = manager.delete_trip(trip.id, other_driver.id)

        assert isinstance(result.error, ForbiddenError)
        assert manager.get_trip(trip.id).is_ok

    def test_caller_without_driver_profile(self, test_db, rider, trip):
        result = make_manager(test_db).delete_trip(trip.id, rider.id)

        assert isinstance(result.error, DriverNotFoundError)

    def test_missing_trip(self, test_db, driver):
        result = make_manager(test_db).delete_trip("missing", driver.id)

        assert isinstance(result.error, TripNotFoundError)
