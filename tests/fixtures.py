"""
Builders shared by the test modules: users, drivers, vehicles, trips, tokens.
"""
from datetime import datetime

from app.models.account import Account, Profile, RoleEnum
from app.models.driver import DriverProfile
from app.models.vehicle import Vehicle, VehicleModel
from app.schemas.trip import TripCreate
from app.services.city_resolver import CityResolver
from app.services.driver_resolver import DriverResolver
from app.services.trip_manager import TripManager
from common_utils.auth.utils import hash_password, create_access_token

DEFAULT_PASSWORD = "password123"


def create_user(db, email, first_name="Test", last_name="User", role=RoleEnum.USER):
    account = Account(email=email, password_hash=hash_password(DEFAULT_PASSWORD), role=role)
    db.add(account)
    db.flush()
    profile = Profile(account_ref_id=account.ref_id, first_name=first_name, last_name=last_name)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def create_driver(db, email, first_name="Driver", license_number="LIC-0001"):
    profile = create_user(db, email, first_name=first_name, role=RoleEnum.DRIVER)
    driver = DriverProfile(profile_ref_id=profile.ref_id, license_number=license_number)
    db.add(driver)
    db.commit()
    db.refresh(profile)
    return profile


def create_vehicle(db, driver_profile, brand, license_plate, model_name="Clio"):
    model = VehicleModel(name=model_name, brand_ref_id=brand.ref_id)
    db.add(model)
    db.flush()
    vehicle = Vehicle(
        license_plate=license_plate,
        model_ref_id=model.ref_id,
        driver_ref_id=driver_profile.driver.ref_id,
    )
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    return vehicle


def create_trip(db, driver_profile, vehicle, seats=2, departure_city="Paris", arrival_city="Lyon",
                departure_at=None, distance_km=465):
    manager = TripManager(db, CityResolver(db), DriverResolver(db))
    payload = TripCreate(
        departure_at=departure_at or datetime(2025, 6, 15, 8, 30),
        distance_km=distance_km,
        seats=seats,
        departure_city=departure_city,
        arrival_city=arrival_city,
        vehicle_id=vehicle.id,
    )
    result = manager.create_trip(driver_profile.id, payload)
    assert result.is_ok, result
    return result.value


def bearer(profile):
    return {"Authorization": f"Bearer {create_access_token(user_id=profile.id)}"}
