# Import all models here so Base.metadata knows every table
from app.models.account import Account, Profile, RoleEnum
from app.models.driver import DriverProfile
from app.models.vehicle import Brand, VehicleModel, Vehicle
from app.models.city import City
from app.models.inscription import Inscription, InscriptionStatusEnum
from app.models.trip import Trip, TripCity, CityTripTypeEnum
