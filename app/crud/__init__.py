from app.crud.account import account_crud, profile_crud
from app.crud.driver import driver_crud
from app.crud.vehicle import brand_crud, vehicle_model_crud, vehicle_crud
from app.crud.city import city_crud
from app.crud.trip import trip_crud
from app.crud.inscription import inscription_crud
