from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.account import Profile
from app.models.driver import DriverProfile


class CRUDDriver(CRUDBase[DriverProfile, None, None]):

    def get_by_user_id(self, db: Session, *, user_id: str) -> Optional[DriverProfile]:
        """Resolve a user's public id straight to their driver profile in one query"""
        return (
            db.query(DriverProfile)
            .join(Profile, Profile.ref_id == DriverProfile.profile_ref_id)
            .filter(Profile.id == user_id)
            .first()
        )

    def get_by_profile_ref(self, db: Session, *, profile_ref_id: int) -> Optional[DriverProfile]:
        return db.query(DriverProfile).filter(DriverProfile.profile_ref_id == profile_ref_id).first()

    def create(self, db: Session, *, profile_ref_id: int, license_number: str) -> DriverProfile:
        return self.add(db, DriverProfile(profile_ref_id=profile_ref_id, license_number=license_number.strip()))


driver_crud = CRUDDriver(DriverProfile)
