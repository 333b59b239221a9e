from fastapi import Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import DriverAlreadyExistsError, UserNotFoundError
from app.core.result import Err, Ok, Result
from app.crud.account import account_crud, profile_crud
from app.crud.driver import driver_crud
from app.database.session import get_db
from app.models.account import RoleEnum
from app.models.driver import DriverProfile
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class DriverService:

    def __init__(self, db: Session):
        self.db = db

    def become_driver(self, user_id: str, license_number: str) -> Result[DriverProfile, Exception]:
        """
        Attach a driver profile to the user, then upgrade their role.

        The driver row is committed on its own. The role upgrade runs after
        and its failure is logged, never reported: the caller still gets the
        driver profile.
        """
        profile = profile_crud.get_active(self.db, user_id=user_id)
        if profile is None:
            return Err(UserNotFoundError(user_id))
        if driver_crud.get_by_profile_ref(self.db, profile_ref_id=profile.ref_id) is not None:
            return Err(DriverAlreadyExistsError(user_id))

        account_ref_id = profile.account_ref_id
        try:
            driver = driver_crud.create(self.db, profile_ref_id=profile.ref_id, license_number=license_number)
            self.db.commit()
        except IntegrityError:
            # unique profile_ref_id: a concurrent request got there first
            self.db.rollback()
            return Err(DriverAlreadyExistsError(user_id))
        logger.info(f"[DriverCreate] user={user_id} driver={driver.id}")

        self.upgrade_role(account_ref_id, user_id)
        return Ok(driver)

    def upgrade_role(self, account_ref_id: int, user_id: str) -> None:
        try:
            account = account_crud.get_by_ref(self.db, ref_id=account_ref_id)
            if account is not None and account.role == RoleEnum.USER:
                account_crud.update_role(self.db, account_ref_id=account_ref_id, role=RoleEnum.DRIVER)
                self.db.commit()
                logger.info(f"[DriverCreate] user={user_id} upgraded to DRIVER")
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"[DriverCreate] Role upgrade failed for user={user_id}; driver profile kept")


def get_driver_service(db: Session = Depends(get_db)) -> DriverService:
    return DriverService(db)
