from typing import Any, Dict, List, Tuple

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.errors import (
    AccountAlreadyExistsError,
    ForbiddenError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from app.core.result import Err, Ok, Result
from app.crud.account import account_crud, profile_crud
from app.database.session import get_db
from app.models.account import Profile, RoleEnum
from app.schemas.account import ProfileUpdate, RegisterRequest
from app.utils.pagination import paginate_query
from common_utils.auth.utils import create_access_token, hash_password, verify_password
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class AccountService:

    def __init__(self, db: Session):
        self.db = db

    def register(self, payload: RegisterRequest) -> Result[Profile, AccountAlreadyExistsError]:
        if account_crud.get_by_email(self.db, email=payload.email) is not None:
            return Err(AccountAlreadyExistsError(payload.email))

        profile = account_crud.create_with_profile(
            self.db,
            email=payload.email,
            password_hash=hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
        )
        self.db.commit()
        logger.info(f"[Register] New account user_id={profile.id}")
        return Ok(profile)

    def login(self, email: str, password: str) -> Result[Dict[str, Any], InvalidCredentialsError]:
        account = account_crud.get_by_email(self.db, email=email)
        if account is None or account.deleted_at is not None or account.profile is None:
            return Err(InvalidCredentialsError())
        if not verify_password(password, account.password_hash):
            logger.warning(f"[Login] Bad password for account={account.id}")
            return Err(InvalidCredentialsError())

        user_id = account.profile.id
        return Ok({
            "access_token": create_access_token(user_id=user_id),
            "token_type": "bearer",
            "user_id": user_id,
            "role": account.role,
        })

    def get_profile(self, user_id: str) -> Result[Profile, UserNotFoundError]:
        profile = profile_crud.get_active(self.db, user_id=user_id)
        if profile is None:
            return Err(UserNotFoundError(user_id))
        return Ok(profile)

    def update_profile(self, user_id: str, payload: ProfileUpdate) -> Result[Profile, UserNotFoundError]:
        """Change the caller's names and phone; absent fields are left alone."""
        profile = profile_crud.get_active(self.db, user_id=user_id)
        if profile is None:
            return Err(UserNotFoundError(user_id))

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if changes:
            profile_crud.update_fields(self.db, profile=profile, changes=changes)
            self.db.commit()
            logger.info(f"[UserUpdate] user={user_id} fields={sorted(changes)}")
        return Ok(profile)

    def list_users(self, page: int, limit: int) -> Result[Tuple[int, List[Profile]], Exception]:
        return Ok(paginate_query(profile_crud.query_active(self.db), page, limit))

    def anonymize(self, target_user_id: str, caller_user_id: str, caller_role: str) -> Result[Profile, Exception]:
        """Blank a user's personal data; self-service or ADMIN."""
        profile = profile_crud.get_active(self.db, user_id=target_user_id)
        if profile is None:
            return Err(UserNotFoundError(target_user_id))
        if target_user_id != caller_user_id and caller_role != RoleEnum.ADMIN.value:
            return Err(ForbiddenError("user", target_user_id))

        profile_crud.anonymize(self.db, profile=profile)
        self.db.commit()
        logger.info(f"[UserDelete] user={target_user_id} anonymized by user={caller_user_id}")
        return Ok(profile)


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)
