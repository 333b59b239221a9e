from datetime import datetime, timezone
from typing import Any, Dict, Optional
from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from app.crud.base import CRUDBase
from app.models.account import Account, Profile, RoleEnum


class CRUDAccount(CRUDBase[Account, None, None]):

    def get_by_email(self, db: Session, *, email: str) -> Optional[Account]:
        return db.query(Account).filter(func.lower(Account.email) == email.lower()).first()

    def create_with_profile(
        self,
        db: Session,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        role: RoleEnum = RoleEnum.USER,
    ) -> Profile:
        account = Account(email=email.lower(), password_hash=password_hash, role=role)
        db.add(account)
        db.flush()
        profile = Profile(
            account_ref_id=account.ref_id,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
        )
        db.add(profile)
        db.flush()
        return profile

    def update_role(self, db: Session, *, account_ref_id: int, role: RoleEnum) -> None:
        db.query(Account).filter(Account.ref_id == account_ref_id).update(
            {Account.role: role}, synchronize_session="fetch"
        )
        db.flush()


class CRUDProfile(CRUDBase[Profile, None, None]):

    def get_active(self, db: Session, *, user_id: str) -> Optional[Profile]:
        """Profile by public id, skipping anonymized users"""
        return (
            db.query(Profile)
            .options(joinedload(Profile.account))
            .filter(Profile.id == user_id, Profile.deleted_at.is_(None))
            .first()
        )

    def query_active(self, db: Session) -> Query:
        return (
            db.query(Profile)
            .options(joinedload(Profile.account))
            .filter(Profile.deleted_at.is_(None))
            .order_by(Profile.created_at, Profile.ref_id)
        )

    def update_fields(self, db: Session, *, profile: Profile, changes: Dict[str, Any]) -> Profile:
        for field, value in changes.items():
            setattr(profile, field, value)
        db.flush()
        return profile

    def anonymize(self, db: Session, *, profile: Profile) -> Profile:
        """Blank personal fields on both rows; the rows themselves are kept."""
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        profile.first_name = ""
        profile.last_name = ""
        profile.phone = None
        profile.deleted_at = now

        account = profile.account
        account.email = f"deleted-{account.id}@anonymized.invalid"
        account.password_hash = ""
        account.deleted_at = now
        db.flush()
        return profile


account_crud = CRUDAccount(Account)
profile_crud = CRUDProfile(Profile)
