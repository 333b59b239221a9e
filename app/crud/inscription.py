from typing import Optional
from sqlalchemy import Integer, String, exists, func, insert, literal, select
from sqlalchemy.orm import Session, Query

from app.crud.base import CRUDBase
from app.models.account import Profile
from app.models.inscription import Inscription, InscriptionStatusEnum
from app.models.mixins import new_public_id
from app.models.trip import Trip

ACTIVE = InscriptionStatusEnum.ACTIVE


class CRUDInscription(CRUDBase[Inscription, None, None]):

    def has_active(self, db: Session, *, rider_ref_id: int, trip_ref_id: int) -> bool:
        return db.query(
            exists().where(
                Inscription.rider_ref_id == rider_ref_id,
                Inscription.trip_ref_id == trip_ref_id,
                Inscription.status == ACTIVE,
            )
        ).scalar()

    def count_active(self, db: Session, *, trip_ref_id: int) -> int:
        return (
            db.query(func.count(Inscription.ref_id))
            .filter(Inscription.trip_ref_id == trip_ref_id, Inscription.status == ACTIVE)
            .scalar()
        )

    def insert_if_seat_available(self, db: Session, *, rider_ref_id: int, trip_ref_id: int) -> Optional[Inscription]:
        """
        Insert an ACTIVE inscription only if, at the moment the statement
        runs, the trip exists, the rider holds no ACTIVE inscription on it and
        the active count is below the seat count.

        The conditions and the write are one INSERT ... SELECT, so the store
        evaluates them atomically. Returns None when nothing was written.
        """
        public_id = new_public_id()
        status_type = Inscription.__table__.c.status.type

        active_count = (
            select(func.count(Inscription.ref_id))
            .where(Inscription.trip_ref_id == trip_ref_id, Inscription.status == ACTIVE)
            .scalar_subquery()
        )
        duplicate = exists().where(
            Inscription.rider_ref_id == rider_ref_id,
            Inscription.trip_ref_id == trip_ref_id,
            Inscription.status == ACTIVE,
        )
        guarded = select(
            literal(public_id, type_=String(36)),
            literal(rider_ref_id, type_=Integer),
            Trip.ref_id,
            literal(ACTIVE, type_=status_type),
            func.now(),
        ).where(
            Trip.ref_id == trip_ref_id,
            active_count < Trip.seats,
            ~duplicate,
        )
        stmt = insert(Inscription.__table__).from_select(
            ["id", "rider_ref_id", "trip_ref_id", "status", "created_at"],
            guarded,
        )
        result = db.execute(stmt)
        if result.rowcount != 1:
            return None
        return db.query(Inscription).filter(Inscription.id == public_id).one()

    def query_for_trip(self, db: Session, *, trip_ref_id: int) -> Query:
        """Passenger rows: inscription joined to the rider's profile"""
        return (
            db.query(Inscription, Profile)
            .join(Profile, Profile.ref_id == Inscription.rider_ref_id)
            .filter(Inscription.trip_ref_id == trip_ref_id)
            .order_by(Inscription.created_at, Inscription.ref_id)
        )

    def query_for_rider(self, db: Session, *, rider_ref_id: int) -> Query:
        return (
            db.query(Inscription)
            .filter(Inscription.rider_ref_id == rider_ref_id)
            .order_by(Inscription.created_at.desc(), Inscription.ref_id.desc())
        )


inscription_crud = CRUDInscription(Inscription)
