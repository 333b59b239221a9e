from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.errors import (
    AlreadyInscribedError,
    ForbiddenError,
    InscriptionNotFoundError,
    NoSeatsAvailableError,
    TripNotFoundError,
    UserNotFoundError,
)
from app.core.result import Err, Ok, Result
from app.crud.account import profile_crud
from app.crud.inscription import inscription_crud
from app.crud.trip import trip_crud
from app.database.session import get_db
from app.models.account import RoleEnum
from app.models.inscription import Inscription
from app.utils.pagination import paginate_query
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class BookingManager:
    """
    Seat booking on trips.

    A booking attempt runs as one transaction:

    1. lock the trip row (``SELECT ... FOR UPDATE``), ``TRIP_NOT_FOUND`` if gone
    2. reject a rider who already holds an ACTIVE booking on the trip
    3. reject when the active count has reached the seat count
    4. insert through a guarded ``INSERT ... SELECT`` that re-checks 2 and 3
       in the same statement

    Step 2 always runs before step 3, so a rider already on a full trip is
    told they are already inscribed. Step 4 is what holds under concurrency
    on engines without row locks; the partial unique index on
    (rider, trip) WHERE status = 'ACTIVE' is the last line for duplicates.
    Lock and serialization conflicts (``OperationalError``) are retried up to
    ``max_retries`` attempts in total, then re-raised.
    """

    def __init__(self, db: Session, max_retries: int = settings.BOOKING_MAX_RETRIES):
        self.db = db
        self.max_retries = max(1, max_retries)

    def create_inscription(self, rider_user_id: str, trip_id: str) -> Result[Inscription, Exception]:
        rider = profile_crud.get_active(self.db, user_id=rider_user_id)
        if rider is None:
            return Err(UserNotFoundError(rider_user_id))
        rider_ref_id = rider.ref_id

        attempt = 0
        while True:
            attempt += 1
            try:
                result = self._attempt_booking(rider_user_id, rider_ref_id, trip_id)
                if result.is_ok:
                    self.db.commit()
                    logger.info(f"[BookingCreate] rider={rider_user_id} trip={trip_id} inscription={result.value.id}")
                else:
                    self.db.rollback()
                    logger.info(f"[BookingCreate] rider={rider_user_id} trip={trip_id} rejected: {result.error.code}")
                return result
            except IntegrityError:
                self.db.rollback()
                # Partial unique index fired: another request booked this rider first,
                # or the trip vanished under us
                logger.warning(f"[BookingCreate] Integrity conflict for rider={rider_user_id} trip={trip_id}")
                if trip_crud.get(self.db, id=trip_id) is None:
                    return Err(TripNotFoundError(trip_id))
                return Err(AlreadyInscribedError(rider_user_id, trip_id))
            except OperationalError:
                self.db.rollback()
                if attempt >= self.max_retries:
                    logger.error(f"[BookingCreate] Giving up after {attempt} attempts for trip={trip_id}")
                    raise
                logger.warning(f"[BookingCreate] Storage conflict on attempt {attempt} for trip={trip_id}, retrying")

    def _attempt_booking(self, rider_user_id: str, rider_ref_id: int, trip_id: str) -> Result:
        trip = trip_crud.get_for_update(self.db, id=trip_id)
        if trip is None:
            return Err(TripNotFoundError(trip_id))

        if inscription_crud.has_active(self.db, rider_ref_id=rider_ref_id, trip_ref_id=trip.ref_id):
            return Err(AlreadyInscribedError(rider_user_id, trip_id))

        if inscription_crud.count_active(self.db, trip_ref_id=trip.ref_id) >= trip.seats:
            return Err(NoSeatsAvailableError(trip_id))

        inscription = inscription_crud.insert_if_seat_available(
            self.db, rider_ref_id=rider_ref_id, trip_ref_id=trip.ref_id
        )
        if inscription is not None:
            return Ok(inscription)

        # The guarded insert saw a different state than the checks above
        if trip_crud.get_by_ref(self.db, ref_id=trip.ref_id) is None:
            return Err(TripNotFoundError(trip_id))
        if inscription_crud.has_active(self.db, rider_ref_id=rider_ref_id, trip_ref_id=trip.ref_id):
            return Err(AlreadyInscribedError(rider_user_id, trip_id))
        return Err(NoSeatsAvailableError(trip_id))

    def cancel_inscription(self, inscription_id: str, caller_user_id: str, caller_role: str) -> Result[None, Exception]:
        """Remove a booking; only its rider or an ADMIN may do so."""
        inscription = inscription_crud.get(self.db, id=inscription_id)
        if inscription is None:
            return Err(InscriptionNotFoundError(inscription_id))

        if inscription.rider_id != caller_user_id and caller_role != RoleEnum.ADMIN.value:
            logger.warning(f"[BookingCancel] user={caller_user_id} tried to cancel inscription={inscription_id}")
            return Err(ForbiddenError("inscription", inscription_id))

        inscription_crud.remove(self.db, db_obj=inscription)
        self.db.commit()
        logger.info(f"[BookingCancel] inscription={inscription_id} cancelled by user={caller_user_id}")
        return Ok(None)

    def list_passengers(self, trip_id: str, page: int, limit: int) -> Result[Tuple[int, List[Dict[str, Any]]], TripNotFoundError]:
        trip = trip_crud.get(self.db, id=trip_id)
        if trip is None:
            return Err(TripNotFoundError(trip_id))

        total, rows = paginate_query(inscription_crud.query_for_trip(self.db, trip_ref_id=trip.ref_id), page, limit)
        passengers = [
            {
                "inscription_id": inscription.id,
                "rider_id": profile.id,
                "first_name": profile.first_name,
                "last_name": profile.last_name,
                "status": inscription.status,
                "created_at": inscription.created_at,
            }
            for inscription, profile in rows
        ]
        return Ok((total, passengers))

    def list_for_rider(
        self,
        rider_user_id: str,
        page: int,
        limit: int,
        caller_user_id: Optional[str] = None,
        caller_role: Optional[str] = None,
    ) -> Result[Tuple[int, List[Inscription]], Exception]:
        """
        A rider's bookings, newest first. When a caller is given it must be
        the rider or an ADMIN.
        """
        rider = profile_crud.get_active(self.db, user_id=rider_user_id)
        if rider is None:
            return Err(UserNotFoundError(rider_user_id))
        if (
            caller_user_id is not None
            and caller_user_id != rider_user_id
            and caller_role != RoleEnum.ADMIN.value
        ):
            logger.warning(f"[BookingList] user={caller_user_id} tried to read bookings of user={rider_user_id}")
            return Err(ForbiddenError("bookings of user", rider_user_id, action="read"))
        return Ok(paginate_query(inscription_crud.query_for_rider(self.db, rider_ref_id=rider.ref_id), page, limit))


def get_booking_manager(db: Session = Depends(get_db)) -> BookingManager:
    return BookingManager(db)
