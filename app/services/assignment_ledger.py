"""
Assignment ledger: the only place guests are seated, moved or unseated.

Invariants kept here:
  * a guest's table belongs to the guest's wedding;
  * a table never holds more guests than its capacity;
  * a seat number is held by at most one guest per table.

Occupancy is re-derived from guest rows inside the table lock on every check.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.locks import locked_table
from app.models import Guest
from app.services.repositories import WeddingRepo, TableRepo, GuestRepo
from app.utils.exceptions import (
    ValidationError,
    NotFoundError,
    CrossWeddingError,
    TableFullError,
    SeatTakenError,
)

logger = logging.getLogger(__name__)


@dataclass
class Occupancy:
    table_id: int
    capacity: int
    count: int
    occupants: List[Tuple[Guest, Optional[int]]] = field(default_factory=list)

    @property
    def available_seats(self) -> int:
        return self.capacity - self.count


class AssignmentLedger:
    """Guest to table/seat mutations and the reads that depend on them"""

    @staticmethod
    def assign(db: Session, guest_id: int, table_id: int, seat_number: Optional[int] = None) -> Guest:
        """
        Seat a guest at a table, optionally at a specific seat number.

        Re-assigning a guest to the seat they already hold is a no-op. Seating a
        guest who sits elsewhere moves them: the old seat is freed by the same
        write that takes the new one.

        Raises NotFoundError, CrossWeddingError, ValidationError, TableFullError
        or SeatTakenError; nothing is written when any of them is raised.
        """
        if seat_number is not None and (isinstance(seat_number, bool) or not isinstance(seat_number, int) or seat_number < 1):
            raise ValidationError.for_field("seat_number", "Seat number must be a positive integer")

        with locked_table(db, table_id) as table:
            guest = GuestRepo.get_for_update(db, guest_id)
            if not guest:
                raise NotFoundError("Guest")

            if guest.wedding_id != table.wedding_id:
                logger.warning(
                    f"Rejected assigning guest {guest.id} (wedding {guest.wedding_id}) "
                    f"to table {table.id} (wedding {table.wedding_id})"
                )
                raise CrossWeddingError(guest.wedding_id, table.wedding_id)

            already_here = guest.table_id == table.id
            if already_here and guest.seat_number == seat_number:
                # Nothing to write; end the transaction to release the row locks
                db.commit()
                return guest

            if not already_here:
                occupied = GuestRepo.count_at_table(db, table.id)
                if occupied >= table.capacity:
                    raise TableFullError(table.id, table.capacity)

            if seat_number is not None:
                holder = GuestRepo.seat_holder(db, table.id, seat_number)
                if holder is not None and holder.id != guest.id:
                    raise SeatTakenError(table.id, seat_number)

            previous_table_id = guest.table_id
            guest.table_id = table.id
            guest.seat_number = seat_number
            try:
                db.commit()
            except IntegrityError:
                # Another writer took the seat between our check and commit
                db.rollback()
                raise SeatTakenError(table.id, seat_number)

        if previous_table_id and previous_table_id != table_id:
            logger.info(f"Moved guest {guest_id} from table {previous_table_id} to table {table_id} (seat {seat_number})")
        else:
            logger.info(f"Seated guest {guest_id} at table {table_id} (seat {seat_number})")
        return guest

    @staticmethod
    def unassign(db: Session, guest_id: int) -> Guest:
        """Clear a guest's table and seat; a no-op for a guest who is not seated"""
        guest = GuestRepo.get_for_update(db, guest_id)
        if not guest:
            raise NotFoundError("Guest")

        if guest.table_id is None and guest.seat_number is None:
            db.commit()
            return guest

        previous_table_id = guest.table_id
        guest.table_id = None
        guest.seat_number = None
        db.commit()

        logger.info(f"Unassigned guest {guest_id} from table {previous_table_id}")
        return guest

    @staticmethod
    def occupancy(db: Session, table_id: int) -> Occupancy:
        """Current head count of a table and its guests in seat order"""
        table = TableRepo.get_by_id(db, table_id)
        if not table:
            raise NotFoundError("Table")

        guests = GuestRepo.list_at_table(db, table_id)
        return Occupancy(
            table_id=table.id,
            capacity=table.capacity,
            count=len(guests),
            occupants=[(guest, guest.seat_number) for guest in guests],
        )

    @staticmethod
    def unassigned_guests(db: Session, wedding_id: int) -> List[Guest]:
        """Confirmed guests of a wedding who have no table yet"""
        if not WeddingRepo.get_by_id(db, wedding_id):
            raise NotFoundError("Wedding")
        return GuestRepo.list_unassigned_confirmed(db, wedding_id)
