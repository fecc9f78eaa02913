"""
Repository layer: the queries the seating services share.

Occupancy is always derived from guest rows here, never stored on the table.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import Wedding, Table, Guest, RSVPStatus


# -------- Wedding repository --------

class WeddingRepo:
    @staticmethod
    def get_by_id(db: Session, wedding_id: int) -> Optional[Wedding]:
        return db.query(Wedding).filter(Wedding.id == wedding_id).first()


# -------- Table repository --------

class TableRepo:
    @staticmethod
    def get_by_id(db: Session, table_id: int) -> Optional[Table]:
        return db.query(Table).filter(Table.id == table_id).first()

    @staticmethod
    def get_for_update(db: Session, table_id: int) -> Optional[Table]:
        """Load a table row with a row-level lock held until the transaction ends."""
        return (
            db.query(Table)
            .filter(Table.id == table_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    @staticmethod
    def list_for_wedding(db: Session, wedding_id: int) -> List[Table]:
        return (
            db.query(Table)
            .filter(Table.wedding_id == wedding_id)
            .order_by(Table.order.asc(), Table.id.asc())
            .all()
        )

    @staticmethod
    def list_by_ids(db: Session, table_ids: List[int]) -> List[Table]:
        return db.query(Table).filter(Table.id.in_(table_ids)).all()

    @staticmethod
    def max_order(db: Session, wedding_id: int) -> int:
        value = db.query(func.max(Table.order)).filter(Table.wedding_id == wedding_id).scalar()
        return value or 0


# -------- Guest repository --------

class GuestRepo:
    @staticmethod
    def get_by_id(db: Session, guest_id: int) -> Optional[Guest]:
        return db.query(Guest).filter(Guest.id == guest_id).first()

    @staticmethod
    def get_for_update(db: Session, guest_id: int) -> Optional[Guest]:
        return (
            db.query(Guest)
            .filter(Guest.id == guest_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    @staticmethod
    def count_at_table(db: Session, table_id: int) -> int:
        return db.query(func.count(Guest.id)).filter(Guest.table_id == table_id).scalar() or 0

    @staticmethod
    def counts_by_table(db: Session, wedding_id: int) -> Dict[int, int]:
        rows = db.query(
            Guest.table_id,
            func.count(Guest.id),
        ).filter(
            Guest.wedding_id == wedding_id,
            Guest.table_id.isnot(None)
        ).group_by(Guest.table_id).all()
        return {table_id: count for table_id, count in rows}

    @staticmethod
    def seat_holder(db: Session, table_id: int, seat_number: int) -> Optional[Guest]:
        return db.query(Guest).filter(
            Guest.table_id == table_id,
            Guest.seat_number == seat_number
        ).first()

    @staticmethod
    def list_at_table(db: Session, table_id: int) -> List[Guest]:
        # Numbered seats first in seat order, unnumbered seats after, by id
        return db.query(Guest).filter(Guest.table_id == table_id).order_by(
            Guest.seat_number.is_(None),
            Guest.seat_number.asc(),
            Guest.id.asc()
        ).all()

    @staticmethod
    def list_seated_for_wedding(db: Session, wedding_id: int) -> List[Guest]:
        return db.query(Guest).filter(
            Guest.wedding_id == wedding_id,
            Guest.table_id.isnot(None)
        ).order_by(
            Guest.table_id.asc(),
            Guest.seat_number.is_(None),
            Guest.seat_number.asc(),
            Guest.id.asc()
        ).all()

    @staticmethod
    def list_unassigned_confirmed(db: Session, wedding_id: int) -> List[Guest]:
        return db.query(Guest).filter(
            Guest.wedding_id == wedding_id,
            Guest.table_id.is_(None),
            Guest.rsvp_status == RSVPStatus.CONFIRMED
        ).order_by(
            Guest.last_name.asc(),
            Guest.first_name.asc(),
            Guest.id.asc()
        ).all()

    @staticmethod
    def unassign_all_at_table(db: Session, table_id: int) -> int:
        """Clear table_id and seat_number for every guest at a table; returns the row count."""
        return db.query(Guest).filter(Guest.table_id == table_id).update(
            {Guest.table_id: None, Guest.seat_number: None},
            synchronize_session="fetch",
        )
