"""
Seating overview and serialization helpers
"""

from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.models import Guest, Wedding
from app.services.assignment_ledger import AssignmentLedger, Occupancy
from app.services.repositories import WeddingRepo, GuestRepo
from app.services.table_registry import TableRegistry, TableListing
from app.utils.exceptions import NotFoundError


def serialize_coordinate(value: Optional[Decimal]) -> Optional[float]:
    """Chart coordinates are stored as Numeric but served as JSON numbers"""
    return float(value) if value is not None else None


def serialize_occupant(guest: Guest) -> Dict:
    return {
        "guest_id": guest.id,
        "name": guest.full_name,
        "group": guest.group,
        "rsvp_status": guest.rsvp_status.value if guest.rsvp_status else None,
        "seat_number": guest.seat_number,
    }


def serialize_table(listing: TableListing) -> Dict:
    table = listing.table
    return {
        "id": table.id,
        "wedding_id": table.wedding_id,
        "name": table.name,
        "shape": table.shape.value,
        "capacity": table.capacity,
        "location": table.location,
        "position_x": serialize_coordinate(table.position_x),
        "position_y": serialize_coordinate(table.position_y),
        "notes": table.notes,
        "order": table.order,
        "seats_filled": listing.seats_filled,
        "available_seats": listing.available_seats,
        "is_full": listing.is_full,
        "occupants": [serialize_occupant(guest) for guest in listing.occupants],
        "created_at": table.created_at,
        "updated_at": table.updated_at,
    }


def serialize_occupancy(occupancy: Occupancy) -> Dict:
    return {
        "table_id": occupancy.table_id,
        "capacity": occupancy.capacity,
        "count": occupancy.count,
        "available_seats": occupancy.available_seats,
        "occupants": [serialize_occupant(guest) for guest, _ in occupancy.occupants],
    }


def serialize_unassigned(guest: Guest) -> Dict:
    return {
        "id": guest.id,
        "first_name": guest.first_name,
        "last_name": guest.last_name,
        "group": guest.group,
        "side": guest.side,
    }


class SeatingService:
    """Read-only views over a wedding's seating"""

    @staticmethod
    def get_seating_overview(db: Session, wedding_id: int) -> Dict:
        """Tables with occupants, confirmed guests still waiting for a seat, and totals"""
        wedding = WeddingRepo.get_by_id(db, wedding_id)
        if not wedding:
            raise NotFoundError("Wedding")

        listings = TableRegistry.list_tables(db, wedding_id)
        unassigned = AssignmentLedger.unassigned_guests(db, wedding_id)

        return {
            "wedding_id": wedding.id,
            "tables": [serialize_table(listing) for listing in listings],
            "unassigned_guests": [serialize_unassigned(guest) for guest in unassigned],
            "stats": {
                "total_tables": len(listings),
                "total_capacity": sum(listing.table.capacity for listing in listings),
                "total_seated": sum(listing.seats_filled for listing in listings),
                "unassigned_count": len(unassigned),
            },
            "shapes": TableRegistry.shapes(),
        }

    @staticmethod
    def get_wedding_counts(db: Session, wedding: Wedding) -> Dict:
        """Guest, table and seated counts for the wedding detail view"""
        seated = GuestRepo.counts_by_table(db, wedding.id)
        return {
            "total_guests": db.query(Guest).filter(Guest.wedding_id == wedding.id).count(),
            "total_tables": len(wedding.tables),
            "total_seated": sum(seated.values()),
        }

    @staticmethod
    def list_tables(db: Session, wedding_id: int) -> List[Dict]:
        if not WeddingRepo.get_by_id(db, wedding_id):
            raise NotFoundError("Wedding")
        return [serialize_table(listing) for listing in TableRegistry.list_tables(db, wedding_id)]
