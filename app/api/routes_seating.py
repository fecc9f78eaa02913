"""
Seating API routes - tables, guest assignment, auto-assignment, chart positions

Handlers are plain ``def`` so FastAPI runs them in its threadpool: the
seating services take blocking per-table locks.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.seating import AssignRequest, AutoAssignRequest
from app.schemas.table import TableCreate, TableUpdate, TablePosition
from app.services.assignment_ledger import AssignmentLedger
from app.services.auto_assign import AutoAssignPlanner
from app.services.seating_service import (
    SeatingService,
    serialize_coordinate,
    serialize_occupancy,
    serialize_table,
    serialize_unassigned,
)
from app.services.table_registry import TableRegistry, TableListing
from app.utils.security import verify_admin_token
from app.utils.responses import success_response

router = APIRouter(dependencies=[Depends(verify_admin_token)])


def _table_data(db: Session, table_id: int) -> dict:
    occupancy = AssignmentLedger.occupancy(db, table_id)
    table = TableRegistry.get_table(db, table_id)
    listing = TableListing(table=table, occupants=[guest for guest, _ in occupancy.occupants])
    return serialize_table(listing)


@router.get("/weddings/{wedding_id}/seating")
def get_seating_overview(wedding_id: int, db: Session = Depends(get_db)):
    """Tables, unassigned confirmed guests and seating totals for a wedding"""
    return success_response(
        message="Seating overview retrieved",
        data=SeatingService.get_seating_overview(db, wedding_id)
    )


@router.get("/weddings/{wedding_id}/unassigned")
def list_unassigned_guests(wedding_id: int, db: Session = Depends(get_db)):
    """Confirmed guests without a table"""
    guests = AssignmentLedger.unassigned_guests(db, wedding_id)
    return success_response(
        message="Unassigned guests retrieved",
        data=[serialize_unassigned(guest) for guest in guests]
    )


@router.get("/tables")
def list_tables(wedding_id: int = Query(...), db: Session = Depends(get_db)):
    """List a wedding's tables in display order with their occupants"""
    return success_response(
        message="Tables retrieved",
        data=SeatingService.list_tables(db, wedding_id)
    )


@router.post("/tables")
def create_table(table_data: TableCreate, db: Session = Depends(get_db)):
    """Add a table to a wedding"""
    table = TableRegistry.create_table(
        db,
        wedding_id=table_data.wedding_id,
        name=table_data.name,
        capacity=table_data.capacity,
        shape=table_data.shape,
        location=table_data.location,
        notes=table_data.notes,
    )
    return success_response(
        message="Table added!",
        data=_table_data(db, table.id),
        status_code=201
    )


@router.get("/tables/{table_id}")
def get_table_occupancy(table_id: int, db: Session = Depends(get_db)):
    """Current occupancy of one table"""
    return success_response(
        message="Table occupancy retrieved",
        data=serialize_occupancy(AssignmentLedger.occupancy(db, table_id))
    )


@router.patch("/tables/{table_id}")
def update_table(table_id: int, table_update: TableUpdate, db: Session = Depends(get_db)):
    """Update a table; capacity cannot drop below the number of seated guests"""
    TableRegistry.update_table(db, table_id, table_update.model_dump(exclude_unset=True))
    return success_response(
        message="Table updated!",
        data=_table_data(db, table_id)
    )


@router.delete("/tables/{table_id}")
def delete_table(table_id: int, db: Session = Depends(get_db)):
    """Remove a table; its guests become unassigned"""
    unassigned = TableRegistry.delete_table(db, table_id)
    return success_response(
        message="Table removed!",
        data={"deleted_table_id": table_id, "unassigned_count": unassigned}
    )


@router.post("/tables/{table_id}/assign")
def assign_guest(table_id: int, assign_data: AssignRequest, db: Session = Depends(get_db)):
    """Seat a guest at a table (moves them if already seated elsewhere)"""
    guest = AssignmentLedger.assign(db, assign_data.guest_id, table_id, assign_data.seat_number)
    return success_response(
        message="Guest assigned to table!",
        data={
            "guest_id": guest.id,
            "table_id": guest.table_id,
            "seat_number": guest.seat_number
        }
    )


@router.delete("/guests/{guest_id}/seat")
def unassign_guest(guest_id: int, db: Session = Depends(get_db)):
    """Take a guest off their table"""
    guest = AssignmentLedger.unassign(db, guest_id)
    return success_response(
        message="Guest removed from table!",
        data={"guest_id": guest.id, "table_id": None, "seat_number": None}
    )


@router.post("/auto-assign")
def auto_assign(request_data: AutoAssignRequest, db: Session = Depends(get_db)):
    """Seat confirmed, unassigned guests into free seats"""
    result = AutoAssignPlanner.run(db, request_data.wedding_id, request_data.strategy)
    return success_response(
        message=f"Guests auto-assigned to tables! {len(result.seated)} seated, {len(result.unseated)} left unseated.",
        data=result.to_dict()
    )


@router.post("/positions")
def update_positions(positions: List[TablePosition], db: Session = Depends(get_db)):
    """Save table positions from the seating chart"""
    tables = TableRegistry.update_positions(db, [position.model_dump() for position in positions])
    return success_response(
        message="Table positions saved!",
        data=[
            {
                "table_id": table.id,
                "position_x": serialize_coordinate(table.position_x),
                "position_y": serialize_coordinate(table.position_y),
            }
            for table in tables
        ]
    )
