"""
Table registry: create, update, delete and list the seating tables of a wedding
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.locks import locked_table, forget_table_lock
from app.models import Table, Guest, TableShape
from app.models.table import SHAPE_LABELS
from app.services.repositories import WeddingRepo, TableRepo, GuestRepo
from app.utils.exceptions import (
    ValidationError,
    NotFoundError,
    CapacityConflictError,
    CrossWeddingError,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name", "shape", "capacity", "location", "position_x", "position_y", "notes", "order",
)


@dataclass
class TableListing:
    """A table together with its current occupants."""
    table: Table
    occupants: List[Guest] = field(default_factory=list)

    @property
    def seats_filled(self) -> int:
        return len(self.occupants)

    @property
    def available_seats(self) -> int:
        return self.table.capacity - self.seats_filled

    @property
    def is_full(self) -> bool:
        return self.available_seats <= 0


class _FieldErrors:
    """Collects field-level validation messages and raises them together."""

    def __init__(self):
        self.errors: List[Dict[str, str]] = []

    def add(self, field_name: str, message: str) -> None:
        self.errors.append({"field": field_name, "message": message})

    def raise_if_any(self) -> None:
        if self.errors:
            raise ValidationError("Validation failed", details=self.errors)


def _clean_name(value: Any, errors: _FieldErrors) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        errors.add("name", "Name is required")
        return None
    value = value.strip()
    if len(value) > settings.MAX_NAME_LENGTH:
        errors.add("name", f"Name may not be longer than {settings.MAX_NAME_LENGTH} characters")
        return None
    return value


def _clean_capacity(value: Any, errors: _FieldErrors) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        errors.add("capacity", "Capacity must be an integer")
        return None
    if not settings.MIN_TABLE_CAPACITY <= value <= settings.MAX_TABLE_CAPACITY:
        errors.add(
            "capacity",
            f"Capacity must be between {settings.MIN_TABLE_CAPACITY} and {settings.MAX_TABLE_CAPACITY}",
        )
        return None
    return value


def _clean_shape(value: Any, errors: _FieldErrors) -> Optional[TableShape]:
    if value is None:
        errors.add("shape", "Shape is required")
        return None
    try:
        return TableShape(value)
    except ValueError:
        errors.add("shape", f"Shape must be one of: {', '.join(s.value for s in TableShape)}")
        return None


def _clean_optional_text(field_name: str, value: Any, errors: _FieldErrors, max_length: Optional[int] = None):
    if value is None:
        return None
    if not isinstance(value, str):
        errors.add(field_name, f"{field_name.capitalize()} must be a string")
        return None
    if max_length and len(value) > max_length:
        errors.add(field_name, f"{field_name.capitalize()} may not be longer than {max_length} characters")
        return None
    return value


def _clean_coordinate(field_name: str, value: Any, errors: _FieldErrors) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        errors.add(field_name, f"{field_name} must be numeric")
        return None


def _clean_order(value: Any, errors: _FieldErrors) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        errors.add("order", "Order must be a non-negative integer")
        return None
    return value


class TableRegistry:
    """Owns the seating tables of each wedding and their shape/capacity rules"""

    @staticmethod
    def shapes() -> Dict[str, str]:
        return {shape.value: label for shape, label in SHAPE_LABELS.items()}

    @staticmethod
    def get_table(db: Session, table_id: int) -> Table:
        table = TableRepo.get_by_id(db, table_id)
        if not table:
            raise NotFoundError("Table")
        return table

    @staticmethod
    def create_table(
        db: Session,
        wedding_id: int,
        name: str,
        capacity: int,
        shape: Optional[str] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Table:
        """Create an empty table placed after the wedding's existing tables"""
        errors = _FieldErrors()
        clean_name = _clean_name(name, errors)
        clean_capacity = _clean_capacity(capacity, errors)
        clean_shape = _clean_shape(shape, errors) if shape is not None else TableShape.ROUND
        clean_location = _clean_optional_text("location", location, errors, settings.MAX_NAME_LENGTH)
        clean_notes = _clean_optional_text("notes", notes, errors)
        errors.raise_if_any()

        if not WeddingRepo.get_by_id(db, wedding_id):
            raise NotFoundError("Wedding")

        table = Table(
            wedding_id=wedding_id,
            name=clean_name,
            shape=clean_shape,
            capacity=clean_capacity,
            location=clean_location,
            notes=clean_notes,
            order=TableRepo.max_order(db, wedding_id) + 1,
        )
        db.add(table)
        db.commit()
        db.refresh(table)

        logger.info(f"Created table {table.id} '{table.name}' (capacity {table.capacity}) for wedding {wedding_id}")
        return table

    @staticmethod
    def update_table(db: Session, table_id: int, patch: Dict[str, Any]) -> Table:
        """
        Apply a partial update to a table.

        Every field is validated before anything is written. A capacity below the
        number of guests currently seated raises CapacityConflictError and leaves
        the table untouched.
        """
        unknown = sorted(set(patch) - set(UPDATABLE_FIELDS))
        errors = _FieldErrors()
        for field_name in unknown:
            errors.add(field_name, "Field cannot be updated")

        changes: Dict[str, Any] = {}
        if "name" in patch:
            changes["name"] = _clean_name(patch["name"], errors)
        if "shape" in patch:
            changes["shape"] = _clean_shape(patch["shape"], errors)
        if "capacity" in patch:
            changes["capacity"] = _clean_capacity(patch["capacity"], errors)
        if "location" in patch:
            changes["location"] = _clean_optional_text("location", patch["location"], errors, settings.MAX_NAME_LENGTH)
        if "notes" in patch:
            changes["notes"] = _clean_optional_text("notes", patch["notes"], errors)
        for axis in ("position_x", "position_y"):
            if axis in patch:
                changes[axis] = _clean_coordinate(axis, patch[axis], errors)
        if "order" in patch:
            changes["order"] = _clean_order(patch["order"], errors) if patch["order"] is not None else 0
        errors.raise_if_any()

        with locked_table(db, table_id) as table:
            new_capacity = changes.get("capacity")
            if new_capacity is not None and new_capacity < table.capacity:
                occupied = GuestRepo.count_at_table(db, table.id)
                if new_capacity < occupied:
                    raise CapacityConflictError(table.id, new_capacity, occupied)

            for field_name, value in changes.items():
                setattr(table, field_name, value)
            db.commit()

        db.refresh(table)
        logger.info(f"Updated table {table.id}: {', '.join(sorted(changes)) or 'no changes'}")
        return table

    @staticmethod
    def delete_table(db: Session, table_id: int) -> int:
        """Delete a table, unassigning (not deleting) everyone seated there.

        Returns the number of guests unassigned.
        """
        with locked_table(db, table_id) as table:
            unassigned = GuestRepo.unassign_all_at_table(db, table.id)
            db.delete(table)
            db.commit()

        forget_table_lock(table_id)
        logger.info(f"Deleted table {table_id}; unassigned {unassigned} guests")
        return unassigned

    @staticmethod
    def list_tables(db: Session, wedding_id: int) -> List[TableListing]:
        """Tables ordered by display order then id, with their occupants"""
        tables = TableRepo.list_for_wedding(db, wedding_id)

        by_table: Dict[int, List[Guest]] = {table.id: [] for table in tables}
        for guest in GuestRepo.list_seated_for_wedding(db, wedding_id):
            if guest.table_id in by_table:
                by_table[guest.table_id].append(guest)

        return [TableListing(table=table, occupants=by_table[table.id]) for table in tables]

    @staticmethod
    def update_positions(db: Session, positions: List[Dict[str, Any]]) -> List[Table]:
        """
        Move tables on the seating chart. Each entry is {table_id, x, y}.

        All tables must exist and belong to the same wedding; the whole batch is
        applied in one transaction or not at all.
        """
        if not positions:
            return []

        errors = _FieldErrors()
        cleaned = []
        for index, entry in enumerate(positions):
            table_id = entry.get("table_id")
            if isinstance(table_id, bool) or not isinstance(table_id, int):
                errors.add(f"{index}.table_id", "Table id must be an integer")
                continue
            x = entry.get("x")
            y = entry.get("y")
            if x is None:
                errors.add(f"{index}.x", "x is required")
            if y is None:
                errors.add(f"{index}.y", "y is required")
            cleaned.append((
                table_id,
                _clean_coordinate(f"{index}.x", x, errors),
                _clean_coordinate(f"{index}.y", y, errors),
            ))
        errors.raise_if_any()

        table_ids = {table_id for table_id, _, _ in cleaned}
        tables = {table.id: table for table in TableRepo.list_by_ids(db, list(table_ids))}
        if len(tables) != len(table_ids):
            raise NotFoundError("Table")

        wedding_ids = {table.wedding_id for table in tables.values()}
        if len(wedding_ids) > 1:
            logger.warning(f"Position update spans weddings {sorted(wedding_ids)}; rejected")
            raise CrossWeddingError()

        for table_id, x, y in cleaned:
            tables[table_id].position_x = x
            tables[table_id].position_y = y
        db.commit()

        logger.info(f"Updated positions of {len(table_ids)} tables in wedding {wedding_ids.pop()}")
        return [tables[table_id] for table_id, _, _ in cleaned]
