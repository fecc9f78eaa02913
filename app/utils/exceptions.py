"""
Seating error taxonomy

Every error carries an HTTP status and a machine-readable code so the
exception handlers can render it without knowing the concrete type.
"""

from typing import Any, Optional
from fastapi import HTTPException, status


class ErrorCode:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CAPACITY_CONFLICT = "CAPACITY_CONFLICT"
    TABLE_FULL = "TABLE_FULL"
    SEAT_TAKEN = "SEAT_TAKEN"
    UNAUTHORIZED = "UNAUTHORIZED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class AppException(HTTPException):
    """Base exception for all application-level errors."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str,
        details: Optional[Any] = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.error_code = error_code
        self.details = details


class SeatingError(AppException):
    """Any failure of a single seating operation."""


class ValidationError(SeatingError):
    def __init__(self, message: str = "Validation failed", details: Optional[list] = None):
        super().__init__(
            status.HTTP_422_UNPROCESSABLE_ENTITY, message, ErrorCode.VALIDATION_ERROR, details or []
        )

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, details=[{"field": field, "message": message}])


class NotFoundError(SeatingError):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found", ErrorCode.NOT_FOUND)
        self.resource = resource


class CrossWeddingError(NotFoundError):
    """Guest and table (or several tables) belong to different weddings.

    Rendered exactly like a missing resource so tenant boundaries do not leak.
    """

    def __init__(self, guest_wedding_id: Optional[int] = None, table_wedding_id: Optional[int] = None):
        super().__init__("Resource")
        self.guest_wedding_id = guest_wedding_id
        self.table_wedding_id = table_wedding_id


class CapacityConflictError(SeatingError):
    def __init__(self, table_id: int, requested: int, occupied: int):
        super().__init__(
            status.HTTP_409_CONFLICT,
            f"Cannot reduce capacity to {requested}: {occupied} guests are already seated",
            ErrorCode.CAPACITY_CONFLICT,
            {"table_id": table_id, "requested_capacity": requested, "seated": occupied},
        )


class TableFullError(SeatingError):
    def __init__(self, table_id: int, capacity: int):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "Table is full!",
            ErrorCode.TABLE_FULL,
            {"table_id": table_id, "capacity": capacity},
        )


class SeatTakenError(SeatingError):
    def __init__(self, table_id: int, seat_number: Optional[int]):
        super().__init__(
            status.HTTP_409_CONFLICT,
            f"Seat {seat_number} is already taken at this table",
            ErrorCode.SEAT_TAKEN,
            {"table_id": table_id, "seat_number": seat_number},
        )
