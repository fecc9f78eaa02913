"""
Seating table Pydantic schemas

Range checks (capacity bounds, non-empty names) live in the table registry so
they apply to every caller, not just HTTP requests.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel

from app.models.table import TableShape

class TableCreate(BaseModel):
    """Schema for creating a table"""
    wedding_id: int
    name: str
    shape: Optional[TableShape] = None
    capacity: int
    location: Optional[str] = None
    notes: Optional[str] = None

class TableUpdate(BaseModel):
    """Partial table update; only fields sent by the client are applied"""
    name: Optional[str] = None
    shape: Optional[TableShape] = None
    capacity: Optional[int] = None
    location: Optional[str] = None
    position_x: Optional[Decimal] = None
    position_y: Optional[Decimal] = None
    notes: Optional[str] = None
    order: Optional[int] = None

class TablePosition(BaseModel):
    """One entry of a bulk position update"""
    table_id: int
    x: Decimal
    y: Decimal
