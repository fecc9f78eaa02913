"""
Seating table model
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship

from app.core.db import Base

class TableShape(str, enum.Enum):
    ROUND = "round"
    RECTANGULAR = "rectangular"
    SQUARE = "square"
    OVAL = "oval"
    U_SHAPE = "u_shape"
    HEAD_TABLE = "head_table"

SHAPE_LABELS = {
    TableShape.ROUND: "Round",
    TableShape.RECTANGULAR: "Rectangular",
    TableShape.SQUARE: "Square",
    TableShape.OVAL: "Oval",
    TableShape.U_SHAPE: "U-Shape",
    TableShape.HEAD_TABLE: "Head Table",
}

class Table(Base):
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, index=True)
    wedding_id = Column(Integer, ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    shape = Column(
        Enum(TableShape, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=False,
        default=TableShape.ROUND,
    )
    capacity = Column(Integer, nullable=False)
    location = Column(String(255), nullable=True)
    position_x = Column(Numeric(8, 2), nullable=True)
    position_y = Column(Numeric(8, 2), nullable=True)
    notes = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    wedding = relationship("Wedding", back_populates="tables")
    # Guests are unassigned, not deleted, when their table goes away (FK is ON DELETE SET NULL)
    guests = relationship("Guest", back_populates="table", passive_deletes=True)
