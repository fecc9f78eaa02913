"""
Guest model

Only the seating columns (table_id, seat_number) are written by the seating
services; everything else belongs to the guest-list side of the application.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base

class RSVPStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    MAYBE = "maybe"

class Guest(Base):
    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, index=True)
    wedding_id = Column(Integer, ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    group = Column(String(100), nullable=True)  # family, friends, coworkers, ...
    side = Column(String(20), nullable=True)  # bride, groom, both
    rsvp_status = Column(
        Enum(RSVPStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=False,
        default=RSVPStatus.PENDING,
    )
    table_id = Column(Integer, ForeignKey("tables.id", ondelete="SET NULL"), nullable=True, index=True)
    seat_number = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    wedding = relationship("Wedding", back_populates="guests")
    table = relationship("Table", back_populates="guests")

    # NULL seat numbers never collide, so unnumbered seats are unconstrained
    __table_args__ = (
        UniqueConstraint("table_id", "seat_number", name="uq_guests_table_seat"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
