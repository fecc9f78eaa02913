"""
Wedding-related Pydantic schemas
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel

class WeddingCreate(BaseModel):
    """Schema for creating a wedding"""
    title: str
    bride_name: str
    groom_name: str
    wedding_date: Optional[date] = None

class WeddingResponse(BaseModel):
    """Basic wedding response"""
    id: int
    title: str
    bride_name: str
    groom_name: str
    wedding_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True

class WeddingDetail(WeddingResponse):
    """Wedding response with seating counts"""
    total_guests: int
    total_tables: int
    total_seated: int
