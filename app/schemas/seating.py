"""
Assignment and auto-assignment Pydantic schemas
"""

from typing import Optional
from pydantic import BaseModel

class AssignRequest(BaseModel):
    """Seat a guest at a table"""
    guest_id: int
    seat_number: Optional[int] = None

class AutoAssignRequest(BaseModel):
    """Run the auto-assignment planner for a wedding"""
    wedding_id: int
    strategy: str = "group"  # group, side
