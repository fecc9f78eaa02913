"""
Pydantic schemas package
"""

from .common import *
from .wedding import *
from .table import *
from .seating import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "WeddingCreate",
    "WeddingResponse",
    "WeddingDetail",
    "TableCreate",
    "TableUpdate",
    "TablePosition",
    "AssignRequest",
    "AutoAssignRequest",
]
