"""
Database models package
"""

from .wedding import Wedding
from .table import Table, TableShape
from .guest import Guest, RSVPStatus

__all__ = ["Wedding", "Table", "TableShape", "Guest", "RSVPStatus"]
