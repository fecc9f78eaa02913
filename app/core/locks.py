"""
Per-table locking for seating mutations

A capacity check and the write that depends on it must not interleave with
another request touching the same table. Two layers cover that:

* an in-process lock per table id, which serializes workers sharing this
  process (and is the only protection SQLite gets, since it ignores FOR UPDATE);
* ``SELECT ... FOR UPDATE`` on the table row, which serializes across
  processes on databases that support row locks.

Only the row being mutated is locked, never the whole wedding. Callers must
commit or roll back before leaving the ``with`` block.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from sqlalchemy.orm import Session

from app.models import Table
from app.services.repositories import TableRepo
from app.utils.exceptions import NotFoundError

_registry_guard = threading.Lock()
_table_locks: Dict[int, threading.Lock] = {}


def _lock_for(table_id: int) -> threading.Lock:
    with _registry_guard:
        lock = _table_locks.get(table_id)
        if lock is None:
            lock = _table_locks[table_id] = threading.Lock()
        return lock


def forget_table_lock(table_id: int) -> None:
    """Drop the lock of a deleted table."""
    with _registry_guard:
        _table_locks.pop(table_id, None)


@contextmanager
def locked_table(db: Session, table_id: int) -> Iterator[Table]:
    """Hold the lock for ``table_id`` and yield the freshly loaded, row-locked table."""
    lock = _lock_for(table_id)
    with lock:
        try:
            table = TableRepo.get_for_update(db, table_id)
            if table is None:
                raise NotFoundError("Table")
            yield table
        except Exception:
            db.rollback()
            raise
