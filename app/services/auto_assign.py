"""
Auto-assignment planner

Greedy, deterministic placement of confirmed guests who have no table yet.
Guests sharing a label (their group, or their side of the family) are kept at
the same table when capacity allows and spill over to the next table when it
does not.

The plan is computed from a single snapshot and then applied one guest at a
time through the assignment ledger. Each assignment is atomic but the run as a
whole is not: a seat taken by a concurrent request between snapshot and apply
leaves that guest unseated and the run carries on.
"""

import logging
from dataclasses import dataclass, field
from itertools import groupby
from typing import Callable, Dict, List, Optional, Set

from sqlalchemy.orm import Session

from app.models import Guest, Table
from app.services.assignment_ledger import AssignmentLedger
from app.services.repositories import WeddingRepo, TableRepo, GuestRepo
from app.utils.exceptions import NotFoundError, SeatingError, ValidationError

logger = logging.getLogger(__name__)


def _clean_label(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


STRATEGIES: Dict[str, Callable[[Guest], Optional[str]]] = {
    "group": lambda guest: _clean_label(guest.group),
    "side": lambda guest: _clean_label(guest.side),
}


@dataclass
class PlannedSeat:
    guest_id: int
    table_id: int
    seat_number: int


@dataclass
class AutoAssignResult:
    seated: List[PlannedSeat] = field(default_factory=list)
    unseated: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "seated": [
                {"guest_id": s.guest_id, "table_id": s.table_id, "seat_number": s.seat_number}
                for s in self.seated
            ],
            "unseated": list(self.unseated),
        }


@dataclass
class _TableSlot:
    """Planner-side view of one table's spare room."""
    table_id: int
    remaining: int
    used_seats: Set[int] = field(default_factory=set)
    labels: Set[str] = field(default_factory=set)

    def take_seat(self) -> int:
        seat = 1
        while seat in self.used_seats:
            seat += 1
        self.used_seats.add(seat)
        self.remaining -= 1
        return seat


def _candidate_order(label_of: Callable[[Guest], Optional[str]]):
    def key(guest: Guest):
        label = label_of(guest)
        return (label is None, label or "", guest.id)
    return key


def _pick_table(slots: List[_TableSlot], label: Optional[str]) -> Optional[_TableSlot]:
    """First open table already hosting ``label``, else the first open table"""
    open_slots = [slot for slot in slots if slot.remaining > 0]
    if not open_slots:
        return None
    if label is not None:
        for slot in open_slots:
            if label in slot.labels:
                return slot
    return open_slots[0]


class AutoAssignPlanner:
    """Fills empty seats with confirmed, unseated guests"""

    @staticmethod
    def plan(
        guests: List[Guest],
        tables: List[Table],
        seated: List[Guest],
        strategy: str = "group",
    ) -> AutoAssignResult:
        """
        Compute a placement without touching the database.

        ``guests`` are the candidates, ``tables`` the wedding's tables and
        ``seated`` the guests already at those tables (for spare capacity,
        taken seat numbers and the labels each table already hosts).
        """
        label_of = STRATEGIES.get(strategy)
        if label_of is None:
            raise ValidationError.for_field("strategy", f"Strategy must be one of: {', '.join(STRATEGIES)}")

        by_table: Dict[int, List[Guest]] = {}
        for guest in seated:
            by_table.setdefault(guest.table_id, []).append(guest)

        slots: List[_TableSlot] = []
        for table in sorted(tables, key=lambda t: (t.order, t.id)):
            occupants = by_table.get(table.id, [])
            remaining = table.capacity - len(occupants)
            if remaining <= 0:
                continue
            slots.append(_TableSlot(
                table_id=table.id,
                remaining=remaining,
                used_seats={g.seat_number for g in occupants if g.seat_number is not None},
                labels={label for label in map(label_of, occupants) if label is not None},
            ))

        result = AutoAssignResult()
        ordered = sorted(guests, key=_candidate_order(label_of))
        for label, cluster in groupby(ordered, key=label_of):
            pending = list(cluster)
            while pending:
                slot = _pick_table(slots, label)
                if slot is None:
                    result.unseated.extend(guest.id for guest in pending)
                    break
                while pending and slot.remaining > 0:
                    guest = pending.pop(0)
                    result.seated.append(PlannedSeat(guest.id, slot.table_id, slot.take_seat()))
                    if label is not None:
                        slot.labels.add(label)

        return result

    @staticmethod
    def run(db: Session, wedding_id: int, strategy: str = "group") -> AutoAssignResult:
        """Plan from a snapshot of the wedding, then apply seat by seat via the ledger"""
        if strategy not in STRATEGIES:
            raise ValidationError.for_field("strategy", f"Strategy must be one of: {', '.join(STRATEGIES)}")
        if not WeddingRepo.get_by_id(db, wedding_id):
            raise NotFoundError("Wedding")

        plan = AutoAssignPlanner.plan(
            guests=GuestRepo.list_unassigned_confirmed(db, wedding_id),
            tables=TableRepo.list_for_wedding(db, wedding_id),
            seated=GuestRepo.list_seated_for_wedding(db, wedding_id),
            strategy=strategy,
        )

        result = AutoAssignResult(unseated=list(plan.unseated))
        for seat in plan.seated:
            try:
                AssignmentLedger.assign(db, seat.guest_id, seat.table_id, seat.seat_number)
            except SeatingError as exc:
                logger.warning(
                    f"Auto-assign could not seat guest {seat.guest_id} at table {seat.table_id}: {exc.message}"
                )
                result.unseated.append(seat.guest_id)
                continue
            result.seated.append(seat)

        logger.info(
            f"Auto-assign for wedding {wedding_id} ({strategy}): "
            f"{len(result.seated)} seated, {len(result.unseated)} unseated"
        )
        return result
