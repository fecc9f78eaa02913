"""
Tests for the assignment ledger: capacity, seat uniqueness, moves and races
"""

import random
import threading

import pytest

from app.models import Guest, RSVPStatus
from app.services.assignment_ledger import AssignmentLedger
from app.services.repositories import GuestRepo
from app.services.table_registry import TableRegistry
from app.utils.exceptions import (
    ValidationError,
    NotFoundError,
    CrossWeddingError,
    CapacityConflictError,
    TableFullError,
    SeatTakenError,
)


def _reread(db_session, guest):
    return db_session.get(Guest, guest.id, populate_existing=True)


def test_assign_sets_table_and_seat(db_session, wedding, make_table, make_guest):
    table = make_table(wedding, capacity=4)
    guest = make_guest(wedding)

    AssignmentLedger.assign(db_session, guest.id, table.id, 3)

    reread = _reread(db_session, guest)
    assert reread.table_id == table.id
    assert reread.seat_number == 3


def test_assign_without_seat_number(db_session, wedding, make_table, make_guest):
    table = make_table(wedding, capacity=4)
    guest = make_guest(wedding)

    AssignmentLedger.assign(db_session, guest.id, table.id)

    reread = _reread(db_session, guest)
    assert reread.table_id == table.id
    assert reread.seat_number is None


def test_assign_full_table(db_session, wedding, make_table, make_guest):
    table = make_table(wedding, capacity=2)
    AssignmentLedger.assign(db_session, make_guest(wedding).id, table.id)
    AssignmentLedger.assign(db_session, make_guest(wedding).id, table.id)
    latecomer = make_guest(wedding)

    with pytest.raises(TableFullError):
        AssignmentLedger.assign(db_session, latecomer.id, table.id)

    assert _reread(db_session, latecomer).table_id is None
    assert AssignmentLedger.occupancy(db_session, table.id).count == 2


def test_unnumbered_seats_count_toward_capacity(db_session, wedding, make_table, make_guest):
    table = make_table(wedding, capacity=1)
    make_guest(wedding, table=table)

    with pytest.raises(TableFullError):
        AssignmentLedger.assign(db_session, make_guest(wedding).id, table.id, 2)


def test_assign_seat_taken(db_session, wedding, make_table, make_guest):
    table = make_table(wedding, capacity=4)
    AssignmentLedger.assign(db_session, make_guest(wedding).id, table.id, 1)
    second = make_guest(wedding)

    with pytest.raises(SeatTakenError):
        AssignmentLedger.assign(db_session, second.id, table.id, 1)

    assert _reread(db_session, second).table_id is None


def test_same_seat_number_at_different_tables(db_session, wedding, make_table, make_guest):
    first = make_table(wedding)
    second = make_table(wedding)
    AssignmentLedger.assign(db_session, make_guest(wedding).id, first.id, 1)
    AssignmentLedger.assign(db_session, make_guest(wedding).id, second.id, 1)

    assert AssignmentLedger.occupancy(db_session, first.id).count == 1
    assert AssignmentLedger.occupancy(db_session, second.id).count == 1


@pytest.mark.parametrize("seat_number", [0, -3])
def test_assign_rejects_non_positive_seat(db_session, wedding, make_table, make_guest, seat_number):
    table = make_table(wedding)
    with pytest.raises(ValidationError):
        AssignmentLedger.assign(db_session, make_guest(wedding).id, table.id, seat_number)


def test_reassign_same_seat_is_noop(db_session, wedding, make_table, make_guest):
    """Re-assigning to the same table and seat changes nothing, even at a full table"""
    table = make_table(wedding, capacity=1)
    guest = make_guest(wedding)
    AssignmentLedger.assign(db_session, guest.id, table.id, 1)
    before = _reread(db_session, guest).updated_at

    AssignmentLedger.assign(db_session, guest.id, table.id, 1)

    reread = _reread(db_session, guest)
    assert (reread.table_id, reread.seat_number) == (table.id, 1)
    assert reread.updated_at == before
    assert AssignmentLedger.occupancy(db_session, table.id).count == 1


def test_change_seat_at_full_table(db_session, wedding, make_table, make_guest):
    """Changing seats at one's own table does not count against capacity"""
    table = make_table(wedding, capacity=2)
    guest = make_guest(wedding)
    AssignmentLedger.assign(db_session, guest.id, table.id, 1)
    AssignmentLedger.assign(db_session, make_guest(wedding).id, table.id, 2)

    AssignmentLedger.assign(db_session, guest.id, table.id, 3)

    assert _reread(db_session, guest).seat_number == 3
    with pytest.raises(SeatTakenError):
        AssignmentLedger.assign(db_session, guest.id, table.id, 2)


def test_move_frees_old_seat(db_session, wedding, make_table, make_guest):
    """A move frees exactly one seat at A, takes one at B and keeps the total"""
    table_a = make_table(wedding, capacity=2)
    table_b = make_table(wedding, capacity=2)
    mover = make_guest(wedding)
    AssignmentLedger.assign(db_session, mover.id, table_a.id, 1)
    AssignmentLedger.assign(db_session, make_guest(wedding).id, table_a.id, 2)
    total_before = sum(GuestRepo.counts_by_table(db_session, wedding.id).values())

    AssignmentLedger.assign(db_session, mover.id, table_b.id, 1)

    assert AssignmentLedger.occupancy(db_session, table_a.id).count == 1
    assert AssignmentLedger.occupancy(db_session, table_b.id).count == 1
    assert sum(GuestRepo.counts_by_table(db_session, wedding.id).values()) == total_before
    # The freed seat can be taken straight away
    AssignmentLedger.assign(db_session, make_guest(wedding).id, table_a.id, 1)


def test_move_to_full_table_keeps_old_seat(db_session, wedding, make_table, make_guest):
    table_a = make_table(wedding, capacity=2)
    table_b = make_table(wedding, capacity=1)
    mover = make_guest(wedding)
    AssignmentLedger.assign(db_session, mover.id, table_a.id, 1)
    AssignmentLedger.assign(db_session, make_guest(wedding).id, table_b.id)

    with pytest.raises(TableFullError):
        AssignmentLedger.assign(db_session, mover.id, table_b.id)

    reread = _reread(db_session, mover)
    assert (reread.table_id, reread.seat_number) == (table_a.id, 1)


def test_assign_across_weddings(db_session, wedding, other_wedding, make_table, make_guest):
    table = make_table(other_wedding)
    guest = make_guest(wedding)

    with pytest.raises(CrossWeddingError):
        AssignmentLedger.assign(db_session, guest.id, table.id)

    assert _reread(db_session, guest).table_id is None


def test_cross_wedding_error_looks_like_not_found():
    error = CrossWeddingError(1, 2)
    assert isinstance(error, NotFoundError)
    assert error.status_code == 404
    assert error.message == "Resource not found"


def test_assign_unknown_guest_or_table(db_session, wedding, make_table, make_guest):
    table = make_table(wedding)
    with pytest.raises(NotFoundError):
        AssignmentLedger.assign(db_session, 999, table.id)
    with pytest.raises(NotFoundError):
        AssignmentLedger.assign(db_session, make_guest(wedding).id, 999)


def test_manual_assign_ignores_rsvp(db_session, wedding, make_table, make_guest):
    table = make_table(wedding)
    pending = make_guest(wedding, rsvp_status=RSVPStatus.PENDING)
    declined = make_guest(wedding, rsvp_status=RSVPStatus.DECLINED)

    AssignmentLedger.assign(db_session, pending.id, table.id)
    AssignmentLedger.assign(db_session, declined.id, table.id)

    assert AssignmentLedger.occupancy(db_session, table.id).count == 2


def test_unassign(db_session, wedding, make_table, make_guest):
    table = make_table(wedding)
    guest = make_guest(wedding)
    AssignmentLedger.assign(db_session, guest.id, table.id, 4)

    AssignmentLedger.unassign(db_session, guest.id)

    reread = _reread(db_session, guest)
    assert reread.table_id is None
    assert reread.seat_number is None
    assert AssignmentLedger.occupancy(db_session, table.id).count == 0


def test_unassign_already_unassigned_is_noop(db_session, wedding, make_guest):
    guest = make_guest(wedding)
    result = AssignmentLedger.unassign(db_session, guest.id)
    assert result.table_id is None


def test_unassign_unknown_guest(db_session):
    with pytest.raises(NotFoundError):
        AssignmentLedger.unassign(db_session, 999)


def test_occupancy_order(db_session, wedding, make_table, make_guest):
    table = make_table(wedding, capacity=5)
    unnumbered = make_guest(wedding, table=table)
    third = make_guest(wedding, table=table, seat_number=3)
    first = make_guest(wedding, table=table, seat_number=1)

    occupancy = AssignmentLedger.occupancy(db_session, table.id)

    assert occupancy.count == 3
    assert occupancy.available_seats == 2
    assert [(guest.id, seat) for guest, seat in occupancy.occupants] == [
        (first.id, 1), (third.id, 3), (unnumbered.id, None)
    ]


def test_count_at_table_includes_unnumbered_seats(db_session, wedding, make_table, make_guest):
    table = make_table(wedding, capacity=5)
    other = make_table(wedding, capacity=5)
    make_guest(wedding, table=table, seat_number=1)
    make_guest(wedding, table=table)
    make_guest(wedding, table=other, seat_number=1)

    assert GuestRepo.count_at_table(db_session, table.id) == 2
    assert GuestRepo.count_at_table(db_session, other.id) == 1


def test_unassigned_guests_only_confirmed(db_session, wedding, other_wedding, make_table, make_guest):
    table = make_table(wedding)
    waiting_b = make_guest(wedding, last_name="Brown")
    waiting_a = make_guest(wedding, last_name="Adams")
    make_guest(wedding, rsvp_status=RSVPStatus.PENDING)
    make_guest(wedding, rsvp_status=RSVPStatus.DECLINED)
    make_guest(wedding, rsvp_status=RSVPStatus.MAYBE)
    make_guest(wedding, table=table)
    make_guest(other_wedding)

    guests = AssignmentLedger.unassigned_guests(db_session, wedding.id)

    assert [guest.id for guest in guests] == [waiting_a.id, waiting_b.id]


def test_unassigned_guests_unknown_wedding(db_session):
    with pytest.raises(NotFoundError):
        AssignmentLedger.unassigned_guests(db_session, 999)


@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
def test_interleaved_operations_never_overfill(db_session, wedding, make_table, make_guest, seed):
    """Random mixes of assign/move/unassign/shrink/delete never exceed capacity"""
    rng = random.Random(seed)
    tables = [make_table(wedding, capacity=rng.randint(1, 4)) for _ in range(4)]
    guests = [make_guest(wedding) for _ in range(14)]
    table_ids = [table.id for table in tables]

    for _ in range(120):
        op = rng.random()
        guest = rng.choice(guests)
        try:
            if op < 0.6 and table_ids:
                seat = rng.choice([None, 1, 2, 3, 4])
                AssignmentLedger.assign(db_session, guest.id, rng.choice(table_ids), seat)
            elif op < 0.85:
                AssignmentLedger.unassign(db_session, guest.id)
            elif op < 0.97 and table_ids:
                TableRegistry.update_table(db_session, rng.choice(table_ids), {"capacity": rng.randint(1, 4)})
            elif table_ids:
                TableRegistry.delete_table(db_session, table_ids.pop(rng.randrange(len(table_ids))))
        except (TableFullError, SeatTakenError, CapacityConflictError):
            pass

        for listing in TableRegistry.list_tables(db_session, wedding.id):
            assert listing.seats_filled <= listing.table.capacity
            seats = [g.seat_number for g in listing.occupants if g.seat_number is not None]
            assert len(seats) == len(set(seats))


def test_concurrent_assigns_respect_capacity(db_session, session_factory, wedding, make_table, make_guest):
    """Many requests racing for one table never push it past capacity"""
    table = make_table(wedding, capacity=3)
    guest_ids = [make_guest(wedding).id for _ in range(10)]
    outcomes = []
    barrier = threading.Barrier(len(guest_ids))

    def worker(guest_id):
        session = session_factory()
        try:
            barrier.wait()
            AssignmentLedger.assign(session, guest_id, table.id)
            outcomes.append("seated")
        except TableFullError:
            outcomes.append("full")
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(guest_id,)) for guest_id in guest_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("seated") == 3
    assert outcomes.count("full") == 7
    assert AssignmentLedger.occupancy(db_session, table.id).count == 3
