from __future__ import annotations

import random

import pytest

from seat_allocation.domain.models import (
    ErrorKind,
    OperationResult,
    Reservation,
    SeatAssignment,
)
from seat_allocation.services.allocation_service import AllocationEngine, EngineClosedError


def _build_engine(seat_count: int) -> AllocationEngine:
    engine = AllocationEngine()
    engine.initialize(seat_count)
    return engine


def _reservation_map(engine: AllocationEngine) -> dict[int, int]:
    return {item.user_id: item.seat_id for item in engine.snapshot().reservations}


def _assert_engine_consistent(engine: AllocationEngine) -> None:
    snapshot = engine.snapshot()
    seated = {item.user_id for item in snapshot.reservations}
    waiting = {entry.user_id for entry in snapshot.waitlist}
    assert seated.isdisjoint(waiting)

    held = [item.seat_id for item in snapshot.reservations]
    assert len(held) == len(set(held))
    free = list(snapshot.available_seats)
    assert sorted(held + free) == list(range(1, snapshot.capacity + 1))
    # Seats only wait in the pool while nobody is waiting for one.
    assert not (free and waiting)


# --- initialize / available ---

def test_initialize_fills_pool() -> None:
    engine = AllocationEngine()
    result = engine.initialize(3)

    assert result.ok
    assert result.seat_count == 3
    assert engine.capacity == 3
    assert engine.snapshot().available_seats == (1, 2, 3)


@pytest.mark.parametrize("seat_count", [0, -4])
def test_initialize_rejects_non_positive_count(seat_count: int) -> None:
    engine = AllocationEngine()
    result = engine.initialize(seat_count)

    assert result.error is ErrorKind.INVALID_CAPACITY
    assert engine.capacity == 0
    assert engine.snapshot().available_seats == ()


def test_initialize_twice_is_rejected() -> None:
    engine = _build_engine(2)
    result = engine.initialize(5)

    assert result.error is ErrorKind.ALREADY_INITIALIZED
    assert engine.capacity == 2
    assert engine.snapshot().available_seats == (1, 2)


def test_available_reports_pool_and_waitlist_sizes() -> None:
    engine = _build_engine(1)
    engine.reserve(1, 1)
    engine.reserve(2, 1)
    engine.reserve(3, 1)

    result = engine.available()
    assert (result.available_seats, result.waitlist_size) == (0, 2)


# --- reserve ---

def test_reserve_takes_lowest_free_seat() -> None:
    engine = _build_engine(3)
    engine.reserve(1, 1)
    engine.reserve(2, 1)
    engine.cancel(1, 1)

    result = engine.reserve(3, 1)
    assert result.seat_id == 1
    assert not result.waitlisted


def test_reserve_for_seated_user_is_rejected() -> None:
    engine = _build_engine(2)
    engine.reserve(1, 1)

    result = engine.reserve(1, 4)
    assert result.error is ErrorKind.ALREADY_SEATED
    assert result.seat_id == 1
    assert engine.snapshot().available_seats == (2,)


def test_reserve_for_waitlisted_user_is_rejected() -> None:
    engine = _build_engine(1)
    engine.reserve(1, 1)
    engine.reserve(2, 1)

    result = engine.reserve(2, 9)
    assert result.error is ErrorKind.ALREADY_WAITLISTED
    assert engine.available().waitlist_size == 1
    assert engine.snapshot().waitlist[0].priority == 1


def test_reserve_before_initialize_waitlists_user() -> None:
    engine = AllocationEngine()
    result = engine.reserve(1, 1)
    assert result.waitlisted
    assert engine.is_waitlisted(1)


# --- cancel ---

def test_cancel_without_reservation_reports_error() -> None:
    engine = _build_engine(1)
    result = engine.cancel(1, 42)
    assert result.error is ErrorKind.NO_RESERVATION
    assert engine.snapshot().available_seats == (1,)


def test_cancel_wrong_seat_reports_mismatch() -> None:
    engine = _build_engine(2)
    engine.reserve(1, 1)

    result = engine.cancel(2, 1)
    assert result.error is ErrorKind.SEAT_MISMATCH
    assert engine.seat_of(1) == 1


def test_cancel_with_empty_waitlist_returns_seat_to_pool() -> None:
    engine = _build_engine(2)
    engine.reserve(1, 1)
    engine.reserve(2, 1)

    result = engine.cancel(1, 1)
    assert result.ok
    assert result.reassignment is None
    assert engine.snapshot().available_seats == (1,)
    assert engine.seat_of(1) is None


# --- exit waitlist / update priority ---

def test_exit_waitlist_removes_waiting_user() -> None:
    engine = _build_engine(1)
    engine.reserve(1, 1)
    engine.reserve(2, 1)

    assert engine.exit_waitlist(2).ok
    assert not engine.is_waitlisted(2)
    assert engine.exit_waitlist(2).error is ErrorKind.NOT_IN_WAITLIST


def test_exit_waitlist_for_seated_user_is_rejected() -> None:
    engine = _build_engine(1)
    engine.reserve(1, 1)
    assert engine.exit_waitlist(1).error is ErrorKind.NOT_IN_WAITLIST
    assert engine.seat_of(1) == 1


def test_update_priority_reorders_waitlist() -> None:
    engine = _build_engine(1)
    engine.reserve(1, 1)
    engine.reserve(2, 3)
    engine.reserve(3, 1)

    result = engine.update_priority(3, 8)
    assert result.ok
    assert [entry.user_id for entry in engine.snapshot().waitlist] == [3, 2]

    cancel = engine.cancel(1, 1)
    assert cancel.reassignment == SeatAssignment(user_id=3, seat_id=1)


def test_update_priority_for_absent_user_is_rejected() -> None:
    engine = _build_engine(1)
    engine.reserve(1, 1)
    assert engine.update_priority(1, 5).error is ErrorKind.NOT_IN_WAITLIST
    assert engine.update_priority(99, 5).error is ErrorKind.NOT_IN_WAITLIST


# --- add seats ---

@pytest.mark.parametrize("seat_count", [0, -1])
def test_add_seats_rejects_non_positive_count(seat_count: int) -> None:
    engine = _build_engine(1)
    result = engine.add_seats(seat_count)
    assert result.error is ErrorKind.INVALID_CAPACITY
    assert engine.capacity == 1


def test_add_seats_without_waitlist_extends_pool() -> None:
    engine = _build_engine(2)
    result = engine.add_seats(3)

    assert result.first_seat_id == 3
    assert result.assignments == ()
    assert engine.capacity == 5
    assert engine.snapshot().available_seats == (1, 2, 3, 4, 5)


def test_add_seats_before_initialize_blocks_initialize() -> None:
    engine = AllocationEngine()
    engine.add_seats(2)
    assert engine.capacity == 2
    assert engine.initialize(4).error is ErrorKind.ALREADY_INITIALIZED


def test_add_seats_serves_waitlist_then_fills_pool() -> None:
    engine = _build_engine(1)
    engine.reserve(1, 1)
    engine.reserve(2, 1)

    result = engine.add_seats(3)
    assert result.assignments == (SeatAssignment(user_id=2, seat_id=2),)
    assert engine.snapshot().available_seats == (3, 4)


# --- release seats ---

def test_release_seats_rejects_inverted_range() -> None:
    engine = _build_engine(1)
    engine.reserve(1, 1)
    result = engine.release_seats(5, 2)
    assert result.error is ErrorKind.INVALID_RANGE
    assert engine.seat_of(1) == 1


def test_release_seats_with_empty_waitlist_returns_seats_to_pool() -> None:
    engine = _build_engine(3)
    for user_id in (1, 2, 3):
        engine.reserve(user_id, 1)

    result = engine.release_seats(1, 2)
    assert result.released_seats == (1, 2)
    assert not result.waitlist_pending
    assert engine.snapshot().available_seats == (1, 2)
    assert _reservation_map(engine) == {3: 3}


def test_release_seats_drops_waitlisted_users_in_range() -> None:
    engine = _build_engine(1)
    engine.reserve(1, 1)
    engine.reserve(5, 1)
    engine.reserve(6, 1)

    result = engine.release_seats(5, 6)
    assert result.released_seats == ()
    assert not result.waitlist_pending
    assert engine.available().waitlist_size == 0
    assert engine.seat_of(1) == 1


def test_release_seats_follows_user_order_not_seat_order() -> None:
    engine = _build_engine(2)
    engine.reserve(20, 1)
    engine.reserve(10, 1)
    engine.reserve(30, 7)
    engine.reserve(40, 1)

    result = engine.release_seats(10, 20)
    # User 10 holds seat 2 and is found first, so seat 2 goes to the head of the waitlist.
    assert result.released_seats == (2, 1)
    assert result.assignments == (
        SeatAssignment(user_id=30, seat_id=2),
        SeatAssignment(user_id=40, seat_id=1),
    )


def test_release_seats_returns_surplus_to_pool() -> None:
    engine = _build_engine(3)
    for user_id in (1, 2, 3, 4):
        engine.reserve(user_id, 1)

    result = engine.release_seats(1, 3)
    assert result.waitlist_pending
    assert result.assignments == (SeatAssignment(user_id=4, seat_id=1),)
    assert engine.snapshot().available_seats == (2, 3)


def test_release_seats_over_huge_range_only_touches_present_users() -> None:
    engine = _build_engine(2)
    engine.reserve(3, 1)
    engine.reserve(1_000_000, 1)

    result = engine.release_seats(1, 10**12)
    assert result.released_seats == (1, 2)
    assert engine.snapshot().available_seats == (1, 2)


# --- print reservations / quit ---

def test_print_reservations_lists_by_seat() -> None:
    engine = _build_engine(3)
    engine.reserve(9, 1)
    engine.reserve(4, 1)
    engine.reserve(7, 1)

    listing = engine.print_reservations()
    assert listing.reservations == (
        Reservation(user_id=9, seat_id=1),
        Reservation(user_id=4, seat_id=2),
        Reservation(user_id=7, seat_id=3),
    )


def test_quit_closes_engine() -> None:
    engine = _build_engine(1)
    assert engine.quit().ok
    assert engine.closed
    with pytest.raises(EngineClosedError):
        engine.reserve(1, 1)
    with pytest.raises(EngineClosedError):
        engine.quit()


# --- sink ---

def test_every_result_is_sent_to_sink() -> None:
    received: list[OperationResult] = []
    engine = AllocationEngine(sink=received.append)

    results = [
        engine.initialize(1),
        engine.reserve(1, 1),
        engine.cancel(2, 1),
        engine.available(),
    ]
    assert received == results


def test_engines_do_not_share_state() -> None:
    first_sink: list[OperationResult] = []
    second_sink: list[OperationResult] = []
    first = AllocationEngine(sink=first_sink.append)
    second = AllocationEngine(sink=second_sink.append)

    first.initialize(1)
    first.reserve(1, 1)
    first.reserve(2, 1)
    second.initialize(5)

    assert second.snapshot().waitlist == ()
    assert second.available().available_seats == 5
    assert len(first_sink) == 3
    assert len(second_sink) == 2


# --- documented scenarios ---

def test_scenario_a_fills_seats_then_waitlists() -> None:
    engine = _build_engine(3)
    seats = [engine.reserve(user_id, 1).seat_id for user_id in (1, 2, 3)]
    fourth = engine.reserve(4, 5)

    assert seats == [1, 2, 3]
    assert fourth.waitlisted
    assert engine.is_waitlisted(4)


def test_scenario_b_cancel_hands_seat_to_waitlist() -> None:
    engine = _build_engine(3)
    for user_id in (1, 2, 3):
        engine.reserve(user_id, 1)
    engine.reserve(4, 5)

    result = engine.cancel(2, 2)
    assert result.reassignment == SeatAssignment(user_id=4, seat_id=2)
    assert _reservation_map(engine) == {1: 1, 3: 3, 4: 2}
    assert engine.available().waitlist_size == 0


def test_scenario_c_priority_beats_arrival() -> None:
    engine = _build_engine(1)
    assert engine.reserve(10, 1).seat_id == 1
    assert engine.reserve(20, 1).waitlisted
    assert engine.reserve(30, 9).waitlisted

    result = engine.cancel(1, 10)
    assert result.reassignment == SeatAssignment(user_id=30, seat_id=1)
    assert engine.is_waitlisted(20)


def test_scenario_d_added_seats_go_to_waitlist_in_order() -> None:
    engine = _build_engine(1)
    for user_id in (1, 2, 3):
        engine.reserve(user_id, 1)

    result = engine.add_seats(2)
    assert result.assignments == (
        SeatAssignment(user_id=2, seat_id=2),
        SeatAssignment(user_id=3, seat_id=3),
    )


def test_scenario_e_release_reassigns_in_discovery_order() -> None:
    engine = _build_engine(2)
    engine.reserve(1, 1)
    engine.reserve(2, 1)
    engine.reserve(3, 5)
    engine.reserve(4, 1)

    result = engine.release_seats(1, 2)
    assert result.waitlist_pending
    assert result.assignments == (
        SeatAssignment(user_id=3, seat_id=1),
        SeatAssignment(user_id=4, seat_id=2),
    )
    assert _reservation_map(engine) == {3: 1, 4: 2}


# --- properties ---

def test_equal_priority_served_in_arrival_order_despite_other_operations() -> None:
    engine = _build_engine(1)
    engine.reserve(100, 1)
    engine.reserve(7, 4)
    engine.reserve(3, 4)
    engine.reserve(50, 1)
    engine.update_priority(50, 2)
    engine.reserve(60, 9)
    engine.exit_waitlist(60)
    engine.update_priority(3, 4)

    served = []
    holder = 100
    for _ in range(3):
        result = engine.cancel(1, holder)
        holder = result.reassignment.user_id
        served.append(holder)
    assert served == [7, 3, 50]


def test_random_workload_preserves_invariants() -> None:
    rng = random.Random(4111)
    engine = _build_engine(5)

    for _ in range(2500):
        action = rng.randrange(7)
        user_id = rng.randint(1, 40)
        if action in (0, 1):
            engine.reserve(user_id, rng.randint(0, 6))
        elif action == 2:
            seat_id = engine.seat_of(user_id)
            engine.cancel(seat_id if seat_id is not None else rng.randint(1, engine.capacity), user_id)
        elif action == 3:
            engine.exit_waitlist(user_id)
        elif action == 4:
            engine.update_priority(user_id, rng.randint(0, 6))
        elif action == 5 and rng.random() < 0.1:
            engine.add_seats(rng.randint(-1, 3))
        elif action == 6 and rng.random() < 0.2:
            low = rng.randint(1, 40)
            engine.release_seats(low, low + rng.randint(-2, 6))
        _assert_engine_consistent(engine)
