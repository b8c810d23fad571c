"""Seat allocation engine: reservation index, free seat pool and waitlist."""

from __future__ import annotations

from dataclasses import replace
from itertools import count
from typing import Callable, Optional, TypeVar

from seat_allocation.domain.constraints import release_range_error, seat_count_error
from seat_allocation.domain.models import (
    AddSeatsResult,
    AvailabilityResult,
    CancelResult,
    EngineSnapshot,
    ErrorKind,
    ExitWaitlistResult,
    InitializeResult,
    OperationResult,
    ReleaseSeatsResult,
    ReservationListing,
    ReserveResult,
    SeatAssignment,
    TerminationResult,
    UpdatePriorityResult,
    WaitlistEntry,
)
from seat_allocation.structures.indexed_heap import seat_pool, waitlist
from seat_allocation.structures.red_black_tree import ReservationIndex
from seat_allocation.utils.logger import get_logger


logger = get_logger(__name__)

OutcomeSink = Callable[[OperationResult], None]
R = TypeVar("R", bound=OperationResult)


class EngineClosedError(Exception):
    """Raised when an operation is attempted after quit."""


class AllocationEngine:
    """Owns all allocation state and applies one operation at a time.

    A user is always in exactly one state: unseated, waitlisted or seated.
    Every operation either applies completely or reports an ``ErrorKind``
    and leaves state untouched. Results are returned and also handed to the
    optional sink.
    """

    def __init__(self, sink: Optional[OutcomeSink] = None) -> None:
        self._sink = sink
        self._reservations = ReservationIndex()
        self._seat_pool = seat_pool()
        self._waitlist = waitlist()
        self._arrivals = count(1)
        self._capacity = 0
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def seat_of(self, user_id: int) -> Optional[int]:
        return self._reservations.find(user_id)

    def is_waitlisted(self, user_id: int) -> bool:
        return user_id in self._waitlist

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            capacity=self._capacity,
            available_seats=tuple(sorted(self._seat_pool)),
            waitlist=tuple(self._waitlist.ordered()),
            reservations=tuple(self._reservations.enumerate_by_seat()),
        )

    def initialize(self, seat_count: int) -> InitializeResult:
        self._ensure_open()
        error = seat_count_error(seat_count)
        if error is None and self._capacity > 0:
            error = ErrorKind.ALREADY_INITIALIZED
        if error is not None:
            logger.debug("Initialize rejected | seat_count=%s | error=%s", seat_count, error.value)
            return self._emit(InitializeResult(seat_count=seat_count, error=error))

        for seat_id in range(1, seat_count + 1):
            self._seat_pool.push(seat_id)
        self._capacity = seat_count
        logger.info("Seats initialized | capacity=%s", seat_count)
        return self._emit(InitializeResult(seat_count=seat_count))

    def available(self) -> AvailabilityResult:
        self._ensure_open()
        return self._emit(
            AvailabilityResult(
                available_seats=self._seat_pool.size(),
                waitlist_size=self._waitlist.size(),
            )
        )

    def reserve(self, user_id: int, priority: int) -> ReserveResult:
        self._ensure_open()
        held_seat = self._reservations.find(user_id)
        if held_seat is not None:
            logger.debug("Reserve rejected | user_id=%s | seat_id=%s | error=already-seated", user_id, held_seat)
            return self._emit(
                ReserveResult(user_id=user_id, seat_id=held_seat, error=ErrorKind.ALREADY_SEATED)
            )
        if user_id in self._waitlist:
            logger.debug("Reserve rejected | user_id=%s | error=already-waitlisted", user_id)
            return self._emit(
                ReserveResult(user_id=user_id, waitlisted=True, error=ErrorKind.ALREADY_WAITLISTED)
            )

        if self._seat_pool:
            seat_id = self._seat_pool.pop()
            self._reservations.insert(user_id, seat_id)
            logger.debug("Seat reserved | user_id=%s | seat_id=%s", user_id, seat_id)
            return self._emit(ReserveResult(user_id=user_id, seat_id=seat_id))

        entry = WaitlistEntry(user_id=user_id, priority=priority, arrival=next(self._arrivals))
        self._waitlist.push(entry)
        logger.debug(
            "User waitlisted | user_id=%s | priority=%s | arrival=%s",
            user_id,
            priority,
            entry.arrival,
        )
        return self._emit(ReserveResult(user_id=user_id, waitlisted=True))

    def cancel(self, seat_id: int, user_id: int) -> CancelResult:
        self._ensure_open()
        held_seat = self._reservations.find(user_id)
        if held_seat is None:
            error: Optional[ErrorKind] = ErrorKind.NO_RESERVATION
        elif held_seat != seat_id:
            error = ErrorKind.SEAT_MISMATCH
        else:
            error = None
        if error is not None:
            logger.debug("Cancel rejected | user_id=%s | seat_id=%s | error=%s", user_id, seat_id, error.value)
            return self._emit(CancelResult(user_id=user_id, seat_id=seat_id, error=error))

        self._reservations.delete(user_id)
        reassignment = self._hand_over(seat_id)
        logger.debug(
            "Reservation canceled | user_id=%s | seat_id=%s | reassigned_to=%s",
            user_id,
            seat_id,
            reassignment.user_id if reassignment else None,
        )
        return self._emit(CancelResult(user_id=user_id, seat_id=seat_id, reassignment=reassignment))

    def exit_waitlist(self, user_id: int) -> ExitWaitlistResult:
        self._ensure_open()
        if user_id not in self._waitlist:
            return self._emit(ExitWaitlistResult(user_id=user_id, error=ErrorKind.NOT_IN_WAITLIST))
        self._waitlist.remove(user_id)
        logger.debug("User left waitlist | user_id=%s", user_id)
        return self._emit(ExitWaitlistResult(user_id=user_id))

    def update_priority(self, user_id: int, priority: int) -> UpdatePriorityResult:
        self._ensure_open()
        if user_id not in self._waitlist:
            return self._emit(
                UpdatePriorityResult(user_id=user_id, priority=priority, error=ErrorKind.NOT_IN_WAITLIST)
            )
        self._waitlist.update(user_id, lambda entry: replace(entry, priority=priority))
        logger.debug("Waitlist priority updated | user_id=%s | priority=%s", user_id, priority)
        return self._emit(UpdatePriorityResult(user_id=user_id, priority=priority))

    def add_seats(self, seat_count: int) -> AddSeatsResult:
        self._ensure_open()
        error = seat_count_error(seat_count)
        if error is not None:
            logger.debug("AddSeats rejected | seat_count=%s | error=%s", seat_count, error.value)
            return self._emit(AddSeatsResult(seat_count=seat_count, error=error))

        first_seat_id = self._capacity + 1
        self._capacity += seat_count
        assignments: list[SeatAssignment] = []
        for seat_id in range(first_seat_id, self._capacity + 1):
            assignment = self._hand_over(seat_id)
            if assignment is not None:
                assignments.append(assignment)
        logger.info(
            "Seats added | added=%s | capacity=%s | assigned_from_waitlist=%s",
            seat_count,
            self._capacity,
            len(assignments),
        )
        return self._emit(
            AddSeatsResult(
                seat_count=seat_count,
                first_seat_id=first_seat_id,
                assignments=tuple(assignments),
            )
        )

    def print_reservations(self) -> ReservationListing:
        self._ensure_open()
        return self._emit(ReservationListing(reservations=tuple(self._reservations.enumerate_by_seat())))

    def release_seats(self, range_start: int, range_end: int) -> ReleaseSeatsResult:
        """Release every reservation and waitlist entry for user ids in the range.

        Freed seats are offered to the waitlist in the order their holders
        were found, i.e. by ascending user id, not by seat number.
        """
        self._ensure_open()
        error = release_range_error(range_start, range_end)
        if error is not None:
            logger.debug("ReleaseSeats rejected | range=[%s, %s]", range_start, range_end)
            return self._emit(
                ReleaseSeatsResult(range_start=range_start, range_end=range_end, error=error)
            )

        affected = set(self._reservations.user_ids_between(range_start, range_end))
        affected.update(
            user_id for user_id in self._waitlist.keys() if range_start <= user_id <= range_end
        )

        released: list[int] = []
        for user_id in sorted(affected):
            if self._reservations.find(user_id) is not None:
                released.append(self._reservations.delete(user_id))
            if user_id in self._waitlist:
                self._waitlist.remove(user_id)

        waitlist_pending = not self._waitlist.is_empty()
        assignments: list[SeatAssignment] = []
        for seat_id in released:
            assignment = self._hand_over(seat_id)
            if assignment is not None:
                assignments.append(assignment)

        logger.info(
            "Seats released | range=[%s, %s] | users=%s | seats=%s | reassigned=%s",
            range_start,
            range_end,
            len(affected),
            len(released),
            len(assignments),
        )
        return self._emit(
            ReleaseSeatsResult(
                range_start=range_start,
                range_end=range_end,
                released_seats=tuple(released),
                waitlist_pending=waitlist_pending,
                assignments=tuple(assignments),
            )
        )

    def quit(self) -> TerminationResult:
        self._ensure_open()
        self._closed = True
        logger.info(
            "Engine closed | capacity=%s | reservations=%s | waitlist=%s",
            self._capacity,
            len(self._reservations),
            self._waitlist.size(),
        )
        return self._emit(TerminationResult())

    def _hand_over(self, seat_id: int) -> Optional[SeatAssignment]:
        """Give a free seat to the head of the waitlist, or return it to the pool."""
        if self._waitlist.is_empty():
            self._seat_pool.push(seat_id)
            return None
        entry = self._waitlist.pop()
        self._reservations.insert(entry.user_id, seat_id)
        return SeatAssignment(user_id=entry.user_id, seat_id=seat_id)

    def _ensure_open(self) -> None:
        if self._closed:
            raise EngineClosedError("engine has been closed by quit")

    def _emit(self, result: R) -> R:
        if self._sink is not None:
            self._sink(result)
        return result
