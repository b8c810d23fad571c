"""Domain models for seat reservations, the waitlist and operation outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ErrorKind(str, Enum):
    """Recoverable rejection reasons. State is unchanged when one is reported."""

    INVALID_CAPACITY = "invalid-capacity"
    INVALID_RANGE = "invalid-range"
    NO_RESERVATION = "no-reservation"
    SEAT_MISMATCH = "seat-mismatch"
    NOT_IN_WAITLIST = "not-in-waitlist"
    ALREADY_INITIALIZED = "already-initialized"
    ALREADY_SEATED = "already-seated"
    ALREADY_WAITLISTED = "already-waitlisted"


@dataclass(frozen=True)
class Reservation:
    user_id: int
    seat_id: int


@dataclass(frozen=True)
class WaitlistEntry:
    """A user waiting for a seat.

    ``arrival`` is a logical counter assigned once at creation. It only breaks
    ties between equal priorities; the earlier arrival is served first.
    """

    user_id: int
    priority: int
    arrival: int

    @property
    def service_order(self) -> tuple[int, int]:
        return (-self.priority, self.arrival)


class _Outcome:
    """Shared success check for operation results."""

    error: Optional[ErrorKind]

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SeatAssignment:
    """A seat handed to a user who was waiting for one."""

    user_id: int
    seat_id: int


@dataclass(frozen=True)
class InitializeResult(_Outcome):
    seat_count: int
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class AvailabilityResult(_Outcome):
    available_seats: int
    waitlist_size: int
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class ReserveResult(_Outcome):
    user_id: int
    seat_id: Optional[int] = None
    waitlisted: bool = False
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class CancelResult(_Outcome):
    user_id: int
    seat_id: int
    reassignment: Optional[SeatAssignment] = None
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class ExitWaitlistResult(_Outcome):
    user_id: int
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class UpdatePriorityResult(_Outcome):
    user_id: int
    priority: int
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class AddSeatsResult(_Outcome):
    seat_count: int
    first_seat_id: Optional[int] = None
    assignments: tuple[SeatAssignment, ...] = ()
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class ReleaseSeatsResult(_Outcome):
    """Outcome of a bulk release over a user id range.

    ``waitlist_pending`` records whether anyone was still waiting once the
    range had been cleared, which decides whether freed seats were offered
    to the waitlist or returned straight to the pool.
    """

    range_start: int
    range_end: int
    released_seats: tuple[int, ...] = ()
    waitlist_pending: bool = False
    assignments: tuple[SeatAssignment, ...] = ()
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class ReservationListing(_Outcome):
    reservations: tuple[Reservation, ...]
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class TerminationResult(_Outcome):
    error: Optional[ErrorKind] = None


OperationResult = Union[
    InitializeResult,
    AvailabilityResult,
    ReserveResult,
    CancelResult,
    ExitWaitlistResult,
    UpdatePriorityResult,
    AddSeatsResult,
    ReleaseSeatsResult,
    ReservationListing,
    TerminationResult,
]


@dataclass(frozen=True)
class EngineSnapshot:
    capacity: int
    available_seats: tuple[int, ...]
    waitlist: tuple[WaitlistEntry, ...]
    reservations: tuple[Reservation, ...]
