"""Render engine results as the line-oriented status report."""

from __future__ import annotations

from functools import singledispatch
from typing import TextIO

from seat_allocation.domain.models import (
    AddSeatsResult,
    AvailabilityResult,
    CancelResult,
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
)


INVALID_SEAT_COUNT = "Invalid input. Please provide a valid number of seats."
INVALID_USER_RANGE = "Invalid input. Please provide a valid range of users."
TERMINATED = "Program Terminated!!"


def _reserved(assignment: SeatAssignment) -> str:
    return f"User {assignment.user_id} reserved seat {assignment.seat_id}"


@singledispatch
def render(result: OperationResult) -> list[str]:
    raise TypeError(f"no renderer for {type(result).__name__}")


@render.register
def _(result: InitializeResult) -> list[str]:
    if result.error is ErrorKind.ALREADY_INITIALIZED:
        return ["Seats have already been initialized"]
    if result.error is not None:
        return [INVALID_SEAT_COUNT]
    return [f"{result.seat_count} Seats are made available for reservation"]


@render.register
def _(result: AvailabilityResult) -> list[str]:
    return [f"Total Seats Available : {result.available_seats}, Waitlist : {result.waitlist_size}"]


@render.register
def _(result: ReserveResult) -> list[str]:
    if result.error is ErrorKind.ALREADY_SEATED:
        return [f"User {result.user_id} already holds seat {result.seat_id}"]
    if result.error is ErrorKind.ALREADY_WAITLISTED:
        return [f"User {result.user_id} is already in the waiting list"]
    if result.waitlisted:
        return [f"User {result.user_id} is added to the waiting list"]
    return [f"User {result.user_id} reserved seat {result.seat_id}"]


@render.register
def _(result: CancelResult) -> list[str]:
    if result.error is ErrorKind.NO_RESERVATION:
        return [f"User {result.user_id} has no reservation to cancel"]
    if result.error is ErrorKind.SEAT_MISMATCH:
        return [f"User {result.user_id} has no reservation for seat {result.seat_id} to cancel"]
    lines = [f"User {result.user_id} canceled their reservation"]
    if result.reassignment is not None:
        lines.append(_reserved(result.reassignment))
    return lines


@render.register
def _(result: ExitWaitlistResult) -> list[str]:
    if result.error is not None:
        return [f"User {result.user_id} is not in waitlist"]
    return [f"User {result.user_id} is removed from the waiting list"]


@render.register
def _(result: UpdatePriorityResult) -> list[str]:
    if result.error is not None:
        return [f"User {result.user_id} priority is not updated"]
    return [f"User {result.user_id} priority has been updated to {result.priority}"]


@render.register
def _(result: AddSeatsResult) -> list[str]:
    if result.error is not None:
        return [INVALID_SEAT_COUNT]
    lines = [f"Additional {result.seat_count} Seats are made available for reservation"]
    lines.extend(_reserved(assignment) for assignment in result.assignments)
    return lines


@render.register
def _(result: ReservationListing) -> list[str]:
    return [f"Seat {item.seat_id}, User {item.user_id}" for item in result.reservations]


@render.register
def _(result: ReleaseSeatsResult) -> list[str]:
    if result.error is not None:
        return [INVALID_USER_RANGE]
    bounds = f"[{result.range_start}, {result.range_end}]"
    if not result.waitlist_pending:
        return [f"Reservations/waitlist of the users in the range {bounds} have been released"]
    lines = [f"Reservations of the Users in the range {bounds} are released"]
    lines.extend(_reserved(assignment) for assignment in result.assignments)
    return lines


@render.register
def _(result: TerminationResult) -> list[str]:
    return [TERMINATED]


class TextOutcomeSink:
    """Engine sink that writes rendered lines to a text stream.

    The termination line is written without a trailing newline.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def __call__(self, result: OperationResult) -> None:
        lines = render(result)
        if isinstance(result, TerminationResult):
            self._stream.write("\n".join(lines))
            return
        for line in lines:
            self._stream.write(line + "\n")
