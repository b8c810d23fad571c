"""Line protocol parsing: ``Name(arg, arg)`` text into validated command DTOs."""

from __future__ import annotations

import re
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError


_FIELD_SPLIT = re.compile(r"[(),]")


class CommandParseError(Exception):
    """Raised when a command line cannot be turned into a command."""


class UnknownCommandError(CommandParseError):
    """Raised when the command name is not part of the protocol."""


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class InitializeCommand(_Command):
    name: Literal["Initialize"] = "Initialize"
    seat_count: int


class AvailableCommand(_Command):
    name: Literal["Available"] = "Available"


class ReserveCommand(_Command):
    name: Literal["Reserve"] = "Reserve"
    user_id: int
    priority: int


class CancelCommand(_Command):
    name: Literal["Cancel"] = "Cancel"
    seat_id: int
    user_id: int


class ExitWaitlistCommand(_Command):
    name: Literal["ExitWaitlist"] = "ExitWaitlist"
    user_id: int


class UpdatePriorityCommand(_Command):
    name: Literal["UpdatePriority"] = "UpdatePriority"
    user_id: int
    priority: int


class AddSeatsCommand(_Command):
    name: Literal["AddSeats"] = "AddSeats"
    seat_count: int


class PrintReservationsCommand(_Command):
    name: Literal["PrintReservations"] = "PrintReservations"


class ReleaseSeatsCommand(_Command):
    name: Literal["ReleaseSeats"] = "ReleaseSeats"
    range_start: int
    range_end: int


class QuitCommand(_Command):
    name: Literal["Quit"] = "Quit"


Command = Union[
    InitializeCommand,
    AvailableCommand,
    ReserveCommand,
    CancelCommand,
    ExitWaitlistCommand,
    UpdatePriorityCommand,
    AddSeatsCommand,
    PrintReservationsCommand,
    ReleaseSeatsCommand,
    QuitCommand,
]

# Positional argument order for each command name.
COMMAND_SIGNATURES: dict[str, tuple[type[_Command], tuple[str, ...]]] = {
    "Initialize": (InitializeCommand, ("seat_count",)),
    "Available": (AvailableCommand, ()),
    "Reserve": (ReserveCommand, ("user_id", "priority")),
    "Cancel": (CancelCommand, ("seat_id", "user_id")),
    "ExitWaitlist": (ExitWaitlistCommand, ("user_id",)),
    "UpdatePriority": (UpdatePriorityCommand, ("user_id", "priority")),
    "AddSeats": (AddSeatsCommand, ("seat_count",)),
    "PrintReservations": (PrintReservationsCommand, ()),
    "ReleaseSeats": (ReleaseSeatsCommand, ("range_start", "range_end")),
    "Quit": (QuitCommand, ()),
}


def _split_fields(line: str) -> tuple[str, list[str]]:
    parts = [part.strip() for part in _FIELD_SPLIT.split(line)]
    name = parts[0]
    arguments = [part for part in parts[1:] if part]
    return name, arguments


def parse_command(line: str) -> Optional[Command]:
    """Parse one protocol line. Blank lines yield ``None``."""
    if not line.strip():
        return None

    name, arguments = _split_fields(line)
    signature = COMMAND_SIGNATURES.get(name)
    if signature is None:
        raise UnknownCommandError(f"unknown command {name!r}")

    model, field_names = signature
    if len(arguments) != len(field_names):
        raise CommandParseError(
            f"{name} expects {len(field_names)} argument(s), got {len(arguments)}"
        )
    try:
        return model.model_validate(dict(zip(field_names, arguments)))
    except ValidationError as exc:
        raise CommandParseError(f"invalid arguments for {name}: {arguments}") from exc
